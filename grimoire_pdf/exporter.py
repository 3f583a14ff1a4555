#!/usr/bin/env python3
"""
Batch export of grimoire sources to PDF.

A grimoire source is a JSON document:

    {
        "title": "Rituais do Fogo",
        "description": "...",
        "content": "<h1>...</h1>",          # stored HTML, used when there are no chapters
        "chapters": [{"title": "...", "content": "..."}],
        "custom_css": "...",
        "include_images": false
    }

Sources with chapters are run through the formatter first; otherwise the
stored HTML is exported as is.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

import json
import sys
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from colorama import Fore, Style

from .config import Config
from .console import ConsoleLogMixin
from .dependencies import check_dependencies
from .errors import InvalidPDFInputError, PDFGenerationError
from .formatter import GrimoireFormatter, RawChapter
from .pdf_generator import (
    DEFAULT_MARGINS,
    DEFAULT_TIMEOUT,
    GrimoirePDFGenerator,
    PDFGenerationOptions,
    build_pdf_html,
)
from .text_utils import DEFAULT_CONTENT, safe_filename
from .theme import DEFAULT_BRAND
from .verification import ExportStateManager, calculate_file_hash


@dataclass
class GrimoireSource:
    """A grimoire as read from its JSON source file."""
    path: Path
    title: str
    description: str = ""
    content: str = ""
    chapters: List[RawChapter] = field(default_factory=list)
    custom_css: str = ""
    include_images: bool = False


def load_grimoire_source(path: Path) -> GrimoireSource:
    """Read and validate a grimoire JSON source.

    Raises:
        ValueError: The file is not valid JSON or misses required fields
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"{path.name} is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a JSON object")

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValueError(f"{path.name} has no title")

    raw_chapters = data.get("chapters") or []
    if not isinstance(raw_chapters, list):
        raise ValueError(f"{path.name}: 'chapters' must be a list")

    chapters = []
    for index, chapter in enumerate(raw_chapters, start=1):
        if not isinstance(chapter, dict):
            raise ValueError(f"{path.name}: chapter {index} must be an object")
        chapters.append(RawChapter(title=str(chapter.get("title") or ""), content=str(chapter.get("content") or "")))

    return GrimoireSource(
        path=path,
        title=title.strip(),
        description=str(data.get("description") or ""),
        content=str(data.get("content") or ""),
        chapters=chapters,
        custom_css=str(data.get("custom_css") or ""),
        include_images=bool(data.get("include_images", False)),
    )


class GrimoireExporter(ConsoleLogMixin):
    """Exports every grimoire source in a directory to PDF."""

    def __init__(self, source_dir: str, output_dir: str, page_margins: str = DEFAULT_MARGINS,
                 debug: bool = False, db_path: Optional[str] = None, max_workers: int = 4,
                 timeout: float = DEFAULT_TIMEOUT, brand: str = DEFAULT_BRAND,
                 force_regenerate: bool = False, save_html: bool = False, use_fallback: bool = True,
                 generator: Optional[GrimoirePDFGenerator] = None,
                 formatter: Optional[GrimoireFormatter] = None):
        """Initialize the exporter.

        Args:
            force_regenerate: If True, bypass export state and render every source
            save_html: If True, save the document HTML alongside the PDF (output/html/)
            use_fallback: If True, render with the text-only renderer when the browser fails
            generator: PDF generator to use; built from margins/timeout/brand when omitted
            formatter: Formatter for sources with chapters
        """
        self.source_dir = Path(source_dir)
        self.output_dir = Path(output_dir)
        self.page_margins = page_margins
        self.debug = debug
        self.max_workers = max_workers
        self.brand = brand
        self.force_regenerate = force_regenerate
        self.save_html = save_html
        self.use_fallback = use_fallback

        self.generator = generator or GrimoirePDFGenerator(
            page_margins=page_margins, timeout=timeout, brand=brand, debug=debug
        )
        self.formatter = formatter or GrimoireFormatter()

        if db_path is None:
            db_path = Config().get_db_path()
        self.state_manager = ExportStateManager(db_path)

        self.pdf_dir = self.output_dir / "pdf"
        self.html_dir = self.output_dir / "html" if self.save_html else None

        self.pdf_dir.mkdir(parents=True, exist_ok=True)
        if self.html_dir:
            self.html_dir.mkdir(parents=True, exist_ok=True)

    def build_grimoire_html(self, source: GrimoireSource) -> str:
        """HTML body for a source: formatted chapters, stored content or a placeholder."""
        if source.chapters:
            formatted = self.formatter.format_grimoire_content(source.title, source.description, source.chapters)
            self._log_debug(
                f"Formatted {len(formatted.chapters)} chapters of '{source.title}' "
                f"({formatted.metadata.word_count} words, ~{formatted.metadata.estimated_reading_time} min)"
            )
            return formatted.to_html()
        if source.content.strip():
            return source.content
        return DEFAULT_CONTENT

    def _render(self, source: GrimoireSource, options: PDFGenerationOptions) -> Tuple[bytes, str]:
        """Render with the browser, falling back to the text-only renderer when allowed."""
        try:
            return self.generator.generate_grimoire_pdf_sync(options), "browser"
        except PDFGenerationError as e:
            if not self.use_fallback or isinstance(e, InvalidPDFInputError):
                raise
            try:
                from .fallback import generate_plain_pdf
            except ImportError:
                self._log_error("Text-only renderer unavailable: reportlab is not installed")
                raise e
            self._log_warning(f"{e} - using text-only renderer for '{source.title}'")
            return generate_plain_pdf(source.title, options.content, author=self.brand), "fallback"

    def export_single(self, source_file: Path, output_stem: Optional[str] = None) -> Tuple[str, str]:
        """Export one source file. Returns (status, filename).

        Status is one of: 'converted', 'skipped', 'failed'. output_stem names the
        PDF; it defaults to the file name derived from the title.
        """
        filename = source_file.name
        try:
            source = load_grimoire_source(source_file)
            if output_stem is None:
                output_stem = safe_filename(source.title, fallback=source_file.stem)
            output_pdf = self.pdf_dir / f"{output_stem}.pdf"
            source_hash = calculate_file_hash(source_file)

            if not self.force_regenerate and not self.state_manager.needs_regeneration(
                    filename, source_hash, output_pdf, self.page_margins, source.include_images, self.brand):
                self._log_info(f"Skipping {filename} - PDF is up to date")
                return "skipped", filename

            self._log_info(f"Exporting {filename} - source has changed or PDF missing")

            options = PDFGenerationOptions(
                title=source.title,
                content=self.build_grimoire_html(source),
                custom_css=source.custom_css,
                include_images=source.include_images,
            )

            if self.html_dir:
                html_file = self.html_dir / f"{output_pdf.stem}.html"
                html_file.write_text(build_pdf_html(options, brand=self.brand), encoding='utf-8')
                self._log_debug(f"Saved document HTML to {html_file}")

            pdf_bytes, renderer = self._render(source, options)
            output_pdf.write_bytes(pdf_bytes)

            self.state_manager.save_export_state(
                filename, source_hash, calculate_file_hash(output_pdf),
                page_margins=self.page_margins,
                include_images=source.include_images,
                renderer=renderer,
                brand=self.brand,
            )
            self._log_success(f"Exported {filename} to {output_pdf.name} ({len(pdf_bytes)} bytes, {renderer})")
            return "converted", filename

        except (ValueError, RuntimeError, OSError, PDFGenerationError) as e:
            self._log_error(f"Error exporting {filename}: {e}")
            return "failed", filename

    def plan_output_names(self, source_files: List[Path]) -> Dict[Path, str]:
        """Pick a distinct PDF file stem for every readable source.

        Stems come from the titles. Titles that reduce to the same stem (case
        insensitive) get the source file stem appended, so no PDF overwrites another.
        Unreadable sources are left out; export_single reports them.
        """
        wanted: Dict[Path, str] = {}
        for source_file in source_files:
            try:
                title = load_grimoire_source(source_file).title
            except (ValueError, OSError):
                continue
            wanted[source_file] = safe_filename(title, fallback=source_file.stem)

        claims = Counter(stem.lower() for stem in wanted.values())
        names: Dict[Path, str] = {}
        taken = set()
        for source_file, stem in wanted.items():
            if claims[stem.lower()] > 1:
                stem = f"{stem}_{safe_filename(source_file.stem, fallback='source')}"
            candidate, suffix = stem, 2
            while candidate.lower() in taken:
                candidate = f"{stem}_{suffix}"
                suffix += 1
            taken.add(candidate.lower())
            names[source_file] = candidate
        return names

    def find_sources(self) -> List[Path]:
        if not self.source_dir.is_dir():
            return []
        return sorted(self.source_dir.glob("*.json"))

    def export_all(self, parallel: bool = True) -> Dict[str, int]:
        """Export every source in the source directory.

        Returns:
            Counts per status: converted, skipped, failed
        """
        counts = {"converted": 0, "skipped": 0, "failed": 0}
        source_files = self.find_sources()

        if not source_files:
            self._log_warning(f"No grimoire sources found in {self.source_dir}")
            return counts

        self._log_info("Starting grimoire PDF export...")
        self._log_info(f"Found {len(source_files)} grimoire sources: {[f.name for f in source_files]}")
        output_names = self.plan_output_names(source_files)

        if parallel and len(source_files) > 1 and self.max_workers > 1:
            self._log_info(f"Using parallel processing with {self.max_workers} workers")
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                future_to_file = {executor.submit(self.export_single, f, output_names.get(f)): f for f in source_files}
                for future in as_completed(future_to_file):
                    status, _ = future.result()
                    counts[status] += 1
        else:
            self._log_info("Using sequential processing")
            for source_file in source_files:
                status, _ = self.export_single(source_file, output_names.get(source_file))
                counts[status] += 1

        self._log_success(
            f"Export complete: {counts['converted']} converted, {counts['skipped']} skipped, "
            f"{counts['failed']} failed ({len(source_files)} total)"
        )
        self._log_info(f"PDF files saved to: {self.pdf_dir.absolute()}")
        return counts


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Export grimoire JSON sources to themed A4 PDFs")
    parser.add_argument("--source", default=None, help="Directory with grimoire JSON sources (default: from config/env/grimoires)")
    parser.add_argument("--output-dir", default=None, help="Output directory (default: from config/env/output). PDFs go to output/pdf/")
    parser.add_argument("--db-path", default=None, help="Export state database path (default: from config/env/user config dir)")
    parser.add_argument("--margins", default=None, help="Page margins in CSS format (default: '20mm 15mm'). Range: 0-3 inches. Use 1, 2, or 4 values. Units: mm, cm, in, pt, px")
    parser.add_argument("--timeout", type=float, default=None, help="Seconds allowed per PDF render (default: 60)")
    parser.add_argument("--brand", default=None, help="Brand printed in footers (default: 'Templo do Abismo')")
    parser.add_argument("--max-workers", type=int, default=4, help="Maximum number of parallel workers (default: 4)")
    parser.add_argument("--no-parallel", action="store_true", help="Disable parallel processing and export sequentially")
    parser.add_argument("--force", action="store_true", help="Render every grimoire, ignoring export state")
    parser.add_argument("--save-html", action="store_true", help="Save the document HTML alongside PDFs (output/html/)")
    parser.add_argument("--no-fallback", action="store_true", help="Fail instead of using the text-only renderer when the browser fails")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging for detailed output")
    parser.add_argument("--cleanup-db", action="store_true", help="Clear all export state records from database and exit")
    parser.add_argument("--skip-dependency-check", action="store_true", help="Do not check for Playwright and Chromium before exporting")

    args = parser.parse_args(argv)

    config = Config({
        "source_dir": args.source,
        "output_dir": args.output_dir,
        "db_path": args.db_path,
        "page_margins": args.margins,
        "timeout": args.timeout,
        "brand": args.brand,
    })

    if args.cleanup_db:
        try:
            state_manager = ExportStateManager(config.get_db_path())
            count = state_manager.clear_all_exports()
            print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} Cleared {count} export state records from database")
            return
        except RuntimeError as e:
            print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} Failed to cleanup database: {e}")
            sys.exit(1)

    if not args.skip_dependency_check and not check_dependencies(check_optional=True):
        if args.no_fallback:
            sys.exit(1)
        print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} Continuing; failed renders will use the text-only renderer")

    try:
        exporter = GrimoireExporter(
            config.get_source_dir(),
            config.get_output_dir(),
            page_margins=config.get_page_margins(),
            debug=args.debug,
            db_path=config.get_db_path(),
            max_workers=args.max_workers,
            timeout=config.get_timeout(),
            brand=config.get_brand(),
            force_regenerate=args.force,
            save_html=args.save_html,
            use_fallback=not args.no_fallback,
        )
    except (ValueError, RuntimeError) as e:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {e}")
        sys.exit(1)

    counts = exporter.export_all(parallel=not args.no_parallel)
    if counts["failed"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
