"""
Grimoire PDF exporter package.
Formats grimoire text into themed HTML and renders it to A4 PDF with a headless browser.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

__version__ = "1.0.0"

from .formatter import (
    FormattedChapter,
    FormattedGrimoire,
    GrimoireFormatter,
    GrimoireMetadata,
    ParagraphRule,
    RawChapter,
    count_words,
    format_grimoire_content,
)
from .theme import DEFAULT_THEME, MysticalSymbols, MysticalTheme, SpecialTerms
from .styles import GRIMOIRE_CSS, PDF_BASE_CSS, grimoire_stylesheet
from .errors import (
    BrowserLaunchError,
    InvalidPDFInputError,
    PDFGenerationError,
    PDFRenderError,
    PDFTimeoutError,
)
from .pdf_generator import (
    GrimoirePDFGenerator,
    PDFGenerationOptions,
    build_pdf_html,
    clean_content_for_pdf,
    generate_grimoire_pdf,
)
from .text_utils import extract_and_truncate_html, extract_text_from_html, safe_filename, truncate_text
from .verification import ExportStateManager, calculate_file_hash
from .config import Config, get_default_db_path, get_user_config_dir
from .dependencies import DependencyChecker, check_dependencies
from .exporter import GrimoireExporter, GrimoireSource, load_grimoire_source

__all__ = [
    "FormattedChapter",
    "FormattedGrimoire",
    "GrimoireFormatter",
    "GrimoireMetadata",
    "ParagraphRule",
    "RawChapter",
    "count_words",
    "format_grimoire_content",
    "DEFAULT_THEME",
    "MysticalSymbols",
    "MysticalTheme",
    "SpecialTerms",
    "GRIMOIRE_CSS",
    "PDF_BASE_CSS",
    "grimoire_stylesheet",
    "BrowserLaunchError",
    "InvalidPDFInputError",
    "PDFGenerationError",
    "PDFRenderError",
    "PDFTimeoutError",
    "GrimoirePDFGenerator",
    "PDFGenerationOptions",
    "build_pdf_html",
    "clean_content_for_pdf",
    "generate_grimoire_pdf",
    "extract_and_truncate_html",
    "extract_text_from_html",
    "safe_filename",
    "truncate_text",
    "ExportStateManager",
    "calculate_file_hash",
    "Config",
    "get_default_db_path",
    "get_user_config_dir",
    "DependencyChecker",
    "check_dependencies",
    "GrimoireExporter",
    "GrimoireSource",
    "load_grimoire_source",
]
