#!/usr/bin/env python3
"""
Grimoire PDF generator using Playwright (headless Chromium).
Cleans stored grimoire HTML for print, wraps it in an A4 document and
renders it to PDF bytes.

Each call launches its own browser and always closes it, whether the render
succeeds, fails or times out.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

import asyncio
import html
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Pattern, Tuple

from playwright.async_api import async_playwright

from .console import ConsoleLogMixin
from .errors import (
    BrowserLaunchError,
    InvalidPDFInputError,
    PDFGenerationError,
    PDFRenderError,
    PDFTimeoutError,
)
from .styles import GRIMOIRE_CSS, PDF_BASE_CSS, PDF_PRINT_OVERRIDES
from .theme import DEFAULT_BRAND, DEFAULT_SUBTITLE


ORNAMENT = "◆ ◇ ◆"
DEFAULT_MARGINS = "20mm 15mm"
DEFAULT_TIMEOUT = 60.0
DEFAULT_CLOSE_TIMEOUT = 5.0

_FLAGS = re.IGNORECASE | re.DOTALL

# Web-only markup that has no meaning on paper. Applied in order.
DESTRUCTIVE_RULES: Tuple[Tuple[Pattern, str], ...] = (
    (re.compile(r"<button\b[^>]*>.*?</button>", _FLAGS), ""),
    (re.compile(r"<input\b[^>]*>", _FLAGS), ""),
    (re.compile(r"<form\b[^>]*>.*?</form>", _FLAGS), ""),
    (re.compile(r"\s*class=\"[^\"]*interactive[^\"]*\"", _FLAGS), ""),
    (re.compile(r"\s*class=\"[^\"]*web-only[^\"]*\"", _FLAGS), ""),
    (re.compile(r"\s*onclick\s*=\s*(?:\"[^\"]*\"|'[^']*')", _FLAGS), ""),
    (re.compile(r"\s*href\s*=\s*(?:\"#[^\"]*\"|'#[^']*')", _FLAGS), ""),
)

# Retag headings and inline emphasis with the print classes. Applied in order.
COSMETIC_RULES: Tuple[Tuple[Pattern, str], ...] = (
    (re.compile(r"<h1\b[^>]*>", _FLAGS), '<h1 class="chapter-title">'),
    # formatter chapter headings are h2.chapter-title and keep their class
    (re.compile(r"<h2\b(?![^>]*class=\"chapter-title\")[^>]*>", _FLAGS), '<h2 class="section-title">'),
    (re.compile(r"<em>([^<]+)</em>", _FLAGS), r'<span class="latin-text">\1</span>'),
    (re.compile(r"<strong>([^<]+)</strong>", _FLAGS), r'<span class="power-word">\1</span>'),
    (re.compile(r"<div class=\"ritual[^\"]*\"[^>]*>", _FLAGS), '<div class="ritual-text">'),
    (re.compile(r"<hr\b[^>]*>", _FLAGS), f'<div class="separator">{ORNAMENT}</div>'),
)

_IMAGE_TAG = re.compile(r"<img\b[^>]*>", _FLAGS)
_CHAPTER_HEADING = re.compile(r"(<h[12] class=\"chapter-title\">)", re.IGNORECASE)
_MARGIN_VALUE = re.compile(r"^(-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)\s*(cm|in|mm|pt|px)?$")


@dataclass
class PDFGenerationOptions:
    """Input for one PDF render. content is expected to be HTML already."""
    title: str
    content: str
    custom_css: Optional[str] = ""
    include_images: bool = False


@dataclass
class _BrowserSession:
    """Handles opened by one render. Closed outside the timed render scope."""
    start_task: Optional[asyncio.Future] = None
    browser: Any = None


def clean_content_for_pdf(content: str, include_images: bool = True) -> str:
    """Strip interactive markup and retag elements with print classes.

    Args:
        content: Stored grimoire HTML
        include_images: When False, <img> tags are removed as well

    Returns:
        HTML ready to be placed in the PDF document body
    """
    cleaned = content or ""
    if not include_images:
        cleaned = _IMAGE_TAG.sub("", cleaned)

    for pattern, replacement in DESTRUCTIVE_RULES:
        cleaned = pattern.sub(replacement, cleaned)

    for pattern, replacement in COSMETIC_RULES:
        cleaned = pattern.sub(replacement, cleaned)

    # Every chapter starts on a new page
    return _CHAPTER_HEADING.sub(r'<div class="page-break"></div>\1', cleaned)


def build_header_template(title: str) -> str:
    return (
        '<div style="font-size: 10px; color: #666; text-align: center; width: 100%; margin: 0 15mm;">'
        f'<span style="color: #d97706;">{html.escape(title)}</span>'
        '</div>'
    )


def build_footer_template(brand: str = DEFAULT_BRAND) -> str:
    return (
        '<div style="font-size: 10px; color: #666; text-align: center; width: 100%; margin: 0 15mm;">'
        f'<span style="color: #d97706;">{html.escape(brand)}</span> — '
        '<span class="pageNumber"></span> / <span class="totalPages"></span>'
        '</div>'
    )


def build_pdf_html(options: PDFGenerationOptions, brand: str = DEFAULT_BRAND) -> str:
    """Create the full HTML document handed to the browser."""
    title = html.escape(options.title)
    body = clean_content_for_pdf(options.content, include_images=options.include_images)
    # Keep custom CSS from closing the style element early
    custom_css = (options.custom_css or "").replace("</", "<\\/")

    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
{PDF_BASE_CSS}
{custom_css}
{GRIMOIRE_CSS}
{PDF_PRINT_OVERRIDES}
    </style>
</head>
<body>
    <div class="grimoire-content">
        <h1 class="grimoire-title">{title}</h1>
        <div class="ornament">{ORNAMENT}</div>

        <div class="content-body">
{body}
        </div>

        <div class="ornament" style="margin-top: 36pt;">{ORNAMENT}</div>
        <div class="colophon">
            {html.escape(brand)}<br>
            {DEFAULT_SUBTITLE}
        </div>
    </div>
</body>
</html>"""


class GrimoirePDFGenerator(ConsoleLogMixin):
    """Renders grimoire HTML to A4 PDF bytes with a headless Chromium."""

    VIEWPORT = {"width": 794, "height": 1123}
    BROWSER_ARGS = [
        '--no-sandbox',
        '--disable-setuid-sandbox',
        '--disable-dev-shm-usage',   # Use /tmp instead of /dev/shm
        '--disable-accelerated-2d-canvas',
        '--no-first-run',
        '--no-zygote',
        '--disable-gpu',
    ]

    def __init__(self, page_margins: str = DEFAULT_MARGINS, timeout: float = DEFAULT_TIMEOUT,
                 brand: str = DEFAULT_BRAND, debug: bool = False, playwright_factory=None,
                 close_timeout: float = DEFAULT_CLOSE_TIMEOUT):
        """Initialize the generator.

        Args:
            page_margins: CSS style margins, 1, 2 or 4 values (default unit mm)
            timeout: Seconds allowed for launching, loading and rendering
            brand: Name printed in the footer and colophon
            debug: Enable debug logging
            playwright_factory: Callable returning a Playwright context manager;
                defaults to playwright.async_api.async_playwright
            close_timeout: Seconds allowed for each teardown step (closing the
                browser, stopping the driver)
        """
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive (got {timeout})")
        if close_timeout <= 0:
            raise ValueError(f"Close timeout must be positive (got {close_timeout})")
        self.page_margins = page_margins
        self.timeout = timeout
        self.close_timeout = close_timeout
        self.brand = brand
        self.debug = debug
        self.playwright_factory = playwright_factory or async_playwright
        self.margins = self._parse_margins()

    def _validate_margin(self, margin_str: str) -> str:
        """Validate and normalize a single margin value."""
        match = _MARGIN_VALUE.match(margin_str.strip())
        if not match:
            raise ValueError(f"Invalid margin format: '{margin_str}'. Use format like '20mm', '2.5cm', '1in', etc.")

        value_str, unit = match.groups()
        value = float(value_str)

        # Set default unit to 'mm' if not specified
        if not unit:
            unit = 'mm'

        # Convert to inches for validation
        if unit == 'cm':
            value_inches = value / 2.54
        elif unit == 'mm':
            value_inches = value / 25.4
        elif unit == 'pt':
            value_inches = value / 72
        elif unit == 'px':
            value_inches = value / 96  # Assuming 96 DPI
        else:  # 'in'
            value_inches = value

        if value_inches < 0:
            raise ValueError(f"Margin cannot be negative: '{margin_str}'. Minimum value is 0.")
        elif value_inches > 3:
            raise ValueError(f"Margin too large: '{margin_str}'. Maximum value is 3 inches (7.62cm).")

        return f"{value}{unit}"

    def _parse_margins(self) -> Dict[str, str]:
        """Parse margin string into individual margin values."""
        margin_parts = self.page_margins.split()

        if len(margin_parts) == 1:
            margin = self._validate_margin(margin_parts[0])
            return {'top': margin, 'right': margin, 'bottom': margin, 'left': margin}
        elif len(margin_parts) == 2:
            vertical = self._validate_margin(margin_parts[0])
            horizontal = self._validate_margin(margin_parts[1])
            return {'top': vertical, 'right': horizontal, 'bottom': vertical, 'left': horizontal}
        elif len(margin_parts) == 4:
            return {
                'top': self._validate_margin(margin_parts[0]),
                'right': self._validate_margin(margin_parts[1]),
                'bottom': self._validate_margin(margin_parts[2]),
                'left': self._validate_margin(margin_parts[3])
            }
        else:
            raise ValueError(f"Invalid margin format: '{self.page_margins}'. Use 1, 2, or 4 values.")

    def _validate_options(self, options: PDFGenerationOptions) -> None:
        if not isinstance(options.title, str) or not options.title.strip():
            raise InvalidPDFInputError("title must be a non-empty string")
        if not isinstance(options.content, str):
            raise InvalidPDFInputError("content must be an HTML string", title=options.title)
        if options.custom_css is not None and not isinstance(options.custom_css, str):
            raise InvalidPDFInputError("custom CSS must be a string", title=options.title)

    async def generate_grimoire_pdf(self, options: PDFGenerationOptions) -> bytes:
        """Render a grimoire to PDF bytes.

        Raises:
            InvalidPDFInputError: options are unusable; no browser is launched
            BrowserLaunchError: Playwright or Chromium could not start
            PDFRenderError: loading the content or printing failed
            PDFTimeoutError: the whole operation exceeded self.timeout
        """
        self._validate_options(options)
        document = build_pdf_html(options, brand=self.brand)
        self._log_debug(f"Rendering '{options.title}' ({len(document)} chars of HTML) with margins: {self.margins}")

        session = _BrowserSession()
        try:
            try:
                pdf_bytes = await asyncio.wait_for(
                    self._render(options.title, document, session), timeout=self.timeout
                )
            except asyncio.TimeoutError as e:
                self._log_error(f"PDF generation for '{options.title}' timed out after {self.timeout:g}s")
                raise PDFTimeoutError(f"render exceeded {self.timeout:g}s", title=options.title) from e
            except PDFGenerationError as e:
                self._log_error(str(e))
                raise
        finally:
            await self._close_session(session)

        self._log_debug(f"Rendered '{options.title}' to {len(pdf_bytes)} bytes")
        return pdf_bytes

    def generate_grimoire_pdf_sync(self, options: PDFGenerationOptions) -> bytes:
        """Blocking wrapper around generate_grimoire_pdf for non-async callers."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(self.generate_grimoire_pdf(options))
        finally:
            asyncio.set_event_loop(None)
            loop.close()

    async def _render(self, title: str, document: str, session: _BrowserSession) -> bytes:
        """Launch, load and print. Runs under the render timeout; teardown is the caller's."""
        try:
            # Shielded: a driver still starting at the timeout is stopped during teardown
            session.start_task = asyncio.ensure_future(self.playwright_factory().start())
            playwright = await asyncio.shield(session.start_task)
            session.browser = await playwright.chromium.launch(headless=True, args=self.BROWSER_ARGS)
        except Exception as e:
            raise BrowserLaunchError(str(e), title=title) from e

        try:
            page = await session.browser.new_page(viewport=self.VIEWPORT, device_scale_factor=1)
            await page.set_content(document, wait_until="networkidle", timeout=self.timeout * 1000)
            pdf_bytes = await page.pdf(
                format='A4',
                print_background=True,
                margin=self.margins,
                display_header_footer=True,
                header_template=build_header_template(title),
                footer_template=build_footer_template(self.brand),
            )
        except Exception as e:
            raise PDFRenderError(str(e), title=title) from e

        if not pdf_bytes:
            raise PDFRenderError("browser returned an empty document", title=title)
        return pdf_bytes

    async def _close_session(self, session: _BrowserSession) -> None:
        """Close browser and stop the Playwright driver, each step bounded by close_timeout."""
        playwright = await self._started_driver(session.start_task)
        try:
            if session.browser is not None:
                await self._bounded(session.browser.close(), "close browser")
        finally:
            if playwright is not None:
                await self._bounded(playwright.stop(), "stop Playwright")
        self._log_debug("Browser instance closed and cleaned up")

    async def _started_driver(self, start_task: Optional[asyncio.Future]):
        """Return the Playwright driver once it has started, or None if it never did."""
        if start_task is None:
            return None
        if not start_task.done():
            try:
                await asyncio.wait_for(asyncio.shield(start_task), timeout=self.close_timeout)
            except asyncio.TimeoutError:
                start_task.cancel()
                await asyncio.wait({start_task}, timeout=self.close_timeout)
                self._log_warning(f"Playwright driver still starting after {self.close_timeout:g}s; abandoned")
                return None
            except Exception as e:
                self._log_warning(f"Playwright driver failed to start: {e}")
                return None
        if start_task.cancelled() or start_task.exception() is not None:
            return None
        return start_task.result()

    async def _bounded(self, awaitable, action: str) -> None:
        try:
            await asyncio.wait_for(awaitable, timeout=self.close_timeout)
        except asyncio.TimeoutError:
            self._log_warning(f"Failed to {action}: no response after {self.close_timeout:g}s")
        except Exception as e:
            self._log_warning(f"Failed to {action}: {e}")


async def generate_grimoire_pdf(options: PDFGenerationOptions, **generator_kwargs) -> bytes:
    """Render one grimoire with a throwaway GrimoirePDFGenerator."""
    return await GrimoirePDFGenerator(**generator_kwargs).generate_grimoire_pdf(options)
