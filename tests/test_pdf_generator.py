from __future__ import annotations

import asyncio
import time

import pytest

from grimoire_pdf.errors import (
    BrowserLaunchError,
    InvalidPDFInputError,
    PDFGenerationError,
    PDFRenderError,
    PDFTimeoutError,
)
from grimoire_pdf.pdf_generator import (
    GrimoirePDFGenerator,
    PDFGenerationOptions,
    generate_grimoire_pdf,
)


def _options(**overrides) -> PDFGenerationOptions:
    values = {"title": "Rituais do Fogo", "content": "<h1>Origens</h1><p>Texto</p>"}
    values.update(overrides)
    return PDFGenerationOptions(**values)


def _generate(generator: GrimoirePDFGenerator, options: PDFGenerationOptions) -> bytes:
    return asyncio.run(generator.generate_grimoire_pdf(options))


def test_renders_a4_pdf_and_releases_browser(fake_playwright) -> None:
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    pdf = _generate(generator, _options())

    assert pdf == b"%PDF-1.7 fake document"
    assert fake_playwright.playwright.chromium.launch_kwargs["headless"] is True
    assert "--no-sandbox" in fake_playwright.playwright.chromium.launch_kwargs["args"]

    page = fake_playwright.page
    assert page.new_page_kwargs["viewport"] == {"width": 794, "height": 1123}
    assert page.set_content_kwargs["wait_until"] == "networkidle"
    assert '<h1 class="chapter-title">Origens</h1>' in page.content
    assert page.pdf_kwargs["format"] == "A4"
    assert page.pdf_kwargs["print_background"] is True
    assert page.pdf_kwargs["display_header_footer"] is True
    assert page.pdf_kwargs["margin"] == {"top": "20.0mm", "right": "15.0mm", "bottom": "20.0mm", "left": "15.0mm"}
    assert "Rituais do Fogo" in page.pdf_kwargs["header_template"]
    assert "Templo do Abismo" in page.pdf_kwargs["footer_template"]

    assert fake_playwright.browser.closed is True
    assert fake_playwright.playwright.stopped is True


def test_unterminated_markup_still_renders(fake_playwright) -> None:
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    pdf = _generate(generator, _options(content="<p>sem fim <strong>aberto"))

    assert isinstance(pdf, bytes)
    assert fake_playwright.browser.closed is True


def test_launch_failure_is_browser_launch_error(fake_playwright) -> None:
    fake_playwright.behaviour.launch_error = RuntimeError("Executable doesn't exist")
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    with pytest.raises(BrowserLaunchError) as excinfo:
        _generate(generator, _options())

    assert isinstance(excinfo.value, PDFGenerationError)
    assert str(excinfo.value).startswith("PDF generation failed")
    assert "Executable doesn't exist" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert fake_playwright.playwright.stopped is True


def test_driver_start_failure_is_browser_launch_error(fake_playwright) -> None:
    fake_playwright.behaviour.start_error = OSError("driver missing")
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    with pytest.raises(BrowserLaunchError):
        _generate(generator, _options())


def test_set_content_failure_is_render_error_and_closes_browser(fake_playwright) -> None:
    fake_playwright.behaviour.set_content_error = RuntimeError("net::ERR_ABORTED")
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    with pytest.raises(PDFRenderError) as excinfo:
        _generate(generator, _options())

    assert excinfo.value.title == "Rituais do Fogo"
    assert fake_playwright.browser.closed is True
    assert fake_playwright.playwright.stopped is True


def test_pdf_failure_is_render_error_and_closes_browser(fake_playwright) -> None:
    fake_playwright.behaviour.pdf_error = RuntimeError("Printing failed")
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    with pytest.raises(PDFRenderError):
        _generate(generator, _options())

    assert fake_playwright.browser.closed is True


def test_empty_document_is_render_error(fake_playwright) -> None:
    fake_playwright.behaviour.pdf_bytes = b""
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    with pytest.raises(PDFRenderError):
        _generate(generator, _options())

    assert fake_playwright.browser.closed is True


def test_hanging_render_times_out_and_closes_browser(fake_playwright) -> None:
    fake_playwright.behaviour.hang_on_set_content = True
    generator = GrimoirePDFGenerator(timeout=0.05, playwright_factory=fake_playwright)

    with pytest.raises(PDFTimeoutError) as excinfo:
        _generate(generator, _options())

    assert isinstance(excinfo.value, PDFRenderError)
    assert fake_playwright.browser.closed is True
    assert fake_playwright.playwright.stopped is True


def test_hanging_close_after_timeout_still_stops_driver(fake_playwright) -> None:
    fake_playwright.behaviour.hang_on_set_content = True
    fake_playwright.behaviour.hang_on_close = True
    generator = GrimoirePDFGenerator(timeout=0.05, close_timeout=0.05, playwright_factory=fake_playwright)

    started = time.monotonic()
    with pytest.raises(PDFTimeoutError):
        _generate(generator, _options())

    assert time.monotonic() - started < 2
    assert fake_playwright.playwright.stopped is True


def test_hanging_close_after_success_returns_pdf(fake_playwright) -> None:
    fake_playwright.behaviour.hang_on_close = True
    generator = GrimoirePDFGenerator(close_timeout=0.05, playwright_factory=fake_playwright)

    started = time.monotonic()
    pdf = _generate(generator, _options())

    assert pdf == b"%PDF-1.7 fake document"
    assert time.monotonic() - started < 2
    assert fake_playwright.playwright.stopped is True


def test_hanging_driver_start_is_bounded(fake_playwright) -> None:
    fake_playwright.behaviour.hang_on_start = True
    generator = GrimoirePDFGenerator(timeout=0.05, close_timeout=0.05, playwright_factory=fake_playwright)

    started = time.monotonic()
    with pytest.raises(PDFTimeoutError):
        _generate(generator, _options())

    assert time.monotonic() - started < 2
    assert fake_playwright.instances == []


def test_driver_started_after_timeout_is_stopped(fake_playwright) -> None:
    fake_playwright.behaviour.start_delay = 0.2
    generator = GrimoirePDFGenerator(timeout=0.05, close_timeout=2, playwright_factory=fake_playwright)

    with pytest.raises(PDFTimeoutError):
        _generate(generator, _options())

    assert len(fake_playwright.instances) == 1
    assert fake_playwright.playwright.stopped is True
    assert fake_playwright.playwright.chromium.browser is None


def test_close_failure_does_not_hide_result(fake_playwright) -> None:
    fake_playwright.behaviour.close_error = RuntimeError("already gone")
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    assert _generate(generator, _options()) == b"%PDF-1.7 fake document"
    assert fake_playwright.playwright.stopped is True


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": ""},
        {"title": "   "},
        {"title": None},
        {"content": None},
        {"custom_css": 42},
    ],
)
def test_invalid_input_never_launches_browser(fake_playwright, overrides) -> None:
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    with pytest.raises(InvalidPDFInputError):
        _generate(generator, _options(**overrides))

    assert fake_playwright.calls == 0


def test_sync_wrapper_returns_bytes(fake_playwright) -> None:
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    assert generator.generate_grimoire_pdf_sync(_options()) == b"%PDF-1.7 fake document"
    assert fake_playwright.browser.closed is True


def test_each_call_uses_its_own_browser(fake_playwright) -> None:
    generator = GrimoirePDFGenerator(playwright_factory=fake_playwright)

    generator.generate_grimoire_pdf_sync(_options())
    generator.generate_grimoire_pdf_sync(_options())

    assert len(fake_playwright.instances) == 2
    assert all(instance.chromium.browser.closed for instance in fake_playwright.instances)


def test_module_level_helper(fake_playwright) -> None:
    pdf = asyncio.run(generate_grimoire_pdf(_options(), playwright_factory=fake_playwright, brand="Casa"))

    assert pdf.startswith(b"%PDF")
    assert "Casa" in fake_playwright.page.pdf_kwargs["footer_template"]


@pytest.mark.parametrize(
    "margins, expected",
    [
        ("1in", {"top": "1.0in", "right": "1.0in", "bottom": "1.0in", "left": "1.0in"}),
        ("10 5", {"top": "10.0mm", "right": "5.0mm", "bottom": "10.0mm", "left": "5.0mm"}),
        ("1cm 2cm 3cm 4cm", {"top": "1.0cm", "right": "2.0cm", "bottom": "3.0cm", "left": "4.0cm"}),
    ],
)
def test_margins_are_parsed(fake_playwright, margins, expected) -> None:
    generator = GrimoirePDFGenerator(page_margins=margins, playwright_factory=fake_playwright)

    assert generator.margins == expected


@pytest.mark.parametrize("margins", ["5in", "-1mm", "abc", "1mm 2mm 3mm"])
def test_invalid_margins_are_rejected(margins) -> None:
    with pytest.raises(ValueError):
        GrimoirePDFGenerator(page_margins=margins)


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValueError):
        GrimoirePDFGenerator(timeout=0)
    with pytest.raises(ValueError):
        GrimoirePDFGenerator(close_timeout=0)
