#!/usr/bin/env python3
"""
Exceptions raised by the PDF generator.

Every failure is a PDFGenerationError, so callers that only care about
"it failed" can catch the base class.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

from typing import Optional


class PDFGenerationError(Exception):
    """PDF generation failed."""

    reason = "PDF generation failed"

    def __init__(self, detail: str = "", title: Optional[str] = None):
        self.detail = detail
        self.title = title
        message = self.reason
        if title:
            message = f"{message} for '{title}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidPDFInputError(PDFGenerationError):
    reason = "PDF generation failed (invalid input)"


class BrowserLaunchError(PDFGenerationError):
    reason = "PDF generation failed (browser launch)"


class PDFRenderError(PDFGenerationError):
    reason = "PDF generation failed (render)"


class PDFTimeoutError(PDFRenderError):
    reason = "PDF generation failed (timeout)"
