#!/usr/bin/env python3
"""
Export grimoire JSON sources to themed PDFs using Playwright (headless Chromium).
Run with --help for options; see grimoire_pdf.exporter for the source format.
"""

from grimoire_pdf.exporter import main


if __name__ == "__main__":
    main()
