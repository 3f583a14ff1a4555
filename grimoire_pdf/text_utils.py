#!/usr/bin/env python3
"""
Text helpers for stored grimoire HTML: plain text extraction, excerpts and
download file names.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

import html
import re
from typing import Optional

DEFAULT_CONTENT = "<p>Conteúdo não disponível</p>"

_TAG = re.compile(r"<[^>]*>")
_SCRIPT_OR_STYLE = re.compile(r"<(script|style)\b[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_WHITESPACE = re.compile(r"\s+")


def extract_text_from_html(markup: Optional[str]) -> str:
    """Remove tags, decode entities and collapse whitespace."""
    if not markup:
        return ""
    text = _SCRIPT_OR_STYLE.sub("", markup)
    text = _TAG.sub("", text)
    text = html.unescape(text)
    return _WHITESPACE.sub(" ", text).strip()


def truncate_text(text: Optional[str], max_length: int) -> Optional[str]:
    """Cut text to max_length characters and add an ellipsis when it was longer."""
    if not text or len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


def extract_and_truncate_html(markup: Optional[str], max_length: int = 100) -> str:
    return truncate_text(extract_text_from_html(markup), max_length)


def safe_filename(title: Optional[str], fallback: str = "grimoire") -> str:
    """Turn a grimoire title into an ASCII file name stem.

    Characters other than ASCII letters, digits and whitespace are dropped and
    whitespace runs become underscores, e.g. "Rituais do Fogo!" -> "Rituais_do_Fogo".
    """
    stem = re.sub(r"[^a-zA-Z0-9\s]", "", title or "")
    stem = re.sub(r"\s+", "_", stem.strip())
    return stem or fallback
