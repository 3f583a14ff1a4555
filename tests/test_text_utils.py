from __future__ import annotations

import pytest

from grimoire_pdf.text_utils import (
    extract_and_truncate_html,
    extract_text_from_html,
    safe_filename,
    truncate_text,
)


def test_extract_text_strips_tags_and_entities() -> None:
    markup = "<style>p { color: red; }</style><p>Fogo &amp; <strong>Sangue</strong></p>\n<p>  Terra </p>"

    assert extract_text_from_html(markup) == "Fogo & Sangue Terra"


def test_extract_text_handles_empty_input() -> None:
    assert extract_text_from_html("") == ""
    assert extract_text_from_html(None) == ""


def test_truncate_adds_ellipsis_only_when_cut() -> None:
    assert truncate_text("curto", 10) == "curto"
    assert truncate_text("abcdef", 6) == "abcdef"
    assert truncate_text("abc def ghi", 4) == "abc..."
    assert truncate_text("", 3) == ""


def test_excerpt_from_html() -> None:
    markup = "<p>" + "palavra " * 30 + "</p>"

    excerpt = extract_and_truncate_html(markup)

    assert excerpt.endswith("...")
    assert len(excerpt) <= 103
    assert "<p>" not in excerpt


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Rituais do Fogo!", "Rituais_do_Fogo"),
        ("  Livro   das   Sombras  ", "Livro_das_Sombras"),
        ("Grimório 2", "Grimrio_2"),
        ("🔥🔥", "grimoire"),
        (None, "grimoire"),
    ],
)
def test_safe_filename(title, expected) -> None:
    assert safe_filename(title) == expected


def test_safe_filename_custom_fallback() -> None:
    assert safe_filename("???", fallback="fogo") == "fogo"
