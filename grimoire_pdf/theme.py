#!/usr/bin/env python3
"""
Ornament symbols and highlighted vocabularies used by the grimoire formatter.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class MysticalSymbols:
    """Glyphs inserted around chapters, sections, quotes and warnings."""
    chapter: str = "⧭"
    section: str = "🜚"
    ritual: str = "⚔"
    warning: str = "⚠"
    quote: str = "🜔"
    flame: str = "🔥"
    pentagram: str = "⛤"
    separator: str = "◈◈◈"


@dataclass(frozen=True)
class SpecialTerms:
    """Vocabularies that receive a semantic highlight span."""
    entities: Tuple[str, ...] = ("Lúcifer", "Lucifer")
    ritual: Tuple[str, ...] = ("ritual", "rituais", "cerimônia", "invocação")
    power: Tuple[str, ...] = ("poder", "energia", "força", "magia", "magick")
    elements: Tuple[str, ...] = ("fogo", "água", "ar", "terra", "éter", "quintessência")
    latin: Tuple[str, ...] = ("astaroth", "belial", "leviathan", "mammon", "baphomet", "sigil", "sigilo")


WARNING_KEYWORDS: Tuple[str, ...] = ("cuidado", "atenção", "aviso", "perigo", "importante")


@dataclass(frozen=True)
class MysticalTheme:
    """Everything the formatter needs besides the text itself.

    Attributes:
        symbols: Ornament glyphs
        terms: Highlighted vocabularies
        warning_keywords: Words that turn a paragraph into a warning callout
        words_per_minute: Reading speed used for the reading time estimate
        heading_max_length: Paragraphs at or above this length are never headings
        preserve_numbered_lists: Emit <ol> for lists whose markers are all numeric
    """
    symbols: MysticalSymbols = field(default_factory=MysticalSymbols)
    terms: SpecialTerms = field(default_factory=SpecialTerms)
    warning_keywords: Tuple[str, ...] = WARNING_KEYWORDS
    words_per_minute: int = 200
    heading_max_length: int = 100
    preserve_numbered_lists: bool = False


DEFAULT_THEME = MysticalTheme()

# Brand printed in PDF footers and colophons
DEFAULT_BRAND = "Templo do Abismo"
DEFAULT_SUBTITLE = "Grimório Luciferiano"
