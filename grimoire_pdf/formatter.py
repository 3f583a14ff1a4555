#!/usr/bin/env python3
"""
Grimoire content formatter.
Turns author text (paragraphs separated by blank lines) into themed HTML:
section headings, quotes, lists, warning callouts and highlighted terms.

The formatter is meant to run exactly once on raw text. Running it again on
its own output wraps the highlighted terms a second time.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Mapping, NamedTuple, Optional, Pattern, Tuple, Union

from .theme import DEFAULT_THEME, MysticalTheme


_TAG_SPLIT = re.compile(r"(<[A-Za-z/!][^>]*>)")
_PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n")
_LIST_ITEM = re.compile(r"^[ \t]*(?:([-*])|(\d+)\.)[ \t]+")
_EMBEDDED_LIST_ITEM = re.compile(r"\n[ \t]*(?:[-*]|\d+\.)[ \t]")
_RITUAL_FORMULA = re.compile(r"\b[A-ZÀ-ÖØ-Þ]{3,}\b")
_OPENING_QUOTES = ('"', "“")
_CLOSING_QUOTES = ('"', "”")


@dataclass
class RawChapter:
    """Author supplied chapter."""
    title: str
    content: str


@dataclass
class FormattedChapter:
    """Chapter with its original strings and the derived HTML."""
    title: str
    content: str
    formatted_content: str


@dataclass
class GrimoireMetadata:
    word_count: int
    estimated_reading_time: int
    formatted_at: datetime = field(default_factory=datetime.now)


@dataclass
class FormattedGrimoire:
    """Transient result of a formatting call."""
    title: str
    description: str
    chapters: List[FormattedChapter]
    metadata: GrimoireMetadata

    def to_html(self) -> str:
        """Description followed by every chapter block."""
        parts = [self.description]
        parts.extend(chapter.formatted_content for chapter in self.chapters)
        return "\n\n".join(parts)


class ParagraphRule(NamedTuple):
    """One paragraph classification rule: the first rule whose predicate matches wins."""
    name: str
    predicate: Callable[[str], bool]
    transform: Callable[[str], str]


ChapterInput = Union[RawChapter, Mapping[str, str]]


def count_words(text: Optional[str]) -> int:
    """Count whitespace separated words. Empty text has no words."""
    if not text:
        return 0
    return len(text.split())


def _whole_word_pattern(terms: Iterable[str], ignore_case: bool = True) -> Optional[Pattern]:
    terms = sorted(set(terms), key=len, reverse=True)
    if not terms:
        return None
    alternation = "|".join(re.escape(term) for term in terms)
    flags = re.IGNORECASE if ignore_case else 0
    return re.compile(rf"\b(?:{alternation})\b", flags)


def _sub_outside_tags(html: str, pattern: Pattern, repl: Callable[[re.Match], str]) -> str:
    """Apply a substitution to text nodes only, leaving tags and attributes alone."""
    parts = _TAG_SPLIT.split(html)
    # re.split with a capturing group alternates text, tag, text, ...
    for i in range(0, len(parts), 2):
        if parts[i]:
            parts[i] = pattern.sub(repl, parts[i])
    return "".join(parts)


class GrimoireFormatter:
    """Formats grimoire title, description and chapters into themed HTML."""

    def __init__(self, theme: MysticalTheme = DEFAULT_THEME):
        self.theme = theme
        self.symbols = theme.symbols
        self._warning_pattern = _whole_word_pattern(theme.warning_keywords)

        terms = theme.terms
        # (pattern, tag, css class) in application order
        self._highlights: List[Tuple[Pattern, str, str]] = []
        for vocabulary, tag, css_class in (
            (terms.entities, "span", "entity-name"),
            (terms.ritual, "span", "ritual-term"),
            (terms.power, "span", "power-term"),
            (terms.elements, "span", "element-term"),
            (terms.latin, "em", "latin-term"),
        ):
            pattern = _whole_word_pattern(vocabulary)
            if pattern is not None:
                self._highlights.append((pattern, tag, css_class))

        self.rules: Tuple[ParagraphRule, ...] = (
            ParagraphRule("heading", self._is_heading, self._format_heading),
            ParagraphRule("quote", self._is_quote, self._format_quote),
            ParagraphRule("list", self._is_list, self._format_list),
            ParagraphRule("warning", self._is_warning, self._format_warning),
            ParagraphRule("paragraph", lambda text: True, self._format_paragraph),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def format_grimoire_content(self, title: Optional[str], description: Optional[str],
                                chapters: Iterable[ChapterInput]) -> FormattedGrimoire:
        """Format a whole grimoire.

        Args:
            title: Grimoire title
            description: Free text description, formatted like chapter content
            chapters: RawChapter objects or mappings with 'title' and 'content'

        Returns:
            FormattedGrimoire with one FormattedChapter per input chapter, in order
        """
        formatted_chapters = [
            self.format_chapter(chapter, number)
            for number, chapter in enumerate(chapters, start=1)
        ]
        total_words = sum(count_words(chapter.content) for chapter in formatted_chapters)

        return FormattedGrimoire(
            title=self.format_title(title),
            description=self.format_description(description),
            chapters=formatted_chapters,
            metadata=GrimoireMetadata(
                word_count=total_words,
                estimated_reading_time=math.ceil(total_words / self.theme.words_per_minute),
            ),
        )

    def format_chapter(self, chapter: ChapterInput, number: int) -> FormattedChapter:
        """Wrap one chapter's formatted body in the chapter block."""
        if isinstance(chapter, Mapping):
            title = chapter.get("title") or ""
            content = chapter.get("content") or ""
        else:
            title = chapter.title or ""
            content = chapter.content or ""

        separator = self.symbols.separator
        heading = f"{self.symbols.chapter} Capítulo {number}: {title}"
        body = self.format_content_text(content)

        formatted = (
            '<div class="grimoire-chapter">\n'
            '  <div class="chapter-header">\n'
            f'    <h2 class="chapter-title">{heading}</h2>\n'
            f'    <div class="chapter-ornament">{separator}</div>\n'
            '  </div>\n'
            '  <div class="chapter-content">\n'
            f'{body}\n'
            '  </div>\n'
            '  <div class="chapter-footer">\n'
            f'    <div class="chapter-ornament">{separator}</div>\n'
            '  </div>\n'
            '</div>'
        )
        return FormattedChapter(title=title, content=content, formatted_content=formatted)

    def format_title(self, title: Optional[str]) -> str:
        flame = self.symbols.flame
        return f"{flame} {title or ''} {flame}"

    def format_description(self, description: Optional[str]) -> str:
        return f'<div class="grimoire-description">{self.format_content_text(description or "")}</div>'

    def format_content_text(self, content: Optional[str]) -> str:
        """Split text into paragraphs, classify and highlight each one."""
        if not content:
            return ""
        normalized = content.replace("\r\n", "\n").replace("\r", "\n")
        paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(normalized)]
        return "\n\n".join(self.format_paragraph(p) for p in paragraphs if p)

    def format_paragraph(self, paragraph: str) -> str:
        rule = self.match_rule(paragraph)
        return self.highlight_terms(rule.transform(paragraph))

    def match_rule(self, paragraph: str) -> ParagraphRule:
        """Return the first rule whose predicate accepts the paragraph."""
        for rule in self.rules:
            if rule.predicate(paragraph):
                return rule
        return self.rules[-1]

    def classify_paragraph(self, paragraph: str) -> str:
        return self.match_rule(paragraph.strip()).name

    def highlight_terms(self, html: str) -> str:
        """Wrap vocabulary terms and uppercase ritual formulas found in text nodes."""
        for pattern, tag, css_class in self._highlights:
            html = _sub_outside_tags(
                html, pattern,
                lambda m, tag=tag, css_class=css_class: f'<{tag} class="{css_class}">{m.group(0)}</{tag}>'
            )
        return _sub_outside_tags(
            html, _RITUAL_FORMULA,
            lambda m: f'<strong class="ritual-formula">{m.group(0)}</strong>'
        )

    # ------------------------------------------------------------------
    # Paragraph rules
    # ------------------------------------------------------------------

    def _is_heading(self, text: str) -> bool:
        return text.endswith(":") and len(text) < self.theme.heading_max_length

    def _format_heading(self, text: str) -> str:
        return f'<h3 class="section-title">{self.symbols.section} {text}</h3>'

    def _is_quote(self, text: str) -> bool:
        return len(text) >= 2 and text.startswith(_OPENING_QUOTES) and text.endswith(_CLOSING_QUOTES)

    def _format_quote(self, text: str) -> str:
        symbol = f'<span class="quote-symbol">{self.symbols.quote}</span>'
        return f'<blockquote class="mystical-quote">{symbol} {text} {symbol}</blockquote>'

    def _is_list(self, text: str) -> bool:
        return _EMBEDDED_LIST_ITEM.search(text) is not None

    def _format_list(self, text: str) -> str:
        intro: List[str] = []
        items: List[List[str]] = []
        numeric_markers = True

        for line in text.split("\n"):
            match = _LIST_ITEM.match(line)
            if match:
                if match.group(1):
                    numeric_markers = False
                items.append([line[match.end():].strip()])
            elif items:
                if line.strip():
                    items[-1].append(line.strip())
            elif line.strip():
                intro.append(line.strip())

        list_tag = "ul"
        if self.theme.preserve_numbered_lists and numeric_markers:
            list_tag = "ol"

        parts = []
        if intro:
            parts.append(f'<p class="grimoire-paragraph list-intro">{"<br>".join(intro)}</p>')
        entries = "\n".join(
            f'<li class="mystical-list-item">{"<br>".join(item)}</li>' for item in items
        )
        parts.append(f'<{list_tag} class="mystical-list">\n{entries}\n</{list_tag}>')
        return "\n".join(parts)

    def _is_warning(self, text: str) -> bool:
        return self._warning_pattern is not None and self._warning_pattern.search(text) is not None

    def _format_warning(self, text: str) -> str:
        return (
            '<div class="warning-box">'
            f'<span class="warning-symbol">{self.symbols.warning}</span> {text}'
            '</div>'
        )

    def _format_paragraph(self, text: str) -> str:
        return f'<p class="grimoire-paragraph">{text}</p>'


_default_formatter = GrimoireFormatter()


def format_grimoire_content(title: Optional[str], description: Optional[str],
                            chapters: Iterable[ChapterInput]) -> FormattedGrimoire:
    """Format a grimoire with the default theme."""
    return _default_formatter.format_grimoire_content(title, description, chapters)
