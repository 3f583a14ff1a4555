#!/usr/bin/env python3
"""
Stylesheets for formatted grimoire HTML and for the printed PDF document.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

GRIMOIRE_CSS = """
.grimoire-chapter {
    margin: 2rem 0;
    padding: 1.5rem;
    background: rgba(0, 0, 0, 0.3);
    border: 1px solid rgba(255, 193, 7, 0.3);
    border-radius: 8px;
    backdrop-filter: blur(10px);
}

.chapter-header {
    text-align: center;
    margin-bottom: 2rem;
}

.chapter-title {
    font-family: 'Cinzel', serif;
    color: #ffc107;
    font-size: 1.5rem;
    font-weight: bold;
    margin-bottom: 1rem;
    text-shadow: 0 0 10px rgba(255, 193, 7, 0.5);
}

.chapter-ornament {
    color: #ffc107;
    font-size: 1.2rem;
    opacity: 0.8;
}

.section-title {
    font-family: 'Cinzel', serif;
    color: #ffc107;
    font-size: 1.2rem;
    margin: 1.5rem 0 1rem 0;
    text-shadow: 0 0 5px rgba(255, 193, 7, 0.3);
}

.grimoire-paragraph {
    font-family: 'EB Garamond', serif;
    line-height: 1.8;
    margin-bottom: 1rem;
    color: rgba(255, 255, 255, 0.9);
    text-align: justify;
}

.mystical-quote {
    background: rgba(139, 69, 19, 0.2);
    border-left: 3px solid #ffc107;
    padding: 1rem;
    margin: 1.5rem 0;
    font-style: italic;
    position: relative;
}

.quote-symbol {
    color: #ffc107;
    font-size: 1.2rem;
    opacity: 0.7;
}

.mystical-list {
    list-style: none;
    padding-left: 0;
}

.mystical-list-item {
    position: relative;
    padding-left: 2rem;
    margin-bottom: 0.5rem;
    color: rgba(255, 255, 255, 0.9);
}

.mystical-list-item::before {
    content: "◈";
    position: absolute;
    left: 0;
    color: #ffc107;
}

ol.mystical-list {
    list-style: decimal;
    padding-left: 2rem;
}

ol.mystical-list .mystical-list-item::before {
    content: none;
}

.warning-box {
    background: rgba(220, 53, 69, 0.2);
    border: 1px solid rgba(220, 53, 69, 0.5);
    padding: 1rem;
    margin: 1rem 0;
    border-radius: 4px;
}

.warning-symbol {
    color: #dc3545;
    margin-right: 0.5rem;
}

.entity-name {
    color: #dc3545;
    font-weight: bold;
    text-shadow: 0 0 5px rgba(220, 53, 69, 0.3);
}

.ritual-term {
    color: #ffc107;
    font-weight: 500;
}

.power-term {
    color: #e83e8c;
    font-weight: 500;
}

.element-term {
    color: #20c997;
    font-weight: 500;
}

.latin-term {
    color: #ffc107;
    font-style: italic;
    font-weight: 500;
}

.ritual-formula {
    color: #dc3545;
    font-weight: bold;
    letter-spacing: 1px;
    text-shadow: 0 0 5px rgba(220, 53, 69, 0.3);
}

.grimoire-description {
    font-family: 'EB Garamond', serif;
    font-size: 1.1rem;
    line-height: 1.6;
    color: rgba(255, 255, 255, 0.8);
    text-align: center;
    margin-bottom: 2rem;
    padding: 1rem;
    background: rgba(0, 0, 0, 0.2);
    border-radius: 4px;
}
"""

# Print typography for the A4 document. Applied before the custom and theme CSS.
PDF_BASE_CSS = """
* {
    margin: 0;
    padding: 0;
    box-sizing: border-box;
}

body {
    font-family: 'Times New Roman', serif;
    line-height: 1.6;
    color: #1a1a1a;
    background: white;
    font-size: 12pt;
}

h1, h2, h3, h4, h5, h6 {
    color: #8b5a3c;
    margin-bottom: 12pt;
    margin-top: 18pt;
    page-break-after: avoid;
    break-after: avoid;
}

h1 {
    font-size: 24pt;
    text-align: center;
    border-bottom: 2px solid #d97706;
    padding-bottom: 12pt;
    margin-bottom: 24pt;
}

h2 {
    font-size: 18pt;
    margin-top: 24pt;
}

h3 {
    font-size: 16pt;
}

h4 {
    font-size: 14pt;
}

p {
    margin-bottom: 12pt;
    text-align: justify;
    orphans: 3;
    widows: 3;
}

.chapter-title {
    font-size: 20pt;
    text-align: center;
    color: #8b5a3c;
    margin: 24pt 0 18pt 0;
    text-transform: uppercase;
    letter-spacing: 1pt;
}

.section-title {
    font-size: 16pt;
    color: #d97706;
    margin: 18pt 0 12pt 0;
    text-transform: uppercase;
    letter-spacing: 0.5pt;
}

.ritual-text {
    font-style: italic;
    background: #f8f6f0;
    padding: 12pt;
    margin: 12pt 0;
    border-left: 4px solid #d97706;
}

.latin-text {
    font-style: italic;
    color: #8b5a3c;
    font-weight: 500;
}

.power-word {
    font-weight: bold;
    color: #7c2d12;
    text-transform: uppercase;
    letter-spacing: 1pt;
}

blockquote {
    margin: 18pt 24pt;
    padding: 12pt;
    background: #f8f6f0;
    border-left: 4px solid #d97706;
    font-style: italic;
    page-break-inside: avoid;
    break-inside: avoid;
}

ul, ol {
    margin: 12pt 0 12pt 24pt;
}

li {
    margin-bottom: 6pt;
}

.page-break {
    page-break-before: always;
}

.avoid-break {
    page-break-inside: avoid;
}

.ornament {
    text-align: center;
    font-size: 18pt;
    color: #d97706;
    margin: 18pt 0;
}

.separator {
    text-align: center;
    font-size: 14pt;
    color: #8b5a3c;
    margin: 12pt 0;
}

.colophon {
    text-align: center;
    margin-top: 24pt;
    font-style: italic;
    color: #8b5a3c;
}

.web-only, .interactive, .button, .link {
    display: none !important;
}
"""


# The theme stylesheet targets a dark screen background; these rules come last
# in the PDF so formatted grimoires stay readable on white paper.
PDF_PRINT_OVERRIDES = """
.grimoire-chapter {
    background: none;
    border: none;
    backdrop-filter: none;
    padding: 0;
}

.chapter-title, .section-title, .chapter-ornament, .quote-symbol,
.ritual-term, .latin-term, .mystical-list-item::before {
    color: #8b5a3c;
    text-shadow: none;
}

.grimoire-paragraph, .mystical-list-item, .grimoire-description {
    color: #1a1a1a;
}

.grimoire-description {
    background: #f8f6f0;
}

.mystical-quote {
    background: #f8f6f0;
    border-left-color: #d97706;
}

.entity-name, .ritual-formula {
    color: #7c2d12;
    text-shadow: none;
}

.warning-box {
    background: #fdf2f2;
    border-color: #dc3545;
    page-break-inside: avoid;
    break-inside: avoid;
}
"""


def grimoire_stylesheet() -> str:
    """Theme stylesheet as a <style> element, ready to embed in a page."""
    return f"<style>{GRIMOIRE_CSS}</style>"
