"""Text utilities for turning chapter markup into plain text.

The conversion is regex based: chapter files in the wild are often not
well-formed, and the output only needs paragraph breaks, not structure.
"""

import re

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*>[\s\S]*?</\1>", re.IGNORECASE)
_BLOCK_END_RE = re.compile(r"</(div|p|h[1-6]|li|section|article)>", re.IGNORECASE)
_BREAK_RE = re.compile(r"<(br|hr)\s*/?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")

# The fixed set of named entities chapter files use in practice.
# "&amp;" is decoded last so "&amp;lt;" stays a literal "&lt;".
HTML_ENTITIES = {
    "&nbsp;": " ",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&hellip;": "...",
    "&mdash;": "—",
    "&ndash;": "–",
}
_ENTITY_RE = re.compile("|".join(re.escape(entity) for entity in HTML_ENTITIES))

_CJK_RE = re.compile(r"[\u4e00-\u9fff]")
_ASCII_WORD_RE = re.compile(r"\b[a-zA-Z]+\b", re.ASCII)

ELLIPSIS = "..."


def html_to_text(html: str) -> str:
    """Strip markup, keeping block boundaries as newlines.

    Args:
        html: Raw (X)HTML document or fragment

    Returns:
        Text with one newline per closed block element or line break; line
        wraps inside the source markup are plain spaces. Not yet normalized.
    """
    text = _SCRIPT_STYLE_RE.sub("", html)
    # Only markup creates line breaks
    text = _WHITESPACE_RE.sub(" ", text)
    text = _BLOCK_END_RE.sub("\n", text)
    text = _BREAK_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    text = _ENTITY_RE.sub(lambda match: HTML_ENTITIES[match.group(0)], text)
    return text.replace("&amp;", "&")


def clean_text(text: str) -> str:
    """Normalize whitespace and separate paragraphs with a blank line.

    Runs of spaces and tabs collapse to one space, blank-line runs collapse,
    and every remaining line break becomes a paragraph break.
    """
    text = re.sub(r"[^\S\n]+", " ", text)
    text = re.sub(r" ?\n ?", "\n", text)
    text = re.sub(r"\n{2,}", "\n", text)
    text = text.strip()
    return text.replace("\n", "\n\n")


def truncate_text(text: str, max_chars: int, suffix: str = ELLIPSIS) -> str:
    """Cut text to ``max_chars`` characters and append ``suffix`` if cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + suffix


def count_words(text: str) -> int:
    """Simple mixed-language word count.

    CJK ideographs count one each; ASCII letters count per standalone word.
    """
    return len(_CJK_RE.findall(text)) + len(_ASCII_WORD_RE.findall(text))
