"""Markup stripping and whitespace normalization for editor content."""

import html
import re

_BLOCK_TAG = re.compile(r"</?(?:p|div|br|li|ul|ol|h[1-6]|blockquote|tr)\b[^>]*>", re.I)
_TAG = re.compile(r"<[^>]*>")
# An unterminated tag at the end of the content, e.g. "hello <b"
_DANGLING_TAG = re.compile(r"<[a-zA-Z/!][^>]*$")
_SPACES = re.compile(r"[^\S\n]+")
_LINE_BREAKS = re.compile(r"\s*\n\s*")


def strip_html(content: str) -> str:
    """Remove markup, keeping block boundaries as line breaks.

    Malformed markup is handled best-effort and never raises.
    """
    text = _BLOCK_TAG.sub("\n", content)
    text = _TAG.sub(" ", text)
    text = _DANGLING_TAG.sub(" ", text)
    return html.unescape(text)


def normalize_text(content: str) -> str:
    """Strip markup and collapse whitespace.

    Runs of spaces collapse to one space; any whitespace run containing a
    line break collapses to a single newline so paragraphs stay separate
    sentences for the tagger.
    """
    if not content:
        return ""
    text = strip_html(content)
    text = _SPACES.sub(" ", text)
    text = _LINE_BREAKS.sub("\n", text)
    return text.strip()
