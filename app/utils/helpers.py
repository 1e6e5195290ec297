"""
Common utility functions and helpers.
"""
import html
import re
from typing import List

_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")


def format_suggestion_html(text: str) -> str:
    """
    Turn plain suggestion text into simple HTML paragraphs.

    Each line becomes a ``<p>``; markdown ``**bold**`` becomes ``<strong>``
    and blank lines become ``&nbsp;`` spacers.  Text is escaped first so the
    model's output can never inject markup.

    Args:
        text: Raw text returned by the assistant

    Returns:
        HTML fragment
    """
    paragraphs: List[str] = []
    for line in (text or "").split("\n"):
        escaped = _BOLD_RE.sub(r"<strong>\1</strong>", html.escape(line, quote=False))
        paragraphs.append(f"<p>{escaped or '&nbsp;'}</p>")
    return "".join(paragraphs)


def truncate_text(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
