"""
Small helpers for the rich-text markup stored in note content.

Notes carry HTML produced by the editor. The AI services want plain text in
and hand back either HTML or plain text that needs light formatting.
"""

import html
import re

_TAG_RE = re.compile(r"<[^>]*>")
_PREVIEW_NOISE_RE = re.compile(r"[#*`\[\]]")
_NUMBERED_ITEM_RE = re.compile(r"^\d+[.)]\s")
_BULLET_ITEM_RE = re.compile(r"^[*\-•]\s")


def strip_html(markup: str) -> str:
    """
    Remove markup tags and decode entities.

    Args:
        markup: HTML fragment

    Returns:
        Plain text, stripped of surrounding whitespace
    """
    if not markup:
        return ""
    return html.unescape(_TAG_RE.sub("", markup)).strip()


def preview_text(markup: str, limit: int = 100) -> str:
    """
    Plain-text preview of note content for lists and history entries.

    Args:
        markup: HTML (or markdown-ish) content
        limit: Maximum characters before an ellipsis is appended

    Returns:
        Preview text
    """
    text = _PREVIEW_NOISE_RE.sub("", strip_html(markup)).strip()
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def looks_like_html(text: str) -> bool:
    """True when the text already contains paragraph or list markup."""
    return any(marker in text for marker in ("<p>", "<ul>", "<ol>"))


def plain_text_to_html(text: str) -> str:
    """
    Convert a plain-text LLM reply into simple HTML.

    Blocks are separated by blank lines. A block whose lines start with
    "1." / "1)" becomes an ordered list, one starting with "-", "*" or "•"
    becomes a bullet list, anything else a paragraph. Text that already
    contains paragraph or list markup is returned unchanged.
    """
    if looks_like_html(text):
        return text

    blocks = [block.strip() for block in text.split("\n\n") if block.strip()]
    rendered = []

    for block in blocks:
        if _NUMBERED_ITEM_RE.match(block):
            items = re.split(r"\n(?=\d+[.)]\s)", block)
            lis = "".join(f"<li>{_NUMBERED_ITEM_RE.sub('', item).strip()}</li>" for item in items)
            rendered.append(f"<ol>{lis}</ol>")
        elif _BULLET_ITEM_RE.match(block) or "\n* " in block or "\n- " in block:
            items = re.split(r"\n(?=[*\-•]\s)", block)
            lis = "".join(f"<li>{_BULLET_ITEM_RE.sub('', item).strip()}</li>" for item in items)
            rendered.append(f"<ul>{lis}</ul>")
        else:
            rendered.append(f"<p>{block}</p>")

    return "".join(rendered)
