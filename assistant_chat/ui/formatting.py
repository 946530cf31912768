"""HTML rendering helpers for chat bubbles and the files panel."""

import html
import re
from datetime import datetime

from assistant_chat.models.domain import Reference

_LIST_PATTERNS = (
    (re.compile(r"^[-*]\s+"), '<ul class="md-list">', "</ul>"),
    (re.compile(r"^\d+\.\s+"), '<ol class="md-list md-numbered">', "</ol>"),
)


def _wrap_lists(text: str) -> str:
    """Group consecutive bullet or numbered lines into HTML lists."""
    result: list[str] = []
    closing: str | None = None
    for line in text.split("\n"):
        stripped = line.strip()
        for pattern, opening, close_tag in _LIST_PATTERNS:
            if pattern.match(stripped):
                if closing != close_tag:
                    if closing:
                        result.append(closing)
                    result.append(opening)
                    closing = close_tag
                result.append(f"<li>{pattern.sub('', stripped)}</li>")
                break
        else:
            if closing:
                result.append(closing)
                closing = None
            result.append(line)
    if closing:
        result.append(closing)
    return "\n".join(result)


# Markdown control characters inside a fence, as entities the later rules skip
_FENCE_LITERALS = str.maketrans({"`": "&#96;", "*": "&#42;", "_": "&#95;", "[": "&#91;"})


def _fenced_block(match: re.Match[str]) -> str:
    return f'<pre class="md-block"><code>{match.group(1).translate(_FENCE_LITERALS)}</code></pre>'


_INLINE_RULES = (
    # Fenced blocks first so their contents are not styled further
    (re.compile(r"```\w*\n?([\s\S]*?)```"), _fenced_block),
    (re.compile(r"`([^`\n]+)`"), r'<code class="md-code">\1</code>'),
    (re.compile(r"\*\*(.+?)\*\*|__(.+?)__"), lambda m: f"<strong>{m.group(1) or m.group(2)}</strong>"),
    (re.compile(r"\*([^*\n]+)\*|\b_([^_\n]+)_\b"), lambda m: f"<em>{m.group(1) or m.group(2)}</em>"),
    (
        re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)"),
        r'<a href="\2" class="md-link" target="_blank" rel="noopener noreferrer">\1</a>',
    ),
)


def markdown_to_html(text: str) -> str:
    """Render the markdown subset assistants produce: fenced and inline code,
    bold, italic, links, bullet and numbered lists.
    """
    text = html.escape(text, quote=False)
    for pattern, replacement in _INLINE_RULES:
        text = pattern.sub(replacement, text)
    return _wrap_lists(text).replace("\n", "<br>")


def plain_to_html(text: str) -> str:
    """Escape user text, keeping line breaks."""
    return html.escape(text, quote=False).replace("\n", "<br>")


def reference_label(ref: Reference) -> str:
    return ref.name or ref.file_id or "Unknown file"


def references_to_html(references: tuple[Reference, ...]) -> str:
    """Citation list shown under an assistant message."""
    items = []
    for ref in references:
        label = html.escape(reference_label(ref))
        if ref.url:
            url = html.escape(ref.url)
            items.append(
                f'<li><a href="{url}" target="_blank" rel="noopener noreferrer" '
                f'class="md-link">{label}</a></li>'
            )
        else:
            items.append(f"<li>{label}</li>")
    return '<ul class="ref-list">' + "".join(items) + "</ul>"


def format_size(size_bytes: int | None) -> str:
    if size_bytes is None:
        return ""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def format_time(timestamp: datetime) -> str:
    return timestamp.astimezone().strftime("%I:%M %p")
