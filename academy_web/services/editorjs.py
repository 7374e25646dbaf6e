"""Rendering of block-based blog content to HTML.

Blog posts are authored in a block editor and stored as
``{"time": ..., "blocks": [{"type": ..., "data": {...}}]}``, either as an
object or as a JSON string. Inline text in paragraphs, headers and list
items is editor-produced HTML; it is cleaned down to the inline tags the
editor emits. Attribute values and captions are escaped, and image and
embed sources must be http(s) or relative URLs.
"""
import json
import logging
from html import escape
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlsplit

import bleach

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_ALT = "Blog image"

INLINE_TAGS = ["a", "b", "br", "code", "em", "i", "mark", "s", "span", "strong", "sub", "sup", "u"]
INLINE_ATTRIBUTES = {
    "a": ["href", "title", "target", "rel"],
    "code": ["class"],
    "mark": ["class"],
    "span": ["class"],
}
URL_SCHEMES = ("", "http", "https")


def clean_inline(text: Any) -> str:
    """Strip everything but the editor's inline markup from block text."""
    if text is None:
        return ""
    return bleach.clean(
        str(text),
        tags=INLINE_TAGS,
        attributes=INLINE_ATTRIBUTES,
        protocols=["http", "https", "mailto"],
        strip=True,
    )


def safe_url(url: Any) -> str:
    """The URL if it is http(s) or relative, otherwise an empty string."""
    if not isinstance(url, str):
        return ""
    url = url.strip()
    try:
        scheme = urlsplit(url).scheme.lower()
    except ValueError:
        return ""
    return url if scheme in URL_SCHEMES else ""


def _dimension(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        # e.g. "100%"
        return default


def _header(data: Dict[str, Any]) -> str:
    level = data.get("level") or 2
    if level not in (1, 2, 3, 4, 5, 6):
        level = 2
    return f'<h{level} class="font-bold my-4 text-2xl">{clean_inline(data.get("text"))}</h{level}>'


def _paragraph(data: Dict[str, Any]) -> str:
    return f'<p class="mb-4 leading-relaxed">{clean_inline(data.get("text"))}</p>'


def _image(data: Dict[str, Any]) -> str:
    file_info = data.get("file")
    # Older image tools store the URL directly in "file"
    if isinstance(file_info, dict):
        url = file_info.get("url")
    else:
        url = file_info
    url = safe_url(url or data.get("url"))
    if not url:
        return ""
    caption = str(data.get("caption") or "")

    parts = [
        '<figure class="my-6">',
        f'<img src="{escape(url)}" alt="{escape(caption or DEFAULT_IMAGE_ALT)}" '
        'class="w-full rounded-lg shadow-md">',
    ]
    if caption:
        parts.append(f'<figcaption class="text-center text-sm text-gray-500 mt-2">{escape(caption)}</figcaption>')
    parts.append("</figure>")
    return "".join(parts)


def _list_item_text(item: Any) -> str:
    # Newer list tool versions store items as {"content": ..., "items": [...]}
    if isinstance(item, dict):
        return clean_inline(item.get("content"))
    return clean_inline(item)


def _list(data: Dict[str, Any]) -> str:
    tag = "ol" if data.get("style") == "ordered" else "ul"
    items = data.get("items")
    if not isinstance(items, list):
        items = []
    rows = "".join(f"<li>{_list_item_text(item)}</li>" for item in items)
    return f'<{tag} class="list-inside list-disc pl-5 mb-4">{rows}</{tag}>'


def _quote(data: Dict[str, Any]) -> str:
    caption = data.get("caption")
    cite = f"<cite>{escape(str(caption))}</cite>" if caption else ""
    return f'<blockquote class="border-l-4 pl-4 italic my-4">{clean_inline(data.get("text"))}{cite}</blockquote>'


def _delimiter(data: Dict[str, Any]) -> str:
    return '<hr class="my-8">'


def _checklist(data: Dict[str, Any]) -> str:
    items = data.get("items")
    if not isinstance(items, list):
        items = []
    rows = []
    for item in items:
        if not isinstance(item, dict):
            item = {"text": item}
        checked = " checked" if item.get("checked") else ""
        rows.append(f'<li><input type="checkbox" disabled{checked}> {clean_inline(item.get("text"))}</li>')
    return f'<ul class="checklist mb-4">{"".join(rows)}</ul>'


def _embed(data: Dict[str, Any]) -> str:
    source = safe_url(data.get("embed"))
    if not source:
        return ""
    width = _dimension(data.get("width"), 580)
    height = _dimension(data.get("height"), 320)
    caption = data.get("caption")
    figcaption = f"<figcaption>{escape(str(caption))}</figcaption>" if caption else ""
    return (
        '<figure class="my-6">'
        f'<iframe src="{escape(source)}" width="{width}" height="{height}" '
        'frameborder="0" allowfullscreen></iframe>'
        f"{figcaption}</figure>"
    )


RENDERERS: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "header": _header,
    "paragraph": _paragraph,
    "image": _image,
    "list": _list,
    "quote": _quote,
    "delimiter": _delimiter,
    "checklist": _checklist,
    "embed": _embed,
}


def render_block(block: Dict[str, Any]) -> Optional[str]:
    """
    Render a single block.

    Returns:
        HTML, or None for block types without a renderer
    """
    renderer = RENDERERS.get(block.get("type"))
    if renderer is None:
        return None
    data = block.get("data")
    return renderer(data if isinstance(data, dict) else {})


def render_content(content: Any) -> str:
    """
    Render block editor content to HTML.

    Args:
        content: Block document as a dict or JSON string

    Returns:
        HTML fragment. Content that is not a block document is returned as
        escaped text inside a ``prose`` container.
    """
    document = content
    if isinstance(content, str):
        try:
            document = json.loads(content)
        except ValueError as e:
            logger.error(f"Failed to parse content JSON: {e}")
            return f'<div class="prose lg:prose-xl max-w-none">{escape(content)}</div>'

    blocks = document.get("blocks") if isinstance(document, dict) else None
    if not isinstance(blocks, list):
        text = "" if content is None else str(content)
        return f'<div class="prose lg:prose-xl max-w-none">{escape(text)}</div>'

    html_parts: List[str] = []
    for block in blocks:
        if not isinstance(block, dict):
            continue
        try:
            rendered = render_block(block)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed {block.get('type')} block: {e}")
            continue
        if rendered:
            html_parts.append(rendered)
    return "\n".join(html_parts)
