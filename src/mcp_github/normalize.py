"""
Response normalization for MCP operations.

Every successful operation answers with exactly one text content block:

    {"content": [{"type": "text", "text": "..."}]}

The text is usually a 2-space indented JSON rendering of a projection of the
raw GitHub payload. A projection is an ordered mapping from output key to
either a dotted source path (``"user.login"``) or a callable receiving the
raw item. Keys are emitted in projection order; missing source keys project
to ``null``.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Callable, Iterable, Mapping
from typing import Any

Projection = Mapping[str, str | Callable[[Mapping[str, Any]], Any]]


def resolve_path(item: Any, path: str) -> Any:
    """
    Resolve a dotted path against nested mappings.

    Args:
        item: Raw object (usually a dict decoded from the GitHub API).
        path: Dotted key path, e.g. ``"head.ref"``.

    Returns:
        The value found, or None if any segment is missing or not a mapping.
    """
    current = item
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def project(item: Mapping[str, Any], projection: Projection) -> dict[str, Any]:
    """
    Project one raw object onto the given output keys.

    Example:
        >>> project({"stargazers_count": 5, "name": "x"}, {"name": "name", "stars": "stargazers_count"})
        {'name': 'x', 'stars': 5}
    """
    result: dict[str, Any] = {}
    for key, source in projection.items():
        if callable(source):
            result[key] = source(item)
        else:
            result[key] = resolve_path(item, source)
    return result


def project_many(
    items: Iterable[Mapping[str, Any]], projection: Projection
) -> list[dict[str, Any]]:
    """Project every object in ``items``."""
    return [project(item, projection) for item in items]


def render_json(value: Any) -> str:
    """Serialize a projected value as 2-space indented JSON."""
    return json.dumps(value, indent=2, ensure_ascii=False)


def decode_base64_text(content: str) -> str:
    """
    Decode base64 file content (as returned by the contents API) to text.

    GitHub wraps the encoded payload at 60 columns, so embedded newlines are
    ignored. Invalid UTF-8 sequences are replaced rather than rejected.

    Raises:
        ValueError: If the content is not valid base64.
    """
    try:
        raw = base64.b64decode("".join(content.split()), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 content: {e}") from e
    return raw.decode("utf-8", errors="replace")


def text_block(text: str) -> dict[str, str]:
    """Build a single text content block."""
    return {"type": "text", "text": text}


def text_response(text: str) -> dict[str, Any]:
    """Wrap text in a response envelope with one content block."""
    return {"content": [text_block(text)]}


def error_response(message: str) -> dict[str, Any]:
    """Wrap an error message in a tool result flagged with ``isError``."""
    return {"content": [text_block(message)], "isError": True}
