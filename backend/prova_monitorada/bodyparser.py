"""
Request body decoding for JSON and urlencoded form payloads.

JSON is parsed strictly: the top level must be an object or an array, and
an empty body decodes to an empty dict.

Form bodies support nested ("extended") keys:

    a=1&a=2              → {"a": ["1", "2"]}
    user[name]=Ana       → {"user": {"name": "Ana"}}
    tags[]=x&tags[]=y    → {"tags": ["x", "y"]}
    items[0][id]=7       → {"items": [{"id": "7"}]}

Brackets deeper than MAX_DEPTH are kept as one literal key, and only the
first PARAMETER_LIMIT pairs are read. Objects whose keys are all small
indexes (0..ARRAY_LIMIT) come back as lists.
"""

import json
import re
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl

from prova_monitorada.exceptions import BodyParseError

JSON = "json"
URLENCODED = "urlencoded"

MAX_DEPTH = 5
PARAMETER_LIMIT = 1000
ARRAY_LIMIT = 20

_BRACKET = re.compile(r"\[([^\[\]]*)\]")


def body_kind(content_type: Optional[str]) -> Optional[str]:
    """Map a Content-Type header to JSON, URLENCODED, or None."""
    if not content_type:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "application/json":
        return JSON
    if media_type == "application/x-www-form-urlencoded":
        return URLENCODED
    return None


def _decode(raw: bytes, content_type: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise BodyParseError(
            message=f"Request body is not valid UTF-8: {e.reason}",
            content_type=content_type,
        ) from e


def parse_json(raw: bytes) -> Any:
    text = _decode(raw, "application/json").lstrip("\ufeff")
    stripped = text.strip()
    if not stripped:
        return {}
    if stripped[0] not in "{[":
        raise BodyParseError(
            message=f"Unexpected token {stripped[0]!r} in JSON at position 0",
            content_type="application/json",
        )
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise BodyParseError(
            message=f"{e.msg} in JSON at position {e.pos}",
            content_type="application/json",
        ) from e


def parse_urlencoded(raw: bytes) -> Dict[str, Any]:
    text = _decode(raw, "application/x-www-form-urlencoded")
    if not text:
        return {}

    pairs = "&".join(text.split("&")[:PARAMETER_LIMIT])
    root: Dict[str, Any] = {}
    for key, value in parse_qsl(pairs, keep_blank_values=True):
        if not key:
            continue
        _assign(root, split_key(key), value)
    return _compact(root)


def split_key(key: str, depth: int = MAX_DEPTH) -> List[str]:
    """
    Split "a[b][c]" into ["a", "b", "c"].

    A key without a parent ("[a]") or without a well-formed first bracket
    is returned whole. Anything past `depth` brackets becomes one final
    literal segment.
    """
    first = key.find("[")
    if first <= 0:
        return [key]

    segments = [key[:first]]
    rest = key[first:]
    pos = 0
    while len(segments) - 1 < depth:
        match = _BRACKET.match(rest, pos)
        if match is None:
            break
        segments.append(match.group(1))
        pos = match.end()

    if len(segments) == 1:
        return [key]
    if pos < len(rest):
        segments.append(rest[pos:])
    return segments


def _next_index(container: Dict[str, Any]) -> str:
    indexes = [int(k) for k in container if k.isdigit()]
    return str(max(indexes) + 1 if indexes else 0)


def _assign(container: Dict[str, Any], segments: List[str], value: str) -> None:
    # Lists are built as {"0": ..., "1": ...} and turned into lists by _compact
    for i, segment in enumerate(segments):
        key = _next_index(container) if segment == "" else segment
        last = i == len(segments) - 1

        if last:
            existing = container.get(key)
            if existing is None:
                container[key] = value
            elif isinstance(existing, dict):
                existing[_next_index(existing)] = value
            else:
                container[key] = {"0": existing, "1": value}
            return

        child = container.get(key)
        if not isinstance(child, dict):
            child = {} if child is None else {"0": child}
            container[key] = child
        container = child


def _compact(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    compacted = {k: _compact(v) for k, v in value.items()}
    if compacted and all(k.isdigit() and int(k) <= ARRAY_LIMIT for k in compacted):
        return [compacted[k] for k in sorted(compacted, key=int)]
    return compacted
