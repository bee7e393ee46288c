"""Locate the first balanced JSON object or array inside free text.

Reasoning-service replies often wrap the payload in prose or markdown fences.
The scanner walks the text once, tracking string literals and escapes so that
braces inside strings do not affect nesting depth.
"""

from __future__ import annotations

import json
from typing import Any, Iterator, Optional

_CLOSERS = {"{": "}", "[": "]"}


def iter_balanced(text: str, opener: str) -> Iterator[str]:
    """Yield every balanced span starting at successive ``opener`` positions."""
    if opener not in _CLOSERS:
        raise ValueError(f"Unsupported opener: {opener!r}")
    closer = _CLOSERS[opener]
    start = text.find(opener)
    while start != -1:
        end = _match_from(text, start, opener, closer)
        if end is not None:
            yield text[start : end + 1]
        start = text.find(opener, start + 1)


def find_balanced(text: str, opener: str) -> Optional[str]:
    return next(iter_balanced(text, opener), None)


def _match_from(text: str, start: int, opener: str, closer: str) -> Optional[int]:
    stack = []
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif char in ("}", "]"):
            if not stack or stack[-1] != char:
                return None
            stack.pop()
            if not stack:
                return index if char == closer else None
    return None


def _first_decoded(text: str, opener: str, kind: type) -> Any:
    for candidate in iter_balanced(text or "", opener):
        try:
            parsed: Any = json.loads(candidate)
        except (ValueError, RecursionError):
            continue
        if isinstance(parsed, kind):
            return parsed
    return None


def extract_json_object(text: str) -> Optional[dict]:
    """Return the first balanced ``{...}`` that decodes to a dict, if any."""
    return _first_decoded(text, "{", dict)


def extract_json_array(text: str) -> Optional[list]:
    return _first_decoded(text, "[", list)
