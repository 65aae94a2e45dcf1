"""Pull the instruction object out of a free-text model reply."""

from __future__ import annotations

import json
from typing import Any

_decoder = json.JSONDecoder()


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the first top-level JSON object embedded in *text*.

    Prose or code fences around the object are ignored.  Returns ``None``
    when no ``{`` starts a decodable object; callers then show the reply
    verbatim instead of applying it.
    """
    if not text:
        return None
    start = text.find("{")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    return None
