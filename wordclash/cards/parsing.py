# wordclash/cards/parsing.py
"""Pull a JSON object out of free-form model output.

The generative service is asked for bare JSON but routinely wraps it in a
markdown fence or a sentence of chatter; we try the whole text, then each
fenced block, then every balanced ``{...}`` span.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterator, Optional


def parse_card_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    if not text or not str(text).strip():
        return None
    for candidate in _candidates(str(text)):
        data = _try_object(candidate)
        if data is not None:
            return data
        for segment in _object_segments(candidate):
            data = _try_object(segment)
            if data is not None:
                return data
    return None


def _try_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _candidates(text: str) -> Iterator[str]:
    cleaned = text.strip()
    yield cleaned
    if "```" not in cleaned:
        return
    parts = cleaned.split("```")
    for i in range(1, len(parts), 2):
        segment = parts[i].strip()
        lines = segment.splitlines()
        if lines and lines[0].strip().lower() in {"json", "jsonc"}:
            segment = "\n".join(lines[1:]).strip()
        if segment:
            yield segment


def _object_segments(text: str) -> Iterator[str]:
    for start in (i for i, ch in enumerate(text) if ch == "{"):
        depth = 0
        in_string = False
        escape = False
        for idx in range(start, len(text)):
            ch = text[idx]
            if in_string:
                if escape:
                    escape = False
                elif ch == "\\":
                    escape = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    yield text[start : idx + 1]
                    break
