from __future__ import annotations

import json
import re

from schemas.content import NormalizedContent

_SURROGATE_RE = re.compile(r"[\ud800-\udbff][\udc00-\udfff]|[\ud800-\udfff]")


def _replace_surrogate(match: re.Match[str]) -> str:
    text = match.group()
    if len(text) == 2:
        return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
    return f"\\u{ord(text):04x}"


def json_string(value: str) -> str:
    # Paired surrogates collapse to their code point; unpaired ones are
    # emitted as lowercase \uXXXX escapes so the result is always valid UTF-8.
    return _SURROGATE_RE.sub(_replace_surrogate, json.dumps(value, ensure_ascii=False))


def canonical_content_json(content: NormalizedContent) -> str:
    # Compact JSON object; key order is part of the hash contract.
    return (
        '{"title":'
        + json_string(content.title)
        + ',"description":'
        + json_string(content.description)
        + ',"url":'
        + json_string(content.url)
        + ',"timestamp":'
        + str(int(content.timestamp))
        + "}"
    )


def canonical_content_bytes(content: NormalizedContent) -> bytes:
    return canonical_content_json(content).encode("utf-8")
