"""Turn raw model output into a validated StructuredEntry.

Models often wrap their JSON in prose or markdown fences, so the parser looks for
the first well-formed JSON object in the text before validating it.
"""

import json
import re

from journal_ai.errors import ErrorKind, ParseError
from journal_ai.models import DEFAULT_MAX_TAGS, MAX_TITLE_LENGTH, ProviderId, StructuredEntry


_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE)
_decoder = json.JSONDecoder()


def extract_payload(raw: str) -> dict | None:
    """Return the first JSON object found in ``raw``, or None."""
    text = raw.strip()
    if not text:
        return None

    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        pass
    else:
        if isinstance(payload, dict):
            return payload

    for match in _JSON_FENCE_RE.finditer(text):
        try:
            payload = json.loads(match.group(1).strip())
        except json.JSONDecodeError:
            continue
        if isinstance(payload, dict):
            return payload

    start = text.find("{")
    while start != -1:
        try:
            payload, _end = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(payload, dict):
                return payload
        start = text.find("{", start + 1)

    return None


def normalize_tags(raw_tags: object, max_tags: int = DEFAULT_MAX_TAGS) -> tuple[str, ...]:
    if raw_tags is None:
        return ()
    if isinstance(raw_tags, str):
        raw_tags = raw_tags.split(",")
    if not isinstance(raw_tags, list):
        raise ParseError(ErrorKind.MALFORMED_OUTPUT, "tags must be a list of strings")

    tags: list[str] = []
    for tag in raw_tags:
        if not isinstance(tag, str):
            continue
        normalized = tag.strip().lower()
        if normalized and normalized not in tags:
            tags.append(normalized)
    return tuple(tags[:max_tags])


def shorten_title(title: str, limit: int = MAX_TITLE_LENGTH) -> str:
    if len(title) <= limit:
        return title
    cut = title[:limit]
    boundary = cut.rfind(" ")
    if boundary > 0:
        cut = cut[:boundary]
    return cut.rstrip(" -,.;:") or title[:limit]


def _required_text(payload: dict, name: str) -> str:
    value = payload.get(name)
    if value is None:
        raise ParseError(ErrorKind.MISSING_FIELD, f"{name} is missing")
    if not isinstance(value, str):
        raise ParseError(ErrorKind.MALFORMED_OUTPUT, f"{name} must be a string")
    value = value.strip()
    if not value:
        raise ParseError(ErrorKind.MISSING_FIELD, f"{name} must be non-empty")
    return value


def parse_entry(
    raw_output: str,
    provider_id: ProviderId,
    max_tags: int = DEFAULT_MAX_TAGS,
) -> StructuredEntry:
    payload = extract_payload(raw_output or "")
    if payload is None:
        raise ParseError(ErrorKind.MALFORMED_OUTPUT, "response did not contain a JSON object")

    title = _required_text(payload, "title")
    content = _required_text(payload, "content")
    tags = normalize_tags(payload.get("tags"), max_tags)

    return StructuredEntry(
        title=shorten_title(title),
        content=content,
        tags=tags,
        source_provider=provider_id,
    )
