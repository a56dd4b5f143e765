"""Extract validated findings from the free-form text returned by the reasoning service.

Never raises for malformed input: when no usable JSON payload is found the result is
an empty list and the reason is logged. Entries that fail validation are dropped one
by one; valid siblings are kept.
"""

import json
import logging
import re
from collections.abc import Iterator
from typing import Any

from pydantic import ValidationError

from app.schemas.findings import FindingCandidate

logger = logging.getLogger(__name__)

FINDINGS_KEY = "vulnerabilities"

# ```json ... ``` (tag is case-insensitive; content is taken lazily up to the closing fence).
_FENCED_JSON_PATTERN = re.compile(r"```[ \t]*json[ \t]*\r?\n?(.*?)```", re.IGNORECASE | re.DOTALL)

# Extraction outcome reasons, logged for observability.
REASON_EMPTY_TEXT = "empty_text"
REASON_NO_JSON = "no_json_found"
REASON_INVALID_JSON = "invalid_json"
REASON_NOT_OBJECT = "payload_not_object"
REASON_MISSING_FINDINGS = "missing_findings_list"


def _balanced_end(text: str, start: int) -> int | None:
    """
    Return the index just past the {...} that opens at text[start], or None if it never closes.

    Braces inside JSON string literals are ignored so snippets such as "if (x) {" in a
    codeSnippet do not break matching.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
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
                return i + 1
    return None


def iter_balanced_objects(text: str) -> Iterator[str]:
    """
    Yield every balanced top-level {...} substring, left to right.

    An opening brace that is never closed (prose such as "a block with { ...") does not
    stop the search: scanning resumes at the next brace after it.
    """
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is None:
            start = text.find("{", start + 1)
        else:
            yield text[start:end]
            start = text.find("{", end)


def iter_json_candidates(raw_text: str) -> Iterator[str]:
    """Fenced ```json block first, then each balanced object in the text."""
    match = _FENCED_JSON_PATTERN.search(raw_text)
    if match:
        candidate = match.group(1).strip()
        if candidate:
            yield candidate
    yield from iter_balanced_objects(raw_text)


def locate_json_payload(raw_text: str) -> str | None:
    """Return the first JSON candidate in raw_text, or None."""
    return next(iter_json_candidates(raw_text), None)


def _log_failure(reason: str, raw_text: str) -> None:
    logger.warning(
        "No findings extracted from reasoning output",
        extra={"reason": reason, "raw_length": len(raw_text or "")},
    )


def validate_entries(entries: list[Any]) -> list[FindingCandidate]:
    """Validate each entry independently; drop (and log) the ones that do not fit the schema."""
    accepted: list[FindingCandidate] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.info(
                "Dropped finding: entry is not an object",
                extra={"index": index, "entry_type": type(entry).__name__},
            )
            continue
        try:
            accepted.append(FindingCandidate.model_validate(entry))
        except ValidationError as e:
            logger.info(
                "Dropped finding that failed validation",
                extra={
                    "index": index,
                    "errors": [
                        {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
                        for err in e.errors()
                    ],
                },
            )
    return accepted


def extract_findings(raw_text: str | None) -> list[FindingCandidate]:
    """
    Locate, parse and validate the findings payload in raw reasoning-service text.

    Candidates are tried in order (fenced block, then each balanced object) and the
    first one that parses to an object with a list under "vulnerabilities" wins.
    Returns an empty list (never raises) when no candidate qualifies.
    """
    if not raw_text or not raw_text.strip():
        _log_failure(REASON_EMPTY_TEXT, raw_text or "")
        return []

    reason = REASON_NO_JSON
    entries = None
    for payload_text in iter_json_candidates(raw_text):
        try:
            payload = json.loads(payload_text)
        except json.JSONDecodeError:
            reason = REASON_INVALID_JSON
            continue
        if not isinstance(payload, dict):
            reason = REASON_NOT_OBJECT
            continue
        candidate_entries = payload.get(FINDINGS_KEY)
        if not isinstance(candidate_entries, list):
            reason = REASON_MISSING_FINDINGS
            continue
        entries = candidate_entries
        break

    if entries is None:
        _log_failure(reason, raw_text)
        return []

    accepted = validate_entries(entries)
    if len(accepted) < len(entries):
        logger.info(
            "Some findings were dropped during validation",
            extra={"received": len(entries), "accepted": len(accepted)},
        )
    return accepted
