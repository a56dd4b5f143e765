"""Reasoning service: send project source code to a local LLM (Ollama) and return its raw text answer."""

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING

import httpx

from app.schemas.findings import (
    CODE_SNIPPET_MAX_LENGTH,
    EXAMPLE_FINDING_CATEGORIES,
    SUPPORTED_FINDING_TYPES,
)

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Snippet length the model is asked to stay under (storage allows up to CODE_SNIPPET_MAX_LENGTH).
PROMPT_SNIPPET_MAX_CHARS = min(200, CODE_SNIPPET_MAX_LENGTH)


class ReasoningServiceError(Exception):
    """Raised when the reasoning service cannot complete (Ollama unreachable, timeout, bad status, or empty output)."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


def _truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut text to at most max_bytes of UTF-8 without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def build_prompt(source_content: str, project_label: str) -> str:
    """Build the fixed instruction prompt plus project content; the model must answer with JSON only."""
    types_list = "\n".join(f"- {t}" for t in SUPPORTED_FINDING_TYPES)
    severity_example = "critical|high|medium|low"
    shape = {
        "vulnerabilities": [
            {
                "severity": severity_example,
                "type": "|".join(SUPPORTED_FINDING_TYPES[:4]) + "|...",
                "category": "|".join(EXAMPLE_FINDING_CATEGORIES[:3]) + "|...",
                "filePath": "path/to/file.js",
                "lineNumber": 42,
                "codeSnippet": "vulnerable code snippet",
                "description": "Clear description of the vulnerability",
                "recommendation": "How to fix this issue",
                "confidenceScore": 0.95,
            }
        ]
    }
    shape_json = json.dumps(shape, indent=2)
    return f"""You are a security analyst examining code for vulnerabilities. Analyze the provided code and identify security issues.

Respond with ONLY a single valid JSON object (no additional text). The JSON must have exactly this shape:
{shape_json}

In codeSnippet and every other string field:
- Escape backslashes as \\\\
- Escape double quotes as \\"
- Replace newlines with \\n and tabs with \\t; never emit raw control characters
- Keep code snippets under {PROMPT_SNIPPET_MAX_CHARS} characters

Only report vulnerabilities of these types (use these exact names in "type"):
{types_list}

"severity" must be one of: critical, high, medium, low. "description" and "recommendation" must be at least 10 characters. "confidenceScore" is a number between 0 and 1.

If no vulnerabilities are found, return: {{"vulnerabilities": []}}

Project: {project_label}

```
{source_content}
```"""


def _log_failure(elapsed: float, content_bytes: int, settings: "Settings") -> None:
    logger.info(
        "LLM analysis request failed",
        extra={
            "llm_latency_seconds": elapsed,
            "content_bytes": content_bytes,
            "model": settings.OLLAMA_MODEL,
            "status": "error",
        },
    )


async def assess(
    source_content: str,
    project_label: str,
    settings: "Settings",
) -> str:
    """
    Send project source code to the local LLM (Ollama) and return the raw generated text.

    The caller is responsible for extracting findings from the text. Raises
    ReasoningServiceError on connection failure, timeout, non-200 status, an invalid
    response body, or empty output. Cancellation is not intercepted.
    """
    content = _truncate_utf8(source_content, settings.ANALYSIS_MAX_CONTENT_BYTES)
    content_bytes = len(content.encode("utf-8"))

    base_url = settings.OLLAMA_BASE_URL.rstrip("/")
    url = f"{base_url}/api/generate"
    payload = {
        "model": settings.OLLAMA_MODEL,
        "prompt": build_prompt(content, project_label),
        "stream": False,
        "format": "json",
        "options": {
            "temperature": settings.OLLAMA_TEMPERATURE,
            "top_p": settings.OLLAMA_TOP_P,
            "repeat_penalty": settings.OLLAMA_REPEAT_PENALTY,
            "seed": settings.OLLAMA_SEED,
        },
    }
    timeout = httpx.Timeout(settings.OLLAMA_REQUEST_TIMEOUT_SEC)
    start = time.perf_counter()

    # httpx timeouts apply per phase; the deadline bounds the whole request.
    try:
        async with asyncio.timeout(settings.OLLAMA_REQUEST_TIMEOUT_SEC):
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(url, json=payload)
        elapsed = time.perf_counter() - start
    except httpx.ConnectError as e:
        _log_failure(time.perf_counter() - start, content_bytes, settings)
        raise ReasoningServiceError(
            "Ollama is unreachable. Ensure Ollama is running and OLLAMA_BASE_URL is correct.",
            cause=e,
        ) from e
    except (httpx.TimeoutException, TimeoutError) as e:
        _log_failure(time.perf_counter() - start, content_bytes, settings)
        raise ReasoningServiceError(
            "Ollama request timed out. Try increasing OLLAMA_REQUEST_TIMEOUT_SEC or reducing project size.",
            cause=e,
        ) from e
    except httpx.HTTPError as e:
        _log_failure(time.perf_counter() - start, content_bytes, settings)
        raise ReasoningServiceError(
            "Ollama request failed.",
            cause=e,
        ) from e

    if response.status_code != 200:
        _log_failure(elapsed, content_bytes, settings)
        raise ReasoningServiceError(
            f"Ollama returned status {response.status_code}. Check that the model is pulled (e.g. ollama pull {settings.OLLAMA_MODEL})."
        )

    try:
        body = response.json()
    except json.JSONDecodeError as e:
        raise ReasoningServiceError(
            "Ollama response body is not valid JSON.",
            cause=e,
        ) from e

    eval_duration_ns = body.get("eval_duration") if isinstance(body, dict) else None
    log_extra: dict[str, float | int | str | None] = {
        "llm_latency_seconds": elapsed,
        "content_bytes": content_bytes,
        "model": settings.OLLAMA_MODEL,
    }
    if eval_duration_ns is not None:
        log_extra["eval_duration_nanoseconds"] = eval_duration_ns
    logger.info("LLM analysis request completed", extra=log_extra)

    raw_response = body.get("response") if isinstance(body, dict) else None
    if raw_response is None:
        raise ReasoningServiceError("Ollama response missing 'response' field.")

    # Some Ollama builds return the JSON-format answer already decoded.
    if not isinstance(raw_response, str):
        raw_response = json.dumps(raw_response)
    if not raw_response.strip():
        raise ReasoningServiceError("Ollama returned an empty response.")
    return raw_response
