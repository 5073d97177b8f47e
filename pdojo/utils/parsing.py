"""Helpers shared by the LLM pattern source and the LLM judge."""

import json
import re
import sys

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential

# Rate limiting and gateway-side outages; everything else is the caller's fault
RETRYABLE_STATUS = frozenset({408, 429, 500, 502, 503, 504})

_FENCED_BLOCK = re.compile(r"```[a-zA-Z]*\s*\n?(.*?)\n?\s*```", re.DOTALL)


def strip_fences(text: str) -> str:
    """Return the body of the first fenced block, or the whole text if unfenced."""
    found = _FENCED_BLOCK.search(text)
    body = found.group(1) if found else text
    return body.strip()


def parse_json_object(text: str) -> dict:
    """Decode model output that should hold a single JSON object.

    Raises json.JSONDecodeError for non-JSON and ValueError for any other
    JSON value (lists, strings...).
    """
    data = json.loads(strip_fences(text))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}.")
    return data


def is_transient(exc: BaseException) -> bool:
    """True for network hiccups and retryable HTTP statuses."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return isinstance(exc, (httpx.TimeoutException, httpx.NetworkError))


def _report_retry(state: RetryCallState) -> None:
    print(
        f"[pdojo] {state.outcome.exception()!r} on attempt {state.attempt_number}; "
        f"backing off {state.next_action.sleep:.0f}s.",
        file=sys.stderr,
    )


async def ainvoke_with_retry(llm, messages, max_retries: int = 3):
    """Await llm.ainvoke(messages), retrying transient failures with exponential backoff.

    The retry count comes from `llm_max_retries` in config, falling back to
    max_retries. Non-transient errors propagate on the first attempt.
    """
    from pdojo.config import get_config

    retries = get_config().get("llm_max_retries", max_retries)
    retrying = AsyncRetrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_exponential(multiplier=1, min=1, max=20),
        retry=retry_if_exception(is_transient),
        before_sleep=_report_retry,
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            return await llm.ainvoke(messages)
