"""
LLM Helpers Module

Summary generation against the Gemini generateContent API. Every call goes
through SummaryClient.summarize(), which never raises: a failure after all
retries, or a malformed response, yields FALLBACK_SUMMARY.

Example Usage:
    from poly_summaries.utils.llm_helpers import SummaryClient, is_fallback

    async with SummaryClient(api_key=key, params=params) as client:
        summary = await client.summarize(record)
        if is_fallback(summary):
            ...

Retry policy:
    - HTTP 429: exponential backoff, rate_limit_backoff * 2 ** (attempt - 1)
    - request errors (transport, decoding, redirects) and other non-2xx:
      linear, attempt * retry_delay
    - give up after max_attempts and return FALLBACK_SUMMARY
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
)

from poly_summaries.agents.record_aggregator import bound_comments
from poly_summaries.models.config import SystemParams
from poly_summaries.models.professor import ProfessorRecord
from poly_summaries.utils.prompt_loader import render_prompt

logger = structlog.get_logger(__name__)

FALLBACK_SUMMARY = "AI summary unavailable."
SUMMARY_TEMPLATE = "professor/summary.j2"


class SummaryAPIError(Exception):
    """Non-success response or transport failure from the summary API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(SummaryAPIError):
    """HTTP 429 from the summary API."""

    pass


class MalformedResponseError(SummaryAPIError):
    """Success response without the expected generated text."""

    pass


def is_fallback(summary: Optional[str]) -> bool:
    """True if summary is missing or the fallback sentinel."""
    return summary is None or summary == FALLBACK_SUMMARY


def insufficient_data_message(record: ProfessorRecord) -> str:
    """Deterministic message for records without evaluations or comments."""
    return (
        f"Not enough student reviews are available to summarize {record.name} yet. "
        f"See {record.link}"
    )


def build_summary_prompt(
    record: ProfessorRecord,
    comment_limit: int = 1000,
    correlation_id: Optional[str] = None,
) -> str:
    """Render the summary prompt for a professor record."""
    return render_prompt(
        SUMMARY_TEMPLATE,
        correlation_id=correlation_id,
        name=record.name,
        rating=record.rating,
        num_evals=record.num_evals,
        clarity=record.clarity,
        helpfulness=record.helpfulness,
        department=record.department,
        courses=record.courses,
        comments=bound_comments(record.comments, comment_limit),
        link=record.link,
    )


def extract_summary_text(payload: Any) -> str:
    """
    Pull candidates[0].content.parts[0].text out of a generateContent response.

    Raises:
        MalformedResponseError: If the path is missing or the text is blank
    """
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError(f"Response missing generated text: {e!r}") from e

    if not isinstance(text, str) or not text.strip():
        raise MalformedResponseError("Response contained empty generated text")
    return text.strip()


class BackoffWait:
    """tenacity wait strategy: exponential for rate limits, linear otherwise."""

    def __init__(self, retry_delay: float, rate_limit_backoff: float):
        self.retry_delay = retry_delay
        self.rate_limit_backoff = rate_limit_backoff

    def __call__(self, retry_state: RetryCallState) -> float:
        attempt = retry_state.attempt_number
        error = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(error, RateLimitError):
            return self.rate_limit_backoff * (2 ** (attempt - 1))
        return attempt * self.retry_delay


class SummaryClient:
    """Gemini summary client with retry, backoff and fallback."""

    def __init__(
        self,
        api_key: str,
        params: Optional[SystemParams] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize SummaryClient.

        Args:
            api_key: Gemini API key (sent in the x-goog-api-key header)
            params: System parameters (defaults when omitted)
            http_client: Optional client, e.g. one built on httpx.MockTransport
            sleep: Coroutine used for backoff waits
            correlation_id: Optional correlation ID for logging
        """
        self.params = params or SystemParams()
        self.api_key = api_key
        self.sleep = sleep
        self.correlation_id = correlation_id
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=self.params.api.timeout
        )
        self.network_calls = 0

    @property
    def endpoint(self) -> str:
        api = self.params.api
        return f"{api.endpoint_base.rstrip('/')}/{api.model}:generateContent"

    async def __aenter__(self) -> "SummaryClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.http_client.aclose()

    def will_call_api(self, record: ProfessorRecord) -> bool:
        """True if summarize() would issue a network request for record."""
        return record.has_sufficient_data()

    async def _request(self, prompt: str) -> str:
        """Single POST to generateContent; raises SummaryAPIError subclasses."""
        self.network_calls += 1
        body = {"contents": [{"parts": [{"text": prompt}]}]}

        try:
            response = await self.http_client.post(
                self.endpoint,
                json=body,
                headers={"x-goog-api-key": self.api_key},
            )
        except httpx.RequestError as e:
            raise SummaryAPIError(f"Request failed: {e!r}") from e

        if response.status_code == 429:
            raise RateLimitError("Rate limited (429)", status_code=429)
        if not response.is_success:
            raise SummaryAPIError(
                f"Gemini API error {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not JSON: {e}") from e

        return extract_summary_text(payload)

    async def summarize(self, record: ProfessorRecord) -> str:
        """
        Generate a summary for one professor.

        Args:
            record: Aggregated professor record

        Returns:
            Generated summary, the insufficient-data message, or FALLBACK_SUMMARY
        """
        log = logger.bind(
            correlation_id=self.correlation_id, professor_name=record.name
        )

        if not self.will_call_api(record):
            log.info(
                "Insufficient data, skipping API call",
                num_evals=record.num_evals,
                comments_length=len(record.comments),
            )
            return insufficient_data_message(record)

        prompt = build_summary_prompt(
            record,
            comment_limit=self.params.batch_config.prompt_comment_length,
            correlation_id=self.correlation_id,
        )
        log.debug("Summary prompt rendered", prompt_length=len(prompt))

        retry_cfg = self.params.retry

        def _before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            log.warning(
                "Summary request failed, retrying",
                attempt=retry_state.attempt_number,
                max_attempts=retry_cfg.max_attempts,
                status_code=getattr(error, "status_code", None),
                error=str(error),
                wait_seconds=(
                    retry_state.next_action.sleep if retry_state.next_action else None
                ),
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(retry_cfg.max_attempts),
            wait=BackoffWait(retry_cfg.retry_delay, retry_cfg.rate_limit_backoff),
            retry=(
                retry_if_exception_type(SummaryAPIError)
                & retry_if_not_exception_type(MalformedResponseError)
            ),
            before_sleep=_before_sleep,
            sleep=self.sleep,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    text = await self._request(prompt)
        except MalformedResponseError as e:
            log.error("Malformed summary response", error=str(e))
            return FALLBACK_SUMMARY
        except RetryError as e:
            error = e.last_attempt.exception()
            log.error(
                "Summary retries exhausted",
                attempts=retry_cfg.max_attempts,
                status_code=getattr(error, "status_code", None),
                error=str(error),
            )
            return FALLBACK_SUMMARY

        log.info("Summary generated", summary_length=len(text))
        return text
