"""Resilient Anthropic Client — wraps AsyncAnthropic with bounded retry and error mapping.

Invariants:
    - Every call has a bounded timeout (Settings.provider_timeout_seconds)
    - Transient errors (connection, 5xx, 529 overloaded): at most max_retries retries
      with exponential backoff, then UpstreamUnavailableError
    - Timeouts are NOT retried: UpstreamUnavailableError immediately
    - Rate limits (429): UpstreamThrottledError immediately, Retry-After surfaced
    - Billing/credit exhaustion (402, billing_error): UpstreamExhaustedError
    - Any other failure, including a malformed response: UpstreamUnavailableError

Design Decisions:
    - Wrapper over raw client: isolates retry/mapping from the generation service
    - SDK built-in retries disabled (max_retries=0): one retry policy, ours
    - Rate limits surface instead of sleeping: the caller decides when to come back,
      a request handler must not park for a minute
    - ±25% jitter on backoff: prevents thundering herd on shared limits
"""

import asyncio
import random
import logging

import anthropic
from anthropic import (
    APIError,
    APIConnectionError,
    APIStatusError,
    RateLimitError,
    APITimeoutError,
    InternalServerError,
)

from app.core.errors import (
    ErrorContext,
    UpstreamExhaustedError,
    UpstreamThrottledError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

# ADR: OverloadedError (HTTP 529) is not re-exported by every SDK release.
# Detect via status code on APIStatusError instead of a private import.
_OVERLOADED_STATUS = 529
_PAYMENT_REQUIRED_STATUS = 402


def _is_overloaded(e: APIError) -> bool:
    """Check if error is Anthropic 529 Overloaded."""
    return isinstance(e, APIStatusError) and e.status_code == _OVERLOADED_STATUS


def _is_billing_exhausted(e: APIStatusError) -> bool:
    """402, billing_error body, or the credit-balance 400 Anthropic sends."""
    if e.status_code == _PAYMENT_REQUIRED_STATUS:
        return True
    body = e.body if isinstance(e.body, dict) else {}
    error = body.get("error") if isinstance(body.get("error"), dict) else body
    if error.get("type") == "billing_error":
        return True
    return "credit balance" in str(error.get("message", "")).lower()


def extract_text(response) -> str:
    """Concatenate text blocks. Raises UpstreamUnavailableError if malformed."""
    content = getattr(response, "content", None)
    if not isinstance(content, list):
        raise UpstreamUnavailableError(
            "response has no content list", "malformed_response",
        )
    return "".join(
        getattr(block, "text", "") or ""
        for block in content
        if getattr(block, "type", None) == "text"
    )


class ResilientAnthropicClient:
    """Wraps Anthropic client with retry logic, timeouts, and error mapping."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 8000,
        max_retries: int = 1,
        base_delay_ms: int = 500,
        max_delay_ms: int = 4000,
        timeout_seconds: int = 60,
    ):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self.model = model
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def complete(
        self, *, system: str, prompt: str, context: ErrorContext | None = None,
    ) -> str:
        """Single-turn completion → plain text ("" when no text block)."""
        response = await self.create_message(
            system=system,
            messages=[{"role": "user", "content": prompt}],
            context=context,
        )
        return extract_text(response)

    async def create_message(
        self,
        *,
        system: str,
        messages: list,
        context: ErrorContext | None = None,
    ):
        """Create message with bounded retry on transient failures."""
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    system=system,
                    messages=messages,
                )
                self._log_success(response, attempt)
                return response

            except RateLimitError as e:
                raise UpstreamThrottledError(
                    "rate limit exceeded",
                    retry_after_ms=self._extract_retry_after(e),
                    context=context,
                )

            except APITimeoutError:
                raise UpstreamUnavailableError(
                    "API timeout", "timeout", context=context,
                )

            except (APIConnectionError, InternalServerError) as e:
                await self._handle_transient_error(e, attempt, context)

            except APIStatusError as e:
                if _is_overloaded(e):
                    await self._handle_transient_error(e, attempt, context)
                    continue
                if _is_billing_exhausted(e):
                    raise UpstreamExhaustedError(str(e), context=context)
                raise UpstreamUnavailableError(
                    str(e), "client_error", context=context,
                )

            except APIError as e:
                raise UpstreamUnavailableError(
                    str(e), "malformed_response", context=context,
                )

            except Exception as e:
                logger.error(
                    f"Unexpected Anthropic error: {e}", exc_info=True,
                )
                raise UpstreamUnavailableError(
                    str(e), "unknown", context=context,
                )

    def _log_success(self, response, attempt: int) -> None:
        """Log successful API call with token usage."""
        usage = getattr(response, "usage", None)
        logger.info(
            "Anthropic API success",
            extra={
                "attempt": attempt + 1,
                "input_tokens": getattr(usage, "input_tokens", None),
                "output_tokens": getattr(usage, "output_tokens", None),
            },
        )

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            raise UpstreamUnavailableError(
                f"Transient failure after {self.max_retries} retries: {e}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(f"Transient error, retry after {delay}ms: {e}")
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, error: RateLimitError) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        try:
            if hasattr(error, "response") and error.response:
                val = error.response.headers.get("retry-after")
                if val:
                    return int(float(val) * 1000)
        except (TypeError, ValueError):
            pass  # nosec B110
        return None
