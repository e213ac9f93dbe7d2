"""
QuillMind Backend — Google Gemini Service Implementation
==========================================================

What:  Concrete LLM service that sends text prompts to Google Gemini.
How:   One generate_content_async call per prompt, wrapped in tenacity
       retries for transient failures and a circuit breaker that fails fast
       while the provider is down.
Who:   Instantiated once at import; called by TextActionService for every
       /api/ai/action request and by the health endpoint.

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter for transient errors
       (connection drops, timeouts, 429/500/503/504 from the API)
    2. Circuit breaker shared by all requests of the process
    3. Per-call timeout passed through request_options
    4. Every failure leaves as UpstreamError with the provider's HTTP status
       when one was reported
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from quillmind.config import settings
from quillmind.exceptions import CircuitBreakerOpenError, InternalError, UpstreamError
from quillmind.services.llm_base import LLMService

logger = logging.getLogger(__name__)

# Errors worth another attempt; anything else (bad request, auth) fails at once.
TRANSIENT_ERRORS = (
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
    google_exceptions.TooManyRequests,
)


def upstream_status_of(exc: BaseException) -> Optional[int]:
    """HTTP status reported by the provider for `exc`, if any."""
    code = getattr(exc, "code", None)
    if isinstance(code, int) and not isinstance(code, bool) and 100 <= code <= 599:
        return int(code)
    return None


def extract_text(response: Any) -> str:
    """
    Pull the single text field out of a Gemini response.

    `response.text` raises ValueError when the candidate was blocked or has
    no parts; that and any non-string or blank value count as a shape
    mismatch.
    """
    try:
        text = response.text
    except (AttributeError, ValueError) as e:
        raise UpstreamError(
            message="The AI service returned a response without text.",
            context={"reason": str(e)},
        )
    if not isinstance(text, str) or not text.strip():
        raise UpstreamError(message="The AI service returned a response without text.")
    return text.strip()


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker Implementation
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Implements the circuit breaker pattern to prevent cascade failures.

    State Machine:
        CLOSED (normal operation)
            → On failure: increment failure_count
            → When failure_count >= threshold: transition to OPEN

        OPEN (rejecting all requests)
            → All calls raise CircuitBreakerOpenError immediately
            → After recovery_timeout seconds: transition to HALF_OPEN

        HALF_OPEN (testing recovery)
            → Allow ONE request through
            → On success: transition to CLOSED (reset failure_count)
            → On failure: transition back to OPEN (reset timer)

    Thread Safety:
        Plain counters, not thread-safe. uvicorn's async workers run every
        request of a process on one event loop.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Check if a request is allowed through the circuit breaker.

        Raises:
            CircuitBreakerOpenError if circuit is OPEN and the recovery
            timeout hasn't elapsed.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info(
                    "Circuit breaker transitioning to HALF_OPEN after %.1fs",
                    elapsed,
                )
                self.state = self.HALF_OPEN
                return True
            remaining = max(1, int(self.recovery_timeout - elapsed))
            raise CircuitBreakerOpenError(recovery_time=remaining)

        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Circuit breaker transitioning to CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Circuit breaker returning to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Gemini Service
# ══════════════════════════════════════════════════════════════════════════

class GeminiService(LLMService):
    """
    Google Gemini implementation of the text generation contract.

    Error Handling Chain:
        API call fails → tenacity retries transient errors
        → still failing → record circuit breaker failure → UpstreamError
        → threshold reached → later calls rejected instantly (503)
        → recovery timeout → one test call allowed (HALF_OPEN)
        → test succeeds → normal operation (CLOSED)
    """

    def __init__(self):
        if settings.gemini_api_key and settings.gemini_api_key != "your_gemini_api_key_here":
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(settings.gemini_model)
        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

        logger.info(
            "GeminiService initialized with model=%s, "
            "circuit_breaker(threshold=%d, recovery=%ds)",
            settings.gemini_model,
            settings.cb_failure_threshold,
            settings.cb_recovery_timeout,
        )

    @property
    def configured(self) -> bool:
        return bool(settings.gemini_api_key) and settings.gemini_api_key != "your_gemini_api_key_here"

    async def generate(self, prompt: str) -> str:
        """
        Send a prompt to Gemini and return the generated text.

        Flow:
            1. Check circuit breaker → may raise CircuitBreakerOpenError
            2. Call Gemini with retry logic
            3. Record success/failure in circuit breaker
            4. Translate any failure into UpstreamError
        """
        call_id = str(uuid.uuid4())[:8]

        self.circuit_breaker.can_execute()

        if not self.configured:
            logger.error("[%s] GEMINI_API_KEY is not configured", call_id)
            raise InternalError(message="The AI service is not configured.")

        logger.info("[%s] Starting Gemini call (%d prompt chars)", call_id, len(prompt))

        try:
            result = await self._call_gemini_with_retry(prompt, call_id)
        except UpstreamError:
            self.circuit_breaker.record_failure()
            raise
        except Exception as e:
            self.circuit_breaker.record_failure()
            status = upstream_status_of(e)
            logger.error(
                "[%s] Gemini call failed (status=%s): %s",
                call_id, status, str(e),
            )
            raise UpstreamError(
                message="The AI service failed to process the request. Please try again later.",
                upstream_status=status,
                context={"call_id": call_id, "error_type": type(e).__name__},
            )

        self.circuit_breaker.record_success()
        return result

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(settings.retry_max_attempts),
        # wait = min(max_wait, min_wait * 2^attempt) + random(0, 1)
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_gemini_with_retry(self, prompt: str, call_id: str) -> str:
        """
        The single API call tenacity retries.

        Kept apart from generate() so the circuit breaker check is not
        itself retried.
        """
        start_time = time.time()

        try:
            response = await self.model.generate_content_async(
                prompt,
                request_options={"timeout": settings.ai_request_timeout},
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(
                "[%s] Gemini API call failed after %.0fms: %s",
                call_id, duration_ms, str(e),
            )
            raise

        text = extract_text(response)
        logger.info(
            "[%s] Gemini call completed in %.0fms, returned %d chars",
            call_id, (time.time() - start_time) * 1000, len(text),
        )
        return text

    async def health_check(self) -> bool:
        """
        Check if Gemini is reachable by listing models (no token cost).
        """
        if not self.configured:
            return False
        try:
            names = await asyncio.to_thread(lambda: [m.name for m in genai.list_models()])
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False
        target = f"models/{settings.gemini_model}"
        if target not in names:
            logger.warning("Configured model %s not found in available models", target)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
# Holds the circuit breaker state, which must be shared across requests.
gemini_service = GeminiService()
