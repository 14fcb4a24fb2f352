"""Async Ollama client with classified failures and exponential backoff."""

from __future__ import annotations

import asyncio
import logging
import socket
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

import backoff
import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential

from burgscribe.exceptions import GenerationError, TransportError, TransportFailure
from burgscribe.utils.enhanced_logging import log_event
from burgscribe.utils.settings import GenerationOptions, get_settings

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate"
VERSION_PATH = "/api/version"
TAGS_PATH = "/api/tags"

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated",
)


def _is_dns_failure(exc: BaseException) -> bool:
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        if any(marker in str(current).lower() for marker in _DNS_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


def classify_error(exc: Exception) -> TransportError:
    """Map an httpx failure onto a :class:`TransportError`."""
    if isinstance(exc, TransportError):
        return exc
    if isinstance(exc, httpx.TimeoutException):
        return TransportError(TransportFailure.TIMEOUT, f"Request timed out: {exc}")
    if isinstance(exc, httpx.ConnectError):
        if _is_dns_failure(exc):
            return TransportError(TransportFailure.DNS_FAILURE, f"DNS resolution failed: {exc}")
        return TransportError(TransportFailure.CONNECTION_REFUSED, f"Connection refused: {exc}")
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 404:
            return TransportError(TransportFailure.MODEL_NOT_FOUND, f"Model not found (HTTP 404): {exc}")
        return TransportError(TransportFailure.HTTP_ERROR, f"HTTP {status}: {exc}")
    if isinstance(exc, httpx.TransportError):
        # Read, write and protocol failures after the connection was established.
        return TransportError(TransportFailure.CONNECTION_LOST, f"Connection lost: {exc}")
    return TransportError(TransportFailure.INVALID_RESPONSE, str(exc))


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, TransportError) and exc.retryable


@dataclass
class HealthReport:
    ok: bool
    version: Optional[str] = None
    model_available: bool = False
    available_models: List[str] = field(default_factory=list)
    error: Optional[str] = None


class OllamaClient:
    """Issue ``/api/generate`` requests and retry transient failures.

    Every attempt re-sends the identical prompt. Failures are classified into
    :class:`TransportFailure` kinds; DNS failures abort immediately, all other
    kinds are retried with delays of ``initial_delay * backoff_factor ** n``.
    Exhaustion raises :class:`GenerationError`.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        *,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        initial_delay: Optional[float] = None,
        backoff_factor: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        settings = get_settings().llm
        self.base_url = (base_url or settings.base_url).rstrip("/")
        self.model = model or settings.model
        self.max_retries = max_retries if max_retries is not None else settings.retry.max_retries
        self.initial_delay = initial_delay if initial_delay is not None else settings.retry.initial_delay
        self.backoff_factor = backoff_factor if backoff_factor is not None else settings.retry.backoff_factor
        self.json_options: GenerationOptions = settings.json_options
        self.text_options: GenerationOptions = settings.text_options
        self._sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds if timeout_seconds is not None else settings.timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "OllamaClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def generate_json(
        self,
        prompt: str,
        *,
        max_retries: Optional[int] = None,
        initial_delay: Optional[float] = None,
    ) -> str:
        """Return the trimmed response text for a JSON-producing prompt."""
        return await self._generate(
            prompt,
            self.json_options,
            max_retries=max_retries if max_retries is not None else self.max_retries,
            initial_delay=initial_delay if initial_delay is not None else self.initial_delay,
        )

    async def generate_text(self, prompt: str, *, max_retries: int = 3) -> str:
        """Return the trimmed response text for a free-text prompt."""
        return await self._generate(
            prompt,
            self.text_options,
            max_retries=max_retries,
            initial_delay=self.initial_delay,
        )

    async def _generate(
        self,
        prompt: str,
        options: GenerationOptions,
        *,
        max_retries: int,
        initial_delay: float,
    ) -> str:
        max_attempts = max(1, max_retries)
        attempt_number = 0
        log_event(self.logger, logging.DEBUG, "Generating with Ollama", model=self.model, base_url=self.base_url)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(multiplier=initial_delay, exp_base=self.backoff_factor),
                retry=retry_if_exception(_is_retryable),
                before_sleep=self._log_retry,
                sleep=self._sleep,
                reraise=True,
            ):
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    return await self._attempt(prompt, options, attempt_number, max_attempts)
        except TransportError as exc:
            log_event(
                self.logger,
                logging.ERROR,
                "Ollama request failed",
                attempts=attempt_number,
                kind=exc.kind.value,
                error=str(exc),
                base_url=self.base_url,
                model=self.model,
            )
            raise GenerationError(
                attempts=attempt_number,
                base_url=self.base_url,
                model=self.model,
                last_error=str(exc),
                kind=exc.kind,
            ) from exc
        raise RuntimeError("Retry loop exited unexpectedly")

    async def _attempt(
        self,
        prompt: str,
        options: GenerationOptions,
        attempt_number: int,
        max_attempts: int,
    ) -> str:
        payload: Dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": options.as_payload(),
        }
        log_event(
            self.logger,
            logging.DEBUG,
            "Sending generate request",
            attempt=attempt_number,
            max_attempts=max_attempts,
            base_url=self.base_url,
        )
        try:
            response = await self.client.post(GENERATE_PATH, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise classify_error(exc) from exc

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise TransportError(TransportFailure.INVALID_RESPONSE, "Invalid response structure from Ollama")
        text = text.strip()
        if not text:
            raise TransportError(TransportFailure.EMPTY_RESPONSE, "Empty response from Ollama")

        log_event(self.logger, logging.DEBUG, "Generated response", chars=len(text), attempt=attempt_number)
        return text

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        kind = exc.kind.value if isinstance(exc, TransportError) else "unknown"
        fields: Dict[str, Any] = {
            "attempt": retry_state.attempt_number,
            "kind": kind,
            "error": str(exc),
            "delay_seconds": retry_state.next_action.sleep if retry_state.next_action else None,
            "base_url": self.base_url,
        }
        if kind == TransportFailure.MODEL_NOT_FOUND.value:
            fields["hint"] = f"ollama pull {self.model}"
        log_event(self.logger, logging.WARNING, "Ollama attempt failed; retrying", **fields)

    @backoff.on_exception(backoff.expo, httpx.TransportError, max_tries=3, factor=0.5, logger=logger)
    async def _get_json(self, path: str) -> Any:
        response = await self.client.get(path)
        response.raise_for_status()
        return response.json()

    async def check_connection(self) -> HealthReport:
        """Probe the server version and installed models. Never raises."""
        try:
            version_payload = await self._get_json(VERSION_PATH)
            tags_payload = await self._get_json(TAGS_PATH)
        except (httpx.HTTPError, ValueError) as exc:
            log_event(self.logger, logging.ERROR, "Ollama health check failed", base_url=self.base_url, error=str(exc))
            return HealthReport(ok=False, error=str(exc))

        version = version_payload.get("version") if isinstance(version_payload, dict) else None
        models = tags_payload.get("models", []) if isinstance(tags_payload, dict) else []
        names = [str(entry.get("name")) for entry in models if isinstance(entry, dict) and entry.get("name")]
        available = any(name == self.model or name.startswith(f"{self.model}:") for name in names)
        if not available:
            log_event(
                self.logger,
                logging.WARNING,
                "Configured model is not installed",
                model=self.model,
                available=", ".join(names),
                hint=f"ollama pull {self.model}",
            )
        return HealthReport(ok=True, version=version, model_available=available, available_models=names)

    async def close(self) -> None:
        await self.client.aclose()


__all__ = ["HealthReport", "OllamaClient", "classify_error"]
