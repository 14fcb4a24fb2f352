"""Exception hierarchy shared by the transport, parser and generator layers."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class BurgscribeError(Exception):
    """Base class for every error raised by burgscribe."""


class TransportFailure(str, Enum):
    """Classification of a single failed request to the generation backend."""

    CONNECTION_REFUSED = "connection_refused"
    CONNECTION_LOST = "connection_lost"
    DNS_FAILURE = "dns_failure"
    TIMEOUT = "timeout"
    MODEL_NOT_FOUND = "model_not_found"
    HTTP_ERROR = "http_error"
    INVALID_RESPONSE = "invalid_response"
    EMPTY_RESPONSE = "empty_response"


class TransportError(BurgscribeError):
    """One failed attempt against the backend."""

    def __init__(self, kind: TransportFailure, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def retryable(self) -> bool:
        # A hostname that does not resolve will not start resolving between attempts.
        return self.kind is not TransportFailure.DNS_FAILURE


class GenerationError(BurgscribeError):
    """Raised once the transport client has given up on a prompt."""

    def __init__(
        self,
        *,
        attempts: int,
        base_url: str,
        model: str,
        last_error: str,
        kind: Optional[TransportFailure] = None,
    ) -> None:
        self.attempts = attempts
        self.base_url = base_url
        self.model = model
        self.last_error = last_error
        self.kind = kind
        super().__init__(
            f"Ollama request failed after {attempts} attempts: {last_error}. "
            f"Check that Ollama is running at {base_url} and model '{model}' is available."
        )


class JSONParseError(BurgscribeError, ValueError):
    """Base class for failures turning response text into a JSON value."""


class NoJSONFoundError(JSONParseError):
    """No JSON-shaped substring exists in the response text."""


class AllRepairsFailedError(JSONParseError):
    """Every repair pass was tried and none produced a usable JSON value."""

    def __init__(self, caller: str, raw_text: str) -> None:
        self.caller = caller
        self.raw_excerpt = raw_text[:200]
        super().__init__(
            f"All JSON parsing methods failed for {caller}; response began with {self.raw_excerpt!r}"
        )


class SchemaError(BurgscribeError, ValueError):
    """Parsed JSON is valid but lacks the structure a generator needs."""


ExtractionError = NoJSONFoundError
RepairExhaustedError = AllRepairsFailedError


__all__ = [
    "AllRepairsFailedError",
    "BurgscribeError",
    "ExtractionError",
    "GenerationError",
    "JSONParseError",
    "NoJSONFoundError",
    "RepairExhaustedError",
    "SchemaError",
    "TransportError",
    "TransportFailure",
]
