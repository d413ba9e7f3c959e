from __future__ import annotations

from typing import Any, Optional


class CoreSearchError(Exception):
    """Base class for every error raised by the CORE search layer."""


class ConfigurationError(CoreSearchError):
    """Raised at startup when required settings are missing or malformed."""


class CacheUnavailable(CoreSearchError):
    """The result cache store could not be reached."""


class CacheCorrupt(CoreSearchError):
    """A stored payload could not be decoded. Treated as a cache miss."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Corrupt cache payload for {key!r}: {reason}")
        self.key = key
        self.reason = reason


class UpstreamRequestError(CoreSearchError):
    """Transport-level failure talking to the CORE API (network, timeout, deadline)."""


class UpstreamStatusError(CoreSearchError):
    def __init__(self, status_code: int, body: str = "") -> None:
        message = f"CORE search failed: HTTP {status_code}"
        if body:
            message += f" - {body[:300]}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResponseDecodeError(CoreSearchError):
    """The CORE response body could not be decoded into papers."""

    def __init__(self, message: str, *, field: Optional[str] = None, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class DateFormatError(ResponseDecodeError, ValueError):
    def __init__(self, raw: str) -> None:
        super().__init__(f"invalid date format: {raw}", value=raw)
        self.raw = raw
