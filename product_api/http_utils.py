"""
Request execution and result normalization for the product API.

Every endpoint call goes through execute(), which sends exactly one request
and turns whatever happens into a ResultEnvelope:

    2xx response        -> success, parsed payload in `data`
    other response      -> failure, status + response body in `error`
    no response         -> failure, status None, "No response received"
    could not dispatch  -> failure, status None, "Request setup error"

Remote problems are never raised. Only precondition violations on the
RequestSpec itself raise, and they do so when the spec is built.

Observers (console, loggers, tests) see the call through three events
emitted on an EventEmitter:
    - request_log: before dispatch
    - response_log: after a 2xx response
    - error_log: after any failure
"""

from __future__ import annotations

import copy
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

import httpx

from product_api.errors import FailureKind

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_MS = 30000
SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})
API_KEY_HEADER = "X-Api-Key"

NO_RESPONSE_ERROR = "No response received"
SETUP_ERROR = "Request setup error"
DEFAULT_SERVER_MESSAGE = "Request failed"
DEFAULT_NETWORK_MESSAGE = "Network error or server timeout"

_SCALAR_TYPES = (str, int, float, bool)


# =============================================================================
# Masking
# =============================================================================


def mask_api_key(api_key: str) -> str:
    """Keep the first 8 and last 4 characters of a key, hide the rest.

    Keys of 12 characters or fewer would be shown in full by that rule,
    so they are hidden completely.

    Examples:
        mask_api_key("sk_live_1234567890abcdef") -> "sk_live_...cdef"
        mask_api_key("short") -> "***"
    """
    if not api_key or len(api_key) <= 12:
        return "***"
    return f"{api_key[:8]}...{api_key[-4:]}"


def mask_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of headers with the API key header masked."""
    masked = {}
    for name, value in headers.items():
        if name.lower() == API_KEY_HEADER.lower():
            masked[name] = mask_api_key(value)
        else:
            masked[name] = value
    return masked


def redact_api_key(text: str, headers: Mapping[str, str]) -> str:
    """Replace the API key from headers with its masked form wherever it appears in text.

    Exception messages from httpx and h11 quote offending header values,
    either as-is or escaped inside a bytes repr, so both forms are replaced.
    """
    for name, value in headers.items():
        if name.lower() != API_KEY_HEADER.lower() or not value:
            continue
        masked = mask_api_key(value)
        forms = {value, value.strip(), value.encode("unicode_escape").decode("ascii")}
        for form in sorted(filter(None, forms), key=len, reverse=True):
            text = text.replace(form, masked)
    return text


# =============================================================================
# Request / result types
# =============================================================================


@dataclass(frozen=True)
class RequestSpec:
    """One outbound request. Built per call and never reused."""

    method: str
    url: str
    # Carries the raw API key, so it stays out of repr() and tracebacks
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)
    body: Any = None
    params: Mapping[str, Any] | None = None
    timeout_ms: int = field(default=REQUEST_TIMEOUT_MS, init=False)

    def __post_init__(self):
        method = str(self.method).upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(
                f"Unsupported HTTP method {self.method!r}; "
                f"expected one of {', '.join(sorted(SUPPORTED_METHODS))}"
            )

        try:
            parsed = httpx.URL(self.url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ValueError(f"Invalid URL {self.url!r}: {e}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ValueError(f"URL must be an absolute http(s) URL, got {self.url!r}")

        params = dict(self.params) if self.params else None
        for key, value in (params or {}).items():
            if not isinstance(value, _SCALAR_TYPES):
                raise ValueError(
                    f"Query parameter {key!r} must be a scalar, got {type(value).__name__}"
                )

        # Copies so later mutation by the caller cannot change a built spec
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "headers", dict(self.headers))
        object.__setattr__(self, "params", params)

    @property
    def resolved_url(self) -> str:
        """URL with the serialized query string, as it will be dispatched."""
        if not self.params:
            return self.url
        separator = "&" if "?" in self.url else "?"
        return f"{self.url}{separator}{httpx.QueryParams(self.params)}"


@dataclass(frozen=True)
class ResultEnvelope:
    """Outcome of one request.

    Success: success=True, status, data.
    Failure: success=False, status (None when no response), error, message.
    duration_ms is always set.
    """

    success: bool
    duration_ms: int
    status: int | None = None
    data: Any = None
    error: Any = None
    message: str | None = None

    def __post_init__(self):
        if self.duration_ms < 0:
            raise ValueError("duration_ms must be >= 0")
        if self.success:
            if self.status is None:
                raise ValueError("a successful result needs a status code")
            if self.error is not None or self.message is not None:
                raise ValueError("a successful result cannot carry error details")
        else:
            if self.data is not None:
                raise ValueError("a failed result cannot carry data")
            if self.error is None:
                raise ValueError("a failed result needs error details")
            if not self.message:
                raise ValueError("a failed result needs a message")

    @classmethod
    def ok(cls, status: int, data: Any, duration_ms: int) -> "ResultEnvelope":
        return cls(success=True, status=status, data=data, duration_ms=duration_ms)

    @classmethod
    def failure(
        cls,
        *,
        status: int | None,
        error: Any,
        message: str,
        duration_ms: int,
    ) -> "ResultEnvelope":
        return cls(
            success=False,
            status=status,
            error=error,
            message=message,
            duration_ms=duration_ms,
        )

    @property
    def kind(self) -> FailureKind | None:
        if self.success:
            return None
        if self.status is not None:
            return FailureKind.SERVER
        if self.error == NO_RESPONSE_ERROR:
            return FailureKind.NETWORK
        return FailureKind.SETUP

    def to_dict(self) -> dict:
        result = {"success": self.success, "status": self.status}
        if self.success:
            result["data"] = self.data
        else:
            result["error"] = self.error
            result["message"] = self.message
        result["duration"] = self.duration_ms
        return result


# =============================================================================
# Execution
# =============================================================================


async def execute(
    spec: RequestSpec,
    *,
    emitter=None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResultEnvelope:
    """Send one request and normalize the outcome.

    Args:
        spec: The request to send.
        emitter: EventEmitter that receives request_log / response_log /
                 error_log events. Optional.
        transport: httpx transport override (tests use httpx.MockTransport).

    Returns:
        ResultEnvelope. Never raises for server, network or setup failures.
    """
    start = time.monotonic()

    try:
        _emit(emitter, "request_log", _request_event(spec))
        async with httpx.AsyncClient(
            timeout=spec.timeout_ms / 1000,
            transport=transport,
            follow_redirects=True,
        ) as client:
            request = client.build_request(
                spec.method,
                spec.url,
                headers=dict(spec.headers),
                params=spec.params,
                json=spec.body,
            )
            response = await client.send(request)
    except (httpx.UnsupportedProtocol, httpx.LocalProtocolError) as e:
        return _setup_failure(e, start, emitter, spec)
    # A redirect loop or an undecodable body leaves no usable response
    except (httpx.TransportError, httpx.TooManyRedirects, httpx.DecodingError) as e:
        return _network_failure(e, start, emitter, spec)
    except Exception as e:
        return _setup_failure(e, start, emitter, spec)

    duration_ms = _elapsed_ms(start)
    payload = _parse_payload(response)

    if response.is_success:
        logger.debug("%s %s -> %d in %dms", spec.method, spec.url, response.status_code, duration_ms)
        _emit(emitter, "response_log", {
            "timestamp": _now(),
            "duration_ms": duration_ms,
            "status": response.status_code,
            "size_bytes": len(response.content),
            "data": copy.deepcopy(payload),
        })
        return ResultEnvelope.ok(response.status_code, payload, duration_ms)

    result = ResultEnvelope.failure(
        status=response.status_code,
        error=payload if payload is not None else response.text,
        message=_server_message(payload),
        duration_ms=duration_ms,
    )
    logger.debug("%s %s -> %d in %dms", spec.method, spec.url, response.status_code, duration_ms)
    _emit_failure(emitter, result)
    return result


def _network_failure(exc: Exception, start: float, emitter, spec: RequestSpec) -> ResultEnvelope:
    result = ResultEnvelope.failure(
        status=None,
        error=NO_RESPONSE_ERROR,
        message=redact_api_key(str(exc), spec.headers) or DEFAULT_NETWORK_MESSAGE,
        duration_ms=_elapsed_ms(start),
    )
    logger.debug("%s %s -> no response (%s)", spec.method, spec.url, type(exc).__name__)
    _emit_failure(emitter, result)
    return result


def _setup_failure(exc: Exception, start: float, emitter, spec: RequestSpec) -> ResultEnvelope:
    result = ResultEnvelope.failure(
        status=None,
        error=SETUP_ERROR,
        message=redact_api_key(str(exc), spec.headers) or type(exc).__name__,
        duration_ms=_elapsed_ms(start),
    )
    logger.debug("%s %s -> setup error (%s)", spec.method, spec.url, type(exc).__name__)
    _emit_failure(emitter, result)
    return result


def _parse_payload(response: httpx.Response) -> Any:
    """JSON when the response says so and parses, raw text otherwise."""
    if not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError:
            pass
    return response.text


def _server_message(payload: Any) -> str:
    """message -> error -> "Request failed"."""
    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if value:
                return value if isinstance(value, str) else str(value)
    return DEFAULT_SERVER_MESSAGE


def _request_event(spec: RequestSpec) -> dict[str, Any]:
    event = {
        "timestamp": _now(),
        "method": spec.method,
        "url": spec.resolved_url,
        "headers": mask_headers(spec.headers),
    }
    if spec.params:
        event["params"] = dict(spec.params)
    if spec.body is not None:
        event["body"] = copy.deepcopy(spec.body)
    return event


def _emit_failure(emitter, result: ResultEnvelope):
    _emit(emitter, "error_log", {
        "timestamp": _now(),
        "duration_ms": result.duration_ms,
        "kind": result.kind.value,
        "status": result.status,
        "error": copy.deepcopy(result.error),
        "message": result.message,
    })


def _emit(emitter, event: str, data: dict[str, Any]):
    if emitter is not None:
        emitter.emit(event, data)


def _elapsed_ms(start: float) -> int:
    return max(int((time.monotonic() - start) * 1000), 0)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
