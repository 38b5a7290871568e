"""Transport-level error types raised by the wishlist HTTP layer.

These never leave the adapter layer: ``map_api_error`` turns them into
domain errors before an adapter method returns.
"""

from __future__ import annotations

from typing import Any, List, Optional

from wishsync.domain.entities import WishlistMode
from wishsync.domain.errors import (
    DuplicateError,
    ModeError,
    NetworkError,
    NotFoundError,
    ValidationError,
    WishlistError,
)

_MESSAGE_KEYS = ("message", "msg", "detail", "error")


class ApiError(RuntimeError):
    """Base class for wishlist REST failures.

    Attributes:
        status: HTTP status, ``None`` when no response arrived.
        payload: Decoded error body (JSON or a text snippet).
        messages: Human-readable messages found in ``payload``.
        context: Operation label such as ``"wishlist.add"``.
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload
        self.messages = extract_error_messages(payload)
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx from the wishlist API."""


class ApiServerError(ApiError):
    """HTTP 5xx from the wishlist API."""


class ApiTimeoutError(ApiError):
    """No response: the request timed out or the connection dropped."""

    def __init__(self, message: str, *, context: Optional[str] = None) -> None:
        super().__init__(message, context=context)


def read_error_body(resp: Any) -> Any:
    """Decoded JSON body of a failed response, else a short text snippet."""
    try:
        return resp.json()
    except Exception:
        text = (getattr(resp, "text", "") or "").strip()
        return text[:400] or None


def ensure_ok(resp: Any, ctx: str) -> None:
    """Raise the ``ApiError`` subclass matching a non-2xx status."""
    status = int(getattr(resp, "status_code", 0) or 0)
    if 200 <= status < 300:
        return
    payload = read_error_body(resp)
    messages = extract_error_messages(payload)
    summary = f"{ctx} failed with HTTP {status}"
    if messages:
        summary = f"{summary}: {messages[0]}"
    if 400 <= status < 500:
        error_cls = ApiClientError
    elif 500 <= status < 600:
        error_cls = ApiServerError
    else:
        error_cls = ApiError
    raise error_cls(summary, status=status, payload=payload, context=ctx)


def extract_error_messages(payload: Any) -> List[str]:
    """Collect messages from an ``errors`` list or a single message field.

    The wishlist API answers 400 with either ``{"errors": [...]}`` (strings or
    ``{"msg": ..., "param": ...}`` objects) or ``{"message": "..."}``, in
    both cases optionally wrapped in a ``data`` envelope.
    """
    if isinstance(payload, dict):
        errors = payload.get("errors")
        data = payload.get("data")
        if errors is None and isinstance(data, dict):
            errors = data.get("errors")
        collected = _flatten_messages(errors)
        if collected:
            return collected
        return _flatten_messages({key: payload.get(key) for key in _MESSAGE_KEYS})
    return _flatten_messages(payload)


def _flatten_messages(raw: Any) -> List[str]:
    if isinstance(raw, str):
        return [raw.strip()] if raw.strip() else []
    if isinstance(raw, dict):
        for key in _MESSAGE_KEYS:
            found = _flatten_messages(raw.get(key))
            if found:
                return found[:1]
        return []
    if isinstance(raw, (list, tuple)):
        return [text for item in raw for text in _flatten_messages(item)]
    return []


def map_api_error(
    exc: Exception,
    *,
    product_id: Optional[str] = None,
    operation: str = "api_call",
) -> WishlistError:
    """Map adapter exceptions to the wishlist error taxonomy.

    Args:
        exc: Exception raised by the HTTP layer (or already a domain error).
        product_id: Product involved in the call, used for duplicate and
            not-found errors.
        operation: Operation name carried by mode errors.

    Returns:
        WishlistError: 409 -> duplicate, 404 -> not found, 400/422 ->
        validation, 401/403 -> authentication required, anything else ->
        network.
    """
    if isinstance(exc, WishlistError):
        return exc
    if isinstance(exc, ApiTimeoutError):
        return NetworkError(exc)
    if isinstance(exc, ApiClientError):
        status = exc.status or 0
        if status == 409:
            return DuplicateError(product_id)
        if status == 404:
            return NotFoundError(product_id)
        if status in (400, 422):
            messages = list(exc.messages)
            reason = messages[0] if messages else "Invalid wishlist request."
            field = _extract_field(exc.payload) or "request"
            return ValidationError(field, reason, errors=messages)
        if status in (401, 403):
            return ModeError(WishlistMode.AUTHENTICATED, operation=operation)
        return NetworkError(exc)
    # server errors, generic transport failures and anything unrecognized
    return NetworkError(exc)


def _extract_field(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    errors = payload.get("errors")
    if isinstance(errors, list):
        for entry in errors:
            if isinstance(entry, dict):
                for key in ("field", "param", "path"):
                    value = entry.get(key)
                    if isinstance(value, str) and value:
                        return value
    value = payload.get("field")
    return value if isinstance(value, str) and value else None


__all__ = [
    "ApiClientError",
    "ApiError",
    "ApiServerError",
    "ApiTimeoutError",
    "ensure_ok",
    "extract_error_messages",
    "map_api_error",
    "read_error_body",
]
