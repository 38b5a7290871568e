"""Coerce arbitrary failures into wishlist errors and display text."""

from __future__ import annotations

from wishsync.adapters.api_errors import map_api_error
from wishsync.domain.errors import NetworkError, WishlistError


def to_wishlist_error(exc: BaseException) -> WishlistError:
    """Coerce any exception into the taxonomy; unknown ones become network errors."""
    if isinstance(exc, WishlistError):
        return exc
    if isinstance(exc, Exception):
        return map_api_error(exc)
    return NetworkError(exc)


def error_message(exc: BaseException) -> str:
    """Display text for an error, preferring the domain ``user_message``."""
    if isinstance(exc, WishlistError):
        return exc.user_message
    text = str(exc).strip()
    return text or "Unexpected error."


__all__ = ["error_message", "to_wishlist_error"]
