"""Domain-level error types for wishlist adapters, repository and view model.

Every error carries an explicit ``kind`` tag. Callers branch on the tag
rather than on the concrete class, so the routing stays exhaustive and
survives serialization (e.g. into a view state or a log record).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Optional


class ErrorKind(str, Enum):
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    MODE = "mode"
    SYNC = "sync"
    NETWORK = "network"


class WishlistError(Exception):
    """Base class for wishlist errors (user-presentable).

    Attributes:
        kind: Discriminator used by the view model to route the failure.
        message: Technical description for logs.
        user_message: Ready-to-display text.
    """

    kind: ErrorKind = ErrorKind.NETWORK

    def __init__(self, message: str, *, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message

    def __str__(self) -> str:
        return self.message


class DuplicateError(WishlistError):
    """Product already saved. Callers treat it as success."""

    kind = ErrorKind.DUPLICATE

    def __init__(self, product_id: Any) -> None:
        super().__init__(
            f"Product {product_id} already exists in wishlist",
            user_message="This product is already in your wishlist.",
        )
        self.product_id = None if product_id is None else str(product_id)


class NotFoundError(WishlistError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, product_id: Any = None) -> None:
        target = "wishlist" if product_id is None else f"product {product_id}"
        super().__init__(
            f"Wishlist resource not found: {target}",
            user_message=(
                "Your wishlist could not be found."
                if product_id is None
                else "This product is not in your wishlist."
            ),
        )
        self.product_id = None if product_id is None else str(product_id)


class ValidationError(WishlistError):
    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        field: str,
        reason: str,
        *,
        errors: Optional[Iterable[str]] = None,
    ) -> None:
        collected: List[str] = list(errors or [])
        if not collected:
            collected = [reason]
        super().__init__(
            f"Wishlist validation failed ({field}): {'; '.join(collected)}",
            user_message=collected[0],
        )
        self.field = field
        self.reason = reason
        self.errors = collected


class ModeError(WishlistError):
    """Operation needs another mode; ``requires_auth`` drives a login redirect."""

    kind = ErrorKind.MODE

    def __init__(self, required_mode: Any, *, operation: str = "operation") -> None:
        mode_value = getattr(required_mode, "value", required_mode)
        self.required_mode = mode_value
        self.operation = operation
        self.requires_auth = mode_value == "authenticated"
        super().__init__(
            f'Operation "{operation}" requires {mode_value} mode',
            user_message=(
                "Please sign in to do this."
                if self.requires_auth
                else "This action is not available."
            ),
        )


class SyncError(WishlistError):
    """Login migration failed outright (partial item failures are not this)."""

    kind = ErrorKind.SYNC

    def __init__(self, cause: Any, *, migrated_count: int = 0) -> None:
        reason = str(cause) if cause is not None else "unknown error"
        super().__init__(
            f"Wishlist sync failed: {reason}",
            user_message="We could not sync your wishlist. Please try again.",
        )
        self.cause = cause
        self.migrated_count = migrated_count


class NetworkError(WishlistError):
    """Unclassified transport or storage failure."""

    kind = ErrorKind.NETWORK

    def __init__(self, cause: Any) -> None:
        reason = str(cause) if cause is not None else "unknown"
        super().__init__(
            f"Wishlist network error: {reason}",
            user_message="Connection problem. Please try again.",
        )
        self.cause = cause


__all__ = [
    "DuplicateError",
    "ErrorKind",
    "ModeError",
    "NetworkError",
    "NotFoundError",
    "SyncError",
    "ValidationError",
    "WishlistError",
]
