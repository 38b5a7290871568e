"""Domain package exports for wishlist value objects and errors."""

from .entities import (
    LoadingState,
    MigrationResult,
    MoveResult,
    PriceChange,
    SyncResult,
    SyncStatus,
    Wishlist,
    WishlistItem,
    WishlistMode,
    resolve_product_id,
)
from .errors import (
    DuplicateError,
    ErrorKind,
    ModeError,
    NetworkError,
    NotFoundError,
    SyncError,
    ValidationError,
    WishlistError,
)

__all__ = [
    "DuplicateError",
    "ErrorKind",
    "LoadingState",
    "MigrationResult",
    "ModeError",
    "MoveResult",
    "NetworkError",
    "NotFoundError",
    "PriceChange",
    "SyncError",
    "SyncResult",
    "SyncStatus",
    "ValidationError",
    "Wishlist",
    "WishlistError",
    "WishlistItem",
    "WishlistMode",
    "resolve_product_id",
]
