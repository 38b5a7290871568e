"""Domain value objects and aggregates shared across adapters, use-cases, and view models."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

_log = logging.getLogger(__name__)

ProductId = str


class WishlistMode(str, Enum):
    """Which adapter currently backs the wishlist aggregate."""

    GUEST = "guest"
    AUTHENTICATED = "authenticated"


class SyncStatus(str, Enum):
    """State machine for the login migration only."""

    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def resolve_product_id(raw: Any) -> Optional[ProductId]:
    """Extract the product identifier from any raw item shape.

    API rows carry a populated ``product`` object, local rows only a
    ``productId``. Lookup order: ``product._id``, ``product.id``,
    ``productId``, ``_id``, ``id``.
    """
    if not isinstance(raw, Mapping):
        return None
    product = raw.get("product")
    candidates: List[Any] = []
    if isinstance(product, Mapping):
        candidates.extend([product.get("_id"), product.get("id")])
    elif isinstance(product, (str, int)):
        candidates.append(product)
    candidates.extend([raw.get("productId"), raw.get("_id"), raw.get("id")])
    for value in candidates:
        if value is None or isinstance(value, bool):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return bool(value)


def _optional_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class WishlistItem:
    """One saved product. Immutable once added; only removal changes it."""

    product_id: ProductId
    notify_price_change: bool = False
    notify_availability: bool = False
    added_at: str = field(default_factory=utc_now_iso)
    price_changed: bool = False
    price_dropped: bool = False
    product: Optional[Mapping[str, Any]] = field(default=None, compare=False)
    is_available: Optional[bool] = None
    price_when_added: Optional[float] = None
    price_difference: Optional[float] = None

    def __post_init__(self) -> None:
        if not isinstance(self.product_id, str) or not self.product_id.strip():
            raise ValueError("WishlistItem.product_id must be a non-empty string.")

    @classmethod
    def from_raw(cls, raw: Any) -> "WishlistItem":
        """Normalize an API row or a local storage row into a ``WishlistItem``.

        Raises:
            ValueError: If ``raw`` is not a mapping or carries no product id.
        """
        if not isinstance(raw, Mapping):
            raise ValueError("Wishlist item must be a mapping.")
        product_id = resolve_product_id(raw)
        if not product_id:
            raise ValueError("Wishlist item has no resolvable product id.")
        product = raw.get("product")
        added_at = raw.get("addedAt")
        return cls(
            product_id=product_id,
            notify_price_change=bool(raw.get("notifyPriceChange", False)),
            notify_availability=bool(raw.get("notifyAvailability", False)),
            added_at=str(added_at) if added_at else utc_now_iso(),
            price_changed=bool(raw.get("priceChanged", False)),
            price_dropped=bool(raw.get("priceDropped", False)),
            product=dict(product) if isinstance(product, Mapping) else None,
            is_available=_optional_bool(raw.get("isAvailable")),
            price_when_added=_optional_float(raw.get("priceWhenAdded")),
            price_difference=_optional_float(raw.get("priceDifference")),
        )

    def to_storage(self) -> Dict[str, Any]:
        """Minimal JSON row persisted by the guest store and sent on migration."""
        return {
            "productId": self.product_id,
            "notifyPriceChange": self.notify_price_change,
            "notifyAvailability": self.notify_availability,
            "addedAt": self.added_at,
        }


@dataclass(frozen=True)
class Wishlist:
    """Ordered collection of items; order is for display only."""

    items: Tuple[WishlistItem, ...] = ()
    user_id: Optional[str] = None

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def product_ids(self) -> List[ProductId]:
        return [item.product_id for item in self.items]

    def contains(self, product_id: Any) -> bool:
        key = str(product_id)
        return any(item.product_id == key for item in self.items)

    def find(self, product_id: Any) -> Optional[WishlistItem]:
        key = str(product_id)
        for item in self.items:
            if item.product_id == key:
                return item
        return None

    @property
    def available_items(self) -> Tuple[WishlistItem, ...]:
        return tuple(item for item in self.items if item.is_available is True)

    @property
    def unavailable_items(self) -> Tuple[WishlistItem, ...]:
        return tuple(item for item in self.items if item.is_available is False)

    @property
    def items_with_price_change(self) -> Tuple[WishlistItem, ...]:
        return tuple(item for item in self.items if item.price_changed)

    @property
    def items_with_price_drop(self) -> Tuple[WishlistItem, ...]:
        return tuple(item for item in self.items if item.price_dropped)

    @property
    def total_savings(self) -> float:
        """Sum of price decreases across items the server flagged as dropped."""
        drops = (
            abs(item.price_difference)
            for item in self.items
            if item.price_dropped and item.price_difference is not None and item.price_difference < 0
        )
        return sum(drops, 0.0)

    @classmethod
    def empty(cls) -> "Wishlist":
        return cls()

    @classmethod
    def from_items(cls, items: Iterable[WishlistItem], user_id: Optional[str] = None) -> "Wishlist":
        """Build a wishlist keeping the first occurrence of each product id."""
        seen: set[str] = set()
        unique: List[WishlistItem] = []
        for item in items:
            if item.product_id in seen:
                continue
            seen.add(item.product_id)
            unique.append(item)
        return cls(items=tuple(unique), user_id=user_id)

    @classmethod
    def from_raw(cls, raw_items: Any, user_id: Optional[str] = None) -> "Wishlist":
        """Normalize raw rows, dropping the ones that cannot be parsed."""
        if not isinstance(raw_items, (list, tuple)):
            return cls(user_id=user_id)
        parsed: List[WishlistItem] = []
        for raw in raw_items:
            try:
                parsed.append(WishlistItem.from_raw(raw))
            except ValueError as exc:
                _log.warning("Dropping wishlist item %r: %s", raw, exc)
        return cls.from_items(parsed, user_id=user_id)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one login migration, kept until acknowledged."""

    migrated_count: int
    failed_count: int


@dataclass(frozen=True)
class LoadingState:
    """Whole-list flag plus the product ids with a mutation in flight."""

    global_: bool = False
    items: FrozenSet[ProductId] = frozenset()

    def with_global(self, value: bool) -> "LoadingState":
        return LoadingState(global_=value, items=self.items)

    def with_item(self, product_id: ProductId) -> "LoadingState":
        return LoadingState(global_=self.global_, items=self.items | {product_id})

    def without_item(self, product_id: ProductId) -> "LoadingState":
        return LoadingState(global_=self.global_, items=self.items - {product_id})


@dataclass(frozen=True)
class PriceChange:
    product_id: ProductId
    old_price: Optional[float]
    new_price: Optional[float]

    @property
    def dropped(self) -> bool:
        if self.old_price is None or self.new_price is None:
            return False
        return self.new_price < self.old_price


@dataclass(frozen=True)
class MoveResult:
    """Server answer for a move-to-cart; ``moved_count`` may be below the request."""

    moved_count: int
    moved_ids: Tuple[ProductId, ...] = ()


@dataclass(frozen=True)
class MigrationResult:
    """Aggregate returned by the guest -> authenticated switch."""

    wishlist: Wishlist
    migrated_count: int
    failed_count: int
    had_guest_items: bool
    duplicate_count: int = 0


__all__ = [
    "LoadingState",
    "MigrationResult",
    "MoveResult",
    "PriceChange",
    "ProductId",
    "SyncResult",
    "SyncStatus",
    "Wishlist",
    "WishlistItem",
    "WishlistMode",
    "resolve_product_id",
    "utc_now_iso",
]
