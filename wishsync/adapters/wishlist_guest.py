"""Guest wishlist adapter backed by the device-local key-value store.

The whole wishlist lives under one fixed key as
``{"items": [{productId, notifyPriceChange, notifyAvailability, addedAt}]}``.
Every mutation is a single read-modify-write so a failed write leaves the
previous value untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from wishsync.domain.entities import (
    MoveResult,
    PriceChange,
    ProductId,
    Wishlist,
    WishlistItem,
    WishlistMode,
    utc_now_iso,
)
from wishsync.domain.errors import (
    DuplicateError,
    ModeError,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from wishsync.domain.ports import KeyValueStorePort, WishlistAdapter
from wishsync.domain.validators import validate_add_item, validate_guest_item

GUEST_STORAGE_KEY = "wishsync_wishlist_guest"
DEFAULT_MAX_GUEST_ITEMS = 100

_log = logging.getLogger(__name__)


class GuestWishlistAdapter(WishlistAdapter):
    """Anonymous, device-local wishlist. No server relationship."""

    mode = WishlistMode.GUEST

    def __init__(
        self,
        store: KeyValueStorePort,
        *,
        key: str = GUEST_STORAGE_KEY,
        max_items: Optional[int] = DEFAULT_MAX_GUEST_ITEMS,
    ) -> None:
        self.store = store
        self.key = key
        self.max_items = max_items

    async def get(self) -> Wishlist:
        return self._to_wishlist(self._read_rows())

    async def add(self, item_data: Mapping[str, Any]) -> Wishlist:
        payload = validate_add_item(item_data)
        product_id = payload["productId"]
        rows = self._read_rows()
        if any(str(row.get("productId")) == product_id for row in rows):
            raise DuplicateError(product_id)
        if self.max_items is not None and len(rows) >= self.max_items:
            raise ValidationError("items", f"Your wishlist is full ({self.max_items} items).")

        added_at = item_data.get("addedAt") if isinstance(item_data, Mapping) else None
        rows.append(
            {
                "productId": product_id,
                "notifyPriceChange": payload["notifyPriceChange"],
                "notifyAvailability": payload["notifyAvailability"],
                "addedAt": str(added_at) if added_at else utc_now_iso(),
            }
        )
        self._write_rows(rows)
        return self._to_wishlist(rows)

    async def remove(self, product_id: ProductId) -> Wishlist:
        key = str(product_id)
        rows = self._read_rows()
        remaining = [row for row in rows if str(row.get("productId")) != key]
        if len(remaining) == len(rows):
            raise NotFoundError(key)
        self._write_rows(remaining)
        return self._to_wishlist(remaining)

    async def clear(self) -> Wishlist:
        try:
            self.store.remove(self.key)
        except OSError as exc:
            raise NetworkError(exc) from exc
        return Wishlist.empty()

    async def move_to_cart(self, product_ids: Iterable[ProductId]) -> MoveResult:
        raise ModeError(WishlistMode.AUTHENTICATED, operation="move_to_cart")

    async def get_price_changes(self) -> List[PriceChange]:
        return []

    async def check(self, product_id: ProductId) -> bool:
        key = str(product_id)
        return any(str(row.get("productId")) == key for row in self._read_rows())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _read_rows(self) -> List[Dict[str, Any]]:
        """Return valid stored rows; corrupt or legacy values degrade to what parses."""
        try:
            raw = self.store.get(self.key)
        except ValueError as exc:
            _log.warning("Guest wishlist storage is corrupt, starting empty: %s", exc)
            return []
        except OSError as exc:
            raise NetworkError(exc) from exc

        if raw is None:
            return []
        if isinstance(raw, Mapping):
            rows = raw.get("items")
        else:
            # legacy layout: bare list of rows
            rows = raw
        if not isinstance(rows, list):
            _log.warning("Guest wishlist storage has unexpected shape %s, starting empty", type(raw).__name__)
            return []

        valid: List[Dict[str, Any]] = []
        seen: set[str] = set()
        for row in rows:
            problems = validate_guest_item(row)
            if problems:
                _log.warning("Dropping guest wishlist row %r: %s", row, problems[0])
                continue
            product_id = str(row["productId"]).strip()
            if product_id in seen:
                continue
            seen.add(product_id)
            valid.append({**row, "productId": product_id})
        return valid

    def _write_rows(self, rows: List[Dict[str, Any]]) -> None:
        try:
            self.store.set(self.key, {"items": rows})
        except (OSError, TypeError, ValueError) as exc:
            raise NetworkError(exc) from exc

    @staticmethod
    def _to_wishlist(rows: List[Dict[str, Any]]) -> Wishlist:
        return Wishlist.from_items(WishlistItem.from_raw(row) for row in rows)


__all__ = ["DEFAULT_MAX_GUEST_ITEMS", "GUEST_STORAGE_KEY", "GuestWishlistAdapter"]
