from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional

from wishsync.domain.entities import (
    MoveResult,
    PriceChange,
    Wishlist,
    WishlistItem,
    WishlistMode,
)
from wishsync.domain.errors import DuplicateError, NotFoundError


def run(coro):
    return asyncio.run(coro)


class FakeRemoteAdapter:
    """In-memory stand-in for the authenticated adapter with failure injection."""

    mode = WishlistMode.AUTHENTICATED

    def __init__(
        self,
        product_ids: Iterable[str] = (),
        *,
        fail_on: Optional[Mapping[str, Exception]] = None,
        get_error: Optional[Exception] = None,
        moved_count: Optional[int] = None,
        price_changes: Optional[List[PriceChange]] = None,
    ) -> None:
        self.rows: Dict[str, WishlistItem] = {pid: WishlistItem(product_id=pid) for pid in product_ids}
        self.fail_on = dict(fail_on or {})
        self.get_error = get_error
        self.moved_count = moved_count
        self.price_changes = list(price_changes or [])
        self.calls: List[tuple] = []

    async def get(self) -> Wishlist:
        self.calls.append(("get",))
        if self.get_error is not None:
            raise self.get_error
        return Wishlist.from_items(self.rows.values())

    async def add(self, item_data: Mapping[str, Any]) -> Wishlist:
        product_id = str(item_data["productId"])
        self.calls.append(("add", product_id))
        if product_id in self.fail_on:
            raise self.fail_on[product_id]
        if product_id in self.rows:
            raise DuplicateError(product_id)
        self.rows[product_id] = WishlistItem.from_raw(item_data)
        return Wishlist.from_items(self.rows.values())

    async def remove(self, product_id: str) -> Wishlist:
        self.calls.append(("remove", product_id))
        if product_id not in self.rows:
            raise NotFoundError(product_id)
        del self.rows[product_id]
        return Wishlist.from_items(self.rows.values())

    async def clear(self) -> Wishlist:
        self.calls.append(("clear",))
        self.rows.clear()
        return Wishlist.empty()

    async def move_to_cart(self, product_ids: Iterable[str]) -> MoveResult:
        ids = list(product_ids)
        self.calls.append(("move_to_cart", tuple(ids)))
        moved = [pid for pid in ids if pid in self.rows]
        if self.moved_count is not None:
            moved = moved[: self.moved_count]
        for pid in moved:
            del self.rows[pid]
        return MoveResult(moved_count=len(moved), moved_ids=tuple(moved))

    async def get_price_changes(self) -> List[PriceChange]:
        self.calls.append(("get_price_changes",))
        return list(self.price_changes)

    async def check(self, product_id: str) -> bool:
        self.calls.append(("check", product_id))
        if self.get_error is not None:
            raise self.get_error
        return product_id in self.rows


__all__ = ["FakeRemoteAdapter", "run"]
