from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional
from urllib.parse import quote

from wishsync.adapters.api_errors import ensure_ok, map_api_error
from wishsync.domain.entities import (
    MoveResult,
    PriceChange,
    ProductId,
    Wishlist,
    WishlistMode,
    resolve_product_id,
)
from wishsync.domain.errors import NetworkError, WishlistError
from wishsync.domain.ports import HttpClientPort, HttpResponse, WishlistAdapter
from wishsync.domain.validators import validate_add_item

_log = logging.getLogger(__name__)


class AuthenticatedWishlistAdapter(WishlistAdapter):
    """REST adapter for the server-persisted wishlist of the signed-in user.

    Holds no copy of the wishlist: every operation returns what the server
    confirmed, so a failed call never leaves a half-applied local state.
    Blocking transport calls run in a worker thread to keep them awaitable.
    """

    mode = WishlistMode.AUTHENTICATED

    def __init__(self, base_url: str, session: HttpClientPort) -> None:
        if not base_url:
            raise ValueError("AuthenticatedWishlistAdapter requires a base URL")
        self.base_url = base_url[:-1] if base_url.endswith("/") else base_url
        self.session = session

    async def get(self) -> Wishlist:
        resp = await self._call("get", lambda: self.session.get(self._url("/wishlist")))
        return self._to_wishlist(self._json(resp, "get"))

    async def add(self, item_data: Mapping[str, Any]) -> Wishlist:
        payload = validate_add_item(item_data)
        product_id = payload["productId"]
        added_at = item_data.get("addedAt")
        if added_at:
            payload["addedAt"] = str(added_at)
        resp = await self._call(
            "add",
            lambda: self.session.post(self._url("/wishlist/items"), json_body=payload),
            product_id=product_id,
        )
        return await self._wishlist_or_refetch(resp, "add")

    async def remove(self, product_id: ProductId) -> Wishlist:
        key = str(product_id)
        resp = await self._call(
            "remove",
            lambda: self.session.delete(self._url(f"/wishlist/items/{quote(key, safe='')}")),
            product_id=key,
        )
        return await self._wishlist_or_refetch(resp, "remove")

    async def clear(self) -> Wishlist:
        await self._call("clear", lambda: self.session.delete(self._url("/wishlist")))
        return Wishlist.empty()

    async def move_to_cart(self, product_ids: Iterable[ProductId]) -> MoveResult:
        ids = [str(pid) for pid in product_ids]
        resp = await self._call(
            "move_to_cart",
            lambda: self.session.post(
                self._url("/wishlist/move-to-cart"), json_body={"productIds": ids}
            ),
        )
        data = self._unwrap(self._json(resp, "move_to_cart"))
        if not isinstance(data, Mapping):
            data = {}
        moved_raw = data.get("movedItems") or []
        moved_ids = tuple(
            pid
            for pid in (
                str(entry) if isinstance(entry, (str, int)) else resolve_product_id(entry)
                for entry in moved_raw
            )
            if pid
        )
        count = data.get("movedCount")
        moved_count = int(count) if isinstance(count, (int, float)) and not isinstance(count, bool) else len(moved_ids)
        return MoveResult(moved_count=moved_count, moved_ids=moved_ids)

    async def get_price_changes(self) -> List[PriceChange]:
        resp = await self._call(
            "get_price_changes",
            lambda: self.session.get(self._url("/wishlist/price-changes")),
        )
        data = self._unwrap(self._json(resp, "get_price_changes"))
        if isinstance(data, Mapping):
            data = data.get("items") or data.get("changes") or []
        if not isinstance(data, list):
            return []
        changes: List[PriceChange] = []
        for entry in data:
            change = self._to_price_change(entry)
            if change is not None:
                changes.append(change)
        return changes

    async def check(self, product_id: ProductId) -> bool:
        """Server-side membership check, answering for products not loaded locally."""
        key = str(product_id)
        resp = await self._call(
            "check",
            lambda: self.session.get(self._url(f"/wishlist/check/{quote(key, safe='')}")),
            product_id=key,
        )
        data = self._unwrap(self._json(resp, "check"))
        return bool(data.get("inWishlist")) if isinstance(data, Mapping) else False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _call(
        self,
        operation: str,
        send: Callable[[], HttpResponse],
        *,
        product_id: Optional[str] = None,
    ) -> HttpResponse:
        try:
            resp = await asyncio.to_thread(send)
            ensure_ok(resp, f"wishlist.{operation}")
            return resp
        except WishlistError:
            raise
        except Exception as exc:
            mapped = map_api_error(exc, product_id=product_id, operation=operation)
            _log.debug("wishlist.%s failed: %s -> %s", operation, exc, mapped.kind.value)
            raise mapped from exc

    async def _wishlist_or_refetch(self, resp: HttpResponse, operation: str) -> Wishlist:
        body = self._json(resp, operation, allow_empty=True)
        data = self._unwrap(body)
        if self._has_items(data):
            return self._to_wishlist(body)
        return await self.get()

    @staticmethod
    def _json(resp: HttpResponse, operation: str, *, allow_empty: bool = False) -> Any:
        if allow_empty and not (getattr(resp, "text", "") or "").strip():
            return None
        try:
            return resp.json()
        except Exception as exc:
            snippet = (getattr(resp, "text", "") or "")[:400]
            raise NetworkError(f"wishlist.{operation}: invalid JSON response: {snippet}") from exc

    @staticmethod
    def _unwrap(body: Any) -> Any:
        if isinstance(body, Mapping) and "data" in body:
            return body["data"]
        return body

    @staticmethod
    def _has_items(data: Any) -> bool:
        return isinstance(data, list) or (isinstance(data, Mapping) and isinstance(data.get("items"), list))

    @classmethod
    def _to_wishlist(cls, body: Any) -> Wishlist:
        data = cls._unwrap(body)
        if isinstance(data, list):
            return Wishlist.from_raw(data)
        if not isinstance(data, Mapping):
            return Wishlist.empty()
        user = data.get("user")
        user_id = None
        if isinstance(user, Mapping):
            user_id = user.get("_id") or user.get("id")
        elif isinstance(user, str):
            user_id = user
        user_id = user_id or data.get("userId")
        return Wishlist.from_raw(data.get("items"), user_id=str(user_id) if user_id else None)

    @staticmethod
    def _to_price_change(entry: Any) -> Optional[PriceChange]:
        product_id = resolve_product_id(entry)
        if not product_id:
            _log.warning("Dropping price change without product id: %r", entry)
            return None
        product = entry.get("product") if isinstance(entry.get("product"), Mapping) else {}
        old = _first_number(entry, ("oldPrice", "priceWhenAdded"))
        new = _first_number(entry, ("newPrice", "currentPrice"))
        if new is None:
            new = _first_number(product, ("price",))
        return PriceChange(product_id=product_id, old_price=old, new_price=new)


def _first_number(data: Mapping[str, Any], keys: Iterable[str]) -> Optional[float]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, bool) or value is None:
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            continue
    return None


__all__ = ["AuthenticatedWishlistAdapter"]
