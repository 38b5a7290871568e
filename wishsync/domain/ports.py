from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from .entities import MoveResult, PriceChange, ProductId, Wishlist, WishlistMode


# ---- Ports (Hexagonal boundaries) ----
class WishlistAdapter(Protocol):
    """Backing store strategy selected by the repository per mode.

    Guest and authenticated implementations share this exact contract so the
    repository can swap them without the view model noticing.
    """

    mode: WishlistMode

    async def get(self) -> Wishlist: ...
    async def add(self, item_data: Mapping[str, Any]) -> Wishlist: ...  # DuplicateError if present
    async def remove(self, product_id: ProductId) -> Wishlist: ...  # NotFoundError if absent
    async def clear(self) -> Wishlist: ...
    async def move_to_cart(self, product_ids: Iterable[ProductId]) -> MoveResult: ...
    async def get_price_changes(self) -> List[PriceChange]: ...
    async def check(self, product_id: ProductId) -> bool: ...


class KeyValueStorePort(Protocol):
    """Durable device-local storage for JSON-serializable values."""

    def get(self, key: str) -> Any: ...  # None when missing
    def set(self, key: str, value: Any) -> None: ...
    def remove(self, key: str) -> None: ...


class HttpResponse(Protocol):
    status_code: int
    text: str

    def json(self) -> Any: ...


class HttpClientPort(Protocol):
    """Authenticated transport (token attachment, timeout, retry live here)."""

    def get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> HttpResponse: ...
    def post(self, url: str, *, json_body: Optional[Dict[str, Any]] = None) -> HttpResponse: ...
    def delete(self, url: str) -> HttpResponse: ...
