"""End-to-end flows through the composition root with a fake wishlist server."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from wishsync.adapters.api_errors import ApiTimeoutError
from wishsync.adapters.storage_local import MemoryStorage
from wishsync.adapters.wishlist_guest import GUEST_STORAGE_KEY
from wishsync.app.composition import build_wishlist_vm
from wishsync.app.settings import WishlistSettings
from wishsync.domain.entities import SyncStatus, WishlistMode
from wishsync.tests.unit.helpers import run

BASE = "http://shop.local/api"


class _Response:
    def __init__(self, status_code: int, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = "" if payload is None else json.dumps(payload)

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("empty body")
        return self._payload


class _FakeWishlistServer:
    """Routes wishlist endpoints over an in-memory list of product ids."""

    def __init__(
        self,
        product_ids: List[str] = (),
        *,
        reject: Optional[Dict[str, str]] = None,
    ) -> None:
        self.product_ids = list(product_ids)
        self.reject = dict(reject or {})
        self.requests: List[tuple] = []

    def _body(self) -> Dict[str, Any]:
        items = [{"product": {"_id": pid, "price": 1}, "addedAt": "2026-01-01T00:00:00Z"} for pid in self.product_ids]
        return {"success": True, "data": {"user": {"_id": "u1"}, "items": items}}

    def get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> _Response:
        self.requests.append(("GET", url))
        if url == f"{BASE}/wishlist":
            return _Response(200, self._body())
        if url == f"{BASE}/wishlist/price-changes":
            return _Response(200, {"data": []})
        return _Response(404, {"message": "Not found"})

    def post(self, url: str, *, json_body: Optional[Dict[str, Any]] = None) -> _Response:
        self.requests.append(("POST", url))
        if url != f"{BASE}/wishlist/items":
            return _Response(404, {"message": "Not found"})
        product_id = json_body["productId"]
        failure = self.reject.get(product_id)
        if failure == "timeout":
            raise ApiTimeoutError(f"Timeout contacting {url}")
        if failure == "500":
            return _Response(500, {"message": "Internal error"})
        if product_id in self.product_ids:
            return _Response(409, {"message": "Product already in wishlist"})
        self.product_ids.append(product_id)
        return _Response(201, self._body())

    def delete(self, url: str) -> _Response:
        self.requests.append(("DELETE", url))
        if url == f"{BASE}/wishlist":
            self.product_ids.clear()
            return _Response(200, {"success": True})
        prefix = f"{BASE}/wishlist/items/"
        if url.startswith(prefix) and url[len(prefix):] in self.product_ids:
            self.product_ids.remove(url[len(prefix):])
            return _Response(200, self._body())
        return _Response(404, {"message": "Item not found"})


def _build(server: _FakeWishlistServer, store: MemoryStorage, **overrides: Any):
    settings = WishlistSettings(api_base_url=BASE).apply_dict(overrides)
    return build_wishlist_vm(settings, store=store, session=server)


def test_login_with_partial_server_failure() -> None:
    store = MemoryStorage()
    server = _FakeWishlistServer(reject={"p2": "500"})
    vm = _build(server, store)
    run(vm.add_item({"productId": "p1"}))
    run(vm.add_item({"productId": "p2"}))

    result = run(vm.on_login())

    assert result.success is True
    assert result.migrated_count == 1
    assert result.failed_count == 1
    assert result.had_guest_items is True
    assert vm.state.mode is WishlistMode.AUTHENTICATED
    assert vm.state.sync_status is SyncStatus.COMPLETED
    assert vm.wishlist.product_ids == ["p1"]
    assert store.get(GUEST_STORAGE_KEY) is None


def test_login_with_timeout_counts_as_failed_item() -> None:
    store = MemoryStorage()
    server = _FakeWishlistServer(["p1"], reject={"p3": "timeout"})
    vm = _build(server, store)
    for pid in ("p1", "p2", "p3"):
        run(vm.add_item({"productId": pid}))

    result = run(vm.on_login())

    # p1 already on the server: neither migrated nor failed
    assert (result.migrated_count, result.failed_count) == (1, 1)
    assert vm.wishlist.product_ids == ["p1", "p2"]


def test_logout_resets_to_empty_guest_wishlist() -> None:
    store = MemoryStorage()
    server = _FakeWishlistServer(["p3"])
    vm = _build(server, store, initial_mode="authenticated")
    run(vm.fetch_wishlist())
    assert vm.wishlist.product_ids == ["p3"]

    run(vm.on_logout())

    assert vm.state.mode is WishlistMode.GUEST
    assert vm.is_empty is True
    assert vm.state.error is None

    # guest actions no longer touch the server
    before = len(server.requests)
    run(vm.add_item({"productId": "g1"}))
    assert len(server.requests) == before
    assert vm.wishlist.product_ids == ["g1"]


def test_authenticated_session_actions_round_trip() -> None:
    store = MemoryStorage()
    server = _FakeWishlistServer()
    vm = _build(server, store, initial_mode="authenticated")

    added = run(vm.add_item({"productId": "p1"}))
    again = run(vm.add_item({"productId": "p1"}))
    removed = run(vm.remove_item("p1"))
    missing = run(vm.remove_item("p1"))

    assert added.success is True
    assert again.success is True and again.is_duplicate is True
    assert removed.success is True
    assert missing.success is False
    assert vm.state.error == "This product is not in your wishlist."
    assert vm.is_empty is True
