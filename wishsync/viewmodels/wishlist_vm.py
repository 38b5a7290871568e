"""Wishlist state container for UI consumers.

Call context:
    The host application builds one ``WishlistVM`` (see
    ``wishsync.app.composition``), binds views through ``subscribe`` and calls
    ``on_login`` / ``on_logout`` from its identity lifecycle.

Responsibilities:
    - Own the canonical ``WishlistState`` and replace it on every change.
    - Set and clear whole-list and per-product loading flags around calls.
    - Decide, in one place, whether a failure becomes the generic ``error``
      field, a structured result, or ``sync_status=FAILED``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from wishsync.domain.entities import (
    LoadingState,
    PriceChange,
    ProductId,
    SyncResult,
    SyncStatus,
    Wishlist,
    WishlistItem,
    WishlistMode,
)
from wishsync.domain.errors import ErrorKind, WishlistError
from wishsync.domain.validators import (
    can_add_to_wishlist,
    can_move_item_to_cart,
    normalize_product_id,
)
from wishsync.usecases.error_mapping import error_message, to_wishlist_error
from wishsync.usecases.wishlist_repository import WishlistRepository


@dataclass(frozen=True)
class WishlistState:
    """Snapshot consumed by views; never mutated in place."""

    wishlist: Wishlist = field(default_factory=Wishlist.empty)
    loading: LoadingState = field(default_factory=LoadingState)
    error: Optional[str] = None
    initialized: bool = False
    mode: WishlistMode = WishlistMode.GUEST
    sync_status: SyncStatus = SyncStatus.IDLE
    sync_result: Optional[SyncResult] = None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a VM action, shaped for direct use by a view."""

    success: bool
    error: Optional[str] = None
    is_duplicate: bool = False
    requires_auth: bool = False
    in_flight: bool = False
    moved_count: Optional[int] = None
    data: Tuple[PriceChange, ...] = ()


@dataclass(frozen=True)
class LoginResult:
    success: bool
    migrated_count: int = 0
    failed_count: int = 0
    had_guest_items: bool = False
    error: Optional[str] = None


Listener = Callable[[WishlistState], None]


class WishlistVM:
    """Single source of truth for the wishlist; delegates all I/O to the repository."""

    def __init__(self, repository: WishlistRepository) -> None:
        self._repo = repository
        self._log = logging.getLogger(__name__)
        self._listeners: List[Listener] = []
        # bumped by on_logout; a login finishing in an older session is dropped
        self._session = 0
        self.state = WishlistState(mode=repository.mode)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every state change; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set(self, **changes: Any) -> None:
        self.state = replace(self.state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception:  # a broken view must not leave loading flags stuck
                self._log.exception("Wishlist state listener failed")

    def _set_global_loading(self, value: bool) -> None:
        self._set(loading=self.state.loading.with_global(value))

    # ------------------------------------------------------------------
    # Read-only projections
    # ------------------------------------------------------------------
    @property
    def wishlist(self) -> Wishlist:
        return self.state.wishlist

    @property
    def items(self) -> Tuple[WishlistItem, ...]:
        return self.state.wishlist.items

    @property
    def item_count(self) -> int:
        return self.state.wishlist.item_count

    @property
    def is_empty(self) -> bool:
        return self.state.wishlist.item_count == 0

    @property
    def is_busy(self) -> bool:
        return self.state.loading.global_ or bool(self.state.loading.items)

    def is_in_wishlist(self, product_id: Any) -> bool:
        return self.state.wishlist.contains(product_id)

    def is_item_loading(self, product_id: Any) -> bool:
        return str(product_id) in self.state.loading.items

    @property
    def available_items(self) -> Tuple[WishlistItem, ...]:
        return self.state.wishlist.available_items

    @property
    def items_with_price_drop(self) -> Tuple[WishlistItem, ...]:
        return self.state.wishlist.items_with_price_drop

    @property
    def total_savings(self) -> float:
        return self.state.wishlist.total_savings

    def can_add_item(self, product_id: Any) -> Optional[str]:
        """Reason the add button should be disabled, or ``None``."""
        return can_add_to_wishlist(self.state.wishlist, product_id)

    def can_move_to_cart(self, product_id: Any) -> Optional[str]:
        """Reason a product cannot go to the cart, or ``None``."""
        if self.state.mode is not WishlistMode.AUTHENTICATED:
            return "Please sign in to do this."
        return can_move_item_to_cart(self.state.wishlist.find(product_id))

    # ------------------------------------------------------------------
    # Read actions
    # ------------------------------------------------------------------
    async def fetch_wishlist(self, force_refresh: bool = False) -> ActionResult:
        """Load the wishlist from the active adapter.

        No-op when already initialized, not forced and no fetch is running.
        On failure the previous wishlist stays in place.
        """
        current = self.state
        if current.initialized and not force_refresh and not current.loading.global_:
            return ActionResult(success=True)

        self._set(loading=current.loading.with_global(True), error=None)
        try:
            wishlist = await self._repo.get()
        except Exception as exc:
            return self._fail(exc, action="fetch_wishlist")
        else:
            self._set(wishlist=wishlist, initialized=True)
            return ActionResult(success=True)
        finally:
            self._set_global_loading(False)

    async def refresh_wishlist(self) -> ActionResult:
        return await self.fetch_wishlist(True)

    # ------------------------------------------------------------------
    # Item actions (granular loading)
    # ------------------------------------------------------------------
    async def add_item(self, item_data: Mapping[str, Any]) -> ActionResult:
        """Add one product; a duplicate counts as success with ``is_duplicate``."""
        raw_id = item_data.get("productId") if isinstance(item_data, Mapping) else None
        product_id = normalize_product_id(raw_id)
        if product_id is not None and product_id in self.state.loading.items:
            return self._in_flight(product_id)

        if product_id is not None:
            self._set(loading=self.state.loading.with_item(product_id))
        try:
            wishlist = await self._repo.add(item_data)
        except Exception as exc:
            return self._fail(exc, action="add_item")
        else:
            self._set(wishlist=wishlist, error=None)
            return ActionResult(success=True)
        finally:
            if product_id is not None:
                self._set(loading=self.state.loading.without_item(product_id))

    async def remove_item(self, product_id: ProductId) -> ActionResult:
        key = str(product_id)
        if key in self.state.loading.items:
            return self._in_flight(key)

        self._set(loading=self.state.loading.with_item(key))
        try:
            wishlist = await self._repo.remove(key)
        except Exception as exc:
            return self._fail(exc, action="remove_item")
        else:
            self._set(wishlist=wishlist, error=None)
            return ActionResult(success=True)
        finally:
            self._set(loading=self.state.loading.without_item(key))

    # ------------------------------------------------------------------
    # Whole-list actions
    # ------------------------------------------------------------------
    async def clear_wishlist(self) -> ActionResult:
        self._set(loading=self.state.loading.with_global(True), error=None)
        try:
            wishlist = await self._repo.clear()
        except Exception as exc:
            return self._fail(exc, action="clear_wishlist")
        else:
            self._set(wishlist=wishlist)
            return ActionResult(success=True)
        finally:
            self._set_global_loading(False)

    async def move_to_cart(self, product_ids: Iterable[ProductId]) -> ActionResult:
        """Move products to the cart (authenticated only), then force a refetch.

        The server may drop more items than requested, e.g. after stock
        changes, so the wishlist is always re-read on success.
        """
        self._set(loading=self.state.loading.with_global(True), error=None)
        try:
            result = await self._repo.move_to_cart(product_ids)
        except Exception as exc:
            return self._fail(exc, action="move_to_cart")
        else:
            await self.fetch_wishlist(force_refresh=True)
            return ActionResult(success=True, moved_count=result.moved_count)
        finally:
            self._set_global_loading(False)

    async def get_price_changes(self) -> ActionResult:
        """Never raises; guest mode yields an empty list."""
        try:
            changes = await self._repo.get_price_changes()
        except Exception as exc:
            err = to_wishlist_error(exc)
            self._log.warning("get_price_changes failed: %s", err)
            return ActionResult(success=False, error=error_message(err))
        return ActionResult(success=True, data=tuple(changes))

    async def check_product(self, product_id: ProductId) -> bool:
        """Ask the active store whether ``product_id`` is saved; ``False`` on failure."""
        try:
            return await self._repo.check(product_id)
        except Exception as exc:
            self._log.warning("check_product(%s) failed: %s", product_id, to_wishlist_error(exc))
            return False

    # ------------------------------------------------------------------
    # Identity lifecycle
    # ------------------------------------------------------------------
    async def on_login(self) -> LoginResult:
        """Migrate the guest wishlist and switch to the authenticated store.

        A result that arrives after ``on_logout`` belongs to the ended session
        and is discarded without touching state.
        """
        if self.state.sync_status is SyncStatus.IN_PROGRESS:
            return LoginResult(success=False, error="Wishlist sync already in progress.")

        session = self._session
        self._set(
            sync_status=SyncStatus.IN_PROGRESS,
            loading=self.state.loading.with_global(True),
            error=None,
        )
        try:
            result = await self._repo.switch_to_authenticated()
        except Exception as exc:
            err = to_wishlist_error(exc)
            message = error_message(err)
            if session != self._session:
                return self._stale_login(err)
            self._log.error("Wishlist login sync failed: %s", err)
            changes: Dict[str, Any] = {
                "sync_status": SyncStatus.FAILED,
                "error": message,
                "loading": self.state.loading.with_global(False),
            }
            if self._repo.mode is not self.state.mode:
                # guest store already consumed; its items exist nowhere now
                changes.update(mode=self._repo.mode, wishlist=Wishlist.empty(), initialized=False)
            self._set(**changes)
            return LoginResult(success=False, error=message)

        if session != self._session:
            return self._stale_login(None)
        self._set(
            wishlist=result.wishlist,
            mode=WishlistMode.AUTHENTICATED,
            initialized=True,
            sync_status=SyncStatus.COMPLETED,
            sync_result=SyncResult(
                migrated_count=result.migrated_count,
                failed_count=result.failed_count,
            ),
            loading=self.state.loading.with_global(False),
        )
        return LoginResult(
            success=True,
            migrated_count=result.migrated_count,
            failed_count=result.failed_count,
            had_guest_items=result.had_guest_items,
        )

    async def on_logout(self) -> None:
        """Return to guest mode; on failure fall back to an empty guest wishlist.

        Never propagates an error: keeping the previous identity's items on
        screen is worse than showing an empty list.
        """
        self._session += 1
        self._set(
            loading=LoadingState(global_=True),
            error=None,
            sync_status=SyncStatus.IDLE,
            sync_result=None,
        )
        try:
            wishlist = await self._repo.switch_to_guest()
        except Exception as exc:
            self._log.warning("Guest wishlist reload failed on logout, resetting: %s", exc)
            wishlist = Wishlist.empty()
        self._set(
            wishlist=wishlist,
            mode=WishlistMode.GUEST,
            initialized=True,
            error=None,
            loading=self.state.loading.with_global(False),
        )

    # ------------------------------------------------------------------
    # UI dismissal
    # ------------------------------------------------------------------
    def clear_error(self) -> None:
        self._set(error=None)

    def clear_sync_status(self) -> None:
        self._set(sync_status=SyncStatus.IDLE, sync_result=None)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _stale_login(self, err: Optional[WishlistError]) -> LoginResult:
        self._log.info("Discarding login sync result from an ended session (%s)", err or "completed")
        return LoginResult(success=False, error="Signed out before the wishlist sync finished.")

    def _in_flight(self, product_id: str) -> ActionResult:
        return ActionResult(
            success=False,
            in_flight=True,
            error=f"Product {product_id} is already being updated.",
        )

    def _fail(self, exc: BaseException, *, action: str) -> ActionResult:
        """Route a failure by error kind into state and a structured result."""
        err: WishlistError = to_wishlist_error(exc)
        kind = err.kind
        message = error_message(err)

        if kind is ErrorKind.DUPLICATE:
            return ActionResult(success=True, is_duplicate=True)
        if kind is ErrorKind.MODE:
            requires_auth = bool(getattr(err, "requires_auth", False))
            if action == "move_to_cart":
                # expected and recoverable: prompt a login, keep the error field clean
                return ActionResult(success=False, error=message, requires_auth=requires_auth)
            self._log.warning("%s needs another mode: %s", action, err)
            self._set(error=message)
            return ActionResult(success=False, error=message, requires_auth=requires_auth)
        if kind in (ErrorKind.NOT_FOUND, ErrorKind.VALIDATION):
            self._log.info("%s rejected: %s", action, err)
            self._set(error=message)
            return ActionResult(success=False, error=message)
        if kind in (ErrorKind.SYNC, ErrorKind.NETWORK):
            self._log.warning("%s failed: %s", action, err)
            self._set(error=message)
            return ActionResult(success=False, error=message)
        raise AssertionError(f"Unhandled wishlist error kind: {kind}")


__all__ = ["ActionResult", "LoginResult", "WishlistState", "WishlistVM"]
