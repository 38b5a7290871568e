"""Repository holding the active wishlist adapter and the mode switch protocol.

Call context:
    ``WishlistVM`` is the only caller. It never talks to adapters directly;
    every read, mutation and mode transition goes through this class.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, List, Mapping

from wishsync.domain.entities import (
    MigrationResult,
    MoveResult,
    PriceChange,
    ProductId,
    Wishlist,
    WishlistMode,
)
from wishsync.domain.errors import ErrorKind, SyncError, WishlistError
from wishsync.domain.ports import WishlistAdapter
from wishsync.domain.validators import (
    validate_add_item,
    validate_guest_item,
    validate_move_to_cart,
)

_log = logging.getLogger(__name__)


class WishlistRepository:
    """Uniform wishlist operations over exactly one active adapter.

    Both strategies are held by composition; ``mode`` selects which one serves
    the uniform operations. Only ``switch_to_authenticated`` and
    ``switch_to_guest`` change the selection.
    """

    def __init__(
        self,
        guest: WishlistAdapter,
        authenticated: WishlistAdapter,
        *,
        initial_mode: WishlistMode = WishlistMode.GUEST,
    ) -> None:
        self._guest = guest
        self._authenticated = authenticated
        self._mode = WishlistMode(initial_mode)
        # one migration per repository instance at a time
        self._migration_lock = asyncio.Lock()
        # bumped on every switch to guest; a migration started in an older
        # session must not activate the authenticated store
        self._session = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def mode(self) -> WishlistMode:
        return self._mode

    @property
    def is_authenticated(self) -> bool:
        return self._mode is WishlistMode.AUTHENTICATED

    @property
    def migration_in_progress(self) -> bool:
        return self._migration_lock.locked()

    @property
    def _active(self) -> WishlistAdapter:
        if self._mode is WishlistMode.AUTHENTICATED:
            return self._authenticated
        return self._guest

    # ------------------------------------------------------------------
    # Uniform operations
    # ------------------------------------------------------------------
    async def get(self) -> Wishlist:
        return await self._active.get()

    async def add(self, item_data: Mapping[str, Any]) -> Wishlist:
        payload = validate_add_item(item_data)
        return await self._active.add(payload)

    async def remove(self, product_id: ProductId) -> Wishlist:
        return await self._active.remove(str(product_id))

    async def clear(self) -> Wishlist:
        return await self._active.clear()

    async def move_to_cart(self, product_ids: Iterable[ProductId]) -> MoveResult:
        """Move items to the cart; the guest adapter refuses with a mode error."""
        if self._mode is WishlistMode.AUTHENTICATED:
            return await self._active.move_to_cart(validate_move_to_cart(product_ids))
        return await self._active.move_to_cart(list(product_ids or []))

    async def get_price_changes(self) -> List[PriceChange]:
        return await self._active.get_price_changes()

    async def check(self, product_id: ProductId) -> bool:
        return await self._active.check(str(product_id))

    # ------------------------------------------------------------------
    # Mode transitions
    # ------------------------------------------------------------------
    async def switch_to_authenticated(self) -> MigrationResult:
        """Migrate guest items to the server and activate the authenticated adapter.

        Each guest item is added individually. Duplicates mean the server
        already has the product and are not failures. The guest store is
        cleared once every item has been attempted, whatever the per-item
        outcomes, so a later login never migrates the same items twice.
        Clearing consumes the guest identity, so the authenticated adapter
        becomes active right after it, before the final server read.

        Raises:
            SyncError: A migration is already running, the guest store cannot
                be read or cleared, the final server read fails, or
                ``switch_to_guest`` ran while the migration was in flight.
                Only a failed final read leaves the authenticated adapter
                active; every other case keeps the guest adapter.
        """
        if self._migration_lock.locked():
            raise SyncError("a wishlist migration is already in progress")

        async with self._migration_lock:
            session = self._session
            try:
                guest_wishlist = await self._guest.get()
            except WishlistError as exc:
                raise SyncError(exc) from exc
            had_guest_items = guest_wishlist.item_count > 0

            migrated = failed = duplicates = 0
            for item in guest_wishlist.items:
                row = item.to_storage()
                if validate_guest_item(row):
                    failed += 1
                    continue
                try:
                    await self._authenticated.add(row)
                except WishlistError as exc:
                    if exc.kind is ErrorKind.DUPLICATE:
                        duplicates += 1
                    else:
                        failed += 1
                        _log.warning("Migration of %s failed: %s", item.product_id, exc)
                else:
                    migrated += 1

            self._ensure_session(session, migrated)
            if had_guest_items:
                try:
                    await self._guest.clear()
                except WishlistError as exc:
                    raise SyncError(exc, migrated_count=migrated) from exc
            self._ensure_session(session, migrated)
            self._mode = WishlistMode.AUTHENTICATED

            try:
                wishlist = await self._authenticated.get()
            except WishlistError as exc:
                raise SyncError(exc, migrated_count=migrated) from exc
            self._ensure_session(session, migrated)

            _log.info(
                "Wishlist migration done: migrated=%d failed=%d duplicates=%d",
                migrated,
                failed,
                duplicates,
            )
            return MigrationResult(
                wishlist=wishlist,
                migrated_count=migrated,
                failed_count=failed,
                had_guest_items=had_guest_items,
                duplicate_count=duplicates,
            )

    async def switch_to_guest(self) -> Wishlist:
        """Drop the authenticated selection and return a freshly read guest wishlist.

        The mode flips before the read, so a failing read still leaves the
        repository in guest mode. A migration still in flight is abandoned.
        """
        self._session += 1
        self._mode = WishlistMode.GUEST
        return await self._guest.get()

    def _ensure_session(self, session: int, migrated: int) -> None:
        if self._session != session:
            _log.warning("Session ended during wishlist migration; not activating the server wishlist")
            raise SyncError("session ended during wishlist migration", migrated_count=migrated)


__all__ = ["WishlistRepository"]
