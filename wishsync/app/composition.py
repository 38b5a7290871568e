"""Composition root: settings -> transport -> adapters -> repository -> view model."""

from __future__ import annotations

import logging
from typing import Optional

from wishsync.adapters.http_client import BearerSession, HttpConfig, TokenProvider
from wishsync.adapters.storage_local import StorageLocal
from wishsync.adapters.wishlist_guest import GuestWishlistAdapter
from wishsync.adapters.wishlist_rest import AuthenticatedWishlistAdapter
from wishsync.app.settings import WishlistSettings
from wishsync.domain.ports import HttpClientPort, KeyValueStorePort
from wishsync.usecases.wishlist_repository import WishlistRepository
from wishsync.utils import logging as logging_utils
from wishsync.viewmodels.wishlist_vm import WishlistVM

_log = logging.getLogger(__name__)


def build_repository(
    settings: WishlistSettings,
    token_provider: Optional[TokenProvider] = None,
    *,
    store: Optional[KeyValueStorePort] = None,
    session: Optional[HttpClientPort] = None,
) -> WishlistRepository:
    """Wire both adapters behind one repository.

    ``store`` defaults to ``StorageLocal(settings.storage_dir)`` and
    ``session`` to a ``BearerSession`` using ``token_provider``.
    """
    if session is None:
        session = BearerSession(
            token_provider,
            HttpConfig(request_timeout_s=settings.request_timeout_s, retries=settings.retries),
        )
    guest = GuestWishlistAdapter(
        store if store is not None else StorageLocal(root_dir=settings.storage_dir),
        max_items=settings.max_guest_items,
    )
    authenticated = AuthenticatedWishlistAdapter(settings.api_base_url, session)
    return WishlistRepository(guest, authenticated, initial_mode=settings.initial_mode)


def build_wishlist_vm(
    settings: Optional[WishlistSettings] = None,
    token_provider: Optional[TokenProvider] = None,
    *,
    store: Optional[KeyValueStorePort] = None,
    session: Optional[HttpClientPort] = None,
    configure_logging: bool = False,
) -> WishlistVM:
    """Build a ready view model; only an entry point should pass ``configure_logging=True``."""
    settings = settings or WishlistSettings.from_env()
    if configure_logging:
        level = logging_utils.configure_root(debug=settings.debug_logging)
        _log.debug("Effective wishlist log level: %s", logging_utils.level_name(level))
    repository = build_repository(settings, token_provider, store=store, session=session)
    return WishlistVM(repository)


__all__ = ["build_repository", "build_wishlist_vm"]
