"""ViewModel package for wishlist UI state and command surfaces.

Call context:
    Hosts import ``WishlistVM`` (usually via ``wishsync.app.composition``)
    and bind view callbacks to its async actions.

Dependencies:
    Domain types and the use-case repository only. Transport and
    persistence stay in the adapter layer.
"""

from .wishlist_vm import ActionResult, LoginResult, WishlistState, WishlistVM

__all__ = ["ActionResult", "LoginResult", "WishlistState", "WishlistVM"]
