"""Adapter package for external I/O implementations.

Purpose:
    Concrete implementations of the domain ports: the guest wishlist on the
    device-local store, the authenticated wishlist over REST, the default
    bearer-token transport and the JSON key-value stores.

Dependencies:
    ``http_client`` depends on ``requests``; the others use the standard
    library and domain protocol definitions only.

Call context:
    Imported by ``wishsync.app.composition`` for runtime wiring and by tests
    for transport-level behavior verification.
"""
