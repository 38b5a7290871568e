"""Use-case layer: the wishlist repository and error translation.

Modules here coordinate domain objects and adapters through ports; the
view model calls into this layer and never touches adapters directly.
"""
