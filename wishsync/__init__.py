"""Dual-mode wishlist synchronization engine (guest device store + server)."""
