from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from wishsync.adapters.wishlist_guest import DEFAULT_MAX_GUEST_ITEMS
from wishsync.domain.entities import WishlistMode
from wishsync.utils.logging import env_truthy

_ENV_PREFIX = "WISHSYNC_"


@dataclass(frozen=True)
class WishlistSettings:
    """Typed runtime settings for the wishlist engine."""

    api_base_url: str = "http://localhost:8000/api"
    request_timeout_s: int = 10
    retries: int = 2
    storage_dir: str = "."
    max_guest_items: int = DEFAULT_MAX_GUEST_ITEMS
    initial_mode: WishlistMode = WishlistMode.GUEST
    debug_logging: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WishlistSettings":
        """Build settings from ``WISHSYNC_*`` variables; unset ones keep defaults."""
        env = os.environ if environ is None else environ
        payload: Dict[str, Any] = {}
        for f in fields(cls):
            value = env.get(f"{_ENV_PREFIX}{f.name.upper()}")
            if value is not None and value.strip():
                payload[f.name] = value
        return cls().apply_dict(payload)

    def apply_dict(self, payload: Mapping[str, Any]) -> "WishlistSettings":
        """Return a copy with flat keys from ``payload`` applied and coerced.

        Raises:
            ValueError: On unknown keys or values that cannot be coerced.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        known = {f.name for f in fields(self)}
        unknown = set(payload.keys()) - known
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(k) for k in unknown))}")

        updates = {key: _coerce(key, value) for key, value in payload.items()}
        return replace(self, **updates) if updates else self

    def to_dict(self) -> Dict[str, Any]:
        snapshot = asdict(self)
        snapshot["initial_mode"] = self.initial_mode.value
        return snapshot


def _coerce(key: str, raw: Any) -> Any:
    if key == "api_base_url":
        text = _coerce_str(key, raw)
        if not text.startswith(("http://", "https://")):
            raise ValueError("api_base_url must be an http(s) URL.")
        return text.rstrip("/")
    if key == "storage_dir":
        return _coerce_str(key, raw) or "."
    if key in {"request_timeout_s", "retries", "max_guest_items"}:
        value = _coerce_int(key, raw)
        if value < 0 or (key != "retries" and value == 0):
            raise ValueError(f"{key} must be positive.")
        return value
    if key == "initial_mode":
        try:
            return WishlistMode(str(getattr(raw, "value", raw)).strip().lower())
        except ValueError as exc:
            raise ValueError("initial_mode must be 'guest' or 'authenticated'.") from exc
    if key == "debug_logging":
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, (int, float)):
            return bool(raw)
        return env_truthy(str(raw))
    raise ValueError(f"Unhandled settings field: {key}")


def _coerce_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string.")
    return value.strip()


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer.")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ValueError(f"{name} must be an integer.") from exc
    raise ValueError(f"{name} must be an integer.")


__all__ = ["WishlistSettings"]
