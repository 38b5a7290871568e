from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LEVEL_ENV_VAR = "WISHSYNC_LOG_LEVEL"
DEBUG_ENV_VARS = ("WISHSYNC_DEBUG", "WISHSYNC_DEBUG_LOGGING")

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _coerce_level(value: Union[str, int, None], fallback: int) -> int:
    if isinstance(value, int):
        return value
    name = (value or "").strip()
    if not name:
        return fallback
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name.upper())
    return resolved if isinstance(resolved, int) else fallback


def env_truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


def resolve_env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Level requested through the environment, or ``None`` when unset."""
    env = os.environ if environ is None else environ
    explicit = env.get(LEVEL_ENV_VAR)
    if explicit and explicit.strip():
        return _coerce_level(explicit, logging.INFO)
    for flag in DEBUG_ENV_VARS:
        if env_truthy(env.get(flag)):
            return logging.DEBUG
    return None


def configure_root(default_level: Union[int, str] = logging.INFO, *, debug: bool = False) -> int:
    """
    Set up the root logger once and apply the effective level.

    Precedence: WISHSYNC_LOG_LEVEL, then a truthy WISHSYNC_DEBUG /
    WISHSYNC_DEBUG_LOGGING, then ``debug``, then ``default_level``.
    Returns the effective level.
    """
    level = resolve_env_level()
    if level is None:
        level = logging.DEBUG if debug else _coerce_level(default_level, logging.INFO)

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    return level


def level_name(level: int) -> str:
    name = logging.getLevelName(level)
    return name if isinstance(name, str) else str(level)
