"""Environment-driven runtime configuration."""

from __future__ import annotations

import logging
import os
from typing import Final

import jax

ENABLE_X64: Final[bool] = os.environ.get("RVAR_JAX_ENABLE_X64", "0") == "1"
USE_JITTED_KERNELS: Final[bool] = os.environ.get("RVAR_JAX_DISABLE_JITTED_KERNELS", "0") != "1"
KERNEL_CACHE_MAX: Final[int] = max(1, int(os.environ.get("RVAR_JAX_KERNEL_CACHE_MAX", "128")))
LOG_LEVEL: Final[str | None] = os.environ.get("RVAR_JAX_LOG_LEVEL") or None

_PACKAGE_LOGGER: Final[str] = "rvar_jax"


def update(str_without_jax: str, value: object, /) -> None:
    jax.config.update(f"jax_{str_without_jax}", value)


def configure_logging(level: str | int | None = LOG_LEVEL) -> logging.Logger:
    """Attach a NullHandler to the package logger and apply ``level`` if given."""
    logger = logging.getLogger(_PACKAGE_LOGGER)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    if level is not None:
        logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger


def apply_environment() -> None:
    if ENABLE_X64:
        update("enable_x64", True)
    configure_logging()
