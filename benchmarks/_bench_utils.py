"""Timing helpers for the rvar-jax benchmarks."""

from __future__ import annotations

import os
import platform
import time
from typing import Any, Callable

import jax
import jax.numpy as jnp

ENV_VARS = (
    "XLA_FLAGS",
    "JAX_PLATFORMS",
    "RVAR_JAX_ENABLE_X64",
    "RVAR_JAX_DISABLE_JITTED_KERNELS",
)


def host_metadata() -> dict[str, Any]:
    return {
        "platform": platform.platform(),
        "python": platform.python_version(),
        "jax": jax.__version__,
        "backend": jax.default_backend(),
        "x64": bool(jnp.asarray(1.0).dtype == jnp.float64),
        "cpu_count": os.cpu_count(),
        "env": {name: os.environ[name] for name in ENV_VARS if name in os.environ},
    }


def _wait(result: object) -> None:
    # Random variables hold their draws in ``.data``.
    jax.block_until_ready(getattr(result, "data", result))


def sample_ms(
    fn: Callable[..., object], args: tuple[object, ...], *, repeats: int, warmup: int, samples: int
) -> list[float]:
    """Per-call wall time in milliseconds, one entry per sample of ``repeats`` calls."""
    for _ in range(warmup):
        _wait(fn(*args))
    rows = []
    for _ in range(samples):
        start = time.perf_counter()
        for _ in range(repeats):
            _wait(fn(*args))
        rows.append((time.perf_counter() - start) * 1e3 / repeats)
    return rows
