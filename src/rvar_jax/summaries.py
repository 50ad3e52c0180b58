"""Summaries of random variables across draws and within draws.

Cross-draw summaries (``expectation``, ``probability``, ``median``,
``variance``) collapse the draw axis and return a plain array with the event
shape. Within-draw summaries (``rvar_sum``, ``rvar_min``, ...) collapse the
event elements of every draw and return a new draws container with one value
per draw (two for ``rvar_range``).
"""

from __future__ import annotations

from functools import partial
from typing import Callable, Final

import jax
import jax.numpy as jnp

from .conformance import conform_nchains
from .errors import RVarTypeError
from .values import DrawsContainer, as_draws

Reducer = Callable[..., jax.Array]

_CROSS_DRAW_REDUCERS: Final[dict[str, tuple[Reducer, Reducer]]] = {
    "mean": (jnp.mean, jnp.nanmean),
    "median": (jnp.median, jnp.nanmedian),
    "variance": (partial(jnp.var, ddof=1), partial(jnp.nanvar, ddof=1)),
}


def _nan_as(value: bool, reducer: Reducer) -> Reducer:
    def reduce(a: jax.Array, axis: int) -> jax.Array:
        if jnp.issubdtype(a.dtype, jnp.inexact):
            a = jnp.where(jnp.isnan(a), value, a)
        return reducer(a, axis=axis)

    return reduce


_WITHIN_DRAW_REDUCERS: Final[dict[str, tuple[Reducer, Reducer]]] = {
    "sum": (jnp.sum, jnp.nansum),
    "prod": (jnp.prod, jnp.nanprod),
    "min": (jnp.min, jnp.nanmin),
    "max": (jnp.max, jnp.nanmax),
    "all": (jnp.all, _nan_as(True, jnp.all)),
    "any": (jnp.any, _nan_as(False, jnp.any)),
    "mean": (jnp.mean, jnp.nanmean),
    "median": (jnp.median, jnp.nanmedian),
}

_NO_IDENTITY: Final[frozenset[str]] = frozenset({"min", "max", "range"})


def summarise_by_element(value: object, name: str, *, na_rm: bool = False) -> jax.Array:
    """Reduce over the draw axis separately for every event position."""
    x = as_draws(value)
    reducer = _CROSS_DRAW_REDUCERS[name][1 if na_rm else 0]
    return reducer(x.data, axis=0)


def expectation(value: object, *, na_rm: bool = False) -> jax.Array:
    return summarise_by_element(value, "mean", na_rm=na_rm)


mean = expectation


def probability(value: object, *, na_rm: bool = False) -> jax.Array:
    """Probability of a boolean random variable: the mean of its draws."""
    x = as_draws(value)
    if not x.is_boolean:
        raise RVarTypeError("Can only use Pr() on logical random variables")
    return summarise_by_element(x, "mean", na_rm=na_rm)


def median(value: object, *, na_rm: bool = False) -> jax.Array:
    return summarise_by_element(value, "median", na_rm=na_rm)


def variance(value: object, *, na_rm: bool = False) -> jax.Array:
    return summarise_by_element(value, "variance", na_rm=na_rm)


def is_na(value: object) -> jax.Array:
    """Whether any draw of each event position is NaN."""
    x = as_draws(value)
    return jnp.any(jnp.isnan(x.data), axis=0)


def any_na(value: object) -> bool:
    x = as_draws(value)
    return bool(jnp.any(jnp.isnan(x.data)))


def _flatten_events(x: DrawsContainer) -> DrawsContainer:
    if x.ndim == 1 and x.labels is None:
        return x
    return DrawsContainer(jnp.reshape(x.data, (x.ndraws, x.size)), nchains=x.nchains)


def _combined_draws(values: tuple[object, ...]) -> tuple[jax.Array, int]:
    if not values:
        raise ValueError("At least one random variable or array is required")
    flattened = [_flatten_events(as_draws(value)) for value in values]
    conformed = conform_nchains(flattened)
    if len(conformed) == 1:
        return conformed[0].data, conformed[0].nchains
    return jnp.concatenate([c.data for c in conformed], axis=1), conformed[0].nchains


def summarise_within_draws(name: str, *values: object, na_rm: bool = False) -> DrawsContainer:
    """Concatenate the flattened event elements of all operands and reduce each draw."""
    draws, nchains = _combined_draws(values)
    if name in _NO_IDENTITY and draws.shape[1] == 0:
        raise ValueError(f"Cannot compute {name} of an empty random variable")
    if name == "range":
        lo = _WITHIN_DRAW_REDUCERS["min"][1 if na_rm else 0](draws, axis=1)
        hi = _WITHIN_DRAW_REDUCERS["max"][1 if na_rm else 0](draws, axis=1)
        return DrawsContainer(jnp.stack([lo, hi], axis=1), nchains=nchains)
    reducer = _WITHIN_DRAW_REDUCERS[name][1 if na_rm else 0]
    return DrawsContainer(jnp.reshape(reducer(draws, axis=1), (-1, 1)), nchains=nchains)


def rvar_sum(*values: object, na_rm: bool = False) -> DrawsContainer:
    return summarise_within_draws("sum", *values, na_rm=na_rm)


def rvar_prod(*values: object, na_rm: bool = False) -> DrawsContainer:
    return summarise_within_draws("prod", *values, na_rm=na_rm)


def rvar_min(*values: object, na_rm: bool = False) -> DrawsContainer:
    return summarise_within_draws("min", *values, na_rm=na_rm)


def rvar_max(*values: object, na_rm: bool = False) -> DrawsContainer:
    return summarise_within_draws("max", *values, na_rm=na_rm)


def rvar_range(*values: object, na_rm: bool = False) -> DrawsContainer:
    """Per-draw ``[min, max]`` over all event elements of all operands."""
    return summarise_within_draws("range", *values, na_rm=na_rm)


def rvar_all(*values: object, na_rm: bool = False) -> DrawsContainer:
    return summarise_within_draws("all", *values, na_rm=na_rm)


def rvar_any(*values: object, na_rm: bool = False) -> DrawsContainer:
    return summarise_within_draws("any", *values, na_rm=na_rm)


def rvar_mean(value: object, *, na_rm: bool = False) -> DrawsContainer:
    return summarise_within_draws("mean", value, na_rm=na_rm)


def rvar_median(value: object, *, na_rm: bool = False) -> DrawsContainer:
    return summarise_within_draws("median", value, na_rm=na_rm)
