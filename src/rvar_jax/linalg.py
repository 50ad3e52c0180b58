"""Batched per-draw linear algebra.

The draw axis is treated as a batch dimension: one tensor contraction or one
batched factorisation covers every draw, so no Python loop over draws exists.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import jax
import jax.numpy as jnp

from .conformance import conform_draws
from .errors import RVarLinAlgError, RVarShapeError
from .values import AxisLabels, DrawsContainer, as_draws

logger = logging.getLogger(__name__)


def _as_inexact(a: jax.Array) -> jax.Array:
    if jnp.issubdtype(a.dtype, jnp.inexact):
        return a
    return a.astype(jnp.asarray(1.0).dtype)


def _as_matrix(value: object, *, column: bool, where: str) -> DrawsContainer:
    x = as_draws(value)
    if x.ndim == 2:
        return x
    if x.ndim != 1:
        raise RVarShapeError(f"{where} is not a vector or matrix, cannot matrix-multiply")
    labels = None
    if x.labels is not None:
        labels = x.labels.select((0, None) if column else (None, 0))
    shape = (x.shape[0], 1) if column else (1, x.shape[0])
    return DrawsContainer(jnp.reshape(x.data, (x.ndraws, *shape)), nchains=x.nchains, labels=labels)


def _matmul_labels(x: DrawsContainer, y: DrawsContainer) -> AxisLabels | None:
    if x.labels is None and y.labels is None:
        return None
    xl = x.labels or AxisLabels.empty(2)
    yl = y.labels or AxisLabels.empty(2)
    return AxisLabels(names=(xl.name(0), yl.name(1)), levels=(xl.level(0), yl.level(1)))


def matmul(left: object, right: object) -> DrawsContainer:
    """Matrix product of every draw of ``left`` with the same draw of ``right``.

    A vector on the left is a row vector and a vector on the right is a column
    vector. Constants are replicated across the draws of the other operand.
    """
    x = _as_matrix(left, column=False, where="First argument (`x`)")
    y = _as_matrix(right, column=True, where="Second argument (`y`)")
    x, y = conform_draws((x, y))
    if x.shape[1] != y.shape[0]:
        raise RVarShapeError(f"non-conformable arguments: {x.shape} and {y.shape}")

    xs, ys = x.data, y.data
    if x.is_boolean:
        xs = xs.astype(jnp.int32)
    if y.is_boolean:
        ys = ys.astype(jnp.int32)
    out = jnp.einsum("dij,djk->dik", xs, ys)
    return DrawsContainer(out, nchains=x.nchains, labels=_matmul_labels(x, y))


def cholesky(value: object) -> DrawsContainer:
    """Upper-triangular ``R`` with ``R.T @ R`` equal to each draw of ``value``."""
    x = as_draws(value)
    if x.ndim != 2:
        raise RVarShapeError("`x` must be a random matrix")
    if x.shape[0] != x.shape[1]:
        raise RVarShapeError(f"Cholesky decomposition needs a square matrix, got event shape {x.shape}")

    lower = jnp.linalg.cholesky(_as_inexact(x.data))
    failed = ~jnp.all(jnp.isfinite(lower), axis=(1, 2))
    if bool(jnp.any(failed)):
        draws = tuple(int(i) for i in jnp.nonzero(failed)[0])
        logger.debug("Cholesky decomposition failed in %d of %d draws", len(draws), x.ndraws)
        shown = ", ".join(str(i) for i in draws[:10])
        more = "" if len(draws) <= 10 else ", ..."
        raise RVarLinAlgError(f"Matrix is not positive definite in draw(s) {shown}{more}", draws=draws)
    return DrawsContainer(jnp.triu(jnp.swapaxes(lower, 1, 2)), nchains=x.nchains, labels=x.labels)


def transpose(value: object) -> DrawsContainer:
    x = as_draws(value)
    if x.ndim == 1:
        labels = None if x.labels is None else x.labels.select((None, 0))
        return DrawsContainer(jnp.reshape(x.data, (x.ndraws, 1, x.shape[0])), nchains=x.nchains, labels=labels)
    if x.ndim == 2:
        labels = None if x.labels is None else x.labels.select((1, 0))
        return DrawsContainer(jnp.swapaxes(x.data, 1, 2), nchains=x.nchains, labels=labels)
    raise RVarShapeError("argument is not a random vector or matrix")


def _normalize_permutation(perm: Sequence[int], rank: int) -> tuple[int, ...]:
    axes = [int(axis) for axis in perm]
    if len(axes) != rank:
        raise RVarShapeError(f"Axis permutation of length {len(axes)} does not match event rank {rank}")
    normalized: list[int] = []
    for axis in axes:
        if axis < 0:
            axis += rank
        if axis < 0 or axis >= rank:
            raise RVarShapeError("Axis permutation entry out of bounds")
        normalized.append(axis)
    if len(set(normalized)) != len(normalized):
        raise RVarShapeError("Axis vector must be a permutation of the event axes")
    return tuple(normalized)


def permute_axes(value: object, perm: Sequence[int]) -> DrawsContainer:
    """Reorder event axes; the draw axis stays first."""
    x = as_draws(value)
    axes = _normalize_permutation(perm, x.ndim)
    data = jnp.transpose(x.data, (0, *(axis + 1 for axis in axes)))
    labels = None if x.labels is None else x.labels.select(axes)
    return DrawsContainer(data, nchains=x.nchains, labels=labels)


aperm = permute_axes
