"""Shape and draw/chain conformance shared by every binary and n-ary operation.

Two stages run before operands are combined:

- event-shape broadcasting, trailing-aligned like ordinary array broadcasting,
  never touching the leading draw axis;
- draw/chain conformance: non-constant operands must agree on their number of
  draws, one-draw constants are replicated, and disagreeing chain counts fall
  back to a single chain.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import jax
import jax.numpy as jnp

from .errors import DrawMismatchError, RVarShapeError
from .values import DrawsContainer, as_draws

logger = logging.getLogger(__name__)


def broadcast_shapes(left: Sequence[int], right: Sequence[int]) -> tuple[int, ...]:
    left = tuple(int(d) for d in left)
    right = tuple(int(d) for d in right)
    rank = max(len(left), len(right))
    padded_left = (1,) * (rank - len(left)) + left
    padded_right = (1,) * (rank - len(right)) + right

    out: list[int] = []
    for axis, (a, b) in enumerate(zip(padded_left, padded_right, strict=True)):
        if a == b or b == 1:
            out.append(a)
        elif a == 1:
            out.append(b)
        else:
            raise RVarShapeError(f"non-conformable arrays: event shapes {left} and {right} differ on axis {axis}")
    return tuple(out)


def broadcast_array(
    data: jax.Array,
    shape: Sequence[int],
    *,
    ndraws: int | None = None,
    broadcast_scalars: bool = True,
) -> jax.Array:
    """Broadcast a draws array (draw axis first) to ``(ndraws, *shape)``.

    Size-1 event axes are inserted on the left of the event axes. With
    ``broadcast_scalars=False`` a single-element array is only reshaped to the
    target rank and left for the consumer's native broadcasting.
    """
    shape = tuple(int(d) for d in shape)
    event = tuple(int(d) for d in data.shape[1:])
    source_draws = int(data.shape[0])
    target_draws = source_draws if ndraws is None else int(ndraws)
    if source_draws not in (1, target_draws):
        raise DrawMismatchError((source_draws, target_draws))
    if len(event) > len(shape):
        raise RVarShapeError(f"non-conformable arrays: cannot broadcast event shape {event} to {shape}")

    padded = (1,) * (len(shape) - len(event)) + event
    for axis, (have, want) in enumerate(zip(padded, shape, strict=True)):
        if have not in (1, want):
            raise RVarShapeError(f"non-conformable arrays: cannot broadcast event shape {event} to {shape} (axis {axis})")

    arr = jnp.reshape(data, (source_draws, *padded))
    if not broadcast_scalars and arr.size == 1:
        return arr
    target = (target_draws, *shape)
    if arr.shape == target:
        return arr
    return jnp.broadcast_to(arr, target)


def common_ndraws(containers: Sequence[DrawsContainer]) -> int:
    sampled: list[int] = []
    for container in containers:
        if not container.is_constant and container.ndraws not in sampled:
            sampled.append(container.ndraws)
    if len(sampled) > 1:
        raise DrawMismatchError(tuple(sampled))
    return sampled[0] if sampled else 1


def common_nchains(containers: Sequence[DrawsContainer]) -> int:
    chains = {container.nchains for container in containers if not container.is_constant}
    if not chains:
        return 1
    if len(chains) == 1:
        return chains.pop()
    logger.debug("Chain counts %s disagree; combined draws fall back to a single chain", sorted(chains))
    return 1


def conform_nchains(values: Sequence[object]) -> list[DrawsContainer]:
    """Coerce operands, check their draw counts and replicate constants to the common draw count."""
    containers = [as_draws(value) for value in values]
    ndraws = common_ndraws(containers)
    nchains = common_nchains(containers)
    return [_conform_one(container, ndraws=ndraws, nchains=nchains) for container in containers]


conform_draws = conform_nchains


def _conform_one(container: DrawsContainer, *, ndraws: int, nchains: int) -> DrawsContainer:
    if container.ndraws == ndraws and container.nchains == nchains:
        return container
    data = container.data
    if container.ndraws != ndraws:
        data = jnp.broadcast_to(data, (ndraws, *container.shape))
    return DrawsContainer(data, nchains=nchains, labels=container.labels)
