"""Draws container, operand kinds and the coercion step shared by every engine."""

from __future__ import annotations

import numbers
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import jax
import jax.numpy as jnp
import numpy as np

from .errors import RVarShapeError, RVarTypeError


class ValueKind(str, Enum):
    CONSTANT = "constant"
    SAMPLED = "sampled"


@dataclass(frozen=True)
class AxisLabels:
    """Optional name per event axis and optional index labels within each axis.

    Labels are carried for display and alignment only; no arithmetic reads them.
    """

    names: tuple[str | None, ...] = ()
    levels: tuple[tuple[str, ...] | None, ...] = ()

    def __post_init__(self) -> None:
        names = tuple(None if name is None else str(name) for name in self.names)
        levels = tuple(None if level is None else tuple(str(item) for item in level) for level in self.levels)
        if names and levels and len(names) != len(levels):
            raise RVarShapeError("Axis names and index labels must describe the same number of axes")
        object.__setattr__(self, "names", names)
        object.__setattr__(self, "levels", levels)

    @classmethod
    def empty(cls, rank: int) -> "AxisLabels":
        return cls(names=(None,) * rank, levels=(None,) * rank)

    @property
    def rank(self) -> int:
        return max(len(self.names), len(self.levels))

    @property
    def is_empty(self) -> bool:
        return all(name is None for name in self.names) and all(level is None for level in self.levels)

    def name(self, axis: int) -> str | None:
        return self.names[axis] if axis < len(self.names) else None

    def level(self, axis: int) -> tuple[str, ...] | None:
        return self.levels[axis] if axis < len(self.levels) else None

    def select(self, axes: Sequence[int | None]) -> "AxisLabels":
        """Build labels from a list of source axes; ``None`` gives an unlabeled axis."""
        return AxisLabels(
            names=tuple(None if axis is None else self.name(axis) for axis in axes),
            levels=tuple(None if axis is None else self.level(axis) for axis in axes),
        )

    def validate(self, shape: tuple[int, ...]) -> None:
        if self.rank != len(shape):
            raise RVarShapeError(f"Labels describe {self.rank} axes but the event shape {shape} has {len(shape)}")
        for axis, level in enumerate(self.levels):
            if level is not None and len(level) != shape[axis]:
                raise RVarShapeError(
                    f"Axis {axis} has {shape[axis]} entries but {len(level)} index labels were given"
                )


@dataclass(frozen=True, eq=False)
class DrawsContainer:
    """Draws of one random variable: axis 0 indexes draws, the rest is the event shape."""

    data: jax.Array
    nchains: int = 1
    labels: AxisLabels | None = field(default=None)

    def __post_init__(self) -> None:
        data = self.data if isinstance(self.data, jax.Array) else jnp.asarray(self.data)
        if data.ndim == 0:
            raise RVarShapeError("Draws data needs a leading draw axis")
        ndraws = int(data.shape[0])
        if ndraws < 1:
            raise RVarShapeError("A random variable needs at least one draw")
        if isinstance(self.nchains, bool) or not isinstance(self.nchains, numbers.Integral) or self.nchains < 1:
            raise RVarShapeError(f"Number of chains must be a positive integer, got {self.nchains!r}")
        if ndraws % int(self.nchains) != 0:
            raise RVarShapeError(f"Number of chains ({self.nchains}) does not divide the number of draws ({ndraws})")
        labels = self.labels
        if labels is not None and labels.is_empty:
            labels = None
        if labels is not None:
            labels.validate(tuple(int(d) for d in data.shape[1:]))
        object.__setattr__(self, "data", data)
        object.__setattr__(self, "nchains", int(self.nchains))
        object.__setattr__(self, "labels", labels)

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(int(d) for d in self.data.shape[1:])

    @property
    def ndim(self) -> int:
        return self.data.ndim - 1

    @property
    def size(self) -> int:
        return int(np.prod(self.shape, dtype=np.int64))

    @property
    def ndraws(self) -> int:
        return int(self.data.shape[0])

    @property
    def niterations(self) -> int:
        return self.ndraws // self.nchains

    @property
    def dtype(self):
        return self.data.dtype

    @property
    def is_constant(self) -> bool:
        return self.ndraws == 1

    @property
    def kind(self) -> ValueKind:
        return ValueKind.CONSTANT if self.is_constant else ValueKind.SAMPLED

    @property
    def is_boolean(self) -> bool:
        return self.data.dtype == jnp.bool_

    def draws_by_chain(self) -> jax.Array:
        return jnp.reshape(self.data, (self.nchains, self.niterations, *self.shape))

    def chain(self, index: int) -> "DrawsContainer":
        if not -self.nchains <= index < self.nchains:
            raise IndexError(f"Chain index {index} out of range for {self.nchains} chains")
        index %= self.nchains
        start = index * self.niterations
        return DrawsContainer(self.data[start : start + self.niterations], nchains=1, labels=self.labels)

    def with_data(self, data, *, nchains: int | None = None, labels: AxisLabels | None = None) -> "DrawsContainer":
        return DrawsContainer(data, nchains=self.nchains if nchains is None else nchains, labels=labels)


def new_draws(data, nchains: int = 1, labels: AxisLabels | None = None) -> DrawsContainer:
    """Construction factory: validates the chain invariant before handing data to the engine."""
    return DrawsContainer(jnp.asarray(data), nchains=nchains, labels=labels)


def validate_operand(value: object, *, where: str = "operand") -> None:
    if isinstance(value, DrawsContainer) or _wrapped_draws(value) is not None:
        return
    if isinstance(value, (jax.Array, np.ndarray, np.generic)):
        return
    if isinstance(value, (bool, numbers.Number)):
        return
    if isinstance(value, (list, tuple)):
        for idx, item in enumerate(value):
            validate_operand(item, where=f"{where}[{idx}]")
        return
    raise RVarTypeError(f"{where} has unsupported type {type(value).__name__}")


def _wrapped_draws(value: object) -> DrawsContainer | None:
    draws = getattr(value, "draws", None)
    if isinstance(draws, DrawsContainer):
        return draws
    return None


def kind_of(value: object) -> ValueKind:
    return as_draws(value).kind


def as_draws(value: object) -> DrawsContainer:
    """Coerce any operand to a draws container; plain arrays become one-draw constants."""
    if isinstance(value, DrawsContainer):
        return value
    wrapped = _wrapped_draws(value)
    if wrapped is not None:
        return wrapped
    validate_operand(value)
    arr = jnp.asarray(value)
    return DrawsContainer(arr[None, ...], nchains=1)


def event_shape_of(value: object) -> tuple[int, ...]:
    """Event shape without materializing a container for plain arrays."""
    if isinstance(value, DrawsContainer):
        return value.shape
    wrapped = _wrapped_draws(value)
    if wrapped is not None:
        return wrapped.shape
    return tuple(int(d) for d in np.shape(value))
