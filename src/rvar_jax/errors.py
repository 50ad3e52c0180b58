"""Structured error types for the random-variable engine."""

from __future__ import annotations

import numpy as np


class RVarError(Exception):
    """Base class for structured rvar-jax errors."""


class RVarShapeError(RVarError, ValueError):
    """Event shapes, ranks or axes are not compatible."""


class DrawMismatchError(RVarShapeError):
    """Two non-constant operands disagree on their number of draws."""

    def __init__(self, ndraws: tuple[int, ...]) -> None:
        self.ndraws = tuple(ndraws)
        counts = ", ".join(str(n) for n in self.ndraws)
        super().__init__(f"Random variables have different numbers of draws ({counts}) and cannot be used together")


class RVarTypeError(RVarError, TypeError):
    """Operand kind or dtype is not supported by the requested operation."""


class RVarLinAlgError(RVarError, np.linalg.LinAlgError):
    """A per-draw decomposition failed numerically."""

    def __init__(self, message: str, *, draws: tuple[int, ...] = ()) -> None:
        self.draws = tuple(draws)
        super().__init__(message)
