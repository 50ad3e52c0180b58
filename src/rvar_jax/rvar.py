"""User-facing random variable type and named entry points."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import wraps

import jax
import jax.numpy as jnp

from . import elementwise, linalg, summaries
from .errors import RVarShapeError, RVarTypeError
from .values import AxisLabels, DrawsContainer, as_draws


class RandomVariable:
    """A random scalar, vector, matrix or tensor represented by its draws.

    Arithmetic, comparisons and ``@`` work draw by draw and return new random
    variables; plain numbers and arrays act as constants.

    Parameters
    ----------
    data : array_like
        Draws with the draw axis first; the remaining axes are the event shape.
    nchains : int, optional
        Number of equal, contiguous chains the draws are split into (default: 1).
    labels : AxisLabels, optional
        Axis names and index labels for the event axes.
    """

    __slots__ = ("draws",)
    __hash__ = None
    # NumPy arrays on the left defer to the reflected operators below.
    __array_ufunc__ = None

    def __init__(self, data, nchains: int = 1, labels: AxisLabels | None = None) -> None:
        self.draws = DrawsContainer(jnp.asarray(data), nchains=nchains, labels=labels)

    @classmethod
    def from_draws(cls, draws: DrawsContainer) -> "RandomVariable":
        out = cls.__new__(cls)
        out.draws = draws
        return out

    @property
    def data(self) -> jax.Array:
        return self.draws.data

    @property
    def shape(self) -> tuple[int, ...]:
        return self.draws.shape

    @property
    def ndim(self) -> int:
        return self.draws.ndim

    @property
    def size(self) -> int:
        return self.draws.size

    @property
    def ndraws(self) -> int:
        return self.draws.ndraws

    @property
    def nchains(self) -> int:
        return self.draws.nchains

    @property
    def niterations(self) -> int:
        return self.draws.niterations

    @property
    def dtype(self):
        return self.draws.dtype

    @property
    def labels(self) -> AxisLabels | None:
        return self.draws.labels

    @property
    def T(self) -> "RandomVariable":
        return transpose(self)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(shape={self.shape}, ndraws={self.ndraws}, "
            f"nchains={self.nchains}, dtype={self.dtype})"
        )

    def __bool__(self) -> bool:
        raise RVarTypeError("The truth value of a random variable is ambiguous; summarise it first (e.g. Pr(x))")

    def __len__(self) -> int:
        if self.ndim == 0:
            raise TypeError("len() of a scalar random variable")
        return self.shape[0]

    def __iter__(self):
        for index in range(len(self)):
            yield self[index]

    def __getitem__(self, key) -> "RandomVariable":
        if not isinstance(key, tuple):
            key = (key,)
        if any(isinstance(item, RandomVariable) for item in key):
            raise RVarTypeError("Random variables cannot be used as indices")
        return RandomVariable.from_draws(DrawsContainer(self.data[(slice(None), *key)], nchains=self.nchains))

    def with_labels(
        self,
        names: Sequence[str | None] | None = None,
        levels: Sequence[Sequence[str] | None] | None = None,
    ) -> "RandomVariable":
        labels = AxisLabels(
            names=tuple(names) if names is not None else (None,) * self.ndim,
            levels=tuple(levels) if levels is not None else (None,) * self.ndim,
        )
        return RandomVariable.from_draws(self.draws.with_data(self.data, labels=labels))

    def reshape(self, *shape: int) -> "RandomVariable":
        if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
            shape = tuple(shape[0])
        try:
            data = jnp.reshape(self.data, (self.ndraws, *shape))
        except (TypeError, ValueError) as err:
            raise RVarShapeError(f"Cannot reshape event shape {self.shape} to {tuple(shape)}") from err
        return RandomVariable.from_draws(DrawsContainer(data, nchains=self.nchains))

    def chain(self, index: int) -> "RandomVariable":
        return RandomVariable.from_draws(self.draws.chain(index))

    def draws_by_chain(self) -> jax.Array:
        return self.draws.draws_by_chain()

    # arithmetic

    def __add__(self, other):
        return add(self, other)

    def __radd__(self, other):
        return add(other, self)

    def __sub__(self, other):
        return subtract(self, other)

    def __rsub__(self, other):
        return subtract(other, self)

    def __mul__(self, other):
        return multiply(self, other)

    def __rmul__(self, other):
        return multiply(other, self)

    def __truediv__(self, other):
        return true_divide(self, other)

    def __rtruediv__(self, other):
        return true_divide(other, self)

    def __floordiv__(self, other):
        return floor_divide(self, other)

    def __rfloordiv__(self, other):
        return floor_divide(other, self)

    def __mod__(self, other):
        return mod(self, other)

    def __rmod__(self, other):
        return mod(other, self)

    def __pow__(self, other):
        return power(self, other)

    def __rpow__(self, other):
        return power(other, self)

    def __matmul__(self, other):
        return matmul(self, other)

    def __rmatmul__(self, other):
        return matmul(other, self)

    def __neg__(self):
        return negative(self)

    def __pos__(self):
        return positive(self)

    def __abs__(self):
        return absolute(self)

    def __round__(self, ndigits: int | None = None):
        return round(self, ndigits or 0)

    # comparisons and logic

    def __eq__(self, other):  # type: ignore[override]
        return equal(self, other)

    def __ne__(self, other):  # type: ignore[override]
        return not_equal(self, other)

    def __lt__(self, other):
        return less(self, other)

    def __le__(self, other):
        return less_equal(self, other)

    def __gt__(self, other):
        return greater(self, other)

    def __ge__(self, other):
        return greater_equal(self, other)

    def __and__(self, other):
        return logical_and(self, other)

    def __rand__(self, other):
        return logical_and(other, self)

    def __or__(self, other):
        return logical_or(self, other)

    def __ror__(self, other):
        return logical_or(other, self)

    def __xor__(self, other):
        return logical_xor(self, other)

    def __rxor__(self, other):
        return logical_xor(other, self)

    def __invert__(self):
        return logical_not(self)

    # linear algebra, cumulative functions and summaries

    def transpose(self) -> "RandomVariable":
        return transpose(self)

    def permute_axes(self, perm: Sequence[int]) -> "RandomVariable":
        return permute_axes(self, perm)

    def cholesky(self) -> "RandomVariable":
        return cholesky(self)

    def cumsum(self) -> "RandomVariable":
        return cumsum(self)

    def cumprod(self) -> "RandomVariable":
        return cumprod(self)

    def cummax(self) -> "RandomVariable":
        return cummax(self)

    def cummin(self) -> "RandomVariable":
        return cummin(self)

    def mean(self, *, na_rm: bool = False) -> jax.Array:
        return summaries.expectation(self, na_rm=na_rm)

    def median(self, *, na_rm: bool = False) -> jax.Array:
        return summaries.median(self, na_rm=na_rm)

    def variance(self, *, na_rm: bool = False) -> jax.Array:
        return summaries.variance(self, na_rm=na_rm)

    def sum(self, *, na_rm: bool = False) -> "RandomVariable":
        return rvar_sum(self, na_rm=na_rm)

    def prod(self, *, na_rm: bool = False) -> "RandomVariable":
        return rvar_prod(self, na_rm=na_rm)

    def min(self, *, na_rm: bool = False) -> "RandomVariable":
        return rvar_min(self, na_rm=na_rm)

    def max(self, *, na_rm: bool = False) -> "RandomVariable":
        return rvar_max(self, na_rm=na_rm)

    def range(self, *, na_rm: bool = False) -> "RandomVariable":
        return rvar_range(self, na_rm=na_rm)

    def all(self, *, na_rm: bool = False) -> "RandomVariable":
        return rvar_all(self, na_rm=na_rm)

    def any(self, *, na_rm: bool = False) -> "RandomVariable":
        return rvar_any(self, na_rm=na_rm)

    def is_finite(self) -> "RandomVariable":
        return is_finite(self)

    def is_infinite(self) -> "RandomVariable":
        return is_infinite(self)

    def is_nan(self) -> "RandomVariable":
        return is_nan(self)

    def is_na(self) -> jax.Array:
        return summaries.is_na(self)

    def any_na(self) -> bool:
        return summaries.any_na(self)


def as_rvar(value: object, nchains: int | None = None) -> RandomVariable:
    """Coerce ``value`` to a random variable; plain arrays become one-draw constants."""
    if isinstance(value, RandomVariable) and nchains is None:
        return value
    draws = as_draws(value)
    if nchains is not None and nchains != draws.nchains:
        draws = draws.with_data(draws.data, nchains=nchains, labels=draws.labels)
    return RandomVariable.from_draws(draws)


def _lift(fn: Callable[..., DrawsContainer]) -> Callable[..., RandomVariable]:
    @wraps(fn)
    def entry(*args, **kwargs) -> RandomVariable:
        return RandomVariable.from_draws(fn(*args, **kwargs))

    return entry


def apply_elementwise(fn: Callable[..., jax.Array], *operands: object) -> RandomVariable:
    """Apply an array function to one or two operands draw by draw."""
    if len(operands) == 1:
        return RandomVariable.from_draws(elementwise.apply_unary(fn, operands[0]))
    if len(operands) == 2:
        return RandomVariable.from_draws(elementwise.apply_binary(fn, operands[0], operands[1]))
    raise TypeError(f"apply_elementwise() takes one or two operands ({len(operands)} given)")


add = _lift(elementwise.add)
subtract = _lift(elementwise.subtract)
multiply = _lift(elementwise.multiply)
true_divide = _lift(elementwise.true_divide)
floor_divide = _lift(elementwise.floor_divide)
mod = _lift(elementwise.mod)
power = _lift(elementwise.power)
maximum = _lift(elementwise.maximum)
minimum = _lift(elementwise.minimum)
equal = _lift(elementwise.equal)
not_equal = _lift(elementwise.not_equal)
less = _lift(elementwise.less)
less_equal = _lift(elementwise.less_equal)
greater = _lift(elementwise.greater)
greater_equal = _lift(elementwise.greater_equal)
logical_and = _lift(elementwise.logical_and)
logical_or = _lift(elementwise.logical_or)
logical_xor = _lift(elementwise.logical_xor)

negative = _lift(elementwise.negative)
positive = _lift(elementwise.positive)
absolute = _lift(elementwise.absolute)
logical_not = _lift(elementwise.logical_not)
exp = _lift(elementwise.exp)
log = _lift(elementwise.log)
log2 = _lift(elementwise.log2)
log10 = _lift(elementwise.log10)
log1p = _lift(elementwise.log1p)
expm1 = _lift(elementwise.expm1)
sqrt = _lift(elementwise.sqrt)
sin = _lift(elementwise.sin)
cos = _lift(elementwise.cos)
tan = _lift(elementwise.tan)
arcsin = _lift(elementwise.arcsin)
arccos = _lift(elementwise.arccos)
arctan = _lift(elementwise.arctan)
sinh = _lift(elementwise.sinh)
cosh = _lift(elementwise.cosh)
tanh = _lift(elementwise.tanh)
arcsinh = _lift(elementwise.arcsinh)
arccosh = _lift(elementwise.arccosh)
arctanh = _lift(elementwise.arctanh)
gamma = _lift(elementwise.gamma)
gammaln = _lift(elementwise.gammaln)
digamma = _lift(elementwise.digamma)
trigamma = _lift(elementwise.trigamma)
floor = _lift(elementwise.floor)
ceil = _lift(elementwise.ceil)
round = _lift(elementwise.round)
sign = _lift(elementwise.sign)
trunc = _lift(elementwise.trunc)
is_finite = _lift(elementwise.is_finite)
is_infinite = _lift(elementwise.is_infinite)
is_nan = _lift(elementwise.is_nan)

cumsum = _lift(elementwise.cumsum)
cumprod = _lift(elementwise.cumprod)
cummax = _lift(elementwise.cummax)
cummin = _lift(elementwise.cummin)

matmul = _lift(linalg.matmul)
cholesky = _lift(linalg.cholesky)
transpose = _lift(linalg.transpose)
permute_axes = _lift(linalg.permute_axes)
aperm = permute_axes

rvar_sum = _lift(summaries.rvar_sum)
rvar_prod = _lift(summaries.rvar_prod)
rvar_min = _lift(summaries.rvar_min)
rvar_max = _lift(summaries.rvar_max)
rvar_range = _lift(summaries.rvar_range)
rvar_all = _lift(summaries.rvar_all)
rvar_any = _lift(summaries.rvar_any)
rvar_mean = _lift(summaries.rvar_mean)
rvar_median = _lift(summaries.rvar_median)

E = summaries.expectation
Pr = summaries.probability
mean = summaries.expectation
median = summaries.median
variance = summaries.variance
is_na = summaries.is_na
any_na = summaries.any_na
