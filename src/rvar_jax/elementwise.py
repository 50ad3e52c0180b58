"""Elementwise operator engine over draws containers."""

from __future__ import annotations

import numbers
from functools import lru_cache, partial
from typing import Callable, Final

import jax
import jax.numpy as jnp
import jax.scipy.special as jsp
from jax import lax

from . import config
from .conformance import broadcast_array, broadcast_shapes, common_nchains, common_ndraws
from .errors import RVarShapeError
from .values import AxisLabels, DrawsContainer, as_draws

ArrayFn = Callable[..., jax.Array]

_BINARY_OPS: Final[dict[str, Callable[[jax.Array, jax.Array], jax.Array]]] = {
    "add": jnp.add,
    "subtract": jnp.subtract,
    "multiply": jnp.multiply,
    "true_divide": jnp.true_divide,
    "floor_divide": jnp.floor_divide,
    "mod": jnp.mod,
    "power": jnp.power,
    "maximum": jnp.maximum,
    "minimum": jnp.minimum,
    "equal": jnp.equal,
    "not_equal": jnp.not_equal,
    "less": jnp.less,
    "less_equal": jnp.less_equal,
    "greater": jnp.greater,
    "greater_equal": jnp.greater_equal,
    "logical_and": jnp.logical_and,
    "logical_or": jnp.logical_or,
    "logical_xor": jnp.logical_xor,
}

_UNARY_OPS: Final[dict[str, Callable[[jax.Array], jax.Array]]] = {
    "negative": jnp.negative,
    "positive": jnp.positive,
    "absolute": jnp.abs,
    "logical_not": jnp.logical_not,
    "exp": jnp.exp,
    "log": jnp.log,
    "log2": jnp.log2,
    "log10": jnp.log10,
    "log1p": jnp.log1p,
    "expm1": jnp.expm1,
    "sqrt": jnp.sqrt,
    "sin": jnp.sin,
    "cos": jnp.cos,
    "tan": jnp.tan,
    "arcsin": jnp.arcsin,
    "arccos": jnp.arccos,
    "arctan": jnp.arctan,
    "sinh": jnp.sinh,
    "cosh": jnp.cosh,
    "tanh": jnp.tanh,
    "arcsinh": jnp.arcsinh,
    "arccosh": jnp.arccosh,
    "arctanh": jnp.arctanh,
    "gamma": jsp.gamma,
    "gammaln": jsp.gammaln,
    "digamma": jsp.digamma,
    "trigamma": lambda a: jsp.polygamma(1, a),
    "floor": jnp.floor,
    "ceil": jnp.ceil,
    "round": jnp.round,
    "sign": jnp.sign,
    "trunc": jnp.trunc,
    "is_finite": jnp.isfinite,
    "is_infinite": jnp.isinf,
    "is_nan": jnp.isnan,
}


def _sequential_scan(step: Callable[[jax.Array, jax.Array], jax.Array]) -> Callable[[jax.Array], jax.Array]:
    """Left-to-right scan over axis 1, one event element at a time for all draws.

    ``jnp.cumsum`` lowers to a tree-shaped associative scan whose float
    rounding depends on the grouping; ``lax.scan`` keeps the element order.
    """

    def kernel(a: jax.Array) -> jax.Array:
        if a.dtype == jnp.bool_:
            a = a.astype(jnp.asarray(0).dtype)
        if a.shape[1] == 0:
            return a

        def body(carry: jax.Array, column: jax.Array) -> tuple[jax.Array, jax.Array]:
            carry = step(carry, column)
            return carry, carry

        _, rest = lax.scan(body, a[:, 0], jnp.swapaxes(a[:, 1:], 0, 1))
        return jnp.concatenate([a[:, :1], jnp.swapaxes(rest, 0, 1)], axis=1)

    return kernel


# Cumulative kernels receive draws flattened to (ndraws, size) and scan axis 1 only.
_CUMULATIVE_OPS: Final[dict[str, Callable[[jax.Array], jax.Array]]] = {
    "cumsum": _sequential_scan(jnp.add),
    "cumprod": _sequential_scan(jnp.multiply),
    "cummax": lambda a: lax.cummax(a, axis=1),
    "cummin": lambda a: lax.cummin(a, axis=1),
}


@lru_cache(maxsize=config.KERNEL_CACHE_MAX)
def _jitted_binary_kernel(op: str) -> Callable[[jax.Array, jax.Array], jax.Array]:
    return jax.jit(_BINARY_OPS[op])


@lru_cache(maxsize=config.KERNEL_CACHE_MAX)
def _jitted_unary_kernel(op: str) -> Callable[[jax.Array], jax.Array]:
    return jax.jit(_UNARY_OPS[op])


@lru_cache(maxsize=config.KERNEL_CACHE_MAX)
def _jitted_cumulative_kernel(op: str) -> Callable[[jax.Array], jax.Array]:
    return jax.jit(_CUMULATIVE_OPS[op])


def _nonnegative_int_power_array(base: jax.Array, exponent: int) -> jax.Array:
    """``base ** exponent`` by binary exponentiation; shared by the jitted and eager paths."""
    if exponent == 0:
        return jnp.ones_like(base)
    out = None
    square = base
    while True:
        if exponent & 1:
            out = square if out is None else out * square
        exponent >>= 1
        if not exponent:
            return out
        square = jnp.square(square)


@lru_cache(maxsize=config.KERNEL_CACHE_MAX)
def _jitted_nonnegative_int_power_kernel(exponent: int) -> Callable[[jax.Array], jax.Array]:
    def kernel(value: jax.Array) -> jax.Array:
        return _nonnegative_int_power_array(value, exponent)

    return jax.jit(kernel)


def _binary_kernel(op: str) -> Callable[[jax.Array, jax.Array], jax.Array]:
    if op not in _BINARY_OPS:
        raise KeyError(f"Unknown elementwise binary operation {op!r}")
    return _jitted_binary_kernel(op) if config.USE_JITTED_KERNELS else _BINARY_OPS[op]


def _unary_kernel(op: str) -> Callable[[jax.Array], jax.Array]:
    if op not in _UNARY_OPS:
        raise KeyError(f"Unknown elementwise unary operation {op!r}")
    return _jitted_unary_kernel(op) if config.USE_JITTED_KERNELS else _UNARY_OPS[op]


def _static_nonnegative_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        return None
    value = int(value)
    return value if value >= 0 else None


def _result_labels(shape: tuple[int, ...], *containers: DrawsContainer) -> AxisLabels | None:
    for container in containers:
        if container.labels is not None and container.shape == shape:
            return container.labels
    return None


def apply_binary(fn: ArrayFn, left: object, right: object) -> DrawsContainer:
    """Apply ``fn`` to two operands after draw/chain and event-shape conformance."""
    x = as_draws(left)
    y = as_draws(right)
    ndraws = common_ndraws((x, y))
    nchains = common_nchains((x, y))
    shape = broadcast_shapes(x.shape, y.shape)

    # Two one-element constants must both carry the common rank explicitly.
    broadcast_scalars = x.data.size == 1 and y.data.size == 1
    xs = broadcast_array(x.data, shape, ndraws=ndraws, broadcast_scalars=broadcast_scalars)
    ys = broadcast_array(y.data, shape, ndraws=ndraws, broadcast_scalars=broadcast_scalars)
    out = jnp.asarray(fn(xs, ys))
    if out.shape != (ndraws, *shape):
        out = jnp.broadcast_to(out, (ndraws, *shape))
    return DrawsContainer(out, nchains=nchains, labels=_result_labels(shape, x, y))


def apply_unary(fn: ArrayFn, value: object, *args, **kwargs) -> DrawsContainer:
    """Apply ``fn`` to the full draws array; the draw axis must come back intact."""
    x = as_draws(value)
    out = jnp.asarray(fn(x.data, *args, **kwargs))
    if out.ndim == 0 or out.shape[0] != x.ndraws:
        raise RVarShapeError(
            f"Elementwise function changed the draw axis from {x.ndraws} draws to shape {tuple(out.shape)}"
        )
    labels = x.labels if tuple(out.shape[1:]) == x.shape else None
    return DrawsContainer(out, nchains=x.nchains, labels=labels)


def _int_power_kernel(exponent: int) -> Callable[[jax.Array], jax.Array]:
    if config.USE_JITTED_KERNELS:
        return _jitted_nonnegative_int_power_kernel(exponent)
    return partial(_nonnegative_int_power_array, exponent=exponent)


def binary(op: str, left: object, right: object) -> DrawsContainer:
    if op == "power":
        exponent = _static_nonnegative_int(right)
        if exponent is not None:
            return apply_unary(_int_power_kernel(exponent), left)
    return apply_binary(_binary_kernel(op), left, right)


def unary(op: str, value: object, *args, **kwargs) -> DrawsContainer:
    """Named unary kernel; extra arguments such as ``decimals`` go to the array function."""
    if args or kwargs:
        if op not in _UNARY_OPS:
            raise KeyError(f"Unknown elementwise unary operation {op!r}")
        return apply_unary(_UNARY_OPS[op], value, *args, **kwargs)
    return apply_unary(_unary_kernel(op), value)


def cumulative(op: str, value: object) -> DrawsContainer:
    """Cumulate each draw's flattened event elements; draws never mix."""
    if op not in _CUMULATIVE_OPS:
        raise KeyError(f"Unknown cumulative operation {op!r}")
    x = as_draws(value)
    flat = jnp.reshape(x.data, (x.ndraws, x.size))
    kernel = _jitted_cumulative_kernel(op) if config.USE_JITTED_KERNELS else _CUMULATIVE_OPS[op]
    return DrawsContainer(kernel(flat), nchains=x.nchains)


def _binary_entry(op: str) -> Callable[[object, object], DrawsContainer]:
    def entry(left: object, right: object) -> DrawsContainer:
        return binary(op, left, right)

    entry.__name__ = entry.__qualname__ = op
    entry.__doc__ = f"Elementwise ``{op}`` of two random variables or arrays."
    return entry


def _unary_entry(op: str) -> Callable[..., DrawsContainer]:
    def entry(value: object, *args, **kwargs) -> DrawsContainer:
        return unary(op, value, *args, **kwargs)

    entry.__name__ = entry.__qualname__ = op
    entry.__doc__ = f"Elementwise ``{op}`` of a random variable or array."
    return entry


def _cumulative_entry(op: str) -> Callable[[object], DrawsContainer]:
    def entry(value: object) -> DrawsContainer:
        return cumulative(op, value)

    entry.__name__ = entry.__qualname__ = op
    entry.__doc__ = f"``{op}`` within each draw over the flattened event elements."
    return entry


add = _binary_entry("add")
subtract = _binary_entry("subtract")
multiply = _binary_entry("multiply")
true_divide = _binary_entry("true_divide")
floor_divide = _binary_entry("floor_divide")
mod = _binary_entry("mod")
power = _binary_entry("power")
maximum = _binary_entry("maximum")
minimum = _binary_entry("minimum")
equal = _binary_entry("equal")
not_equal = _binary_entry("not_equal")
less = _binary_entry("less")
less_equal = _binary_entry("less_equal")
greater = _binary_entry("greater")
greater_equal = _binary_entry("greater_equal")
logical_and = _binary_entry("logical_and")
logical_or = _binary_entry("logical_or")
logical_xor = _binary_entry("logical_xor")

negative = _unary_entry("negative")
positive = _unary_entry("positive")
absolute = _unary_entry("absolute")
logical_not = _unary_entry("logical_not")
exp = _unary_entry("exp")
log = _unary_entry("log")
log2 = _unary_entry("log2")
log10 = _unary_entry("log10")
log1p = _unary_entry("log1p")
expm1 = _unary_entry("expm1")
sqrt = _unary_entry("sqrt")
sin = _unary_entry("sin")
cos = _unary_entry("cos")
tan = _unary_entry("tan")
arcsin = _unary_entry("arcsin")
arccos = _unary_entry("arccos")
arctan = _unary_entry("arctan")
sinh = _unary_entry("sinh")
cosh = _unary_entry("cosh")
tanh = _unary_entry("tanh")
arcsinh = _unary_entry("arcsinh")
arccosh = _unary_entry("arccosh")
arctanh = _unary_entry("arctanh")
gamma = _unary_entry("gamma")
gammaln = _unary_entry("gammaln")
digamma = _unary_entry("digamma")
trigamma = _unary_entry("trigamma")
floor = _unary_entry("floor")
ceil = _unary_entry("ceil")
round = _unary_entry("round")
sign = _unary_entry("sign")
trunc = _unary_entry("trunc")
is_finite = _unary_entry("is_finite")
is_infinite = _unary_entry("is_infinite")
is_nan = _unary_entry("is_nan")

cumsum = _cumulative_entry("cumsum")
cumprod = _cumulative_entry("cumprod")
cummax = _cumulative_entry("cummax")
cummin = _cumulative_entry("cummin")
