"""rvar-jax public API."""

from . import config

config.apply_environment()

from .errors import (  # noqa: E402
    DrawMismatchError,
    RVarError,
    RVarLinAlgError,
    RVarShapeError,
    RVarTypeError,
)
from .values import AxisLabels, DrawsContainer, ValueKind, as_draws, kind_of, new_draws  # noqa: E402
from .conformance import broadcast_array, broadcast_shapes, conform_draws, conform_nchains  # noqa: E402
from .rvar import (  # noqa: E402
    E,
    Pr,
    RandomVariable,
    absolute,
    add,
    any_na,
    aperm,
    apply_elementwise,
    arccos,
    arccosh,
    arcsin,
    arcsinh,
    arctan,
    arctanh,
    as_rvar,
    ceil,
    cholesky,
    cos,
    cosh,
    cummax,
    cummin,
    cumprod,
    cumsum,
    digamma,
    equal,
    exp,
    expm1,
    floor,
    floor_divide,
    gamma,
    gammaln,
    greater,
    greater_equal,
    is_finite,
    is_infinite,
    is_na,
    is_nan,
    less,
    less_equal,
    log,
    log10,
    log1p,
    log2,
    logical_and,
    logical_not,
    logical_or,
    logical_xor,
    matmul,
    maximum,
    mean,
    median,
    minimum,
    mod,
    multiply,
    negative,
    not_equal,
    permute_axes,
    positive,
    power,
    round,
    rvar_all,
    rvar_any,
    rvar_max,
    rvar_mean,
    rvar_median,
    rvar_min,
    rvar_prod,
    rvar_range,
    rvar_sum,
    sign,
    sin,
    sinh,
    sqrt,
    subtract,
    tan,
    tanh,
    transpose,
    trigamma,
    true_divide,
    trunc,
    variance,
)

__version__ = "0.1.0"

__all__ = [
    "RandomVariable",
    "DrawsContainer",
    "AxisLabels",
    "ValueKind",
    "new_draws",
    "as_draws",
    "as_rvar",
    "kind_of",
    "broadcast_shapes",
    "broadcast_array",
    "conform_nchains",
    "conform_draws",
    "apply_elementwise",
    "add",
    "subtract",
    "multiply",
    "true_divide",
    "floor_divide",
    "mod",
    "power",
    "maximum",
    "minimum",
    "equal",
    "not_equal",
    "less",
    "less_equal",
    "greater",
    "greater_equal",
    "logical_and",
    "logical_or",
    "logical_xor",
    "negative",
    "positive",
    "absolute",
    "logical_not",
    "exp",
    "log",
    "log2",
    "log10",
    "log1p",
    "expm1",
    "sqrt",
    "sin",
    "cos",
    "tan",
    "arcsin",
    "arccos",
    "arctan",
    "sinh",
    "cosh",
    "tanh",
    "arcsinh",
    "arccosh",
    "arctanh",
    "gamma",
    "gammaln",
    "digamma",
    "trigamma",
    "floor",
    "ceil",
    "round",
    "sign",
    "trunc",
    "is_finite",
    "is_infinite",
    "is_nan",
    "cumsum",
    "cumprod",
    "cummax",
    "cummin",
    "matmul",
    "cholesky",
    "transpose",
    "permute_axes",
    "aperm",
    "E",
    "Pr",
    "mean",
    "median",
    "variance",
    "is_na",
    "any_na",
    "rvar_sum",
    "rvar_prod",
    "rvar_min",
    "rvar_max",
    "rvar_range",
    "rvar_all",
    "rvar_any",
    "rvar_mean",
    "rvar_median",
    "RVarError",
    "RVarShapeError",
    "DrawMismatchError",
    "RVarTypeError",
    "RVarLinAlgError",
]
