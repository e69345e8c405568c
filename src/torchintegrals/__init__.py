"""
torchintegrals: a common interface to numerical integration backends.

Problem and solution:
    IntegralProblem, IntegralSolution, isinplace

Solving:
    init, solve, solve_cache

Re-solving with a cache:
    IntegralCache, set_f, set_p, set_lb, set_ub, build_problem

Algorithms:
    QuadGK, HCubature, VEGAS, GaussLegendre, Trapezoidal

Infinite domains:
    transformation_if_inf

Exceptions and warnings:
    IntegrationError, InvalidConfiguration, MissingAlgorithm, InvalidOption,
    ShapeMismatch, UnsupportedCapability, QuadratureWarning,
    BackendNonConvergence
"""

from torchintegrals import algorithms
from torchintegrals._cache import (
    IntegralCache,
    build_problem,
    set_f,
    set_lb,
    set_p,
    set_ub,
)
from torchintegrals._exceptions import (
    BackendNonConvergence,
    IntegrationError,
    InvalidConfiguration,
    InvalidOption,
    MissingAlgorithm,
    QuadratureWarning,
    ShapeMismatch,
    UnsupportedCapability,
)
from torchintegrals._infinite import transformation_if_inf
from torchintegrals._options import SolveOptions, default_tolerances
from torchintegrals._problem import IntegralProblem, isinplace
from torchintegrals._solution import IntegralSolution
from torchintegrals._solve import init, solve, solve_cache
from torchintegrals.algorithms import (
    VEGAS,
    GaussLegendre,
    HCubature,
    QuadGK,
    Trapezoidal,
)

__all__ = [
    "algorithms",
    # Problem and solution
    "IntegralProblem",
    "IntegralSolution",
    "isinplace",
    # Solving
    "init",
    "solve",
    "solve_cache",
    "SolveOptions",
    "default_tolerances",
    # Cache
    "IntegralCache",
    "build_problem",
    "set_f",
    "set_p",
    "set_lb",
    "set_ub",
    # Algorithms
    "QuadGK",
    "HCubature",
    "VEGAS",
    "GaussLegendre",
    "Trapezoidal",
    # Infinite domains
    "transformation_if_inf",
    # Exceptions
    "IntegrationError",
    "InvalidConfiguration",
    "MissingAlgorithm",
    "InvalidOption",
    "ShapeMismatch",
    "UnsupportedCapability",
    "QuadratureWarning",
    "BackendNonConvergence",
]

__version__ = "0.1.0"
