"""One-dimensional adaptive Gauss-Kronrod integration."""

import math
from dataclasses import dataclass
from typing import Any, Callable, Tuple

import torch
from torch import Tensor

from torchintegrals._exceptions import UnsupportedCapability
from torchintegrals._integrand import probe
from torchintegrals._options import SolveOptions
from torchintegrals._problem import IntegralProblem
from torchintegrals._solution import IntegralSolution
from torchintegrals.algorithms._base import Capabilities, IntegralAlgorithm
from torchintegrals.algorithms._cubature import integrate_cubature

# Gauss order -> scipy rule name of the embedded Kronrod pair
_RULES = {7: "gk15", 10: "gk21"}


@dataclass(frozen=True)
class QuadGK(IntegralAlgorithm):
    """
    One-dimensional adaptive Gauss-Kronrod integration.

    Globally adaptive bisection driven by an embedded G(n)-K(2n+1) pair,
    evaluated by ``scipy.integrate.cubature``.

    Parameters
    ----------
    order : int
        Order of the Gauss rule: 7 (G7-K15) or 10 (G10-K21). Other orders
        are rejected when solving.
    norm : callable
        Norm applied to the elementwise error estimate of vector-valued
        integrands.

    Notes
    -----
    The cache holds a probe of the integrand's output, rebuilt whenever the
    integrand or parameter changes.

    References
    ----------
    Laurie, D. (1997). Calculation of Gauss-Kronrod quadrature rules.
    Mathematics of Computation, 66(219), 1133-1145.

    Examples
    --------
    >>> problem = IntegralProblem(lambda x, p: torch.cos(x), 1.0, 3.0)
    >>> solve(problem, QuadGK()).u  # sin(3) - sin(1)
    """

    order: int = 7
    norm: Callable[[Tensor], Tensor] = torch.linalg.vector_norm

    capabilities = Capabilities(
        max_nout=math.inf,
        batch=False,
        inplace=False,
        min_dim=1,
        max_dim=1,
        infinite_bounds=True,
        domain_transform=True,
        sampled=False,
    )

    def build_cache(self, problem: IntegralProblem) -> Tuple[Any, bool]:
        return probe(problem), False

    def _evaluate(
        self,
        problem: IntegralProblem,
        cacheval: Any,
        options: SolveOptions,
    ) -> IntegralSolution:
        rule = _RULES.get(self.order)
        if rule is None:
            raise UnsupportedCapability(
                f"order={self.order}",
                self.name,
                "Available orders: 7 (G7-K15), 10 (G10-K21).",
            )

        return integrate_cubature(
            self.name, self.norm, problem, cacheval, options, rule=rule
        )
