"""Fixed-order Gauss-Legendre quadrature."""

import math
from dataclasses import dataclass
from typing import Any, Optional

import torch
from torch import Tensor

from torchintegrals._exceptions import InvalidConfiguration
from torchintegrals._integrand import IntegrandEvaluator, solution_shape
from torchintegrals._options import SolveOptions
from torchintegrals._problem import IntegralProblem
from torchintegrals._solution import IntegralSolution
from torchintegrals.algorithms._base import Capabilities, IntegralAlgorithm
from torchintegrals.algorithms._nodes import (
    composite_nodes_weights,
    gauss_legendre,
)


@dataclass(frozen=True, eq=False)
class GaussLegendre(IntegralAlgorithm):
    """
    Fixed-order Gauss-Legendre quadrature, optionally composite.

    The integral is approximated by a single weighted sum over ``n`` nodes
    per subinterval; no error estimate is produced and tolerances are
    ignored.

    Parameters
    ----------
    n : int
        Number of nodes per subinterval.
    subintervals : int
        Number of equal panels the domain is split into.
    nodes, weights : Tensor, optional
        Precomputed rule on [-1, 1]. Computed from ``n`` when either is
        missing.

    Raises
    ------
    InvalidConfiguration
        If ``subintervals`` is not positive, or ``nodes`` and ``weights``
        differ in length.

    Examples
    --------
    >>> problem = IntegralProblem(lambda x, p: x**3, 0.0, 1.0)
    >>> solve(problem, GaussLegendre(n=2)).u
    tensor(0.2500, dtype=torch.float64)
    """

    n: int = 250
    subintervals: int = 1
    nodes: Optional[Tensor] = None
    weights: Optional[Tensor] = None

    capabilities = Capabilities(
        max_nout=math.inf,
        batch=True,
        inplace=True,
        min_dim=1,
        max_dim=1,
        infinite_bounds=False,
        domain_transform=True,
        sampled=False,
    )

    def __post_init__(self) -> None:
        if self.subintervals < 1:
            raise InvalidConfiguration(
                "Cannot use a nonpositive number of subintervals."
            )

        if self.nodes is None or self.weights is None:
            nodes, weights = gauss_legendre(self.n)
            object.__setattr__(self, "nodes", nodes)
            object.__setattr__(self, "weights", weights)
        else:
            nodes = torch.as_tensor(self.nodes)
            weights = torch.as_tensor(self.weights)
            if nodes.shape != weights.shape or nodes.dim() != 1:
                raise InvalidConfiguration(
                    f"nodes and weights must be 1-D of equal length, got "
                    f"{tuple(nodes.shape)} and {tuple(weights.shape)}"
                )
            object.__setattr__(self, "nodes", nodes)
            object.__setattr__(self, "weights", weights)
            object.__setattr__(self, "n", nodes.shape[0])

    @property
    def composite(self) -> bool:
        return self.subintervals > 1

    def _evaluate(
        self,
        problem: IntegralProblem,
        cacheval: Any,
        options: SolveOptions,
    ) -> IntegralSolution:
        a = problem.lb.reshape(-1)[0]
        b = problem.ub.reshape(-1)[0]
        x, w = composite_nodes_weights(
            self.nodes, self.weights, a, b, self.subintervals
        )

        if problem.lb.dim() == 1:
            x = x.unsqueeze(-1)

        evaluator = IntegrandEvaluator(problem)
        values = evaluator(x)
        u = w.to(values.dtype) @ values

        return IntegralSolution(
            u=u.reshape(solution_shape(problem)),
            error=None,
            n_function_evals=evaluator.n_evals,
            stats={"nodes": x.shape[0], "subintervals": self.subintervals},
        )
