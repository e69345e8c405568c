"""Trapezoidal rule on a grid or on pre-sampled data."""

import math
from dataclasses import dataclass
from typing import Any, Union

import torch
from torch import Tensor

from torchintegrals._exceptions import InvalidConfiguration, ShapeMismatch
from torchintegrals._integrand import IntegrandEvaluator, solution_shape
from torchintegrals._options import SolveOptions
from torchintegrals._problem import IntegralProblem
from torchintegrals._solution import IntegralSolution
from torchintegrals.algorithms._base import Capabilities, IntegralAlgorithm


def trapezoid(
    y: Tensor,
    x: Union[Tensor, None] = None,
    *,
    dx: Union[float, Tensor, None] = None,
    dim: int = -1,
) -> Tensor:
    """
    Integrate ``y`` along ``dim`` with the composite trapezoidal rule.

    Uses the sample points ``x`` if given, otherwise the uniform spacing
    ``dx`` (default 1.0). Differentiable with respect to ``y`` and ``x``.
    """
    if x is not None:
        return torch.trapezoid(y, x, dim=dim)
    if dx is not None:
        return torch.trapezoid(y, dx=dx, dim=dim)
    return torch.trapezoid(y, dim=dim)


@dataclass(frozen=True, eq=False)
class Trapezoidal(IntegralAlgorithm):
    """
    Trapezoidal rule over a one-dimensional grid.

    Parameters
    ----------
    spec : int or Tensor
        Number of equally spaced points spanning ``[lb, ub]``, or the grid
        itself as a 1-D tensor whose endpoints are ``lb`` and ``ub``.
    dim : int
        Sample axis when the problem holds pre-sampled data.

    Raises
    ------
    InvalidConfiguration
        If the grid has fewer than two points or non-finite endpoints.

    Notes
    -----
    When ``f`` is a tensor of samples, its length along ``dim`` must match
    the grid. The infinite-domain transform is never applied because the
    rule evaluates the integrand at the endpoints.
    """

    spec: Union[int, Tensor]
    dim: int = 0

    capabilities = Capabilities(
        max_nout=math.inf,
        batch=False,
        inplace=True,
        min_dim=1,
        max_dim=1,
        infinite_bounds=False,
        domain_transform=False,
        sampled=True,
    )

    def __post_init__(self) -> None:
        if isinstance(self.spec, Tensor):
            if self.spec.dim() != 1 or self.spec.shape[0] < 2:
                raise InvalidConfiguration(
                    "Trapezoidal grid must be 1-D with at least 2 points, "
                    f"got shape {tuple(self.spec.shape)}"
                )
            if not torch.isfinite(self.spec[[0, -1]]).all():
                raise InvalidConfiguration(
                    "Trapezoidal grid endpoints must be finite."
                )
        elif isinstance(self.spec, bool) or not isinstance(self.spec, int):
            raise InvalidConfiguration(
                "Trapezoidal spec must be a point count or a 1-D grid, got "
                f"{type(self.spec).__name__}"
            )
        elif self.spec < 2:
            raise InvalidConfiguration(
                f"Trapezoidal needs at least 2 points, got {self.spec}"
            )

    @property
    def npoints(self) -> int:
        if isinstance(self.spec, Tensor):
            return self.spec.shape[0]
        return self.spec

    def grid(self, problem: IntegralProblem) -> Tensor:
        """Sample points spanning the problem's domain."""
        a = problem.lb.reshape(-1)[0]
        b = problem.ub.reshape(-1)[0]

        if isinstance(self.spec, Tensor):
            x = self.spec.to(problem.dtype)
            endpoints = torch.stack([a, b])
            if not torch.allclose(x[[0, -1]], endpoints):
                raise ShapeMismatch(
                    f"Grid spans [{x[0].item()}, {x[-1].item()}] but the "
                    f"domain is [{a.item()}, {b.item()}]"
                )
            return x

        return torch.linspace(a.item(), b.item(), self.spec, dtype=problem.dtype)

    def _evaluate(
        self,
        problem: IntegralProblem,
        cacheval: Any,
        options: SolveOptions,
    ) -> IntegralSolution:
        x = self.grid(problem)

        if problem.is_sampled:
            y = problem.f
            if not -y.dim() <= self.dim < y.dim():
                raise ShapeMismatch(
                    f"Samples of shape {tuple(y.shape)} have no dim {self.dim}"
                )
            if y.shape[self.dim] != x.shape[0]:
                raise ShapeMismatch(
                    f"Samples have length {y.shape[self.dim]} along dim "
                    f"{self.dim}, but the grid has {x.shape[0]} points"
                )
            dtype = torch.promote_types(y.dtype, x.dtype)
            u = trapezoid(y.to(dtype), x.to(dtype), dim=self.dim)
            return IntegralSolution(u=u, stats={"npoints": x.shape[0]})

        evaluator = IntegrandEvaluator(problem)
        points = x if problem.lb.dim() == 0 else x.unsqueeze(-1)
        values = evaluator(points)
        u = trapezoid(values, x.to(values.dtype), dim=0)

        return IntegralSolution(
            u=u.reshape(solution_shape(problem)),
            n_function_evals=evaluator.n_evals,
            stats={"npoints": x.shape[0]},
        )
