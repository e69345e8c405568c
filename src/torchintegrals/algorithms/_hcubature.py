"""Multidimensional h-adaptive cubature."""

import math
from dataclasses import dataclass
from typing import Any, Callable, Tuple

import torch
from torch import Tensor

from torchintegrals._exceptions import InvalidConfiguration
from torchintegrals._integrand import probe
from torchintegrals._options import SolveOptions
from torchintegrals._problem import IntegralProblem
from torchintegrals._solution import IntegralSolution
from torchintegrals.algorithms._base import Capabilities, IntegralAlgorithm
from torchintegrals.algorithms._cubature import integrate_cubature


@dataclass(frozen=True)
class HCubature(IntegralAlgorithm):
    """
    Multidimensional h-adaptive integration.

    The region with the largest error is repeatedly split in half along
    every axis. One-dimensional problems use the G7-K15 rule,
    higher-dimensional ones the degree-7 Genz-Malik rule. Evaluation is
    delegated to ``scipy.integrate.cubature``.

    Parameters
    ----------
    initdiv : int
        Number of segments each dimension is divided into before adaptive
        subdivision starts.
    norm : callable
        Norm applied to the elementwise error estimate.

    Raises
    ------
    InvalidConfiguration
        If ``initdiv`` is not positive.

    References
    ----------
    Genz, A. C., & Malik, A. A. (1980). Remarks on algorithm 006: An adaptive
    algorithm for numerical integration over an N-dimensional rectangular
    region. Journal of Computational and Applied Mathematics, 6(4), 295-302.
    """

    initdiv: int = 1
    norm: Callable[[Tensor], Tensor] = torch.linalg.vector_norm

    capabilities = Capabilities(
        max_nout=math.inf,
        batch=True,
        inplace=True,
        min_dim=1,
        max_dim=math.inf,
        infinite_bounds=True,
        domain_transform=True,
        sampled=False,
    )

    def __post_init__(self) -> None:
        if self.initdiv < 1:
            raise InvalidConfiguration(
                f"initdiv must be at least 1, got {self.initdiv}"
            )

    def build_cache(self, problem: IntegralProblem) -> Tuple[Any, bool]:
        return probe(problem), False

    def _evaluate(
        self,
        problem: IntegralProblem,
        cacheval: Any,
        options: SolveOptions,
    ) -> IntegralSolution:
        rule = "gk15" if problem.ndim == 1 else "genz-malik"
        return integrate_cubature(
            self.name,
            self.norm,
            problem,
            cacheval,
            options,
            rule=rule,
            initdiv=self.initdiv,
        )
