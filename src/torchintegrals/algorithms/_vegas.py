"""Monte Carlo integration with VEGAS importance sampling."""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
import torch

from torchintegrals._integrand import IntegrandEvaluator, solution_shape
from torchintegrals._options import SolveOptions
from torchintegrals._problem import IntegralProblem
from torchintegrals._solution import FAILURE, SUCCESS, IntegralSolution
from torchintegrals.algorithms._base import Capabilities, IntegralAlgorithm

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 10


@dataclass(frozen=True)
class VEGAS(IntegralAlgorithm):
    """
    Multidimensional adaptive Monte Carlo integration.

    Importance sampling through an adaptive grid reduces variance. Sampling
    and grid adaptation are performed by the ``vegas`` package.

    Parameters
    ----------
    nbins : int
        Number of grid increments per dimension.
    ncalls : int
        Integrand evaluations per iteration.
    debug : bool
        Log the per-iteration summary at INFO level.
    seed : int, optional
        Seed of the random generator created for every solve, so repeated
        solves of the same problem give identical results. ``None`` draws
        fresh entropy on each solve.

    Notes
    -----
    ``maxiters`` sets the number of VEGAS iterations (default 10). The
    reported error is the standard deviation of the weighted average, and
    the solve succeeds when it is below ``abstol + reltol * |u|``.

    References
    ----------
    Lepage, G. P. (1978). A new algorithm for adaptive multidimensional
    integration. Journal of Computational Physics, 27(2), 192-203.
    """

    nbins: int = 100
    ncalls: int = 1000
    debug: bool = False
    seed: Optional[int] = 0

    capabilities = Capabilities(
        max_nout=1,
        batch=True,
        inplace=True,
        min_dim=1,
        max_dim=math.inf,
        infinite_bounds=False,
        domain_transform=True,
        sampled=False,
    )

    def _evaluate(
        self,
        problem: IntegralProblem,
        cacheval: Any,
        options: SolveOptions,
    ) -> IntegralSolution:
        import vegas

        evaluator = IntegrandEvaluator(problem)

        lower = problem.lb.reshape(-1).tolist()
        upper = problem.ub.reshape(-1).tolist()
        grid = vegas.AdaptiveMap(list(zip(lower, upper)), ninc=self.nbins)
        rng = np.random.default_rng(self.seed)
        integrator = vegas.Integrator(grid, ran_array_generator=rng.random)

        @vegas.lbatchintegrand
        def integrand(x):
            return evaluator.from_numpy(x)[:, 0]

        nitn = options.maxiters
        if nitn is None:
            nitn = DEFAULT_ITERATIONS

        # Problem options take precedence
        backend_kwargs = {
            "nitn": nitn,
            "neval": self.ncalls,
            **problem.kwargs,
        }
        nitn = backend_kwargs["nitn"]

        result = integrator(integrand, **backend_kwargs)

        if self.debug:
            logger.info("VEGAS summary:\n%s", result.summary())

        mean = float(result.mean)
        sdev = float(result.sdev)
        tolerance = options.abstol + options.reltol * abs(mean)

        if sdev <= tolerance:
            retcode = SUCCESS
            message = "Integration successful."
        else:
            retcode = FAILURE
            message = (
                f"Standard deviation {sdev:.2e} exceeds tolerance "
                f"{tolerance:.2e} after {nitn} iteration(s)."
            )

        return IntegralSolution(
            u=torch.tensor(mean, dtype=problem.dtype).reshape(
                solution_shape(problem)
            ),
            error=torch.tensor(sdev, dtype=problem.dtype),
            retcode=retcode,
            n_function_evals=evaluator.n_evals,
            message=message,
            stats={"Q": float(result.Q), "nitn": nitn},
        )
