"""Adapter for ``scipy.integrate.cubature``, shared by QuadGK and HCubature."""

import itertools
import logging
from typing import Callable, List, Optional, Tuple

import numpy as np
import torch
from scipy.integrate import cubature
from torch import Tensor

from torchintegrals._exceptions import UnsupportedCapability
from torchintegrals._integrand import (
    IntegrandEvaluator,
    IntegrandPrototype,
    check_prototype,
    probe,
    solution_shape,
)
from torchintegrals._options import SolveOptions
from torchintegrals._problem import IntegralProblem
from torchintegrals._solution import MAXITERS, SUCCESS, IntegralSolution

logger = logging.getLogger(__name__)

# scipy's own default subdivision cap
DEFAULT_MAX_SUBDIVISIONS = 10000


def initial_cells(
    a: np.ndarray, b: np.ndarray, initdiv: int
) -> List[Tuple[np.ndarray, np.ndarray]]:
    """Split the box ``[a, b]`` into ``initdiv`` segments per dimension."""
    if initdiv == 1:
        return [(a, b)]

    edges = [np.linspace(lo, hi, initdiv + 1) for lo, hi in zip(a, b)]
    cells = []
    for index in itertools.product(range(initdiv), repeat=len(a)):
        lower = np.array([edges[d][i] for d, i in enumerate(index)])
        upper = np.array([edges[d][i + 1] for d, i in enumerate(index)])
        cells.append((lower, upper))
    return cells


def integrate_cubature(
    name: str,
    norm: Callable[[Tensor], Tensor],
    problem: IntegralProblem,
    prototype: Optional[IntegrandPrototype],
    options: SolveOptions,
    *,
    rule: str,
    initdiv: int = 1,
) -> IntegralSolution:
    """
    Integrate ``problem`` with ``scipy.integrate.cubature``.

    The integrand is evaluated through an :class:`IntegrandEvaluator`, so
    batched and in-place integrands are adapted to cubature's
    ``(npoints, ndim) -> (npoints, nout)`` convention. When ``initdiv > 1``
    the domain is split into ``initdiv**ndim`` cells that are integrated
    separately with the absolute tolerance and subdivision budget shared
    between them.

    Entries of ``problem.kwargs`` are passed to ``cubature`` verbatim and
    take precedence over the keywords derived from ``rule`` and ``options``.
    """
    if prototype is None:
        prototype = probe(problem)
    check_prototype(prototype, problem)

    evaluator = IntegrandEvaluator(problem, prototype)

    a = np.atleast_1d(problem.lb.detach().cpu().numpy()).astype(np.float64)
    b = np.atleast_1d(problem.ub.detach().cpu().numpy()).astype(np.float64)

    if initdiv > 1 and not (np.isfinite(a).all() and np.isfinite(b).all()):
        raise UnsupportedCapability(
            f"initdiv={initdiv} with infinite bounds",
            name,
            "Leave do_inf_transformation enabled or use initdiv=1.",
        )

    cells = initial_cells(a, b, initdiv)
    max_subdivisions = options.maxiters
    if max_subdivisions is None:
        max_subdivisions = DEFAULT_MAX_SUBDIVISIONS
    per_cell = max(1, max_subdivisions // len(cells))

    backend_kwargs = {
        "rule": rule,
        "rtol": options.reltol,
        "atol": options.abstol / len(cells),
        "max_subdivisions": per_cell,
        **problem.kwargs,
    }

    estimate = np.zeros(problem.nout)
    error = np.zeros(problem.nout)
    converged = True
    subdivisions = 0

    for lower, upper in cells:
        result = cubature(evaluator.from_numpy, lower, upper, **backend_kwargs)
        estimate = estimate + np.asarray(result.estimate).reshape(-1)
        error = error + np.asarray(result.error).reshape(-1)
        converged = converged and result.status == "converged"
        subdivisions += result.subdivisions

    logger.debug(
        "%s: %d cell(s), %d subdivision(s), %d evaluation(s)",
        name,
        len(cells),
        subdivisions,
        evaluator.n_evals,
    )

    u = torch.as_tensor(estimate, dtype=prototype.dtype)
    error_estimate = norm(torch.as_tensor(error, dtype=prototype.dtype))

    if converged:
        retcode = SUCCESS
        message = "Integration successful."
    else:
        retcode = MAXITERS
        message = (
            f"Subdivision limit reached after {subdivisions} subdivision(s). "
            f"Error estimate: {error_estimate.item():.2e}"
        )

    return IntegralSolution(
        u=u.reshape(solution_shape(problem)),
        error=error_estimate,
        retcode=retcode,
        n_function_evals=evaluator.n_evals,
        message=message,
        stats={
            "rule": backend_kwargs["rule"],
            "subdivisions": subdivisions,
            "cells": len(cells),
        },
    )
