"""Problem/algorithm entry points: ``init``, ``solve_cache`` and ``solve``."""

import logging
from typing import Any, Optional

from torchintegrals._cache import IntegralCache, rebuild_cache, resolve_problem
from torchintegrals._exceptions import MissingAlgorithm
from torchintegrals._options import SolveOptions
from torchintegrals._problem import IntegralProblem
from torchintegrals._solution import IntegralSolution
from torchintegrals.algorithms._base import IntegralAlgorithm

logger = logging.getLogger(__name__)


def init(
    problem: IntegralProblem,
    alg: Optional[IntegralAlgorithm] = None,
    *,
    sensealg: Any = None,
    do_inf_transformation: Optional[bool] = None,
    **kwargs: Any,
) -> IntegralCache:
    """
    Prepare a reusable cache for solving ``problem`` with ``alg``.

    Parameters
    ----------
    problem : IntegralProblem
        What to integrate.
    alg : IntegralAlgorithm
        How to integrate it.
    sensealg : any, optional
        Sensitivity algorithm, carried along for differentiation frontends.
    do_inf_transformation : bool, optional
        ``False`` passes infinite bounds to the backend untransformed.
    **kwargs
        ``abstol``, ``reltol`` and ``maxiters``.

    Returns
    -------
    IntegralCache

    Raises
    ------
    InvalidOption
        If ``kwargs`` holds an unrecognized keyword.
    MissingAlgorithm
        If ``alg`` is not given.
    UnsupportedCapability
        If the algorithm cannot handle the problem.
    """
    options = SolveOptions.from_kwargs(kwargs, problem.dtype)

    if alg is None:
        raise MissingAlgorithm(
            "No integration algorithm was given. Use QuadGK() for "
            "one-dimensional integrals, HCubature() for multidimensional "
            "ones, or VEGAS() for high-dimensional Monte Carlo integration."
        )
    if not isinstance(alg, IntegralAlgorithm):
        raise TypeError(
            f"alg must be an IntegralAlgorithm, got {type(alg).__name__}"
        )

    cache = IntegralCache(
        inplace=problem.inplace,
        f=problem.f,
        lb=problem.lb,
        ub=problem.ub,
        nout=problem.nout,
        p=problem.p,
        batch=problem.batch,
        prob_kwargs=problem.kwargs,
        alg=alg,
        sensealg=sensealg,
        options=options,
        do_inf_transformation=do_inf_transformation,
    )
    return rebuild_cache(cache)


def solve_cache(cache: IntegralCache) -> IntegralSolution:
    """
    Solve the integral held by ``cache``.

    The cache itself is never modified. Stale algorithm memory is rebuilt
    for this call only.
    """
    if cache.needs_rebuild:
        logger.debug("Rebuilding stale %s cache", cache.alg.name)
        cache = rebuild_cache(cache)

    problem = resolve_problem(cache)
    return cache.alg.evaluate(
        problem, cache.cacheval, cache.options, cache.sensealg
    )


def solve(
    problem: IntegralProblem,
    alg: Optional[IntegralAlgorithm] = None,
    **kwargs: Any,
) -> IntegralSolution:
    """
    Integrate ``problem`` with ``alg``.

    Equivalent to ``solve_cache(init(problem, alg, **kwargs))``.

    Examples
    --------
    >>> problem = IntegralProblem(lambda x, p: torch.cos(x), 1.0, 3.0)
    >>> solve(problem, QuadGK(), reltol=1e-6).u
    tensor(-0.7004, dtype=torch.float64)
    """
    return solve_cache(init(problem, alg, **kwargs))
