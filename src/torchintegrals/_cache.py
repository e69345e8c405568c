"""Reusable integration cache and its setters."""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

import torch
from torch import Tensor

from torchintegrals._infinite import transformation_if_inf
from torchintegrals._options import SolveOptions
from torchintegrals._problem import Bound, IntegralProblem, isinplace
from torchintegrals.algorithms._base import IntegralAlgorithm

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class IntegralCache:
    """
    Everything needed to solve, and re-solve, an integral.

    Created by :func:`~torchintegrals.init`. The cache is an immutable value:
    ``set_f``, ``set_p``, ``set_lb`` and ``set_ub`` return new caches and
    leave the original untouched.

    Attributes
    ----------
    inplace : bool
        Whether ``f`` has the in-place signature ``f(out, x, p)``.
    f : callable or Tensor
        Integrand or pre-sampled data.
    lb, ub : Tensor
        Bounds of the original, untransformed domain.
    nout : int
        Number of integrand outputs.
    p : any
        Integrand parameter.
    batch : int
        Maximum points per integrand call, 0 for unbatched.
    prob_kwargs : dict
        Backend options from the problem.
    alg : IntegralAlgorithm
        Algorithm descriptor.
    sensealg : any
        Sensitivity algorithm, recorded but not interpreted.
    options : SolveOptions
        Tolerances and iteration cap.
    do_inf_transformation : bool, optional
        Infinite-domain transform switch; ``None`` applies it when needed.
    cacheval : any
        Algorithm working memory from ``alg.build_cache``.
    needs_rebuild : bool
        True when ``cacheval`` is stale with respect to ``f`` and ``p``.
    """

    inplace: bool
    f: Union[Callable, Tensor]
    lb: Tensor
    ub: Tensor
    nout: int
    p: Any
    batch: int
    prob_kwargs: Dict[str, Any]
    alg: IntegralAlgorithm
    sensealg: Any
    options: SolveOptions
    do_inf_transformation: Optional[bool]
    cacheval: Any = None
    needs_rebuild: bool = True


def build_problem(cache: IntegralCache) -> IntegralProblem:
    """Return the untransformed problem described by ``cache``."""
    return IntegralProblem(
        cache.f,
        cache.lb,
        cache.ub,
        cache.p,
        nout=cache.nout,
        batch=cache.batch,
        kwargs=cache.prob_kwargs,
        inplace=cache.inplace,
    )


def resolve_problem(cache: IntegralCache) -> IntegralProblem:
    """
    Return the problem handed to the backend.

    The infinite-domain transform is applied according to
    ``cache.do_inf_transformation``, and never for algorithms that cannot
    use it.
    """
    do_inf_transformation = cache.do_inf_transformation
    if not cache.alg.capabilities.domain_transform:
        do_inf_transformation = False
    return transformation_if_inf(build_problem(cache), do_inf_transformation)


def rebuild_cache(cache: IntegralCache) -> IntegralCache:
    """Return a copy of ``cache`` with freshly built algorithm memory."""
    problem = resolve_problem(cache)
    cache.alg.check_capabilities(problem)
    cacheval, needs_rebuild = cache.alg.build_cache(problem)

    logger.debug(
        "Built %s cache (needs_rebuild=%s)", cache.alg.name, needs_rebuild
    )

    return dataclasses.replace(
        cache, cacheval=cacheval, needs_rebuild=needs_rebuild
    )


def set_f(
    cache: IntegralCache,
    f: Union[Callable, Tensor],
    nout: Optional[int] = None,
) -> IntegralCache:
    """
    Replace the integrand.

    The in-place form is detected again from ``f``, ``nout`` is updated when
    given, and the algorithm memory is rebuilt.
    """
    if nout is None:
        nout = cache.nout
    new = dataclasses.replace(cache, f=f, inplace=isinplace(f), nout=nout)
    build_problem(new)
    return rebuild_cache(new)


def set_p(cache: IntegralCache, p: Any) -> IntegralCache:
    """Replace the integrand parameter and rebuild the algorithm memory."""
    return rebuild_cache(dataclasses.replace(cache, p=p))


def set_lb(cache: IntegralCache, lb: Bound) -> IntegralCache:
    """Replace the lower bound, keeping the bound dtype and algorithm memory."""
    lb = torch.as_tensor(lb, dtype=cache.lb.dtype, device=cache.lb.device)
    problem = build_problem(dataclasses.replace(cache, lb=lb))
    return dataclasses.replace(cache, lb=problem.lb)


def set_ub(cache: IntegralCache, ub: Bound) -> IntegralCache:
    """Replace the upper bound, keeping the bound dtype and algorithm memory."""
    ub = torch.as_tensor(ub, dtype=cache.ub.dtype, device=cache.ub.device)
    problem = build_problem(dataclasses.replace(cache, ub=ub))
    return dataclasses.replace(cache, ub=problem.ub)
