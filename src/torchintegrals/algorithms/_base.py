"""Algorithm descriptor base class and backend dispatch."""

import logging
import math
import warnings
from typing import Any, NamedTuple, Optional, Tuple, Union

from torchintegrals._exceptions import (
    BackendNonConvergence,
    UnsupportedCapability,
)
from torchintegrals._options import SolveOptions
from torchintegrals._problem import IntegralProblem
from torchintegrals._solution import IntegralSolution

logger = logging.getLogger(__name__)


class Capabilities(NamedTuple):
    """What an algorithm can integrate.

    Attributes
    ----------
    max_nout : int or float
        Largest supported ``nout``; ``math.inf`` means unbounded.
    batch : bool
        Accepts batched integrands.
    inplace : bool
        Accepts in-place integrands.
    min_dim, max_dim : int or float
        Supported domain dimensions.
    infinite_bounds : bool
        The backend integrates infinite bounds without the domain transform.
    domain_transform : bool
        The infinite-domain change of variables may be applied.
    sampled : bool
        Accepts pre-sampled data instead of a callable.
    """

    max_nout: Union[int, float] = math.inf
    batch: bool = False
    inplace: bool = False
    min_dim: int = 1
    max_dim: Union[int, float] = math.inf
    infinite_bounds: bool = False
    domain_transform: bool = True
    sampled: bool = False


class IntegralAlgorithm:
    """
    Base class of all algorithm descriptors.

    Subclasses are frozen dataclasses holding hyperparameters only. They
    declare ``capabilities`` and implement ``_evaluate``; algorithms that keep
    working state between solves also override ``build_cache``.
    """

    capabilities = Capabilities()

    @property
    def name(self) -> str:
        return type(self).__name__

    def build_cache(self, problem: IntegralProblem) -> Tuple[Any, bool]:
        """
        Build algorithm-specific working memory for ``problem``.

        Returns
        -------
        cacheval : any
            Working memory, or None for stateless algorithms.
        needs_rebuild : bool
            True if ``cacheval`` does not yet correspond to the problem's
            integrand and parameter.
        """
        return None, False

    def check_capabilities(self, problem: IntegralProblem) -> None:
        """Raise ``UnsupportedCapability`` if ``problem`` is out of reach."""
        caps = self.capabilities

        if problem.is_sampled and not caps.sampled:
            raise UnsupportedCapability("pre-sampled integrands", self.name)
        if problem.nout > caps.max_nout:
            raise UnsupportedCapability(
                f"vector-valued integrands (nout={problem.nout})", self.name
            )
        if problem.batch > 0 and not caps.batch:
            raise UnsupportedCapability("batched integrands", self.name)
        if problem.inplace and not caps.inplace:
            raise UnsupportedCapability("in-place integrands", self.name)
        if not caps.min_dim <= problem.ndim <= caps.max_dim:
            raise UnsupportedCapability(
                f"{problem.ndim}-dimensional domains", self.name
            )
        if problem.has_infinite_bounds and not caps.infinite_bounds:
            hint = ""
            if caps.domain_transform:
                hint = "Leave do_inf_transformation enabled."
            raise UnsupportedCapability("infinite bounds", self.name, hint)

    def evaluate(
        self,
        problem: IntegralProblem,
        cacheval: Any,
        options: SolveOptions,
        sensealg: Optional[Any] = None,
    ) -> IntegralSolution:
        """
        Integrate a fully resolved problem with this algorithm's backend.

        Parameters
        ----------
        problem : IntegralProblem
            Problem after the infinite-domain transform, if any.
        cacheval : any
            Working memory from ``build_cache``.
        options : SolveOptions
            Tolerances and iteration cap.
        sensealg : any, optional
            Sensitivity algorithm; recorded in ``stats``.

        Returns
        -------
        IntegralSolution
            Non-convergence is reported through ``retcode`` and a
            ``BackendNonConvergence`` warning, never raised.

        Raises
        ------
        UnsupportedCapability
            If the problem needs a capability the algorithm lacks.
        """
        self.check_capabilities(problem)

        logger.debug(
            "Dispatching %s (ndim=%d, nout=%d, batch=%d, inplace=%s)",
            self.name,
            problem.ndim,
            problem.nout,
            problem.batch,
            problem.inplace,
        )
        solution = self._evaluate(problem, cacheval, options)

        solution.stats.setdefault("algorithm", self.name)
        if sensealg is not None:
            solution.stats["sensealg"] = sensealg

        if not solution.success:
            warnings.warn(
                f"{self.name} did not converge ({solution.retcode}). "
                f"{solution.message}",
                BackendNonConvergence,
                stacklevel=3,
            )

        return solution

    def _evaluate(
        self,
        problem: IntegralProblem,
        cacheval: Any,
        options: SolveOptions,
    ) -> IntegralSolution:
        raise NotImplementedError
