"""Integral solution record."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from torch import Tensor

SUCCESS = "Success"
MAXITERS = "MaxIters"
FAILURE = "Failure"


@dataclass
class IntegralSolution:
    """
    Solution object returned by ``solve`` and ``solve_cache``.

    Attributes
    ----------
    u : Tensor
        Integral value(s). Shape ``()`` for a single out-of-place output,
        ``(nout,)`` for vector-valued or in-place integrands. For pre-sampled
        data, the sample shape with the integration axis removed.
    error : Tensor, optional
        Error estimate mapped through the algorithm's norm, or None when the
        backend provides none.
    retcode : str
        ``"Success"``, ``"MaxIters"`` (iteration budget exhausted) or
        ``"Failure"`` (tolerance not reached).
    n_function_evals : int
        Number of integrand points evaluated.
    message : str
        Status message describing the outcome.
    stats : dict
        Additional backend statistics.

    Examples
    --------
    >>> sol = solve(problem, QuadGK())
    >>> sol.u, sol.error, sol.success
    """

    u: Tensor
    error: Optional[Tensor] = None
    retcode: str = SUCCESS
    n_function_evals: int = 0
    message: str = "Integration successful."
    stats: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        """Initialize empty stats dict if not provided."""
        if self.stats is None:
            self.stats = {}

    @property
    def success(self) -> bool:
        return self.retcode == SUCCESS
