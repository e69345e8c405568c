"""Shared solver options."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import torch

from torchintegrals._exceptions import InvalidOption

ALLOWED_OPTIONS = frozenset({"abstol", "reltol", "maxiters"})


def default_tolerances(dtype: torch.dtype) -> dict[str, float]:
    """Return dtype-appropriate default tolerances.

    Parameters
    ----------
    dtype : torch.dtype
        The dtype of the integration bounds.

    Returns
    -------
    dict[str, float]
        Dictionary with keys 'abstol' and 'reltol'.
    """
    if dtype in (torch.float16, torch.bfloat16):
        return {"abstol": 1e-3, "reltol": 1e-2}
    elif dtype == torch.float32:
        return {"abstol": 1e-6, "reltol": 1e-5}
    else:  # float64 and others
        return {"abstol": 1e-8, "reltol": 1e-8}


def check_kwargs(kwargs: Dict[str, Any]) -> None:
    """Raise ``InvalidOption`` if ``kwargs`` holds unrecognized keys."""
    unknown = set(kwargs) - ALLOWED_OPTIONS
    if unknown:
        raise InvalidOption(unknown, ALLOWED_OPTIONS)


@dataclass(frozen=True)
class SolveOptions:
    """
    Tolerances and iteration cap forwarded to every backend.

    Attributes
    ----------
    abstol : float
        Absolute tolerance.
    reltol : float
        Relative tolerance.
    maxiters : int, optional
        Iteration or subdivision cap. ``None`` lets each backend use its own
        default.
    """

    abstol: float = 1e-8
    reltol: float = 1e-8
    maxiters: Optional[int] = None

    @classmethod
    def from_kwargs(
        cls, kwargs: Dict[str, Any], dtype: torch.dtype = torch.float64
    ) -> "SolveOptions":
        check_kwargs(kwargs)
        defaults = default_tolerances(dtype)
        return cls(
            abstol=float(kwargs.get("abstol", defaults["abstol"])),
            reltol=float(kwargs.get("reltol", defaults["reltol"])),
            maxiters=kwargs.get("maxiters"),
        )
