"""Integral problem descriptor."""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Union

import torch
from torch import Tensor

from torchintegrals._exceptions import ShapeMismatch

Bound = Union[float, Sequence[float], Tensor]


def isinplace(f: Union[Callable, Tensor]) -> bool:
    """
    Detect whether ``f`` writes its result into an output buffer.

    In-place integrands have the signature ``f(out, x, p)``; out-of-place
    integrands have ``f(x, p)``. Pre-sampled data (a tensor) is never
    in-place. Callables whose signature cannot be inspected are treated as
    out-of-place.
    """
    if isinstance(f, Tensor):
        return False
    if not callable(f):
        raise TypeError(
            f"Integrand must be callable or a tensor of samples, got {type(f).__name__}"
        )

    try:
        signature = inspect.signature(f)
    except (TypeError, ValueError):
        return False

    positional = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    )
    required = [
        parameter
        for parameter in signature.parameters.values()
        if parameter.kind in positional
        and parameter.default is inspect.Parameter.empty
    ]
    return len(required) >= 3


def _as_bound(value: Bound) -> Tensor:
    if isinstance(value, Tensor):
        if value.is_floating_point():
            return value
        return value.to(torch.float64)
    return torch.as_tensor(value, dtype=torch.float64)


@dataclass(frozen=True, eq=False)
class IntegralProblem:
    """
    Description of what to integrate.

    Parameters
    ----------
    f : callable or Tensor
        Integrand ``f(x, p)`` or in-place integrand ``f(out, x, p)``. A tensor
        is interpreted as pre-sampled data (only supported by
        ``Trapezoidal``).
    lb, ub : float, sequence or Tensor
        Lower and upper bounds. A scalar bound describes a one-dimensional
        domain whose points are 0-d tensors; a bound of shape ``(d,)``
        describes a ``d``-dimensional domain. Bounds may be infinite.
    p : any
        Parameter passed through to the integrand unchanged.
    nout : int
        Number of integrand outputs.
    batch : int
        Maximum number of points per integrand call. ``0`` means the
        integrand is called one point at a time; otherwise it receives points
        stacked along a leading axis, ``(B,)`` or ``(B, d)``, and returns
        ``(B,)`` when ``nout == 1`` or ``(B, nout)``.
    kwargs : dict
        Backend options forwarded verbatim.
    inplace : bool, optional
        Override the in-place detection performed by :func:`isinplace`.

    Raises
    ------
    ShapeMismatch
        If ``lb`` and ``ub`` differ in shape, are not scalars or vectors, or
        ``nout``/``batch`` are invalid.

    Examples
    --------
    >>> problem = IntegralProblem(lambda x, p: torch.cos(x), 1.0, 3.0)
    >>> problem.ndim
    1
    """

    f: Union[Callable, Tensor]
    lb: Bound
    ub: Bound
    p: Any = None
    nout: int = 1
    batch: int = 0
    kwargs: Dict[str, Any] = field(default_factory=dict)
    inplace: Optional[bool] = None

    def __post_init__(self) -> None:
        lb = _as_bound(self.lb)
        ub = _as_bound(self.ub)
        dtype = torch.promote_types(lb.dtype, ub.dtype)
        lb = lb.to(dtype)
        ub = ub.to(dtype)

        if lb.shape != ub.shape:
            raise ShapeMismatch(
                f"lb and ub must have the same shape, got {tuple(lb.shape)} "
                f"and {tuple(ub.shape)}"
            )
        if lb.dim() > 1:
            raise ShapeMismatch(
                f"Bounds must be scalars or 1-D, got shape {tuple(lb.shape)}"
            )
        if lb.dim() == 1 and lb.numel() == 0:
            raise ShapeMismatch("Bounds must not be empty")

        if (
            isinstance(self.nout, bool)
            or not isinstance(self.nout, int)
            or self.nout < 1
        ):
            raise ShapeMismatch(
                f"nout must be a positive integer, got {self.nout!r}"
            )
        if (
            isinstance(self.batch, bool)
            or not isinstance(self.batch, int)
            or self.batch < 0
        ):
            raise ShapeMismatch(
                f"batch must be a non-negative integer, got {self.batch!r}"
            )

        inplace = self.inplace
        if inplace is None:
            inplace = isinplace(self.f)

        object.__setattr__(self, "lb", lb)
        object.__setattr__(self, "ub", ub)
        object.__setattr__(self, "kwargs", dict(self.kwargs))
        object.__setattr__(self, "inplace", bool(inplace))

    @property
    def ndim(self) -> int:
        """Dimension of the integration domain."""
        return 1 if self.lb.dim() == 0 else self.lb.shape[0]

    @property
    def is_sampled(self) -> bool:
        """True when ``f`` holds pre-sampled data rather than a callable."""
        return isinstance(self.f, Tensor)

    @property
    def has_infinite_bounds(self) -> bool:
        return not bool(
            torch.isfinite(self.lb).all() and torch.isfinite(self.ub).all()
        )

    @property
    def dtype(self) -> torch.dtype:
        return self.lb.dtype
