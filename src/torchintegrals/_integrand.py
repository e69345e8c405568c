"""Integrand calling-convention adapters."""

from typing import NamedTuple, Optional, Tuple

import numpy as np
import torch
from torch import Tensor

from torchintegrals._exceptions import ShapeMismatch
from torchintegrals._problem import IntegralProblem


class IntegrandPrototype(NamedTuple):
    """Output description of an integrand, obtained by probing it once.

    Attributes
    ----------
    numel : int
        Number of values the integrand produces per point.
    dtype : torch.dtype
        Floating dtype of the integrand's output.
    buffer : Tensor, optional
        Reusable output buffer of shape ``(nout,)`` for in-place integrands.
    """

    numel: int
    dtype: torch.dtype
    buffer: Optional[Tensor]


def solution_shape(problem: IntegralProblem) -> Tuple[int, ...]:
    """Shape of ``IntegralSolution.u`` for a callable integrand."""
    if problem.nout == 1 and not problem.inplace:
        return ()
    return (problem.nout,)


def probe_point(problem: IntegralProblem) -> Tensor:
    """Return a finite point inside the integration domain."""
    lb, ub = problem.lb, problem.ub
    finite_lb = torch.isfinite(lb)
    finite_ub = torch.isfinite(ub)
    return torch.where(
        finite_lb & finite_ub,
        (lb + ub) / 2,
        torch.where(
            finite_lb,
            lb + 1,
            torch.where(finite_ub, ub - 1, torch.zeros_like(lb)),
        ),
    )


def probe(problem: IntegralProblem) -> IntegrandPrototype:
    """Evaluate the integrand once and record its output description."""
    x = probe_point(problem)
    nout = problem.nout

    if problem.batch > 0:
        x = x.unsqueeze(0)
        if problem.inplace:
            out = torch.zeros(
                (1,) if nout == 1 else (1, nout), dtype=problem.dtype
            )
            problem.f(out, x, problem.p)
            return IntegrandPrototype(nout, out.dtype, None)
        value = torch.as_tensor(problem.f(x, problem.p))
        return IntegrandPrototype(
            value.numel(), _floating(value.dtype, problem.dtype), None
        )

    if problem.inplace:
        buffer = torch.zeros(nout, dtype=problem.dtype)
        problem.f(buffer, x, problem.p)
        return IntegrandPrototype(nout, buffer.dtype, buffer)

    value = torch.as_tensor(problem.f(x, problem.p))
    return IntegrandPrototype(
        value.numel(), _floating(value.dtype, problem.dtype), None
    )


def check_prototype(
    prototype: IntegrandPrototype, problem: IntegralProblem
) -> None:
    if prototype.numel != problem.nout:
        raise ShapeMismatch(
            f"Integrand returned {prototype.numel} value(s) per point, "
            f"but nout={problem.nout}"
        )


def _floating(dtype: torch.dtype, fallback: torch.dtype) -> torch.dtype:
    if dtype.is_floating_point:
        return torch.promote_types(dtype, fallback)
    return fallback


class IntegrandEvaluator:
    """
    Evaluate an integrand on a stack of points, whatever its convention.

    Points are stacked along a leading axis, ``(N,)`` for a one-dimensional
    scalar domain and ``(N, d)`` otherwise. The result always has shape
    ``(N, nout)``. Unbatched integrands are called once per point; batched
    ones receive chunks of at most ``problem.batch`` points. In-place
    integrands are given a fresh or reused output buffer.

    Parameters
    ----------
    problem : IntegralProblem
        Problem whose integrand is evaluated.
    prototype : IntegrandPrototype, optional
        Probe result. Its buffer is reused for unbatched in-place calls.

    Attributes
    ----------
    n_evals : int
        Number of points evaluated so far.
    """

    def __init__(
        self,
        problem: IntegralProblem,
        prototype: Optional[IntegrandPrototype] = None,
    ):
        self.problem = problem
        self.dtype = problem.dtype if prototype is None else prototype.dtype
        self.buffer = None if prototype is None else prototype.buffer
        self.n_evals = 0

    def __call__(self, points: Tensor) -> Tensor:
        n = points.shape[0]
        self.n_evals += n

        if self.problem.batch == 0:
            rows = [self._evaluate_point(points[i]) for i in range(n)]
            if not rows:
                return torch.zeros(0, self.problem.nout, dtype=self.dtype)
            return torch.stack(rows)

        chunks = torch.split(points, self.problem.batch)
        return torch.cat([self._evaluate_batch(chunk) for chunk in chunks])

    def _evaluate_point(self, x: Tensor) -> Tensor:
        problem = self.problem

        if problem.inplace:
            out = self.buffer
            if out is None:
                out = torch.zeros(problem.nout, dtype=self.dtype)
            else:
                out.zero_()
            problem.f(out, x, problem.p)
            return out.reshape(-1).clone()

        value = torch.as_tensor(problem.f(x, problem.p), dtype=self.dtype)
        value = value.reshape(-1)
        if value.numel() != problem.nout:
            raise ShapeMismatch(
                f"Integrand returned {value.numel()} value(s), "
                f"but nout={problem.nout}"
            )
        return value

    def _evaluate_batch(self, x: Tensor) -> Tensor:
        problem = self.problem
        m = x.shape[0]
        nout = problem.nout

        if problem.inplace:
            out = torch.zeros(
                (m,) if nout == 1 else (m, nout), dtype=self.dtype
            )
            problem.f(out, x, problem.p)
            return out.reshape(m, nout)

        value = torch.as_tensor(problem.f(x, problem.p), dtype=self.dtype)

        # A batched integrand that ignores x may return a single point value.
        if value.numel() == nout and m > 1:
            return value.reshape(1, nout).expand(m, nout)

        if value.numel() != m * nout:
            raise ShapeMismatch(
                f"Batched integrand returned shape {tuple(value.shape)} for "
                f"{m} points, expected ({m},) or ({m}, {nout})"
            )
        return value.reshape(m, nout)

    def from_numpy(self, x: np.ndarray) -> np.ndarray:
        """Evaluate points given as an ``(N, d)`` array; return ``(N, nout)``."""
        points = torch.from_numpy(np.ascontiguousarray(x)).to(
            self.problem.dtype
        )
        if self.problem.lb.dim() == 0:
            points = points.reshape(-1)
        return self(points).detach().cpu().numpy()
