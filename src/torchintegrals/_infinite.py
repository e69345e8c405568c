"""Change of variables for infinite integration domains."""

import dataclasses
from typing import Optional, Tuple

import torch
from torch import Tensor

from torchintegrals._problem import IntegralProblem


def transformation_if_inf(
    problem: IntegralProblem,
    do_inf_transformation: Optional[bool] = None,
) -> IntegralProblem:
    """
    Map a problem with infinite bounds onto a finite domain.

    Parameters
    ----------
    problem : IntegralProblem
        Problem to transform.
    do_inf_transformation : bool, optional
        ``False`` disables the transform. ``None`` and ``True`` apply it
        whenever a bound is infinite.

    Returns
    -------
    IntegralProblem
        The transformed problem, or ``problem`` itself when no transform is
        needed.
    """
    if do_inf_transformation is False or problem.is_sampled:
        return problem
    if not problem.has_infinite_bounds:
        return problem
    return transform_infinite(problem)


def transform_infinite(problem: IntegralProblem) -> IntegralProblem:
    r"""
    Apply the infinite-limits change of variables.

    Per dimension:

    - :math:`[a, \infty)` uses :math:`x = a + t/(1-t)`, :math:`t \in [0, 1)`.
    - :math:`(-\infty, b]` uses :math:`x = b - (1-t)/t`, :math:`t \in (0, 1]`.
    - :math:`(-\infty, \infty)` uses :math:`x = t/(1-t^2)`,
      :math:`t \in (-1, 1)`.

    Finite dimensions are left untouched. Reversed bounds are flipped and the
    integrand is negated accordingly. The transformed integrand keeps the
    original calling convention (batched or not, in-place or not).
    """
    flipped = problem.lb > problem.ub
    a = torch.minimum(problem.lb, problem.ub)
    b = torch.maximum(problem.lb, problem.ub)
    sign = -1.0 if int(flipped.sum()) % 2 else 1.0

    both = torch.isneginf(a) & torch.isposinf(b)
    lower = torch.isfinite(a) & torch.isposinf(b)
    upper = torch.isneginf(a) & torch.isfinite(b)
    semi = lower | upper

    new_lb = torch.where(both, -torch.ones_like(a), torch.where(semi, 0.0, a))
    new_ub = torch.where(both | semi, torch.ones_like(b), b)

    vector_domain = a.dim() == 1

    def to_domain(t: Tensor) -> Tuple[Tensor, Tensor]:
        one = torch.ones_like(t)
        x = torch.where(
            both,
            t / (1 - t**2),
            torch.where(
                lower,
                a + t / (1 - t),
                torch.where(upper, b - (1 - t) / t, t),
            ),
        )
        jacobian = torch.where(
            both,
            (1 + t**2) / (1 - t**2) ** 2,
            torch.where(
                lower,
                1 / (1 - t) ** 2,
                torch.where(upper, 1 / t**2, one),
            ),
        )
        if vector_domain:
            jacobian = jacobian.prod(dim=-1)
        return x, sign * jacobian

    f = problem.f

    if problem.inplace:

        def transformed(out, t, p):
            x, jacobian = to_domain(t)
            f(out, x, p)
            out.mul_(_expand_as(jacobian, out))

    else:

        def transformed(t, p):
            x, jacobian = to_domain(t)
            value = torch.as_tensor(f(x, p), dtype=jacobian.dtype)
            return value * _expand_as(jacobian, value)

    return dataclasses.replace(
        problem,
        f=transformed,
        lb=new_lb,
        ub=new_ub,
        inplace=problem.inplace,
    )


def _expand_as(jacobian: Tensor, value: Tensor) -> Tensor:
    # Batched jacobians have shape (B,); outputs may carry a trailing nout axis.
    if jacobian.dim() == 0 or value.dim() <= jacobian.dim():
        return jacobian
    return jacobian.reshape(
        jacobian.shape + (1,) * (value.dim() - jacobian.dim())
    )
