import math

import pytest
import scipy.integrate
import torch

from torchintegrals import (
    HCubature,
    IntegralProblem,
    QuadGK,
    solve,
    transformation_if_inf,
)
from torchintegrals._infinite import transform_infinite


class TestTransformationIfInf:
    def test_finite_problem_untouched(self):
        problem = IntegralProblem(lambda x, p: x, 0.0, 1.0)

        assert transformation_if_inf(problem) is problem

    def test_disabled(self):
        problem = IntegralProblem(lambda x, p: x, 0.0, math.inf)

        assert transformation_if_inf(problem, False) is problem

    def test_sampled_untouched(self):
        problem = IntegralProblem(torch.ones(3), 0.0, 1.0)

        assert transformation_if_inf(problem, True) is problem

    @pytest.mark.parametrize(
        "lb,ub,new_lb,new_ub",
        [
            (-math.inf, math.inf, -1.0, 1.0),
            (0.0, math.inf, 0.0, 1.0),
            (-math.inf, 2.0, 0.0, 1.0),
        ],
    )
    def test_new_domain(self, lb, ub, new_lb, new_ub):
        transformed = transformation_if_inf(
            IntegralProblem(lambda x, p: x, lb, ub)
        )

        assert transformed.lb.item() == new_lb
        assert transformed.ub.item() == new_ub
        assert not transformed.has_infinite_bounds

    def test_mixed_vector_domain(self):
        transformed = transform_infinite(
            IntegralProblem(lambda x, p: x.sum(), [0.0, 1.0], [math.inf, 2.0])
        )

        torch.testing.assert_close(
            transformed.lb, torch.tensor([0.0, 1.0], dtype=torch.float64)
        )
        torch.testing.assert_close(
            transformed.ub, torch.tensor([1.0, 2.0], dtype=torch.float64)
        )

    def test_keeps_calling_convention(self):
        def f(out, x, p):
            out.fill_(1.0)

        transformed = transform_infinite(
            IntegralProblem(f, 0.0, math.inf, batch=4)
        )

        assert transformed.inplace
        assert transformed.batch == 4


class TestInfiniteIntegrals:
    def test_gaussian_whole_line(self):
        """Integrate exp(-x^2) over the real line"""
        problem = IntegralProblem(
            lambda x, p: torch.exp(-(x**2)), -math.inf, math.inf
        )

        result = solve(problem, QuadGK(), reltol=1e-8)

        assert torch.allclose(
            result.u,
            torch.tensor(math.sqrt(math.pi), dtype=result.u.dtype),
            rtol=1e-6,
        )

    def test_exponential_half_line(self):
        problem = IntegralProblem(lambda x, p: torch.exp(-x), 0.0, math.inf)

        result = solve(problem, QuadGK(), reltol=1e-8)

        assert torch.allclose(
            result.u, torch.tensor(1.0, dtype=result.u.dtype), rtol=1e-6
        )

    def test_lower_infinite_matches_scipy(self):
        problem = IntegralProblem(
            lambda x, p: 1 / (1 + x**2), -math.inf, 2.0
        )
        expected, _ = scipy.integrate.quad(
            lambda x: 1 / (1 + x**2), -math.inf, 2.0
        )

        result = solve(problem, QuadGK(), reltol=1e-8)

        assert torch.allclose(
            result.u, torch.tensor(expected, dtype=result.u.dtype), rtol=1e-6
        )

    def test_reversed_bounds_negate(self):
        problem = IntegralProblem(lambda x, p: torch.exp(-x), math.inf, 0.0)

        result = solve(problem, QuadGK(), reltol=1e-8)

        assert torch.allclose(
            result.u, torch.tensor(-1.0, dtype=result.u.dtype), rtol=1e-6
        )

    def test_batched_vector_output(self):
        def f(x, p):
            g = torch.exp(-(x**2))
            return torch.stack([g, x**2 * g], dim=-1)

        problem = IntegralProblem(f, -math.inf, math.inf, nout=2, batch=64)

        result = solve(problem, HCubature(), reltol=1e-8)

        expected = torch.tensor(
            [math.sqrt(math.pi), math.sqrt(math.pi) / 2],
            dtype=result.u.dtype,
        )
        assert torch.allclose(result.u, expected, rtol=1e-6)

    def test_two_dimensional_gaussian(self):
        problem = IntegralProblem(
            lambda x, p: torch.exp(-(x**2).sum(-1)),
            [-math.inf, -math.inf],
            [math.inf, math.inf],
            batch=1000,
        )

        result = solve(problem, HCubature(), reltol=1e-5)

        assert torch.allclose(
            result.u, torch.tensor(math.pi, dtype=result.u.dtype), rtol=1e-3
        )
