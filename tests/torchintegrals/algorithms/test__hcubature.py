import math

import pytest
import scipy.integrate
import torch

from torchintegrals import (
    HCubature,
    IntegralProblem,
    InvalidConfiguration,
    UnsupportedCapability,
    solve,
)


class TestHCubature:
    def test_initdiv_validated(self):
        with pytest.raises(InvalidConfiguration, match="initdiv"):
            HCubature(initdiv=0)

    def test_one_dimensional_rule(self):
        problem = IntegralProblem(lambda x, p: torch.cos(x), 1.0, 3.0)

        result = solve(problem, HCubature())

        assert result.stats["rule"] == "gk15"
        assert torch.allclose(
            result.u,
            torch.tensor(math.sin(3.0) - math.sin(1.0), dtype=result.u.dtype),
            rtol=1e-8,
        )

    def test_two_dimensional_matches_scipy(self):
        problem = IntegralProblem(
            lambda x, p: torch.exp(-x[..., 0] * x[..., 1]),
            [0.0, 0.0],
            [1.0, 2.0],
            batch=256,
        )
        expected, _ = scipy.integrate.dblquad(
            lambda y, x: math.exp(-x * y), 0, 1, 0, 2
        )

        result = solve(problem, HCubature(), reltol=1e-8)

        assert result.stats["rule"] == "genz-malik"
        assert torch.allclose(
            result.u, torch.tensor(expected, dtype=result.u.dtype), rtol=1e-6
        )

    def test_three_dimensional_polynomial(self):
        problem = IntegralProblem(
            lambda x, p: (x**2).sum(-1),
            [0.0, 0.0, 0.0],
            [1.0, 1.0, 1.0],
            batch=100,
        )

        result = solve(problem, HCubature())

        assert torch.allclose(
            result.u, torch.tensor(1.0, dtype=result.u.dtype), rtol=1e-8
        )

    def test_in_place(self):
        def f(out, x, p):
            out[0] = x.prod()
            out[1] = x.sum()

        problem = IntegralProblem(f, [0.0, 0.0], [1.0, 1.0], nout=2)

        result = solve(problem, HCubature())

        torch.testing.assert_close(
            result.u, torch.tensor([0.25, 1.0], dtype=torch.float64)
        )

    def test_in_place_batched(self):
        def f(out, x, p):
            out[:] = p * x

        problem = IntegralProblem(f, 0.0, 2.0, p=3.0, batch=32)

        result = solve(problem, HCubature())

        assert result.u.shape == (1,)
        torch.testing.assert_close(
            result.u, torch.tensor([6.0], dtype=torch.float64)
        )

    @pytest.mark.parametrize("initdiv", [2, 3])
    def test_initdiv(self, initdiv):
        problem = IntegralProblem(
            lambda x, p: torch.sin(x[..., 0]) * torch.cos(x[..., 1]),
            [0.0, 0.0],
            [math.pi, math.pi / 2],
            batch=128,
        )

        result = solve(problem, HCubature(initdiv=initdiv), reltol=1e-8)

        assert result.stats["cells"] == initdiv**2
        assert torch.allclose(
            result.u, torch.tensor(2.0, dtype=result.u.dtype), rtol=1e-6
        )

    def test_initdiv_with_native_infinite_bounds(self):
        problem = IntegralProblem(lambda x, p: torch.exp(-x), 0.0, math.inf)

        with pytest.raises(UnsupportedCapability, match="initdiv"):
            solve(problem, HCubature(initdiv=2), do_inf_transformation=False)

    def test_initdiv_with_transformed_infinite_bounds(self):
        problem = IntegralProblem(lambda x, p: torch.exp(-x), 0.0, math.inf)

        result = solve(problem, HCubature(initdiv=4), reltol=1e-8)

        assert torch.allclose(
            result.u, torch.tensor(1.0, dtype=result.u.dtype), rtol=1e-6
        )
