import math

import numpy as np
import pytest
import torch
from hypothesis import given, settings
from hypothesis import strategies as st

from torchintegrals import (
    GaussLegendre,
    IntegralProblem,
    InvalidConfiguration,
    solve,
)
from torchintegrals.algorithms import gauss_legendre
from torchintegrals.algorithms._nodes import composite_nodes_weights


class TestGaussLegendreNodes:
    @pytest.mark.parametrize("n", [1, 2, 5, 16])
    def test_matches_numpy(self, n):
        nodes, weights = gauss_legendre(n)
        expected_nodes, expected_weights = np.polynomial.legendre.leggauss(n)

        np.testing.assert_allclose(nodes.numpy(), expected_nodes, atol=1e-12)
        np.testing.assert_allclose(weights.numpy(), expected_weights, atol=1e-12)

    def test_weights_sum_to_two(self):
        _, weights = gauss_legendre(50)

        assert torch.allclose(weights.sum(), torch.tensor(2.0, dtype=torch.float64))

    def test_dtype(self):
        nodes, weights = gauss_legendre(8, dtype=torch.float32)

        assert nodes.dtype == weights.dtype == torch.float32

    def test_invalid_n(self):
        with pytest.raises(ValueError, match="at least 1"):
            gauss_legendre(0)

    def test_composite_panels(self):
        nodes, weights = gauss_legendre(3)
        a = torch.tensor(0.0, dtype=torch.float64)
        b = torch.tensor(4.0, dtype=torch.float64)

        x, w = composite_nodes_weights(nodes, weights, a, b, 4)

        assert x.shape == w.shape == (12,)
        assert torch.all((x > 0) & (x < 4))
        assert torch.allclose(w.sum(), torch.tensor(4.0, dtype=torch.float64))


class TestGaussLegendre:
    def test_nonpositive_subintervals(self):
        with pytest.raises(InvalidConfiguration, match="nonpositive"):
            GaussLegendre(subintervals=-1)

    def test_composite_flag(self):
        assert not GaussLegendre(n=4).composite
        assert GaussLegendre(n=4, subintervals=3).composite

    def test_precomputed_table(self):
        nodes, weights = gauss_legendre(4)
        alg = GaussLegendre(nodes=nodes, weights=weights)

        assert alg.n == 4
        assert alg.nodes is nodes

    def test_mismatched_table(self):
        with pytest.raises(InvalidConfiguration, match="equal length"):
            GaussLegendre(nodes=torch.zeros(3), weights=torch.zeros(4))

    def test_cosine(self):
        problem = IntegralProblem(lambda x, p: torch.cos(x), 1.0, 3.0)

        result = solve(problem, GaussLegendre(n=20))

        assert result.error is None
        assert result.success
        assert result.n_function_evals == 20
        assert torch.allclose(
            result.u,
            torch.tensor(math.sin(3.0) - math.sin(1.0), dtype=result.u.dtype),
            rtol=1e-12,
        )

    def test_composite(self):
        problem = IntegralProblem(lambda x, p: torch.sqrt(x), 0.0, 1.0)

        single = solve(problem, GaussLegendre(n=4))
        composite = solve(problem, GaussLegendre(n=4, subintervals=50))

        exact = 2 / 3
        assert abs(composite.u.item() - exact) < abs(single.u.item() - exact)
        assert composite.n_function_evals == 200

    def test_batched_vector_output(self):
        problem = IntegralProblem(
            lambda x, p: torch.stack([x, x**2], dim=-1),
            0.0,
            1.0,
            nout=2,
            batch=7,
        )

        result = solve(problem, GaussLegendre(n=10))

        torch.testing.assert_close(
            result.u, torch.tensor([0.5, 1 / 3], dtype=torch.float64)
        )

    def test_in_place(self):
        def f(out, x, p):
            out.fill_(float(x) ** 3)

        problem = IntegralProblem(f, 0.0, 2.0)

        result = solve(problem, GaussLegendre(n=2))

        torch.testing.assert_close(
            result.u, torch.tensor([4.0], dtype=torch.float64)
        )

    def test_infinite_bounds_transformed(self):
        problem = IntegralProblem(
            lambda x, p: torch.exp(-(x**2)), -math.inf, math.inf
        )

        result = solve(problem, GaussLegendre(n=200))

        assert abs(result.u.item() - math.sqrt(math.pi)) < 1e-6

    @settings(max_examples=25, deadline=None)
    @given(
        n=st.integers(min_value=1, max_value=6),
        coefficients=st.lists(
            st.floats(min_value=-3.0, max_value=3.0), min_size=1, max_size=12
        ),
    )
    def test_polynomial_exactness(self, n, coefficients):
        """n nodes integrate polynomials of degree 2n - 1 exactly"""
        coefficients = coefficients[: 2 * n]
        polynomial = np.polynomial.Polynomial(coefficients)
        antiderivative = polynomial.integ()
        expected = antiderivative(2.0) - antiderivative(-1.0)

        problem = IntegralProblem(
            lambda x, p: sum(c * x**k for k, c in enumerate(p)),
            -1.0,
            2.0,
            p=coefficients,
        )

        result = solve(problem, GaussLegendre(n=n))

        assert abs(result.u.item() - expected) < 1e-9 * max(1.0, abs(expected))
