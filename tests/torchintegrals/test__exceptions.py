import warnings

import pytest

from torchintegrals import (
    BackendNonConvergence,
    IntegrationError,
    InvalidConfiguration,
    InvalidOption,
    MissingAlgorithm,
    QuadratureWarning,
    ShapeMismatch,
    UnsupportedCapability,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            InvalidConfiguration,
            MissingAlgorithm,
            InvalidOption,
            ShapeMismatch,
            UnsupportedCapability,
        ],
    )
    def test_errors_derive_from_integration_error(self, error):
        assert issubclass(error, IntegrationError)

    def test_integration_error_is_exception(self):
        assert issubclass(IntegrationError, Exception)

    def test_non_convergence_is_quadrature_warning(self):
        assert issubclass(BackendNonConvergence, QuadratureWarning)
        assert issubclass(QuadratureWarning, UserWarning)

    def test_non_convergence_can_be_warned(self):
        with pytest.warns(QuadratureWarning, match="did not converge"):
            warnings.warn("QuadGK did not converge", BackendNonConvergence)


class TestInvalidOption:
    def test_lists_offending_and_allowed_options(self):
        error = InvalidOption({"tol", "foo"}, {"abstol", "reltol"})

        assert error.options == ("foo", "tol")
        assert error.allowed == ("abstol", "reltol")
        assert "foo, tol" in str(error)
        assert "abstol, reltol" in str(error)


class TestUnsupportedCapability:
    def test_names_capability_and_algorithm(self):
        error = UnsupportedCapability("batched integrands", "QuadGK")

        assert error.capability == "batched integrands"
        assert error.algorithm == "QuadGK"
        assert str(error) == "QuadGK does not support batched integrands."

    def test_hint_appended(self):
        error = UnsupportedCapability(
            "infinite bounds", "VEGAS", "Leave do_inf_transformation enabled."
        )

        assert str(error).endswith("Leave do_inf_transformation enabled.")
