"""Exceptions and warnings for integral solving."""

from typing import Iterable


class QuadratureWarning(UserWarning):
    """Warning for quadrature issues (e.g., slow convergence)."""

    pass


class BackendNonConvergence(QuadratureWarning):
    """Emitted when a backend ran but did not reach the requested tolerance.

    Non-convergence is reported through the solution's ``retcode``; this
    warning is informational and never raised by the library itself.
    """

    pass


class IntegrationError(Exception):
    """Base exception for all integral solver errors."""

    pass


class InvalidConfiguration(IntegrationError):
    """Raised when an algorithm descriptor is constructed with bad settings."""

    pass


class MissingAlgorithm(IntegrationError):
    """Raised when no integration algorithm was supplied."""

    pass


class InvalidOption(IntegrationError):
    """Raised when ``init``/``solve`` receive an unrecognized keyword."""

    def __init__(self, options: Iterable[str], allowed: Iterable[str]):
        self.options = tuple(sorted(options))
        self.allowed = tuple(sorted(allowed))
        super().__init__(
            f"Unrecognized keyword argument(s): {', '.join(self.options)}. "
            f"Accepted options: {', '.join(self.allowed)}"
        )


class ShapeMismatch(IntegrationError):
    """Raised when bounds, parameters or outputs have inconsistent shapes."""

    pass


class UnsupportedCapability(IntegrationError):
    """Raised when an algorithm cannot handle a requested capability."""

    def __init__(self, capability: str, algorithm: str, message: str = ""):
        self.capability = capability
        self.algorithm = algorithm
        super().__init__(
            f"{algorithm} does not support {capability}. {message}".rstrip()
        )
