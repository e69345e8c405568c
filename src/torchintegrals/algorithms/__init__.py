"""
Integration algorithm descriptors.

Adaptive:
    QuadGK, HCubature

Monte Carlo:
    VEGAS

Fixed rules:
    GaussLegendre, Trapezoidal

Base types:
    IntegralAlgorithm, Capabilities
"""

from torchintegrals.algorithms._base import Capabilities, IntegralAlgorithm
from torchintegrals.algorithms._gauss_legendre import GaussLegendre
from torchintegrals.algorithms._hcubature import HCubature
from torchintegrals.algorithms._nodes import gauss_legendre
from torchintegrals.algorithms._quadgk import QuadGK
from torchintegrals.algorithms._trapezoidal import Trapezoidal, trapezoid
from torchintegrals.algorithms._vegas import VEGAS

__all__ = [
    # Adaptive
    "QuadGK",
    "HCubature",
    # Monte Carlo
    "VEGAS",
    # Fixed rules
    "GaussLegendre",
    "Trapezoidal",
    "gauss_legendre",
    "trapezoid",
    # Base types
    "Capabilities",
    "IntegralAlgorithm",
]
