"""Gauss-Legendre nodes and weights."""

from typing import Optional, Tuple

import torch
from torch import Tensor


def gauss_legendre(
    n: int,
    dtype: torch.dtype = torch.float64,
    device: Optional[torch.device] = None,
) -> Tuple[Tensor, Tensor]:
    """
    Compute Gauss-Legendre nodes and weights on [-1, 1].

    Parameters
    ----------
    n : int
        Number of nodes.
    dtype : torch.dtype
        Data type of the returned tensors.
    device : torch.device, optional
        Device of the returned tensors.

    Returns
    -------
    nodes : Tensor
        Nodes sorted ascending, shape (n,).
    weights : Tensor
        Weights, shape (n,).

    Raises
    ------
    ValueError
        If n < 1.

    Notes
    -----
    Nodes are the eigenvalues of the symmetric tridiagonal Jacobi matrix of
    the Legendre polynomials; weights follow from the first components of
    its eigenvectors. The rule is exact for polynomials of degree 2n-1.

    References
    ----------
    Golub, G. H., & Welsch, J. H. (1969). Calculation of Gauss quadrature rules.
    Mathematics of Computation, 23(106), 221-230.
    """
    if n < 1:
        raise ValueError(f"n must be at least 1, got {n}")

    if n == 1:
        return (
            torch.zeros(1, dtype=dtype, device=device),
            torch.full((1,), 2.0, dtype=dtype, device=device),
        )

    # Eigen-decomposition in float64 regardless of the requested dtype
    k = torch.arange(1, n, dtype=torch.float64, device=device)
    beta = k / torch.sqrt(4 * k**2 - 1)
    jacobi = torch.diag(beta, diagonal=1) + torch.diag(beta, diagonal=-1)

    eigenvalues, eigenvectors = torch.linalg.eigh(jacobi)

    order = torch.argsort(eigenvalues)
    nodes = eigenvalues[order]
    weights = 2 * eigenvectors[0, order] ** 2

    return nodes.to(dtype), weights.to(dtype)


def composite_nodes_weights(
    nodes: Tensor,
    weights: Tensor,
    a: Tensor,
    b: Tensor,
    subintervals: int = 1,
) -> Tuple[Tensor, Tensor]:
    """
    Map a rule on [-1, 1] onto ``subintervals`` equal panels of [a, b].

    Returns flattened nodes and weights of shape ``(subintervals * n,)``.
    Reversed bounds (``a > b``) produce negative weights.
    """
    dtype = a.dtype
    nodes = nodes.to(dtype=dtype, device=a.device)
    weights = weights.to(dtype=dtype, device=a.device)

    edges = torch.linspace(0, 1, subintervals + 1, dtype=dtype, device=a.device)
    edges = a + (b - a) * edges
    left = edges[:-1].unsqueeze(-1)
    right = edges[1:].unsqueeze(-1)

    half_width = (right - left) / 2
    midpoint = (right + left) / 2

    scaled_nodes = half_width * nodes + midpoint
    scaled_weights = half_width * weights

    return scaled_nodes.reshape(-1), scaled_weights.reshape(-1)
