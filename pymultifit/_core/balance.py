"""
Column balancing.

Scales each column of a matrix by a power of two so that its Euclidean
norm lands in [0.5, 1]. Powers of two keep the scaling exact in binary
floating point, so unscaling the solution introduces no rounding.
"""

import numpy as np
from typing import Tuple


def balance_factors(A: np.ndarray) -> np.ndarray:
    """
    Power-of-two column scale factors for A.

    Parameters
    ----------
    A : ndarray, shape (n, p)

    Returns
    -------
    D : ndarray, shape (p,)
        D[j] = 2**k with ||A[:, j]|| / D[j] in [0.5, 1]; 1 for zero columns
    """
    norms = np.linalg.norm(A, axis=0)
    mantissa, exponent = np.frexp(norms)

    # frexp puts exact powers of two at mantissa 0.5. They are scaled to
    # norm 1 rather than left at 0.5; both are inside [0.5, 1].
    exponent = exponent - (mantissa == 0.5).astype(exponent.dtype)

    D = np.ldexp(1.0, exponent)
    D[norms == 0.0] = 1.0
    return D


def balance_columns(A: np.ndarray, D: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Balance the columns of A in place.

    Parameters
    ----------
    A : ndarray, shape (n, p)
        Matrix to balance (modified in place: A[:, j] /= D[j])
    D : ndarray, shape (p,)
        Receives the scale factors

    Returns
    -------
    (A, D)
        The same arrays, for chaining
    """
    D[:] = balance_factors(A)
    A /= D
    return A, D
