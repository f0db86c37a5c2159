"""
Singular value filtering and rank estimation.
"""

import numpy as np
from typing import Optional, Tuple


def filter_singular_values(
    S: np.ndarray,
    tol: float,
    lam: float = 0.0,
) -> Tuple[np.ndarray, int]:
    """
    Filter coefficients of the regularized pseudo-inverse.

    A singular value s_j is kept when s_j > tol * s_0, with s_0 the
    largest singular value. Kept directions get

        alpha_j = s_j / (s_j^2 + lam^2)

    which is 1 / s_j for lam = 0. Dropped directions get alpha_j = 0.

    Parameters
    ----------
    S : ndarray, shape (p,)
        Singular values in non-increasing order
    tol : float
        Relative tolerance (> 0)
    lam : float
        Tikhonov parameter

    Returns
    -------
    alpha : ndarray, shape (p,)
        Filter coefficients
    rank : int
        Number of kept singular values
    """
    s0 = S[0]
    keep = S > tol * s0

    alpha = np.zeros_like(S)
    s_keep = S[keep]
    alpha[keep] = s_keep / (s_keep * s_keep + lam * lam)

    return alpha, int(np.count_nonzero(keep))


def filtered_factor(
    Q: np.ndarray,
    alpha: np.ndarray,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Scale column j of Q by alpha[j]: Q diag(alpha)."""
    return np.multiply(Q, alpha, out=out)


def numerical_rank(S: np.ndarray, tol: float) -> int:
    """Count singular values strictly above tol * max(S)."""
    return filter_singular_values(S, tol)[1]
