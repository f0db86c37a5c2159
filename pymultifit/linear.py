"""
Multilinear least squares entry points.

All fits share one SVD-based solver and differ only in fixed arguments:

    fit                  default tolerance, balanced
    fit_tol              caller tolerance, balanced
    fit_tol_unbalanced   caller tolerance, not balanced
    fit_ridge            scalar Tikhonov, not balanced
    fit_ridge_vec        per-parameter Tikhonov, not balanced
    wfit, wfit_tol, wfit_tol_unbalanced
                         weighted counterparts of the first three

Every fit takes a MultilinearWorkspace sized for the problem and returns
a FitResult (``coef, cov, chisq, rank``). Optional ``c`` and ``cov`` out
arrays are filled in place on success and left untouched on error.

Examples
--------
>>> import numpy as np
>>> from pymultifit import MultilinearWorkspace, fit_tol_unbalanced
>>> X = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
>>> y = np.array([1.0, 2.0, 3.0])
>>> work = MultilinearWorkspace(3, 2, backend='cpu')
>>> coef, cov, chisq, rank = fit_tol_unbalanced(X, y, np.finfo(float).eps, work)
>>> rank
2
"""

from typing import Optional

import numpy as np

from ._core import (
    DEFAULT_TOL,
    FitResult,
    MultilinearWorkspace,
    linear_svd,
    linear_ridge2,
    linear_est,
    linear_residuals,
)
from .exceptions import InvalidArgumentError


def fit(
    X,
    y,
    work: MultilinearWorkspace,
    c: Optional[np.ndarray] = None,
    cov: Optional[np.ndarray] = None,
) -> FitResult:
    """Ordinary least squares with machine-epsilon tolerance and column balancing."""
    return linear_svd(X, y, DEFAULT_TOL, True, 0.0, work, c=c, cov=cov)


def fit_tol(
    X,
    y,
    tol: float,
    work: MultilinearWorkspace,
    c: Optional[np.ndarray] = None,
    cov: Optional[np.ndarray] = None,
) -> FitResult:
    """
    Ordinary least squares with a caller-supplied singular value tolerance.

    Singular values s_j <= tol * s_0 are discarded; ``rank`` counts the
    rest.
    """
    return linear_svd(X, y, tol, True, 0.0, work, c=c, cov=cov)


def fit_tol_unbalanced(
    X,
    y,
    tol: float,
    work: MultilinearWorkspace,
    c: Optional[np.ndarray] = None,
    cov: Optional[np.ndarray] = None,
) -> FitResult:
    """Like fit_tol, without column balancing."""
    return linear_svd(X, y, tol, False, 0.0, work, c=c, cov=cov)


def fit_ridge(
    lam: float,
    X,
    y,
    work: MultilinearWorkspace,
    c: Optional[np.ndarray] = None,
    cov: Optional[np.ndarray] = None,
) -> FitResult:
    """
    Standard-form Tikhonov (ridge) regression.

    Solves c = (X^T X + lam^2 I)^{-1} X^T y. The returned chisq includes
    the penalty lam^2 ||c||^2. Columns are never balanced since balancing
    would change the meaning of the penalty.

    Parameters
    ----------
    lam : float
        Regularization parameter (>= 0); lam = 0 is ordinary least squares
    """
    lam = float(lam)
    if not lam >= 0:
        raise InvalidArgumentError(f"lambda must be nonnegative, got {lam}")
    return linear_svd(X, y, DEFAULT_TOL, False, lam, work, c=c, cov=cov)


def fit_ridge_vec(
    lam,
    X,
    y,
    work: MultilinearWorkspace,
    c: Optional[np.ndarray] = None,
    cov: Optional[np.ndarray] = None,
) -> FitResult:
    """
    Ridge regression with per-parameter regularization L = diag(lam).

    Solves c = (X^T X + L^2)^{-1} X^T y. Every lam_j must be nonzero.
    The covariance is that of the transformed coefficients L c.
    """
    return linear_ridge2(lam, X, y, work, c=c, cov=cov)


def wfit(
    X,
    w,
    y,
    work: MultilinearWorkspace,
    c: Optional[np.ndarray] = None,
    cov: Optional[np.ndarray] = None,
) -> FitResult:
    """
    Weighted least squares with machine-epsilon tolerance and balancing.

    Minimizes sum_i w_i (y_i - x_i . c)^2; negative weights count as
    zero. The covariance is (X^T W X)^{-1}, not rescaled by the residual
    variance.
    """
    return linear_svd(X, y, DEFAULT_TOL, True, 0.0, work, c=c, cov=cov, w=w)


def wfit_tol(
    X,
    w,
    y,
    tol: float,
    work: MultilinearWorkspace,
    c: Optional[np.ndarray] = None,
    cov: Optional[np.ndarray] = None,
) -> FitResult:
    """Weighted least squares with a caller-supplied tolerance."""
    return linear_svd(X, y, tol, True, 0.0, work, c=c, cov=cov, w=w)


def wfit_tol_unbalanced(
    X,
    w,
    y,
    tol: float,
    work: MultilinearWorkspace,
    c: Optional[np.ndarray] = None,
    cov: Optional[np.ndarray] = None,
) -> FitResult:
    """Like wfit_tol, without column balancing."""
    return linear_svd(X, y, tol, False, 0.0, work, c=c, cov=cov, w=w)


def predict(x, c, cov):
    """
    Evaluate the fitted model at x.

    Returns
    -------
    (y_hat, y_err)
        Point estimate x . c and its standard error sqrt(x^T cov x)
    """
    return linear_est(x, c, cov)


def residuals(X, y, c, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Residual vector y - X c."""
    return linear_residuals(X, y, c, out=out)


__all__ = [
    'fit',
    'fit_tol',
    'fit_tol_unbalanced',
    'fit_ridge',
    'fit_ridge_vec',
    'wfit',
    'wfit_tol',
    'wfit_tol_unbalanced',
    'predict',
    'residuals',
]
