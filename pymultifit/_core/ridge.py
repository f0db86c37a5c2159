"""
Ridge regression with a diagonal regularization matrix.

Minimizes ||y - X c||^2 + ||L c||^2 with L = diag(lambda_1, ..., lambda_p)
through the change of variables

    X~ = X L^{-1},    c~ = L c

which turns the problem into standard-form Tikhonov regularization with
lambda = 1 on X~ c~ = y.
"""

from typing import Optional

import numpy as np

from .._utils import check_array, check_vector, check_out
from ..exceptions import DimensionError, SingularRegularizationError
from .solver import DEFAULT_TOL, FitResult, linear_svd, _check_fit_args
from .workspace import MultilinearWorkspace


def linear_ridge2(
    lam,
    X,
    y,
    work: MultilinearWorkspace,
    c: Optional[np.ndarray] = None,
    cov: Optional[np.ndarray] = None,
) -> FitResult:
    """
    Per-parameter ridge regression.

    Parameters
    ----------
    lam : array_like, shape (p,)
        Diagonal of L; every entry must be nonzero
    X : ndarray, shape (n, p)
        Design matrix
    y : ndarray, shape (n,)
        Observations
    work : MultilinearWorkspace
        Workspace sized (n, p); ``work.A`` receives X~
    c, cov : ndarray, optional
        Output arrays, written in place on success

    Returns
    -------
    FitResult
        Coefficients of the original variables. The covariance and
        chisq are those of the transformed solve: cov(c~), and chisq
        including the penalty ||L c||^2.

    Raises
    ------
    DimensionError
        lam has the wrong length, or the workspace does not match X
    SingularRegularizationError
        Some lambda_j is zero
    """
    X = check_array(X, 'X')
    y = check_vector(y, 'y')
    lam = check_vector(lam, 'lambda')
    c = check_out(c, 1, 'c')
    cov = check_out(cov, 2, 'cov')
    p = X.shape[1]

    if lam.shape[0] != p:
        raise DimensionError(
            f"lambda vector has incorrect length: {lam.shape[0]}, expected {p}"
        )
    _check_fit_args(X, y, None, DEFAULT_TOL, work, c, cov)

    # All entries are checked before work.A is touched
    zero = np.flatnonzero(lam == 0.0)
    if zero.size:
        raise SingularRegularizationError(
            f"lambda matrix is singular: lambda[{zero[0]}] == 0"
        )

    # X~ = X L^{-1}, built in the workspace and aliased into the solve
    np.divide(X, lam, out=work.A)

    # No balancing: it cannot be applied to the Tikhonov term
    result = linear_svd(work.A, y, DEFAULT_TOL, False, 1.0, work, c=c, cov=cov)

    # c = L^{-1} c~
    np.divide(result.coef, lam, out=result.coef)

    return result
