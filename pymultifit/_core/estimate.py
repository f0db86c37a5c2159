"""
Prediction and residuals from fitted coefficients.
"""

import warnings
from typing import Optional, Tuple, Union

import numpy as np

from .._utils import check_array, check_vector, check_out
from ..exceptions import DimensionError, NotSquareError


def linear_est(
    x,
    c,
    cov,
) -> Tuple[Union[float, np.ndarray], Union[float, np.ndarray]]:
    """
    Estimate y = x . c and its standard error.

    The variance is the quadratic form x^T cov x, evaluated from the
    diagonal and the lower triangle of the (symmetric) covariance:

        var = sum_i x_i^2 cov_ii + 2 sum_{j<i} x_i x_j cov_ij

    Parameters
    ----------
    x : array_like, shape (p,) or (m, p)
        Predictor vector, or one predictor vector per row
    c : array_like, shape (p,)
        Fitted coefficients
    cov : array_like, shape (p, p)
        Coefficient covariance

    Returns
    -------
    (y, y_err)
        Floats for a single x, arrays of shape (m,) for a matrix

    Warns
    -----
    RuntimeWarning
        If the variance is negative (cov not positive semi-definite);
        the error is then nan.
    """
    x = np.asarray(x, dtype=np.float64)
    if x.ndim not in (1, 2):
        raise ValueError("x must be 1- or 2-dimensional")
    c = check_vector(c, 'c')
    cov = check_array(cov, 'cov')

    if x.shape[-1] != c.shape[0]:
        raise DimensionError(
            "number of parameters c does not match number of observations x: "
            f"{c.shape[0]} != {x.shape[-1]}"
        )
    if cov.shape[0] != cov.shape[1]:
        raise NotSquareError(f"covariance matrix is not square: {cov.shape}")
    if c.shape[0] != cov.shape[0]:
        raise DimensionError(
            "number of parameters c does not match size of covariance matrix cov: "
            f"{c.shape[0]} != {cov.shape[0]}"
        )

    y = x @ c

    weights = 2.0 * np.tril(cov, -1) + np.diag(np.diag(cov))
    var = np.einsum('...i,ij,...j->...', x, weights, x)

    if np.any(var < 0):
        warnings.warn(
            "Negative prediction variance; covariance matrix is not "
            "positive semi-definite",
            RuntimeWarning
        )
    with np.errstate(invalid='ignore'):
        y_err = np.sqrt(var)

    if x.ndim == 1:
        return float(y), float(y_err)
    return y, y_err


def linear_residuals(X, y, c, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Residuals r = y - X c.

    Parameters
    ----------
    X : ndarray, shape (n, p)
    y : ndarray, shape (n,)
    c : ndarray, shape (p,)
    out : ndarray, shape (n,), optional
        Receives the residuals

    Returns
    -------
    ndarray, shape (n,)
    """
    X = check_array(X, 'X')
    y = check_vector(y, 'y')
    c = check_vector(c, 'c')
    out = check_out(out, 1, 'r')

    if X.shape[0] != y.shape[0]:
        raise DimensionError(
            "number of observations in y does not match rows of matrix X: "
            f"{y.shape[0]} != {X.shape[0]}"
        )
    if X.shape[1] != c.shape[0]:
        raise DimensionError(
            "number of parameters c does not match columns of matrix X: "
            f"{c.shape[0]} != {X.shape[1]}"
        )
    if out is not None and out.shape[0] != y.shape[0]:
        raise DimensionError(
            "number of observations in y does not match number of residuals: "
            f"{y.shape[0]} != {out.shape[0]}"
        )

    r = y - X @ c
    if out is None:
        return r
    out[:] = r
    return out
