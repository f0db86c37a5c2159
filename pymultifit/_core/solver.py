"""
Linear least squares via singular value filtering.

Solves

    min_c ||y - X c||^2 + lam^2 ||c||^2            (unweighted)
    min_c sum_i w_i (y_i - x_i . c)^2              (weighted)

through the SVD of the (weighted, balanced) design matrix:

    A = U diag(S) Q^T
    c = Q diag(alpha) U^T y / D,    alpha_j = s_j / (s_j^2 + lam^2)

Singular values at or below tol * s_0 get alpha_j = 0, which handles
rank-deficient and ill-conditioned designs.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .._utils import check_array, check_vector, check_out
from ..exceptions import DimensionError, NotSquareError, InvalidArgumentError
from .balance import balance_columns
from .svfilter import filter_singular_values, filtered_factor
from .workspace import MultilinearWorkspace

logger = logging.getLogger(__name__)

DEFAULT_TOL = float(np.finfo(np.float64).eps)


@dataclass(frozen=True)
class FitResult:
    """
    Result of a multilinear fit.

    Unpacks as ``coef, cov, chisq, rank = result``.
    """
    coef: np.ndarray    # Coefficients, shape (p,)
    cov: np.ndarray     # Covariance of coefficients, shape (p, p)
    chisq: float        # Weighted residual sum of squares (+ ridge penalty)
    rank: int           # Effective rank
    n: int              # Number of observations

    @property
    def p(self) -> int:
        return self.coef.shape[0]

    @property
    def df_residual(self) -> int:
        return self.n - self.rank

    def __iter__(self):
        return iter((self.coef, self.cov, self.chisq, self.rank))


def _check_fit_args(X, y, w, tol, work, c, cov):
    """Precondition checks, in the documented order."""
    n, p = X.shape

    if n != y.shape[0]:
        raise DimensionError(
            "number of observations in y does not match rows of matrix X: "
            f"{y.shape[0]} != {n}"
        )
    if c is not None and p != c.shape[0]:
        raise DimensionError(
            "number of parameters c does not match columns of matrix X: "
            f"{c.shape[0]} != {p}"
        )
    if w is not None and w.shape[0] != y.shape[0]:
        raise DimensionError(
            "number of weights does not match number of observations: "
            f"{w.shape[0]} != {y.shape[0]}"
        )
    if cov is not None:
        if cov.shape[0] != cov.shape[1]:
            raise NotSquareError(f"covariance matrix is not square: {cov.shape}")
        if cov.shape[0] != p:
            raise DimensionError(
                "number of parameters does not match size of covariance matrix: "
                f"{p} != {cov.shape[0]}"
            )
    work.check_size(X)
    if not tol > 0:
        raise InvalidArgumentError(f"tolerance must be positive, got {tol}")


def _symmetric_cov(QSI: np.ndarray, D: np.ndarray, scale: float) -> np.ndarray:
    """cov[i, j] = scale * (QSI_i . QSI_j) / (D_i D_j), mirrored from the upper triangle."""
    M = QSI @ QSI.T
    M = np.triu(M) + np.triu(M, 1).T
    M /= np.outer(D, D)
    with np.errstate(invalid='ignore'):
        M *= scale
    return M


def linear_svd(
    X,
    y,
    tol: float,
    balance: bool,
    lam: float,
    work: MultilinearWorkspace,
    c: Optional[np.ndarray] = None,
    cov: Optional[np.ndarray] = None,
    w=None,
) -> FitResult:
    """
    Generalized least squares fit through the SVD.

    Parameters
    ----------
    X : ndarray, shape (n, p)
        Design matrix. May be ``work.A`` itself.
    y : ndarray, shape (n,)
        Observations
    tol : float
        Relative singular value tolerance (> 0)
    balance : bool
        Balance the columns before decomposing
    lam : float
        Tikhonov parameter (unweighted fits only)
    work : MultilinearWorkspace
        Workspace sized (n, p)
    c, cov : ndarray, optional
        Output arrays, written in place on success
    w : ndarray, shape (n,), optional
        Observation weights; negative weights count as zero

    Returns
    -------
    FitResult
        coef, cov, chisq, rank

    Notes
    -----
    Unweighted fits scale the covariance by s^2 = r^2 / (n - rank). Weighted
    fits return the raw (X^T W X)^+ since the weights carry the noise model.
    The ridge penalty lam^2 ||c||^2 is added to chisq of unweighted fits only.
    """
    X = check_array(X, 'X')
    y = check_vector(y, 'y')
    if w is not None:
        w = check_vector(w, 'w')
    c = check_out(c, 1, 'c')
    cov = check_out(cov, 2, 'cov')

    _check_fit_args(X, y, w, tol, work, c, cov)

    n, p = X.shape
    weighted = w is not None
    A = work.A

    if X is A:
        # A gets scaled in place below; keep the design for the residuals
        if weighted or balance:
            X = X.copy()
    else:
        if np.may_share_memory(X, A):
            # a view into A, possibly with another layout
            X = X.copy()
        np.copyto(A, X)

    if weighted:
        w = np.clip(w, 0.0, None)
        sqrt_w = np.sqrt(w)
        A *= sqrt_w[:, np.newaxis]
        np.multiply(sqrt_w, y, out=work.t)
        rhs = work.t
    else:
        rhs = y

    D = work.D
    if balance:
        balance_columns(A, D)
    else:
        D.fill(1.0)

    factors = work.backend.svd(A)
    work.S[:] = factors.S
    work.Q[:] = factors.Q

    # xt = U^T y
    np.dot(factors.U.T, rhs, out=work.xt)

    alpha, rank = filter_singular_values(work.S, tol, 0.0 if weighted else lam)
    QSI = filtered_factor(work.Q, alpha, out=work.QSI)

    coef = QSI @ work.xt
    coef /= D

    r = y - X @ coef
    if weighted:
        r2 = float(np.dot(w, r * r))
        chisq = r2
        scale = 1.0
    else:
        r2 = float(np.dot(r, r))
        chisq = r2 + lam * lam * float(np.dot(coef, coef))

        dof = n - rank
        if dof == 0:
            warnings.warn(
                f"No residual degrees of freedom (n = rank = {rank}); "
                "covariance scale is undefined",
                RuntimeWarning
            )
        with np.errstate(divide='ignore', invalid='ignore'):
            scale = np.float64(r2) / dof

    cov_out = _symmetric_cov(QSI, D, scale)

    # A holds U on return
    A[:] = factors.U

    if c is not None:
        c[:] = coef
        coef = c
    if cov is not None:
        cov[:] = cov_out
        cov_out = cov

    logger.debug(
        "linear_svd n=%d p=%d weighted=%s balance=%s lam=%g rank=%d chisq=%g",
        n, p, weighted, balance, lam, rank, chisq
    )

    return FitResult(coef=coef, cov=cov_out, chisq=chisq, rank=rank, n=n)
