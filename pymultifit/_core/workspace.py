"""
Scratch workspace for multilinear fits.

A workspace is sized for one (n, p) problem and is owned by exactly one
fit at a time. Concurrent fits need one workspace each; there is no
internal locking.
"""

import numbers

import numpy as np

from .._backends import get_backend
from ..exceptions import DimensionError, InvalidArgumentError


class MultilinearWorkspace:
    """
    Buffers reused across fits of an n x p system.

    Attributes
    ----------
    n, p : int
        Number of observations and parameters
    A : ndarray, shape (n, p)
        Working copy of X. Holds the left singular vectors U after a fit.
        May be passed back in as X; the solver detects the aliasing.
    Q : ndarray, shape (p, p)
        Right singular vectors
    QSI : ndarray, shape (p, p)
        Q scaled by the filter coefficients
    S : ndarray, shape (p,)
        Singular values
    D : ndarray, shape (p,)
        Column balance factors
    t : ndarray, shape (n,)
        Weighted right-hand side
    xt : ndarray, shape (p,)
        Projected right-hand side U^T y
    backend : BackendBase
        Decomposition service
    """

    def __init__(self, n: int, p: int, backend='auto'):
        for name, value in (('n', n), ('p', p)):
            if not isinstance(value, numbers.Integral) or isinstance(value, bool):
                raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise InvalidArgumentError(f"{name} must be positive, got {value}")

        self.n = int(n)
        self.p = int(p)

        self.A = np.zeros((self.n, self.p), dtype=np.float64)
        self.Q = np.zeros((self.p, self.p), dtype=np.float64)
        self.QSI = np.zeros((self.p, self.p), dtype=np.float64)
        self.S = np.zeros(self.p, dtype=np.float64)
        self.D = np.ones(self.p, dtype=np.float64)
        self.t = np.zeros(self.n, dtype=np.float64)
        self.xt = np.zeros(self.p, dtype=np.float64)

        self.backend = get_backend(backend)

    @property
    def shape(self):
        return (self.n, self.p)

    def check_size(self, X: np.ndarray) -> None:
        """Raise DimensionError unless X is n x p."""
        if X.shape != self.shape:
            raise DimensionError(
                "size of workspace does not match size of observation matrix: "
                f"workspace is {self.n}x{self.p}, X is {X.shape[0]}x{X.shape[1]}"
            )

    def __repr__(self):
        return (
            f"MultilinearWorkspace(n={self.n}, p={self.p}, "
            f"backend={self.backend.name!r})"
        )
