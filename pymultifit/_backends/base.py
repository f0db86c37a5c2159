"""
Abstract base classes for backends.

A backend is the decomposition service of the solver: it factors the
working matrix as A = U diag(S) Q^T. Everything else (weighting,
balancing, filtering, covariance) is backend-agnostic NumPy code.
"""

from abc import ABC, abstractmethod
import numpy as np
from dataclasses import dataclass


@dataclass
class SVDFactors:
    """Thin singular value decomposition of an n x p matrix."""
    U: np.ndarray   # Left factor, shape (n, p)
    S: np.ndarray   # Singular values, shape (p,), non-increasing
    Q: np.ndarray   # Right factor (not transposed), shape (p, p)


def complete_factors(U: np.ndarray, S: np.ndarray, Vt: np.ndarray, p: int) -> SVDFactors:
    """
    Bring raw LAPACK-style factors to the (n, p) / (p,) / (p, p) layout.

    When n >= p the thin factors already have this layout. When n < p
    only n singular values exist; the missing ones are exact zeros and
    the matching columns of U are zero, so every downstream product
    keeps its shape and the extra directions are filtered out.

    Parameters
    ----------
    U : ndarray, shape (n, k)
    S : ndarray, shape (k,)
    Vt : ndarray, shape (p, p)
        Transposed right factor (full, so that Q is square)
    p : int
        Number of columns of the decomposed matrix
    """
    n, k = U.shape
    if k < p:
        U = np.hstack([U, np.zeros((n, p - k), dtype=np.float64)])
        S = np.concatenate([S, np.zeros(p - k, dtype=np.float64)])
    return SVDFactors(
        U=np.ascontiguousarray(U[:, :p]),
        S=np.ascontiguousarray(S[:p]),
        Q=np.ascontiguousarray(Vt.T),
    )


class BackendBase(ABC):
    """Abstract base class for all backends."""

    @abstractmethod
    def svd(self, A: np.ndarray) -> SVDFactors:
        """
        Singular value decomposition of the working matrix.

        Backends implement the factorization with their native types,
        only converting at entry/exit.

        Parameters
        ----------
        A : ndarray, shape (n, p)
            Working matrix (weighted and balanced). Not modified.

        Returns
        -------
        SVDFactors
            U (n, p), S (p,), Q (p, p), all float64 numpy arrays
        """
        pass

    @abstractmethod
    def get_device_info(self) -> dict:
        """Get backend information."""
        pass


class CPUBackend(BackendBase):
    """CPU backend base class (always FP64)."""
    pass


class GPUBackendFP64(BackendBase):
    """GPU backend base class for FP64."""
    pass
