"""
CPU backend using NumPy + SciPy.

This is the reference implementation.
"""

import logging
import warnings

import numpy as np
from scipy import linalg

from .base import CPUBackend, SVDFactors, complete_factors

logger = logging.getLogger(__name__)


class CPUBackendFP64(CPUBackend):
    """
    CPU backend using SciPy's LAPACK SVD.

    Uses the divide-and-conquer driver (gesdd) and falls back to the
    QR-iteration driver (gesvd) when gesdd fails to converge, which
    happens on some badly conditioned inputs.
    Always uses FP64 precision.
    """

    def __init__(self):
        self.name = "cpu_fp64"
        self.precision = "fp64"

    def svd(self, A: np.ndarray) -> SVDFactors:
        """Decompose A with LAPACK."""
        n, p = A.shape

        # Full right factor needed when there are fewer rows than columns
        full = n < p

        try:
            U, S, Vt = linalg.svd(
                A, full_matrices=full, check_finite=False, lapack_driver='gesdd'
            )
        except linalg.LinAlgError:
            warnings.warn(
                "SVD (gesdd) did not converge, retrying with gesvd",
                RuntimeWarning
            )
            U, S, Vt = linalg.svd(
                A, full_matrices=full, check_finite=False, lapack_driver='gesvd'
            )

        logger.debug("cpu svd of %dx%d matrix, s_max=%g", n, p, S[0] if S.size else 0.0)
        return complete_factors(U, S, Vt, p)

    def get_device_info(self) -> dict:
        """Get backend information."""
        import scipy
        return {
            'backend': 'cpu',
            'precision': 'fp64',
            'library': f'NumPy {np.__version__}, SciPy {scipy.__version__}',
        }
