"""
pymultifit: linear least squares through singular value filtering.

Licensed under GPL-3.0
"""

__version__ = "1.0.0"

# Workspace-based entry points
from ._core import MultilinearWorkspace, FitResult, DEFAULT_TOL
from .linear import (
    fit,
    fit_tol,
    fit_tol_unbalanced,
    fit_ridge,
    fit_ridge_vec,
    wfit,
    wfit_tol,
    wfit_tol_unbalanced,
    predict,
    residuals,
)

# Model interface
from .model import multilinear, MultilinearModel

from .exceptions import (
    ErrorKind,
    MultifitError,
    DimensionError,
    NotSquareError,
    InvalidArgumentError,
    SingularRegularizationError,
)

# Import backend utilities (for advanced users)
from ._backends import get_backend, list_available_backends

__all__ = [
    'MultilinearWorkspace',
    'FitResult',
    'DEFAULT_TOL',
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
    'multilinear',
    'MultilinearModel',
    'ErrorKind',
    'MultifitError',
    'DimensionError',
    'NotSquareError',
    'InvalidArgumentError',
    'SingularRegularizationError',
    'get_backend',
    'list_available_backends',
]
