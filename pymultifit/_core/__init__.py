"""
Core algorithms (backend-agnostic).
"""

from .balance import balance_columns, balance_factors
from .svfilter import filter_singular_values, filtered_factor, numerical_rank
from .workspace import MultilinearWorkspace
from .solver import DEFAULT_TOL, FitResult, linear_svd
from .ridge import linear_ridge2
from .estimate import linear_est, linear_residuals

__all__ = [
    "balance_columns",
    "balance_factors",
    "filter_singular_values",
    "filtered_factor",
    "numerical_rank",
    "MultilinearWorkspace",
    "DEFAULT_TOL",
    "FitResult",
    "linear_svd",
    "linear_ridge2",
    "linear_est",
    "linear_residuals",
]
