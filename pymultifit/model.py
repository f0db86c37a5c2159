"""
Multilinear regression with an R-style interface.

Wraps the workspace-based entry points in a model object with labelled
coefficients, standard errors and a printed summary.
"""

import logging
from typing import Optional, Union, List

import numpy as np
import pandas as pd
from scipy import stats

from ._core import DEFAULT_TOL, MultilinearWorkspace
from . import linear

logger = logging.getLogger(__name__)


class MultilinearModel:
    """
    Fit a (weighted or regularized) linear model.

    Examples
    --------
    >>> import pandas as pd
    >>> from pymultifit import multilinear
    >>>
    >>> data = pd.read_csv('calibration.csv')
    >>> model = multilinear(y='response', X=['dose', 'temperature'], data=data)
    >>> model.summary()
    >>>
    >>> model.coef            # Named coefficients
    >>> model.cov             # Labelled covariance matrix
    >>> model.conf_int()      # Confidence intervals
    >>> model.predict(new_data, return_error=True)
    """

    def __init__(
        self,
        y: Union[str, np.ndarray],
        X: Union[List[str], np.ndarray],
        data: Optional[pd.DataFrame] = None,
        weights: Optional[Union[str, np.ndarray]] = None,
        tol: Optional[float] = None,
        ridge=None,
        balance: bool = True,
        intercept: bool = True,
        backend='auto',
    ):
        """
        Fit the model.

        Parameters
        ----------
        y : str or array
            Response variable
            - If string: column name in data
            - If array: numeric values
        X : list of str or array
            Predictor variables
            - If list of strings: column names in data
            - If array: numeric matrix (n x k)
        data : DataFrame, optional
            Dataset containing y, X and weights variables
        weights : str or array, optional
            Observation weights (inverse variances). Negative weights
            count as zero.
        tol : float, optional
            Relative singular value tolerance (default: machine epsilon).
            Ignored for ridge fits.
        ridge : float or array, optional
            Tikhonov parameter: a scalar for standard-form ridge, or one
            nonzero value per coefficient (intercept included). Cannot be
            combined with weights.
        balance : bool
            Balance the design columns before decomposing (not for ridge)
        intercept : bool
            Prepend a column of ones named 'Intercept'
        backend : str
            Decomposition backend: 'auto', 'cpu', 'gpu', 'pytorch'
        """
        if isinstance(y, str):
            if data is None:
                raise ValueError("Must provide data when y is a string")
            self.y_values = np.asarray(data[y].values, dtype=np.float64)
            self.y_name = y
        else:
            self.y_values = np.asarray(y, dtype=np.float64)
            self.y_name = 'y'

        if isinstance(X, list) and all(isinstance(x, str) for x in X):
            if data is None:
                raise ValueError("Must provide data when X is list of strings")
            X_values = np.asarray(data[X].values, dtype=np.float64)
            X_names = list(X)
        else:
            X_values = np.asarray(X, dtype=np.float64)
            if X_values.ndim == 1:
                X_values = X_values[:, np.newaxis]
            X_names = [f'x{i}' for i in range(X_values.shape[1])]

        if weights is not None:
            if isinstance(weights, str):
                if data is None:
                    raise ValueError("Must provide data when weights is a string")
                self.weights_values = np.asarray(data[weights].values, dtype=np.float64)
            else:
                self.weights_values = np.asarray(weights, dtype=np.float64)
        else:
            self.weights_values = None

        if ridge is not None and self.weights_values is not None:
            raise ValueError("ridge regularization cannot be combined with weights")

        self.intercept = intercept
        if intercept:
            X_values = np.column_stack([np.ones(X_values.shape[0]), X_values])
            X_names = ['Intercept'] + X_names

        self.X_values = X_values
        self.var_names = X_names
        self.n_obs = len(self.y_values)
        self.n_coef = X_values.shape[1]
        self.tol = DEFAULT_TOL if tol is None else tol
        self.ridge = ridge
        self.balance = balance

        self.workspace = MultilinearWorkspace(self.n_obs, self.n_coef, backend=backend)
        self._result = self._fit()

        self._compute_statistics()

    @property
    def is_weighted(self) -> bool:
        return self.weights_values is not None

    @property
    def is_regularized(self) -> bool:
        return self.ridge is not None

    def _fit(self):
        """Dispatch to the matching entry point."""
        X, y, work = self.X_values, self.y_values, self.workspace

        if self.is_weighted:
            w = self.weights_values
            if self.balance:
                return linear.wfit_tol(X, w, y, self.tol, work)
            return linear.wfit_tol_unbalanced(X, w, y, self.tol, work)

        if self.is_regularized:
            if np.ndim(self.ridge) == 0:
                return linear.fit_ridge(float(self.ridge), X, y, work)
            return linear.fit_ridge_vec(self.ridge, X, y, work)

        if self.balance:
            return linear.fit_tol(X, y, self.tol, work)
        return linear.fit_tol_unbalanced(X, y, self.tol, work)

    def _compute_statistics(self):
        """Compute standard errors, t-stats, p-values, etc."""
        result = self._result

        self.coefficients = result.coef
        self.vcov = result.cov
        self.chisq = result.chisq
        self.rank = result.rank
        self.df_residual = result.df_residual

        self.residuals = linear.residuals(self.X_values, self.y_values, self.coefficients)
        self.fitted_values = self.y_values - self.residuals

        # Clamp tiny negative diagonals from rounding in rank-deficient fits
        self.std_errors = np.sqrt(np.clip(np.diag(self.vcov), 0.0, None))
        with np.errstate(divide='ignore', invalid='ignore'):
            self.t_values = np.where(
                self.std_errors > 0, self.coefficients / self.std_errors, np.nan
            )

        # Weighted covariance assumes known variances: normal reference
        if self.is_regularized:
            self.pvalues = np.full(self.n_coef, np.nan)
        elif self.is_weighted:
            self.pvalues = 2 * stats.norm.sf(np.abs(self.t_values))
        elif self.df_residual > 0:
            self.pvalues = 2 * stats.t.sf(np.abs(self.t_values), self.df_residual)
        else:
            self.pvalues = np.full(self.n_coef, np.nan)

        # Residual standard error (unweighted only)
        if not self.is_weighted and self.df_residual > 0:
            rss = float(self.residuals @ self.residuals)
            self.sigma = np.sqrt(rss / self.df_residual)
        else:
            self.sigma = np.nan

        # R-squared
        if self.is_weighted:
            w = np.clip(self.weights_values, 0.0, None)
            center = np.average(self.y_values, weights=w) if self.intercept and w.sum() > 0 else 0.0
            tss = float(np.sum(w * (self.y_values - center) ** 2))
            rss = float(np.sum(w * self.residuals ** 2))
        else:
            center = np.mean(self.y_values) if self.intercept else 0.0
            tss = float(np.sum((self.y_values - center) ** 2))
            rss = float(self.residuals @ self.residuals)
        self.r_squared = 1 - (rss / tss) if tss > 0 else 0.0

        logger.debug(
            "MultilinearModel fitted: n=%d p=%d rank=%d chisq=%g",
            self.n_obs, self.n_coef, self.rank, self.chisq
        )

    @property
    def coef(self) -> pd.Series:
        """Named coefficients (pandas Series)."""
        return pd.Series(self.coefficients, index=self.var_names)

    @property
    def cov(self) -> pd.DataFrame:
        """Labelled covariance matrix (pandas DataFrame)."""
        return pd.DataFrame(self.vcov, index=self.var_names, columns=self.var_names)

    def conf_int(self, alpha: float = 0.05) -> pd.DataFrame:
        """
        Confidence intervals for coefficients.

        Parameters
        ----------
        alpha : float
            Significance level (default: 0.05 for 95% CI)

        Returns
        -------
        DataFrame
            Confidence intervals with columns 'lower' and 'upper'.
            NaN for regularized fits, whose estimates are biased.
        """
        if self.is_regularized or (not self.is_weighted and self.df_residual <= 0):
            crit = np.nan
        elif self.is_weighted:
            crit = stats.norm.ppf(1 - alpha/2)
        else:
            crit = stats.t.ppf(1 - alpha/2, self.df_residual)

        lower = self.coefficients - crit * self.std_errors
        upper = self.coefficients + crit * self.std_errors

        return pd.DataFrame({
            'lower': lower,
            'upper': upper
        }, index=self.var_names)

    def predict(self, newdata: Union[pd.DataFrame, np.ndarray], return_error: bool = False):
        """
        Predict response for new data.

        Parameters
        ----------
        newdata : DataFrame or array
            New predictor values
            - If DataFrame: must have columns matching the predictor names
            - If array: must have the same number of columns as X
        return_error : bool
            Also return the standard error of each prediction

        Returns
        -------
        array, or (array, array) when return_error is True
        """
        names = self.var_names[1:] if self.intercept else self.var_names
        if isinstance(newdata, pd.DataFrame):
            X_new = np.asarray(newdata[names].values, dtype=np.float64)
        else:
            X_new = np.asarray(newdata, dtype=np.float64)
            if X_new.ndim == 1:
                X_new = X_new[np.newaxis, :]

        if self.intercept:
            X_new = np.column_stack([np.ones(len(X_new)), X_new])

        y_hat, y_err = linear.predict(X_new, self.coefficients, self.vcov)

        if return_error:
            return y_hat, y_err
        return y_hat

    def summary(self):
        """Print summary of fit results."""
        print()
        print("="*80)
        print("MULTILINEAR FIT RESULTS")
        print("="*80)
        print()

        if self.is_weighted:
            method = "weighted least squares"
        elif self.is_regularized:
            method = "ridge regression"
        else:
            method = "ordinary least squares"

        print(f"Dependent variable: {self.y_name}")
        print(f"Method: {method}")
        print(f"Number of observations: {self.n_obs}")
        print(f"Effective rank: {self.rank} of {self.n_coef}")
        print()

        print("Coefficients:")
        print("-"*80)
        print(f"{'Variable':<20} {'Estimate':>12} {'Std. Error':>12} {'t value':>10} {'Pr(>|t|)':>12}")
        print("-"*80)

        for i, name in enumerate(self.var_names):
            p = self.pvalues[i]
            if np.isnan(p):
                sig = ''
                p_str = 'NA'
            else:
                if p < 0.001:
                    sig = ' ***'
                elif p < 0.01:
                    sig = ' **'
                elif p < 0.05:
                    sig = ' *'
                elif p < 0.1:
                    sig = ' .'
                else:
                    sig = ''

                p_str = f"{p:.4f}" if p >= 0.0001 else "<.0001"

            print(f"{name:<20} {self.coefficients[i]:>12.4f} {self.std_errors[i]:>12.4f} "
                  f"{self.t_values[i]:>10.3f} {p_str:>12}{sig}")

        print("-"*80)
        print("Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1")
        print()

        print(f"Chi-square:              {self.chisq:.6g}")
        if not np.isnan(self.sigma):
            print(f"Residual standard error: {self.sigma:.4f} on {self.df_residual} degrees of freedom")
        print(f"R-squared:               {self.r_squared:.4f}")

        print()
        print(f"Backend: {self.workspace.backend.name}")
        print("="*80)
        print()

    def __repr__(self):
        return f"MultilinearModel(n={self.n_obs}, p={self.n_coef}, rank={self.rank}, chisq={self.chisq:.4g})"


def multilinear(y, X, data=None, **kwargs):
    """
    Fit a multilinear model (convenience function).

    Parameters
    ----------
    y : str or array
        Response variable
    X : list of str or array
        Predictor variables
    data : DataFrame, optional
        Dataset
    **kwargs
        Additional arguments passed to MultilinearModel

    Returns
    -------
    MultilinearModel
        Fitted model object

    Examples
    --------
    >>> model = multilinear(y='mpg', X=['wt', 'hp'], data=mtcars)
    >>> model.summary()
    >>>
    >>> # Ridge with a scalar penalty
    >>> model = multilinear(y='mpg', X=['wt', 'hp'], data=mtcars, ridge=0.5)
    """
    return MultilinearModel(y=y, X=X, data=data, **kwargs)
