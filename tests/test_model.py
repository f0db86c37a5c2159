"""
Test the R-style model interface.
"""

import pytest
import numpy as np
import pandas as pd

from pymultifit import (
    multilinear,
    MultilinearModel,
    MultilinearWorkspace,
    fit_tol,
    fit_ridge_vec,
    wfit,
    predict,
    DEFAULT_TOL,
)


@pytest.fixture
def data():
    """Calibration-style dataset with a known linear response."""
    rng = np.random.RandomState(3)
    n = 60
    df = pd.DataFrame({
        'dose': rng.uniform(0, 10, n),
        'temperature': rng.normal(20, 3, n),
    })
    df['response'] = 1.5 + 0.8 * df['dose'] - 0.2 * df['temperature'] + rng.normal(0, 0.1, n)
    df['weight'] = rng.uniform(0.5, 2.0, n)
    return df


def design(df):
    return np.column_stack([np.ones(len(df)), df[['dose', 'temperature']].values])


class TestModelFit:

    def test_matches_entry_point(self, data):
        """Intercept column plus fit_tol gives the same numbers."""
        model = multilinear(y='response', X=['dose', 'temperature'], data=data, backend='cpu')

        X = design(data)
        y = data['response'].values
        result = fit_tol(X, y, DEFAULT_TOL, MultilinearWorkspace(*X.shape, backend='cpu'))

        np.testing.assert_allclose(model.coefficients, result.coef, rtol=1e-12)
        np.testing.assert_allclose(model.vcov, result.cov, rtol=1e-12)
        assert model.chisq == pytest.approx(result.chisq)
        assert model.rank == 3
        assert model.df_residual == len(data) - 3

    def test_recovers_coefficients(self, data):
        model = multilinear(y='response', X=['dose', 'temperature'], data=data, backend='cpu')
        np.testing.assert_allclose(model.coefficients, [1.5, 0.8, -0.2], atol=0.1)
        assert model.r_squared > 0.99

    def test_labels(self, data):
        model = multilinear(y='response', X=['dose', 'temperature'], data=data, backend='cpu')

        assert list(model.coef.index) == ['Intercept', 'dose', 'temperature']
        assert list(model.cov.columns) == ['Intercept', 'dose', 'temperature']
        np.testing.assert_allclose(model.std_errors, np.sqrt(np.diag(model.vcov)))

    def test_array_inputs(self, data):
        X = data[['dose', 'temperature']].values
        y = data['response'].values
        model = MultilinearModel(y, X, intercept=False, backend='cpu')

        assert model.var_names == ['x0', 'x1']
        assert model.n_coef == 2
        np.testing.assert_allclose(model.fitted_values + model.residuals, y)

    def test_residual_standard_error(self, data):
        model = multilinear(y='response', X=['dose', 'temperature'], data=data, backend='cpu')
        expected = np.sqrt(model.chisq / model.df_residual)
        assert model.sigma == pytest.approx(expected)

    def test_unbalanced_matches_balanced(self, data):
        balanced = multilinear(y='response', X=['dose', 'temperature'], data=data, backend='cpu')
        plain = multilinear(
            y='response', X=['dose', 'temperature'], data=data, balance=False, backend='cpu'
        )
        np.testing.assert_allclose(plain.coefficients, balanced.coefficients, rtol=1e-10)


class TestWeightedModel:

    def test_matches_wfit(self, data):
        model = multilinear(
            y='response', X=['dose', 'temperature'], data=data, weights='weight', backend='cpu'
        )
        X = design(data)
        result = wfit(
            X, data['weight'].values, data['response'].values,
            MultilinearWorkspace(*X.shape, backend='cpu')
        )

        np.testing.assert_allclose(model.coefficients, result.coef, rtol=1e-12)
        assert model.is_weighted
        assert np.isnan(model.sigma)
        assert np.all(np.isfinite(model.pvalues))
        assert 0.0 <= model.r_squared <= 1.0

    def test_weights_with_ridge_rejected(self, data):
        with pytest.raises(ValueError, match="cannot be combined"):
            multilinear(
                y='response', X=['dose', 'temperature'], data=data,
                weights='weight', ridge=0.1, backend='cpu'
            )


class TestRidgeModel:

    def test_scalar_ridge(self, data):
        model = multilinear(
            y='response', X=['dose', 'temperature'], data=data, ridge=0.5, backend='cpu'
        )
        assert model.is_regularized
        assert np.all(np.isnan(model.pvalues))
        assert model.conf_int().isna().all().all()

    def test_vector_ridge(self, data):
        lam = np.array([0.1, 0.5, 2.0])
        model = multilinear(
            y='response', X=['dose', 'temperature'], data=data, ridge=lam, backend='cpu'
        )
        X = design(data)
        result = fit_ridge_vec(
            lam, X, data['response'].values, MultilinearWorkspace(*X.shape, backend='cpu')
        )
        np.testing.assert_allclose(model.coefficients, result.coef, rtol=1e-12)

    def test_uniform_vector_matches_scalar(self, data):
        scalar = multilinear(
            y='response', X=['dose', 'temperature'], data=data, ridge=0.7, backend='cpu'
        )
        vector = multilinear(
            y='response', X=['dose', 'temperature'], data=data,
            ridge=np.full(3, 0.7), backend='cpu'
        )
        np.testing.assert_allclose(vector.coefficients, scalar.coefficients, rtol=1e-10)
        np.testing.assert_allclose(vector.vcov, 0.7**2 * scalar.vcov, rtol=1e-8, atol=1e-14)


class TestModelOutputs:

    def test_conf_int(self, data):
        model = multilinear(y='response', X=['dose', 'temperature'], data=data, backend='cpu')
        ci = model.conf_int(alpha=0.05)

        assert list(ci.columns) == ['lower', 'upper']
        assert list(ci.index) == model.var_names
        assert np.all(ci['lower'] < model.coefficients)
        assert np.all(ci['upper'] > model.coefficients)

    def test_predict(self, data):
        model = multilinear(y='response', X=['dose', 'temperature'], data=data, backend='cpu')
        new = pd.DataFrame({'dose': [1.0, 5.0], 'temperature': [18.0, 22.0]})

        y_hat, y_err = model.predict(new, return_error=True)

        X_new = np.column_stack([np.ones(2), new.values])
        expected, expected_err = predict(X_new, model.coefficients, model.vcov)
        np.testing.assert_allclose(y_hat, expected)
        np.testing.assert_allclose(y_err, expected_err)
        assert np.all(y_err > 0)

    def test_predict_single_row_array(self, data):
        model = multilinear(y='response', X=['dose', 'temperature'], data=data, backend='cpu')
        y_hat = model.predict(np.array([2.0, 20.0]))
        assert y_hat.shape == (1,)
        assert y_hat[0] == pytest.approx(model.coefficients @ [1.0, 2.0, 20.0])

    def test_summary(self, data, capsys):
        model = multilinear(y='response', X=['dose', 'temperature'], data=data, backend='cpu')
        model.summary()
        out = capsys.readouterr().out

        assert 'MULTILINEAR FIT RESULTS' in out
        assert 'ordinary least squares' in out
        assert 'temperature' in out
        assert 'Backend: cpu_fp64' in out

    def test_repr(self, data):
        model = multilinear(y='response', X=['dose', 'temperature'], data=data, backend='cpu')
        assert repr(model).startswith('MultilinearModel(n=60, p=3, rank=3')

    def test_missing_data(self):
        with pytest.raises(ValueError, match="Must provide data"):
            MultilinearModel('response', ['dose'])
