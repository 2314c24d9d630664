"""
Tests for regression fit().

Tests the complete pipeline: DesignMatrix, WLS validation, the QR
backend and FittedModel properties.
"""

import numpy as np
import pytest

from pylinmodels.core.compute.tolerances import CPU_FP64
from pylinmodels.core.exceptions import DimensionError, RankDeficientError, ValidationError
from pylinmodels.core.observations import ObservationTable
from pylinmodels.regression import FittedModel, fit
from pylinmodels.terms import INTERCEPT, DesignMatrix, Term, VariableSchema


@pytest.fixture
def two_x_schema():
    return VariableSchema.from_dict({
        'response': 'y', 'variables': {'x1': 'numeric', 'x2': 'numeric', 'z': 'numeric'},
    })


@pytest.fixture
def two_x_table(rng):
    n = 80
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    y = 0.5 + 1.0 * x1 - 2.0 * x2 + rng.standard_normal(n) * 0.2
    return ObservationTable.from_columns({'x1': x1, 'x2': x2, 'z': 2.0 * x1, 'y': y})


class TestFitBasic:
    """Basic fit() functionality tests."""

    def test_recovers_line(self, line_table, line_schema):
        model = fit(DesignMatrix.build(line_table, ['x'], line_schema))
        assert isinstance(model, FittedModel)
        assert model.coef_dict['x'] == pytest.approx(2.0, abs=0.02)
        assert model.intercept == pytest.approx(3.0, abs=0.02)
        assert model.adjusted_r_squared > 0.999

    def test_column_names(self, two_x_table, two_x_schema):
        model = fit(DesignMatrix.build(two_x_table, ['x1', 'x2'], two_x_schema))
        assert model.column_names == (INTERCEPT, 'x1', 'x2')
        assert model.coefficients.shape == (3,)
        assert model.p == 2
        assert model.n_params == 3
        assert model.df_residual == 80 - 3

    def test_matches_numpy_lstsq(self, two_x_table, two_x_schema):
        design = DesignMatrix.build(two_x_table, ['x1', 'x2'], two_x_schema)
        model = fit(design)
        expected, *_ = np.linalg.lstsq(design.with_intercept(), design.response, rcond=None)
        np.testing.assert_allclose(model.coefficients, expected, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_residuals_sum_to_zero(self, two_x_table, two_x_schema):
        model = fit(DesignMatrix.build(two_x_table, ['x1', 'x2'], two_x_schema))
        assert abs(model.residuals.sum()) < 1e-10
        np.testing.assert_allclose(model.fitted_values + model.residuals, model.design.response)

    def test_rss_and_tss(self, two_x_table, two_x_schema):
        design = DesignMatrix.build(two_x_table, ['x1'], two_x_schema)
        model = fit(design)
        y = design.response
        assert model.rss == pytest.approx(np.sum(model.residuals ** 2))
        assert model.tss == pytest.approx(np.sum((y - y.mean()) ** 2))
        assert 0.0 <= model.r_squared <= 1.0

    def test_intercept_only(self, line_table, line_schema):
        model = fit(DesignMatrix.intercept_only(line_table, line_schema))
        assert model.column_names == (INTERCEPT,)
        assert model.intercept == pytest.approx(line_table.column('y').mean())
        assert model.r_squared == pytest.approx(0.0, abs=1e-12)

    def test_row_accounting(self, mixed_table, mixed_schema):
        model = fit(DesignMatrix.build(mixed_table, ['x1', 'x2', 'g'], mixed_schema))
        assert model.info['n_total'] == 120
        assert model.info['n_retained'] == 117
        assert model.info['n_dropped'] == 3
        assert model.n_dropped == 3

    def test_backend_name_and_timing(self, line_table, line_schema):
        model = fit(DesignMatrix.build(line_table, ['x'], line_schema))
        assert model.backend_name == 'cpu_qr'
        assert 'total_seconds' in model.timing
        assert model.info['method'] == 'qr'

    def test_unknown_backend(self, line_table, line_schema):
        with pytest.raises(ValueError, match="Unknown backend"):
            fit(DesignMatrix.build(line_table, ['x'], line_schema), backend='gpu')


class TestWeights:
    """Weighted fits."""

    def test_unit_weights_match_unweighted(self, two_x_table, two_x_schema):
        design = DesignMatrix.build(two_x_table, ['x1', 'x2'], two_x_schema)
        plain = fit(design)
        unit = fit(design, weights=np.ones(design.n))
        np.testing.assert_allclose(unit.coefficients, plain.coefficients, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)
        assert unit.rss == pytest.approx(plain.rss)
        assert unit.info['weighted'] is True
        assert plain.info['weighted'] is False

    def test_weighted_matches_scaled_lstsq(self, rng, two_x_table, two_x_schema):
        design = DesignMatrix.build(two_x_table, ['x1', 'x2'], two_x_schema)
        w = rng.uniform(0.5, 3.0, design.n)
        model = fit(design, weights=w)
        sw = np.sqrt(w)
        expected, *_ = np.linalg.lstsq(sw[:, None] * design.with_intercept(), sw * design.response, rcond=None)
        np.testing.assert_allclose(model.coefficients, expected, rtol=1e-9, atol=1e-12)
        assert model.rss == pytest.approx(np.sum(w * model.residuals ** 2))

    def test_non_positive_weights(self, line_table, line_schema):
        design = DesignMatrix.build(line_table, ['x'], line_schema)
        w = np.ones(design.n)
        w[3] = 0.0
        with pytest.raises(ValidationError, match="strictly positive"):
            fit(design, weights=w)

    def test_weight_length(self, line_table, line_schema):
        design = DesignMatrix.build(line_table, ['x'], line_schema)
        with pytest.raises(DimensionError):
            fit(design, weights=np.ones(design.n - 1))

    def test_response_override(self, line_table, line_schema):
        design = DesignMatrix.build(line_table, ['x'], line_schema)
        model = fit(design, response=5.0 - design.X[:, 0])
        assert model.coef_dict['x'] == pytest.approx(-1.0)
        assert model.intercept == pytest.approx(5.0)

    def test_non_finite_response(self, line_table, line_schema):
        design = DesignMatrix.build(line_table, ['x'], line_schema)
        y = design.response.copy()
        y[0] = np.nan
        with pytest.raises(ValidationError, match="non-finite"):
            fit(design, response=y)


class TestRankDeficiency:
    """Test behavior with rank-deficient designs."""

    def test_collinear_column_named(self, two_x_table, two_x_schema):
        design = DesignMatrix.build(two_x_table, ['x1', 'x2', 'z'], two_x_schema)
        with pytest.raises(RankDeficientError) as exc_info:
            fit(design)
        err = exc_info.value
        assert err.rank == 3
        assert err.expected_rank == 4
        assert len(err.columns) == 1
        assert err.columns[0] in ('x1', 'z')

    def test_constant_column_collinear_with_intercept(self):
        schema = VariableSchema.from_dict({'response': 'y', 'variables': {'c': 'numeric'}})
        obs = ObservationTable.from_columns({'c': [1.0] * 6, 'y': [1.0, 2.0, 3.0, 2.0, 1.0, 0.5]})
        with pytest.raises(RankDeficientError):
            fit(DesignMatrix.build(obs, ['c'], schema))


class TestInference:
    """Standard errors, t statistics and p-values."""

    def test_standard_errors_match_formula(self, two_x_table, two_x_schema):
        design = DesignMatrix.build(two_x_table, ['x1', 'x2'], two_x_schema)
        model = fit(design)
        X = design.with_intercept()
        sigma2 = model.rss / model.df_residual
        expected = np.sqrt(sigma2 * np.diag(np.linalg.inv(X.T @ X)))
        np.testing.assert_allclose(model.standard_errors, expected, rtol=1e-8)
        assert model.residual_std_error == pytest.approx(np.sqrt(sigma2))

    def test_p_values_in_unit_interval(self, two_x_table, two_x_schema):
        model = fit(DesignMatrix.build(two_x_table, ['x1', 'x2'], two_x_schema))
        assert np.all((model.p_values >= 0) & (model.p_values <= 1))
        assert model.p_values[1] < 1e-6

    def test_saturated_fit_warns(self):
        schema = VariableSchema.from_dict({'response': 'y', 'variables': {'x': 'numeric'}})
        obs = ObservationTable.from_columns({'x': [0.0, 1.0], 'y': [1.0, 3.0]})
        model = fit(DesignMatrix.build(obs, ['x'], schema))
        assert model.df_residual == 0
        assert any("Saturated" in w for w in model.warnings)
        assert np.all(np.isnan(model.standard_errors))
        assert np.isnan(model.residual_std_error)
        assert "Residual Std. Error: NA on 0 DF" in model.summary()
        assert model.coef_dict['x'] == pytest.approx(2.0)


class TestPredictAndSummary:
    """Prediction on rebuilt designs and text output."""

    def test_predict_on_rebuilt_design(self, two_x_table, two_x_schema):
        ids = two_x_table.row_ids
        train = DesignMatrix.build(two_x_table, ['x1', 'x2'], two_x_schema, rows=ids[:60])
        model = fit(train)
        held = train.rebuild(two_x_table, ids[60:])
        pred = model.predict(held)
        expected = model.intercept + held.X @ model.coefficients[1:]
        np.testing.assert_allclose(pred, expected)

    def test_predict_column_mismatch(self, two_x_table, two_x_schema):
        model = fit(DesignMatrix.build(two_x_table, ['x1'], two_x_schema))
        other = DesignMatrix.build(two_x_table, ['x2'], two_x_schema)
        with pytest.raises(ValidationError, match="do not match"):
            model.predict(other)

    def test_summary(self, mixed_table, mixed_schema):
        model = fit(DesignMatrix.build(mixed_table, [Term.of('x1'), Term.of('g')], mixed_schema))
        text = model.summary()
        assert "Least Squares Results" in text
        assert "g[b]" in text
        assert "119 retained of 120" in text

    def test_repr(self, line_table, line_schema):
        model = fit(DesignMatrix.build(line_table, ['x'], line_schema))
        assert repr(model).startswith("FittedModel(terms=['x']")
