"""
Tests for selection criteria and held-out scoring.
"""

import numpy as np
import pytest

from pylinmodels.comparison import (
    adjusted_r2,
    aic,
    bic,
    compare_models,
    held_out_error,
    score_model,
    validation_error,
)
from pylinmodels.core.exceptions import DegenerateDesignError, ValidationError
from pylinmodels.core.observations import ObservationTable
from pylinmodels.core.split import SplitConfig, split_rows
from pylinmodels.regression import fit
from pylinmodels.terms import DesignMatrix, VariableSchema


class TestFormulas:
    """Adjusted R², BIC and AIC against their closed forms."""

    def test_adjusted_r2(self, mixed_table, mixed_schema):
        model = fit(DesignMatrix.build(mixed_table, ['x1', 'g'], mixed_schema))
        n, p = model.n, model.p
        expected = 1 - (model.rss / (n - p - 1)) / (model.tss / (n - 1))
        assert adjusted_r2(model) == pytest.approx(expected)
        assert model.adjusted_r_squared == pytest.approx(expected)

    def test_bic_and_aic(self, mixed_table, mixed_schema):
        model = fit(DesignMatrix.build(mixed_table, ['x1', 'grade'], mixed_schema))
        n, k = model.n, model.p + 1
        base = n * np.log(model.rss / n)
        assert bic(model) == pytest.approx(base + k * np.log(n))
        assert aic(model) == pytest.approx(base + 2 * k)

    def test_each_model_uses_own_n(self, mixed_table, mixed_schema):
        a = fit(DesignMatrix.build(mixed_table, ['x1'], mixed_schema))
        b = fit(DesignMatrix.build(mixed_table, ['x2'], mixed_schema))
        assert a.n == 120 and b.n == 118
        assert bic(b) == pytest.approx(118 * np.log(b.rss / 118) + 2 * np.log(118))

    def test_perfect_fit(self):
        schema = VariableSchema.from_dict({'response': 'y', 'variables': {'x': 'numeric'}})
        obs = ObservationTable.from_columns({'x': [0.0, 1.0, 2.0, 3.0], 'y': [1.0, 3.0, 5.0, 7.0]})
        model = fit(DesignMatrix.build(obs, ['x'], schema))
        assert adjusted_r2(model) == pytest.approx(1.0)
        assert bic(model) < -50 or np.isneginf(bic(model))

    def test_saturated_fit_has_no_adjusted_r2(self):
        schema = VariableSchema.from_dict({'response': 'y', 'variables': {'site': 'nominal'}})
        obs = ObservationTable.from_columns({
            'site': ['s1', 's2', 's3', 's4', 's5', 's6'],
            'y': [1.0, 3.1, 4.9, 7.0, 9.2, 11.0],
        })
        model = fit(DesignMatrix.build(obs, ['site'], schema))
        assert model.df_residual == 0
        assert np.isnan(adjusted_r2(model))
        assert np.isnan(model.adjusted_r_squared)
        assert "Adj. R-squared: NA" in model.summary()

    def test_true_model_preferred(self, mixed_table, mixed_schema):
        good = fit(DesignMatrix.build(mixed_table, ['x1', 'g', 'grade'], mixed_schema, rows=range(20, 120)))
        weak = fit(DesignMatrix.build(mixed_table, ['grade'], mixed_schema, rows=range(20, 120)))
        assert adjusted_r2(good) > adjusted_r2(weak)
        assert bic(good) < bic(weak)


class TestHeldOutError:
    """Mean squared prediction error on held-out rows."""

    def test_nominal_scenario_near_noise(self, rng):
        """Three-level nominal effect; held-out error tracks the noise variance."""
        n = 300
        g = np.array(['a', 'b', 'c'] * (n // 3), dtype=object)
        y = np.array([{'a': 0.0, 'b': 4.0, 'c': -3.0}[v] for v in g]) + rng.standard_normal(n) * 0.1
        obs = ObservationTable.from_columns({'g': g, 'y': y})
        schema = VariableSchema.from_dict({'response': 'y', 'variables': {'g': 'nominal'}})
        split = split_rows(obs.row_ids, SplitConfig(seed=3))
        model = fit(DesignMatrix.build(obs, ['g'], schema, rows=split.train))
        mse, n_val = validation_error(model, obs, split.validation)
        assert n_val == len(split.validation)
        assert mse < 0.05

    def test_matches_manual_prediction(self, mixed_table, mixed_schema):
        ids = mixed_table.row_ids
        model = fit(DesignMatrix.build(mixed_table, ['x1', 'grade'], mixed_schema, rows=ids[:80]))
        held = model.design.rebuild(mixed_table, ids[80:])
        expected = np.mean((held.response - model.predict(held)) ** 2)
        assert held_out_error(model, held) == pytest.approx(expected)

    def test_response_override(self, mixed_table, mixed_schema):
        ids = mixed_table.row_ids
        model = fit(DesignMatrix.build(mixed_table, ['x1'], mixed_schema, rows=ids[:80]))
        held = model.design.rebuild(mixed_table, ids[80:])
        pred = model.predict(held)
        assert held_out_error(model, held, response=pred) == pytest.approx(0.0)

    def test_overlapping_rows(self, mixed_table, mixed_schema):
        ids = mixed_table.row_ids
        model = fit(DesignMatrix.build(mixed_table, ['x1'], mixed_schema, rows=ids[:80]))
        held = model.design.rebuild(mixed_table, ids[70:])
        with pytest.raises(ValidationError, match="overlap"):
            held_out_error(model, held)

    def test_term_mismatch(self, mixed_table, mixed_schema):
        ids = mixed_table.row_ids
        model = fit(DesignMatrix.build(mixed_table, ['x1'], mixed_schema, rows=ids[:80]))
        other = DesignMatrix.build(mixed_table, ['grade'], mixed_schema, rows=ids[80:])
        with pytest.raises(ValidationError, match="differ"):
            held_out_error(model, other)

    def test_unseen_level_in_held_out_rows(self):
        schema = VariableSchema.from_dict({'response': 'y', 'variables': {'g': 'nominal'}})
        obs = ObservationTable.from_columns({
            'g': ['a', 'b', 'a', 'b', 'a', 'c'],
            'y': [1.0, 2.0, 1.1, 2.1, 0.9, 3.0],
        })
        model = fit(DesignMatrix.build(obs, ['g'], schema, rows=[0, 1, 2, 3, 4]))
        with pytest.raises(DegenerateDesignError):
            validation_error(model, obs, [5])


class TestScoreModel:
    """score_model() and compare_models() bundling."""

    def test_scores_without_validation(self, mixed_table, mixed_schema):
        model = fit(DesignMatrix.build(mixed_table, ['x1'], mixed_schema))
        scores = score_model(model)
        assert np.isnan(scores.held_out_mse)
        assert scores.n_validation == 0
        assert scores.n_train == 120
        assert scores.n_params == 2
        assert scores.bic == pytest.approx(bic(model))

    def test_scores_with_validation(self, mixed_table, mixed_schema):
        ids = mixed_table.row_ids
        model = fit(DesignMatrix.build(mixed_table, ['x1', 'x2'], mixed_schema, rows=ids[:80]))
        scores = score_model(model, mixed_table, ids[80:])
        assert scores.n_validation == 40
        assert scores.held_out_mse > 0
        assert set(scores.as_dict()) >= {'adjusted_r2', 'bic', 'aic', 'held_out_mse'}

    def test_degenerate_validation_is_nan(self):
        schema = VariableSchema.from_dict({'response': 'y', 'variables': {'g': 'nominal'}})
        obs = ObservationTable.from_columns({
            'g': ['a', 'b', 'a', 'b', 'a', 'c'],
            'y': [1.0, 2.0, 1.1, 2.1, 0.9, 3.0],
        })
        model = fit(DesignMatrix.build(obs, ['g'], schema, rows=[0, 1, 2, 3, 4]))
        scores = score_model(model, obs, [5])
        assert np.isnan(scores.held_out_mse)

    def test_rows_require_observations(self, mixed_table, mixed_schema):
        model = fit(DesignMatrix.build(mixed_table, ['x1'], mixed_schema))
        with pytest.raises(ValidationError, match="observations"):
            score_model(model, rows=[1, 2])

    def test_compare_models_keeps_order(self, mixed_table, mixed_schema):
        ids = mixed_table.row_ids
        models = [
            fit(DesignMatrix.build(mixed_table, terms, mixed_schema, rows=ids[:90]))
            for terms in (['x1'], ['x2'], ['x1', 'g', 'grade'])
        ]
        scores = compare_models(models, mixed_table, ids[90:])
        assert [s.n_params for s in scores] == [2, 2, 6]
        assert scores[2].held_out_mse < scores[1].held_out_mse

    def test_compare_models_empty(self):
        with pytest.raises(ValidationError):
            compare_models([])
