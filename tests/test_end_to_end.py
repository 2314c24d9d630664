"""
End-to-end scenarios: file ingestion through fitting, comparison,
selection and penalized paths.
"""

import numpy as np
import pytest

from pylinmodels.comparison import nested_f_test, validation_error
from pylinmodels.core.exceptions import DegenerateDesignError
from pylinmodels.core.observations import ObservationTable
from pylinmodels.core.split import SplitConfig, split_rows
from pylinmodels.penalized import lasso_lambda_max, make_grid, solve_path, standardize
from pylinmodels.regression import fit
from pylinmodels.selection import forward_select, terms_with_interactions
from pylinmodels.terms import DesignMatrix, VariableSchema


class TestLineRecovery:
    """Recover a known line, including from a CSV file."""

    def test_intercept_and_slope(self, line_table, line_schema):
        model = fit(DesignMatrix.build(line_table, ['x'], line_schema))
        assert model.coef_dict['x'] == pytest.approx(2.0, abs=0.02)
        assert model.intercept == pytest.approx(3.0, abs=0.02)
        assert model.adjusted_r_squared == pytest.approx(1.0, abs=1e-3)

    def test_from_csv(self, tmp_path, line_table, line_schema):
        path = tmp_path / 'line.csv'
        x, y = line_table.column('x'), line_table.column('y')
        lines = ['x,y'] + [f"{a!r},{b!r}" for a, b in zip(x.tolist(), y.tolist())]
        lines[5] = 'NA,' + lines[5].split(',')[1]
        path.write_text("\n".join(lines) + "\n")

        obs = ObservationTable.from_file(path)
        model = fit(DesignMatrix.build(obs, ['x'], line_schema))
        assert model.n == 99
        assert model.info['n_dropped'] == 1
        assert model.coef_dict['x'] == pytest.approx(2.0, abs=0.02)


class TestNominalHeldOut:
    """Held-out prediction for a nominal predictor."""

    @pytest.fixture
    def schema(self):
        return VariableSchema.from_dict({'response': 'y', 'variables': {'level': 'nominal'}})

    def test_constant_offsets_predicted_exactly(self, schema):
        labels = np.array(['lo', 'mid', 'hi'] * 20, dtype=object)
        offsets = {'lo': -1.0, 'mid': 0.5, 'hi': 4.0}
        obs = ObservationTable.from_columns({
            'level': labels, 'y': np.array([offsets[v] for v in labels]),
        })
        split = split_rows(obs.row_ids, SplitConfig(seed=5))
        model = fit(DesignMatrix.build(obs, ['level'], schema, rows=split.train))
        mse, _ = validation_error(model, obs, split.validation)
        assert mse == pytest.approx(0.0, abs=1e-20)

    def test_unseen_level_raises(self, schema):
        obs = ObservationTable.from_columns({
            'level': ['lo', 'mid', 'lo', 'mid', 'hi'],
            'y': [-1.0, 0.5, -1.0, 0.5, 4.0],
        })
        model = fit(DesignMatrix.build(obs, ['level'], schema, rows=[0, 1, 2, 3]))
        with pytest.raises(DegenerateDesignError) as exc_info:
            validation_error(model, obs, [4])
        assert exc_info.value.level == 'hi'


class TestLassoEndpoints:
    """Lasso at zero and at the zeroing penalty."""

    def test_zero_and_zeroing_penalties(self, mixed_table, mixed_schema):
        split = split_rows(mixed_table.row_ids, SplitConfig(seed=8))
        train = DesignMatrix.build(mixed_table, ['x1', 'x2', 'g', 'grade'], mixed_schema,
                                   rows=split.train)
        valid = train.rebuild(mixed_table, split.validation)
        train_std, stats = standardize(train)
        valid_std, _ = standardize(valid, reference=stats)

        grid = make_grid(0.0, 1.5 * lasso_lambda_max(train_std), 15)
        path = solve_path(train_std, penalty='lasso', grid=grid, validation=valid_std, tol=1e-12)

        np.testing.assert_array_equal(path.points[-1].coefficients, 0.0)
        ols = fit(train_std)
        np.testing.assert_allclose(path.points[0].coefficients, ols.coefficients[1:],
                                   rtol=1e-5, atol=1e-6)


class TestWorkflow:
    """Select, refit, test and compare."""

    def test_select_then_test(self, mixed_table, mixed_schema):
        split = split_rows(mixed_table.row_ids, SplitConfig(seed=4))
        search = forward_select(
            mixed_table, mixed_schema, split,
            terms_with_interactions(['x1', 'x2', 'g', 'grade']),
            criterion='held_out_mse', max_terms=4,
        )
        best = search.best()
        assert best.size >= 2

        final = fit(DesignMatrix.build(mixed_table, best.terms, mixed_schema,
                                       rows=split.train_and_validation))
        test_mse, n_test = validation_error(final, mixed_table, split.test)
        assert n_test > 0
        assert test_mse < 1.0

        rows = final.row_ids
        reduced = fit(DesignMatrix.build(mixed_table, best.terms[:1], mixed_schema, rows=rows))
        refit = fit(DesignMatrix.build(mixed_table, best.terms, mixed_schema, rows=rows))
        assert 0.0 <= nested_f_test(refit, reduced).p_value <= 1.0
