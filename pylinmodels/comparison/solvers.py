"""
Model comparison.

Public API:
    nested_f_test(full, reduced) -> FTestSolution
    score_model(model, observations=None, rows=None) -> ModelScores
    compare_models(models, observations=None, rows=None) -> list[ModelScores]
"""

from __future__ import annotations

import time
from typing import Any, Iterable, Sequence, TYPE_CHECKING

import numpy as np
from scipy import stats as sp_stats

from pylinmodels.core.exceptions import (
    DegenerateDesignError,
    NotNestedError,
    ValidationError,
)
from pylinmodels.core.observations import ObservationTable
from pylinmodels.core.result import Result
from pylinmodels.comparison._common import FTestParams, ModelScores
from pylinmodels.comparison._criteria import adjusted_r2, aic, bic, validation_error
from pylinmodels.comparison.solution import FTestSolution

if TYPE_CHECKING:
    from pylinmodels.regression.solution import FittedModel


def nested_f_test(full: 'FittedModel', reduced: 'FittedModel') -> FTestSolution:
    """
    F-test of a reduced model against a full model that contains it.

    Args:
        full: Model with the larger term set
        reduced: Model whose term set is a strict subset of full's, fit on
            exactly the same rows with the same weights

    Returns:
        FTestSolution with F, its degrees of freedom and the upper-tail
        p-value

    Raises:
        NotNestedError: If reduced's terms are not a strict subset of full's,
            the row sets or weights differ, or full adds no residual degrees
            of freedom

    Example:
        >>> reduced = fit(DesignMatrix.build(obs, [Term.of('x')], schema, rows=rows))
        >>> full = fit(DesignMatrix.build(obs, [Term.of('x'), Term.of('g')], schema, rows=rows))
        >>> nested_f_test(full, reduced).p_value
    """
    t0 = time.perf_counter()

    if not reduced.term_set < full.term_set:
        raise NotNestedError(
            f"reduced terms {sorted(t.name for t in reduced.term_set)} are not a "
            f"strict subset of full terms {sorted(t.name for t in full.term_set)}"
        )
    if not np.array_equal(full.row_ids, reduced.row_ids):
        raise NotNestedError(
            f"models were fit on different rows (full n={full.n}, reduced "
            f"n={reduced.n}); build both designs over the same complete cases"
        )
    if not np.array_equal(full.weights, reduced.weights):
        raise NotNestedError(
            "models were fit with different weights; their weighted RSS are "
            "not on the same scale"
        )

    df_full = full.df_residual
    k = reduced.df_residual - df_full
    if k <= 0:
        raise NotNestedError(
            f"full model adds no parameters (df_reduced={reduced.df_residual}, "
            f"df_full={df_full})"
        )

    warnings: list[str] = []
    rss_full = full.rss
    # Floating-point noise can leave RSS_reduced a hair below RSS_full.
    diff = max(reduced.rss - rss_full, 0.0)

    if df_full == 0 or rss_full == 0:
        f_value = np.inf if diff > 0 else np.nan
        p_value = 0.0 if diff > 0 else 1.0
        warnings.append("Full model fits exactly; F is degenerate")
    else:
        f_value = (diff / k) / (rss_full / df_full)
        p_value = float(sp_stats.f.sf(f_value, k, df_full))

    added = tuple(t.name for t in full.terms if t not in reduced.term_set)
    params = FTestParams(
        f_value=float(f_value),
        p_value=float(min(max(p_value, 0.0), 1.0)),
        df_num=int(k),
        df_den=int(df_full),
        rss_full=float(rss_full),
        rss_reduced=float(reduced.rss),
        n_obs=full.n,
        added_terms=added,
    )
    elapsed = time.perf_counter() - t0
    result = Result(
        params=params,
        info={'method': 'nested F-test', 'n_retained': full.n, 'n_total': full.n_total},
        timing={'total_seconds': elapsed},
        backend_name='cpu',
        warnings=tuple(warnings),
    )
    return FTestSolution(_result=result)


def score_model(
    model: 'FittedModel',
    observations: ObservationTable | None = None,
    rows: Iterable[Any] | None = None,
) -> ModelScores:
    """
    Score one model under every comparison metric.

    Args:
        model: Fitted model
        observations: Table the held-out rows are drawn from
        rows: Held-out row ids; with observations, the model's design is
            rebuilt over them for the held-out MSE

    Returns:
        ModelScores. held_out_mse is NaN when no held-out rows are given
        or the held-out design is degenerate (e.g. an unseen level).
    """
    held_out = float('nan')
    n_validation = 0
    if rows is not None:
        if observations is None:
            raise ValidationError("rows: observations are required to score held-out rows")
        try:
            held_out, n_validation = validation_error(model, observations, rows)
        except DegenerateDesignError:
            held_out, n_validation = float('nan'), 0

    return ModelScores(
        adjusted_r2=adjusted_r2(model),
        bic=bic(model),
        aic=aic(model),
        held_out_mse=held_out,
        n_train=model.n,
        n_validation=n_validation,
        n_params=model.n_params,
    )


def compare_models(
    models: Sequence['FittedModel'],
    observations: ObservationTable | None = None,
    rows: Iterable[Any] | None = None,
) -> list[ModelScores]:
    """
    Score several models, possibly non-nested, in the order given.

    Each model keeps its own retained-row count, so BIC and adjusted R²
    may be computed on different samples when the term sets reference
    different variables.
    """
    if not models:
        raise ValidationError("models: need at least one model")
    row_list = list(rows) if rows is not None else None
    return [score_model(m, observations, row_list) for m in models]
