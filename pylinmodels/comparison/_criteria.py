"""
Model selection criteria.

Each criterion uses the model's own retained-row count n and its column
count p (intercept excluded), so two models fit on different complete-case
row sets each get their own n.

    adjusted R²   1 - (RSS / (n - p - 1)) / (TSS / (n - 1))
    BIC           n ln(RSS / n) + (p + 1) ln(n)
    AIC           n ln(RSS / n) + 2 (p + 1)
    held-out MSE  mean((y_v - ŷ_v)²) over complete-case validation rows
"""

from __future__ import annotations

from typing import Any, Iterable, TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike

from pylinmodels.core.exceptions import ValidationError
from pylinmodels.core.observations import ObservationTable
from pylinmodels.core.validation import check_1d, check_array, check_finite, check_length
from pylinmodels.terms.design import DesignMatrix

if TYPE_CHECKING:
    from pylinmodels.regression.solution import FittedModel


def adjusted_r2(model: 'FittedModel') -> float:
    """
    Adjusted R². NaN when n - p - 1 <= 0 (a saturated fit), 1 or 0 when
    the response is constant.
    """
    n, p = model.n, model.p
    if n - p - 1 <= 0 or n <= 1:
        return float(np.nan)
    if model.tss == 0:
        return 1.0 if model.rss == 0 else 0.0
    return 1.0 - (model.rss / (n - p - 1)) / (model.tss / (n - 1))


def _log_rss_term(model: 'FittedModel') -> float:
    n = model.n
    if model.rss <= 0:
        return -np.inf
    return n * np.log(model.rss / n)


def bic(model: 'FittedModel') -> float:
    """Bayesian information criterion; -inf for a perfect fit."""
    return float(_log_rss_term(model) + model.n_params * np.log(model.n))


def aic(model: 'FittedModel') -> float:
    """Akaike information criterion; -inf for a perfect fit."""
    return float(_log_rss_term(model) + 2.0 * model.n_params)


def held_out_error(
    model: 'FittedModel',
    validation: DesignMatrix,
    response: ArrayLike | None = None,
) -> float:
    """
    Mean squared prediction error on held-out rows.

    Args:
        model: Fitted model
        validation: Design over held-out rows built with the model's term
            set and encoding (model.design.rebuild(observations, rows))
        response: Held-out response; defaults to validation.response

    Raises:
        ValidationError: If the term set or columns differ from the model's,
            or the held-out rows overlap the training rows
    """
    if validation.term_set != model.term_set:
        raise ValidationError(
            f"validation design terms {sorted(t.name for t in validation.term_set)} "
            f"differ from the model's {sorted(t.name for t in model.term_set)}"
        )
    overlap = set(validation.row_ids.tolist()).intersection(model.row_ids.tolist())
    if overlap:
        raise ValidationError(
            f"held-out rows overlap the training rows ({len(overlap)} shared)"
        )

    if response is None:
        y = validation.response
    else:
        y = check_array(response, 'response')
        check_1d(y, 'response')
        check_length(y, validation.n, 'response')
        check_finite(y, 'response')

    predictions = model.predict(validation)
    return float(np.mean((y - predictions) ** 2))


def validation_error(
    model: 'FittedModel',
    observations: ObservationTable,
    rows: Iterable[Any],
) -> tuple[float, int]:
    """
    Rebuild the model's design over `rows` and score it.

    Complete-case exclusion applies to the held-out rows independently,
    so the held-out sample size can differ from other metrics'.

    Returns:
        (held-out MSE, held-out rows used)

    Raises:
        DegenerateDesignError: No usable held-out row, or a nominal level
            the training rows never showed
    """
    validation = model.design.rebuild(observations, rows)
    return held_out_error(model, validation), validation.n
