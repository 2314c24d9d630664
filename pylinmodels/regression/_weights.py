"""
Per-group residual-variance weights.

Two-step weighted least squares for heteroscedastic groups: fit on the
training rows, estimate each group's residual variance from that fit, and
weight every row by the inverse of its group's variance. Variances are
always re-estimated from the training fit that is passed in; externally
supplied variance figures are not accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pylinmodels.core.exceptions import DegenerateDesignError, ValidationError
from pylinmodels.core.observations import ObservationTable
from pylinmodels.terms.design import DesignMatrix
from pylinmodels.terms.schema import as_label

if TYPE_CHECKING:
    from pylinmodels.regression.solution import FittedModel


@dataclass(frozen=True)
class GroupWeights:
    """
    Inverse-variance weights keyed by group label.

    Attributes:
        variable: Grouping variable
        variances: label -> residual variance on the training fit
        counts: label -> training rows used for the estimate
    """
    variable: str
    variances: dict[str, float]
    counts: dict[str, int]

    @property
    def weights(self) -> dict[str, float]:
        return {label: 1.0 / var for label, var in self.variances.items()}

    def for_design(
        self,
        design: DesignMatrix,
        observations: ObservationTable,
    ) -> NDArray[np.floating[Any]]:
        """
        Weights aligned to design.row_ids.

        Raises:
            DegenerateDesignError: If a row's group is missing or was not
                seen when the variances were estimated
        """
        labels = _labels(observations, self.variable, design.row_ids)
        lookup = self.weights
        out = np.empty(len(labels), dtype=np.float64)
        for i, label in enumerate(labels):
            if label is None or label not in lookup:
                raise DegenerateDesignError(
                    f"'{self.variable}': row {design.row_ids[i]!r} has group "
                    f"{label!r} with no variance estimate (known {sorted(lookup)})",
                    variable=self.variable,
                    level=label,
                )
            out[i] = lookup[label]
        return out


def group_variance_weights(
    model: 'FittedModel',
    observations: ObservationTable,
    variable: str,
) -> GroupWeights:
    """
    Estimate per-group residual variances from a training fit.

    Args:
        model: Fit on the training rows (typically unweighted)
        observations: Table holding the grouping column
        variable: Grouping column (any column; values are treated as labels)

    Returns:
        GroupWeights with one variance (ddof=1) per group

    Raises:
        ValidationError: If a group has fewer than 2 rows or zero
            residual variance
        DegenerateDesignError: If a fitted row has no group label
    """
    labels = _labels(observations, variable, model.row_ids)
    if any(label is None for label in labels):
        raise DegenerateDesignError(
            f"'{variable}': some fitted rows have no group label",
            variable=variable,
        )

    residuals = model.residuals
    labels_arr = np.asarray(labels, dtype=object)
    variances: dict[str, float] = {}
    counts: dict[str, int] = {}
    for label in sorted(set(labels)):
        group_resid = residuals[labels_arr == label]
        if len(group_resid) < 2:
            raise ValidationError(
                f"'{variable}': group {label!r} has {len(group_resid)} row(s); "
                f"need at least 2 to estimate a variance"
            )
        var = float(np.var(group_resid, ddof=1))
        if var <= 0:
            raise ValidationError(
                f"'{variable}': group {label!r} has zero residual variance"
            )
        variances[label] = var
        counts[label] = len(group_resid)

    return GroupWeights(variable=variable, variances=variances, counts=counts)


def _labels(
    observations: ObservationTable,
    variable: str,
    row_ids: NDArray[Any],
) -> list[str | None]:
    pos = observations.positions(row_ids.tolist())
    col = observations.column(variable)[pos]
    missing = observations.is_missing(variable)[pos]
    return [None if m else as_label(v) for v, m in zip(col.tolist(), missing.tolist())]
