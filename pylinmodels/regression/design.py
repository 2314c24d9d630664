"""
Weighted regression design.

Pairs a DesignMatrix with the response and per-row weights the solver
will use. Validation happens here, once; backends trust the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinmodels.core.validation import (
    check_1d,
    check_array,
    check_finite,
    check_length,
    check_positive,
)
from pylinmodels.terms.design import DesignMatrix


@dataclass(frozen=True, eq=False)
class WLSDesign:
    """
    Validated inputs for one weighted least-squares fit.

    Attributes:
        matrix: The encoded design (no intercept column)
        y: Response aligned to matrix.row_ids
        weights: Strictly positive weights aligned to matrix.row_ids
        weighted: False when the caller supplied no weights
    """
    matrix: DesignMatrix
    y: NDArray[np.floating[Any]]
    weights: NDArray[np.floating[Any]]
    weighted: bool

    @classmethod
    def build(
        cls,
        matrix: DesignMatrix,
        response: ArrayLike | None = None,
        weights: ArrayLike | None = None,
    ) -> WLSDesign:
        """
        Validate response and weights against the design.

        Args:
            matrix: Design from DesignMatrix.build()
            response: Defaults to matrix.response
            weights: Defaults to all ones

        Raises:
            ValidationError: Non-numeric, non-finite, or non-positive values
            DimensionError: Length differs from the retained row count
        """
        n = matrix.n
        if response is None:
            y = matrix.response
        else:
            y = check_array(response, 'response')
            if y.ndim == 2 and y.shape[1] == 1:
                y = y.ravel()
            check_1d(y, 'response')
            check_length(y, n, 'response')
        check_finite(y, 'response')

        if weights is None:
            w = np.ones(n, dtype=np.float64)
            weighted = False
        else:
            w = check_array(weights, 'weights')
            check_1d(w, 'weights')
            check_length(w, n, 'weights')
            check_finite(w, 'weights')
            check_positive(w, 'weights')
            weighted = True

        return cls(matrix=matrix, y=y, weights=w, weighted=weighted)

    @property
    def n(self) -> int:
        return self.matrix.n

    @property
    def n_params(self) -> int:
        """Fitted columns, intercept included."""
        return self.matrix.p + 1

    def weighted_system(self) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
        """sqrt(W)[1 | X] and sqrt(W)y, the system the QR solver factors."""
        sqrt_w = np.sqrt(self.weights)
        return sqrt_w[:, None] * self.matrix.with_intercept(), sqrt_w * self.y
