"""
PathDesign: validated regularization-path configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinmodels.core.exceptions import ValidationError
from pylinmodels.core.validation import check_array, check_finite, check_increasing_grid
from pylinmodels.penalized._common import PENALTIES, PenaltyKind


@dataclass(frozen=True, eq=False)
class PathDesign:
    """
    Attributes:
        penalty: 'ridge' or 'lasso'
        grid: Non-negative, strictly increasing penalty strengths
        tol: Coordinate-descent change tolerance (lasso only)
        max_iter: Cap on coordinate-descent passes per grid point (lasso only)
    """
    penalty: PenaltyKind
    grid: NDArray[np.floating[Any]]
    tol: float
    max_iter: int

    @classmethod
    def build(
        cls,
        penalty: str,
        grid: ArrayLike,
        *,
        tol: float = 1e-7,
        max_iter: int = 10_000,
    ) -> PathDesign:
        """
        Raises:
            ValidationError: Unknown penalty, bad grid, tol <= 0 or
                max_iter < 1
        """
        if penalty not in PENALTIES:
            raise ValidationError(f"penalty must be one of {PENALTIES}, got {penalty!r}")

        grid_arr = np.array(check_array(np.atleast_1d(grid), 'grid'), dtype=np.float64).ravel()
        check_finite(grid_arr, 'grid')
        check_increasing_grid(grid_arr, 'grid')
        grid_arr.setflags(write=False)

        if not tol > 0:
            raise ValidationError(f"tol: must be positive, got {tol}")
        if isinstance(max_iter, bool) or not isinstance(max_iter, int) or max_iter < 1:
            raise ValidationError(f"max_iter: must be a positive integer, got {max_iter!r}")

        return cls(penalty=penalty, grid=grid_arr, tol=float(tol), max_iter=max_iter)

    @property
    def n_points(self) -> int:
        return len(self.grid)
