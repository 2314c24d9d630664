"""
Common data types for penalized regression paths.
"""

from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
from numpy.typing import NDArray

PenaltyKind = Literal['ridge', 'lasso']
PENALTIES: tuple[str, ...] = ('ridge', 'lasso')


@dataclass(frozen=True)
class PathPoint:
    """
    Fit at one penalty strength.

    Attributes:
        penalty: Grid value λ
        intercept: Unpenalized intercept
        coefficients: Penalized coefficients, one per design column
        held_out_error: Mean squared error on the validation design
        df: Effective degrees of freedom excluding the intercept
            (trace of the ridge hat matrix minus one; lasso: nonzero count)
        converged: False when coordinate descent hit its iteration cap
        iterations: Full coordinate passes (0 for closed-form ridge)
        warning: Convergence message, None when converged
    """
    penalty: float
    intercept: float
    coefficients: NDArray[np.floating[Any]]
    held_out_error: float
    df: float
    converged: bool = True
    iterations: int = 0
    warning: str | None = None

    @property
    def n_nonzero(self) -> int:
        return int(np.count_nonzero(self.coefficients))


@dataclass(frozen=True)
class PathParams:
    """Grid-ordered path and the selected point."""
    kind: PenaltyKind
    points: tuple[PathPoint, ...]
    selected_index: int
    column_names: tuple[str, ...]
