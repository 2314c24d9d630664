"""
Parameter payload for weighted least squares.

A pure data container produced by a backend and wrapped in Result[P].
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class LinearParams:
    """
    Weighted least-squares fit.

    Coefficients are ordered intercept first, then the design columns.
    rss and tss are weighted; tss is taken about the weighted mean.
    """
    coefficients: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    weights: NDArray[np.floating[Any]]
    rss: float
    tss: float
    rank: int
    df_residual: int
    leverage: NDArray[np.floating[Any]]
    cov_unscaled: NDArray[np.floating[Any]]   # (X'WX)^-1
