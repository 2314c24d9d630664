"""
Closed-form ridge regression.

    min_{b0, β} Σ w_i (y_i - b0 - x_i'β)² + λ ||β||²

solved as the augmented least-squares problem

    | sqrt(W)[1 | X]   |        | sqrt(W) y |
    | [0 | sqrt(λ) I]  | b  ~   |     0     |

with the same pivoted QR used for unpenalized fits. The intercept column
gets no penalty row. At λ = 0 this is exactly weighted least squares.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pylinmodels.core.compute.linalg.qr import lstsq_qr


def ridge_fit(
    Xw: NDArray[np.floating[Any]],
    yw: NDArray[np.floating[Any]],
    penalty: float,
    column_names: tuple[str, ...] | None = None,
) -> tuple[float, NDArray[np.floating[Any]], float]:
    """
    Args:
        Xw: sqrt(W)[1 | X], intercept column first
        yw: sqrt(W)y
        penalty: λ >= 0
        column_names: Fitted column names for rank-deficiency messages

    Returns:
        (intercept, coefficients, effective df excluding the intercept)

    Raises:
        RankDeficientError: Only possible at λ = 0
    """
    n, k = Xw.shape
    if penalty > 0:
        penalty_rows = np.zeros((k - 1, k), dtype=np.float64)
        penalty_rows[:, 1:] = np.sqrt(penalty) * np.eye(k - 1)
        A = np.vstack([Xw, penalty_rows])
        b = np.concatenate([yw, np.zeros(k - 1)])
    else:
        A, b = Xw, yw

    beta, qr_result = lstsq_qr(A, b, column_names)

    # trace of the hat matrix restricted to the data rows
    Q = qr_result.Q[:n, :k]
    df = float(np.sum(Q ** 2)) - 1.0
    return float(beta[0]), beta[1:], df
