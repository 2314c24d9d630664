"""
QR decomposition and least-squares solves.

Column-pivoted QR (LAPACK geqp3 through SciPy) is used so that the
numerical rank, and the identity of the columns that fall outside it, can
be reported when a design is rank-deficient. All least-squares solves in
pylinmodels go through here; none form explicit normal-equation inverses.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy.linalg import qr as scipy_qr, solve_triangular

from pylinmodels.core.compute.tolerances import rank_tolerance
from pylinmodels.core.exceptions import RankDeficientError


@dataclass(frozen=True)
class QRResult:
    """
    Result of a column-pivoted QR decomposition X[:, pivot] = Q R.

    Attributes:
        Q: Orthonormal factor (n x k, k = min(n, p))
        R: Upper triangular factor (k x p)
        pivot: Column permutation applied before factoring
        rank: Numerical rank determined from |diag(R)|
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    pivot: NDArray[np.intp]
    rank: int

    @property
    def dependent_columns(self) -> NDArray[np.intp]:
        """Original indices of the columns beyond the numerical rank."""
        return np.sort(self.pivot[self.rank:])

    @property
    def condition_number(self) -> float:
        """Ratio of largest to smallest |diag(R)| over the full-rank block."""
        diag_R = np.abs(np.diag(self.R))[:self.rank]
        if self.rank == 0 or diag_R[-1] == 0:
            return float('inf')
        return float(diag_R[0] / diag_R[-1])


def qr_pivoted(X: NDArray[np.floating[Any]]) -> QRResult:
    """
    Economy column-pivoted QR decomposition.

    Args:
        X: Matrix to decompose (n x p)

    Returns:
        QRResult with Q, R, pivot and numerical rank
    """
    Q, R, pivot = scipy_qr(X, mode='economic', pivoting=True)

    diag_R = np.abs(np.diag(R))
    if len(diag_R) > 0 and diag_R[0] > 0:
        tol = rank_tolerance(X.shape[0], X.shape[1], diag_R[0])
        rank = int(np.sum(diag_R > tol))
    else:
        rank = 0

    return QRResult(Q=Q, R=R, pivot=pivot, rank=rank)


def qr_solve(
    qr_result: QRResult,
    y: NDArray[np.floating[Any]],
    column_names: tuple[str, ...] | None = None,
) -> NDArray[np.floating[Any]]:
    """
    Solve min_β ||y - Xβ||² given the pivoted QR of X.

        X P = Q R   =>   β[P] = R⁻¹ Q'y

    Args:
        qr_result: Decomposition of X (n x p, n >= p)
        y: Response vector (n,)
        column_names: Names used in the error message when X is
            rank-deficient

    Returns:
        Coefficient vector β (p,) in the original column order

    Raises:
        RankDeficientError: If the numerical rank is below p
    """
    p = qr_result.R.shape[1]
    if qr_result.rank < p:
        dependent = qr_result.dependent_columns
        if column_names is not None:
            names = tuple(column_names[j] for j in dependent)
        else:
            names = tuple(str(j) for j in dependent)
        raise RankDeficientError(
            f"Design matrix is rank-deficient: rank={qr_result.rank}, expected={p}. "
            f"Linearly dependent column(s): {', '.join(names)}",
            rank=qr_result.rank,
            expected_rank=p,
            columns=names,
        )

    Qty = qr_result.Q.T @ y
    beta_pivoted = solve_triangular(qr_result.R[:p, :p], Qty[:p], lower=False)

    beta = np.empty(p, dtype=np.float64)
    beta[qr_result.pivot] = beta_pivoted
    return beta


def lstsq_qr(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
    column_names: tuple[str, ...] | None = None,
) -> tuple[NDArray[np.floating[Any]], QRResult]:
    """Decompose X and solve in one call; returns (β, QRResult)."""
    qr_result = qr_pivoted(X)
    return qr_solve(qr_result, y, column_names), qr_result
