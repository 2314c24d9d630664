"""
CPU backend for weighted least squares.

Factors the weight-scaled design sqrt(W)[1 | X] with column-pivoted QR
and back-substitutes; the normal equations are never formed. Rank
deficiency is detected from the pivoted R diagonal and reported with the
names of the dependent columns.
"""

from typing import Any

import numpy as np
from scipy.linalg import solve_triangular

from pylinmodels.core.compute.linalg.qr import qr_pivoted, qr_solve
from pylinmodels.core.compute.timing import Timer
from pylinmodels.core.compute.tolerances import is_ill_conditioned, select_tolerance
from pylinmodels.core.result import Result
from pylinmodels.regression._common import LinearParams
from pylinmodels.regression.design import WLSDesign


class CPUQRBackend:
    """
    Weighted least squares via pivoted QR.

    Stateless; one instance can serve any number of fits.
    """

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: WLSDesign) -> Result[LinearParams]:
        """
        Algorithm:
            1. Scale: Xw = sqrt(W)[1 | X], yw = sqrt(W)y
            2. Pivoted QR: Xw P = QR
            3. Solve: β[P] = R⁻¹ Q'yw
            4. Residuals, weighted RSS/TSS, leverage = rowsum(Q²),
               unscaled covariance (X'WX)⁻¹ = P R⁻¹R⁻ᵀ Pᵀ

        Raises:
            RankDeficientError: If [1 | X] has dependent columns
        """
        timer = Timer()
        timer.start()

        matrix = design.matrix
        y = design.y
        w = design.weights
        n, k = design.n, design.n_params

        with timer.section('qr_decomposition'):
            Xw, yw = design.weighted_system()
            qr_result = qr_pivoted(Xw)

        with timer.section('solve'):
            coefficients = qr_solve(qr_result, yw, matrix.fitted_column_names)

        with timer.section('residuals'):
            fitted_values = matrix.with_intercept() @ coefficients
            residuals = y - fitted_values

        with timer.section('statistics'):
            rss = float(np.sum(w * residuals ** 2))
            y_mean = float(np.sum(w * y) / np.sum(w))
            tss = float(np.sum(w * (y - y_mean) ** 2))
            Q = qr_result.Q[:, :k]
            leverage = np.sum(Q ** 2, axis=1)

            R_inv = solve_triangular(qr_result.R[:k, :k], np.eye(k), lower=False)
            cov_unscaled = np.empty((k, k), dtype=np.float64)
            cov_unscaled[np.ix_(qr_result.pivot, qr_result.pivot)] = R_inv @ R_inv.T

        timer.stop()

        condition_number = qr_result.condition_number
        params = LinearParams(
            coefficients=coefficients,
            fitted_values=fitted_values,
            residuals=residuals,
            weights=w,
            rss=rss,
            tss=tss,
            rank=qr_result.rank,
            df_residual=n - k,
            leverage=leverage,
            cov_unscaled=cov_unscaled,
        )

        info: dict[str, Any] = {
            'method': 'qr',
            'rank': qr_result.rank,
            'weighted': design.weighted,
            'condition_number': condition_number,
            'tolerance': select_tolerance(is_ill_conditioned(condition_number)).name,
            'n_total': matrix.n_total,
            'n_retained': n,
            'n_dropped': matrix.n_dropped,
        }

        warnings: tuple[str, ...] = ()
        if n - k == 0:
            warnings = ("Saturated fit: zero residual degrees of freedom",)

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=warnings,
        )
