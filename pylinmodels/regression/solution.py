"""
User-facing weighted least-squares results.

FittedModel wraps the backend Result together with the DesignMatrix it was
fit on, and exposes fit statistics, coefficient inference, prediction and
row-level diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pylinmodels.core.exceptions import ValidationError
from pylinmodels.core.result import Result
from pylinmodels.regression import _diagnostics
from pylinmodels.regression._common import LinearParams
from pylinmodels.terms._terms import Term
from pylinmodels.terms.design import DesignMatrix


@dataclass(eq=False)
class FittedModel:
    """
    A fitted weighted linear model.

    Immutable in practice: the payload is frozen and the only mutable
    fields are lazily filled caches.
    """
    _result: Result[LinearParams]
    _design: DesignMatrix

    _studentized: NDArray[np.floating[Any]] | None = field(default=None, repr=False)
    _cooks: NDArray[np.floating[Any]] | None = field(default=None, repr=False)

    # === Model identity ===

    @property
    def design(self) -> DesignMatrix:
        return self._design

    @property
    def terms(self) -> tuple[Term, ...]:
        return self._design.terms

    @property
    def term_set(self) -> frozenset[Term]:
        return self._design.term_set

    @property
    def column_names(self) -> tuple[str, ...]:
        """Coefficient names, '(Intercept)' first."""
        return self._design.fitted_column_names

    @property
    def row_ids(self) -> NDArray[Any]:
        return self._design.row_ids

    # === Coefficients and fit ===

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def coef_dict(self) -> dict[str, float]:
        return dict(zip(self.column_names, self.coefficients.tolist()))

    @property
    def intercept(self) -> float:
        return float(self.coefficients[0])

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def weights(self) -> NDArray[np.floating[Any]]:
        return self._result.params.weights

    @property
    def rss(self) -> float:
        return self._result.params.rss

    @property
    def tss(self) -> float:
        return self._result.params.tss

    @property
    def n(self) -> int:
        """Retained rows the model was fit on."""
        return self._design.n

    @property
    def p(self) -> int:
        """Design columns, intercept excluded."""
        return self._design.p

    @property
    def n_params(self) -> int:
        return self.p + 1

    @property
    def n_total(self) -> int:
        return self._design.n_total

    @property
    def n_dropped(self) -> int:
        return self._design.n_dropped

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - self.rss / self.tss

    @property
    def adjusted_r_squared(self) -> float:
        from pylinmodels.comparison._criteria import adjusted_r2
        return adjusted_r2(self)

    @property
    def residual_std_error(self) -> float:
        df = self.df_residual
        if df <= 0:
            return float(np.nan)
        return float(np.sqrt(self.rss / df))

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """SE(β) = sqrt(diag(σ² (X'WX)⁻¹)); NaN when df is zero."""
        if self.df_residual <= 0:
            return np.full(self.n_params, np.nan)
        sigma_sq = self.rss / self.df_residual
        return np.sqrt(sigma_sq * np.diag(self._result.params.cov_unscaled))

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        se = self.standard_errors
        with np.errstate(divide='ignore', invalid='ignore'):
            t = self.coefficients / se
        return np.where(np.isfinite(t), t, np.nan)

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values against t(df_residual)."""
        t = self.t_statistics
        if self.df_residual <= 0:
            return np.full(self.n_params, np.nan)
        return 2.0 * sp_stats.t.sf(np.abs(t), self.df_residual)

    # === Prediction ===

    def predict(self, design: DesignMatrix) -> NDArray[np.floating[Any]]:
        """
        Predictions on a design with the same columns.

        Raises:
            ValidationError: If the design's columns differ from the model's
        """
        if design.column_names != self._design.column_names:
            raise ValidationError(
                f"design columns {design.column_names} do not match the model's "
                f"{self._design.column_names}; rebuild with model.design.rebuild()"
            )
        return design.with_intercept() @ self.coefficients

    # === Diagnostics ===

    @property
    def leverage(self) -> NDArray[np.floating[Any]]:
        """Hat values of the weighted design, one per retained row."""
        return self._result.params.leverage

    @property
    def studentized_residuals(self) -> NDArray[np.floating[Any]]:
        """Externally studentized (jackknife) residuals."""
        if self._studentized is None:
            params = self._result.params
            self._studentized = _diagnostics.external_studentized(
                params.residuals, params.weights, params.leverage,
                params.rss, params.df_residual,
            )
        return self._studentized

    @property
    def cooks_distance(self) -> NDArray[np.floating[Any]]:
        if self._cooks is None:
            params = self._result.params
            internal = _diagnostics.internal_studentized(
                params.residuals, params.weights, params.leverage,
                params.rss, params.df_residual,
            )
            self._cooks = _diagnostics.cooks_distance(
                internal, params.leverage, self.n_params
            )
        return self._cooks

    def outlier_rows(self, alpha: float = 0.05) -> NDArray[Any]:
        """Row ids whose studentized residual exceeds the Bonferroni t cut-off."""
        if not (0.0 < alpha < 1.0):
            raise ValidationError(f"alpha: must be in (0, 1), got {alpha}")
        mask = _diagnostics.outlier_mask(
            self.studentized_residuals, self.df_residual, alpha
        )
        return self.row_ids[mask]

    def high_leverage_rows(self, multiple: float = 2.0) -> NDArray[Any]:
        """Row ids with leverage above `multiple` times (p + 1) / n."""
        mask = _diagnostics.high_leverage_mask(self.leverage, self.n_params, multiple)
        return self.row_ids[mask]

    def influential_rows(self, threshold: float | None = None) -> NDArray[Any]:
        """Row ids with Cook's distance above threshold (default 4 / n)."""
        if threshold is None:
            threshold = 4.0 / self.n
        with np.errstate(invalid='ignore'):
            mask = self.cooks_distance > threshold
        return self.row_ids[mask]

    def half_normal_scores(
        self, statistic: str = 'cooks_distance',
    ) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]], NDArray[Any]]:
        """
        Half-normal ranking of a diagnostic.

        Args:
            statistic: 'cooks_distance', 'studentized_residuals' or 'leverage'

        Returns:
            (expected quantiles, sorted |values|, row ids in that order)
        """
        if statistic not in ('cooks_distance', 'studentized_residuals', 'leverage'):
            raise ValidationError(f"statistic: unknown diagnostic {statistic!r}")
        quantiles, values, order = _diagnostics.half_normal_scores(
            getattr(self, statistic)
        )
        return quantiles, values, self.row_ids[order]

    def diagnostics_table(self) -> dict[str, NDArray[Any]]:
        """Per-row diagnostics keyed by column name, for external reporting."""
        return {
            'row_id': self.row_ids,
            'fitted': self.fitted_values,
            'residual': self.residuals,
            'leverage': self.leverage,
            'studentized_residual': self.studentized_residuals,
            'cooks_distance': self.cooks_distance,
        }

    # === Metadata ===

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """Coefficient table and fit statistics."""
        adj = self.adjusted_r_squared
        rse = self.residual_std_error
        lines = [
            "Weighted Least Squares Results" if self.info.get('weighted') else
            "Least Squares Results",
            "=" * 72,
            f"Terms: {', '.join(t.name for t in self.terms) or '(intercept only)'}",
            f"Observations: {self.n} retained of {self.n_total} ({self.n_dropped} dropped, complete cases)",
            f"Columns: {self.n_params} (intercept included)",
            f"R-squared: {self.r_squared:.6f}",
            f"Adj. R-squared: {'NA' if np.isnan(adj) else f'{adj:.6f}'}",
            f"Residual Std. Error: {'NA' if np.isnan(rse) else f'{rse:.6f}'} on {self.df_residual} DF",
            "",
            f"{'':<28} {'Estimate':>12} {'Std.Error':>12} {'t value':>9} {'Pr(>|t|)':>10}",
            "-" * 72,
        ]
        for name, coef, se, t, pv in zip(
            self.column_names, self.coefficients, self.standard_errors,
            self.t_statistics, self.p_values,
        ):
            se_str = f"{se:12.6f}" if not np.isnan(se) else f"{'NA':>12}"
            t_str = f"{t:9.3f}" if not np.isnan(t) else f"{'NA':>9}"
            p_str = f"{pv:10.4g}" if not np.isnan(pv) else f"{'NA':>10}"
            lines.append(f"{name[:28]:<28} {coef:12.6f} {se_str} {t_str} {p_str}")
        lines.append("-" * 72)
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"FittedModel(terms={[t.name for t in self.terms]}, n={self.n}, "
            f"p={self.p}, r_squared={self.r_squared:.4f})"
        )
