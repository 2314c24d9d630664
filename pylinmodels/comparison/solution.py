"""
Model comparison solution types.

FTestSolution wraps Result[FTestParams] and formats an anova-style
two-row comparison table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pylinmodels.core.result import Result
from pylinmodels.comparison._common import FTestParams


@dataclass
class FTestSolution:
    """
    Nested-model F-test between a reduced and a full model.

    F = ((RSS_reduced - RSS_full) / k) / (RSS_full / df_full)
    """
    _result: Result[FTestParams]

    @property
    def f_value(self) -> float:
        return self._result.params.f_value

    @property
    def p_value(self) -> float:
        """Upper-tail probability of F(df_num, df_den)."""
        return self._result.params.p_value

    @property
    def df_num(self) -> int:
        return self._result.params.df_num

    @property
    def df_den(self) -> int:
        return self._result.params.df_den

    @property
    def rss_full(self) -> float:
        return self._result.params.rss_full

    @property
    def rss_reduced(self) -> float:
        return self._result.params.rss_reduced

    @property
    def added_terms(self) -> tuple[str, ...]:
        """Terms in the full model that the reduced model lacks."""
        return self._result.params.added_terms

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        p = self._result.params
        df_reduced = p.df_den + p.df_num
        lines = [
            "Analysis of Variance Table (nested models)",
            "",
            f"Model 1: reduced   Model 2: reduced + {', '.join(p.added_terms)}",
            f"{'':<6} {'Res.Df':>7} {'RSS':>14} {'Df':>4} {'Sum of Sq':>14} {'F':>10} {'Pr(>F)':>10}",
            f"{'1':<6} {df_reduced:>7d} {p.rss_reduced:>14.6g}",
            f"{'2':<6} {p.df_den:>7d} {p.rss_full:>14.6g} {p.df_num:>4d} "
            f"{p.rss_reduced - p.rss_full:>14.6g} {p.f_value:>10.4f} {p.p_value:>10.4g}",
            "",
            f"Observations: {p.n_obs}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"FTestSolution(F={self.f_value:.4f}, df=({self.df_num}, {self.df_den}), "
            f"p_value={self.p_value:.4g})"
        )
