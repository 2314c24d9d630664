"""
Regularization path solution type.

RegularizationPath wraps Result[PathParams]: one PathPoint per grid value
in increasing penalty order, plus the validation-selected point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pylinmodels.core.result import Result
from pylinmodels.penalized._common import PathParams, PathPoint
from pylinmodels.terms.design import INTERCEPT


@dataclass
class RegularizationPath:
    """
    Penalized fits over a penalty grid.

    The selected point minimises held-out error; among points whose error
    ties the minimum, the largest penalty wins.
    """
    _result: Result[PathParams]

    @property
    def kind(self) -> str:
        """'ridge' or 'lasso'."""
        return self._result.params.kind

    @property
    def points(self) -> tuple[PathPoint, ...]:
        return self._result.params.points

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._result.params.column_names

    @property
    def penalties(self) -> NDArray[np.floating[Any]]:
        return np.array([pt.penalty for pt in self.points])

    @property
    def coefficient_matrix(self) -> NDArray[np.floating[Any]]:
        """(n_points, p) coefficients, one row per grid value."""
        return np.vstack([pt.coefficients for pt in self.points])

    @property
    def intercepts(self) -> NDArray[np.floating[Any]]:
        return np.array([pt.intercept for pt in self.points])

    @property
    def held_out_errors(self) -> NDArray[np.floating[Any]]:
        return np.array([pt.held_out_error for pt in self.points])

    @property
    def selected_index(self) -> int:
        return self._result.params.selected_index

    @property
    def selected(self) -> PathPoint:
        return self.points[self.selected_index]

    @property
    def converged(self) -> bool:
        return all(pt.converged for pt in self.points)

    def coef_dict(self, index: int | None = None) -> dict[str, float]:
        """Named coefficients of one point (default: the selected one)."""
        pt = self.selected if index is None else self.points[index]
        return {INTERCEPT: pt.intercept, **dict(zip(self.column_names, pt.coefficients.tolist()))}

    def table(self) -> dict[str, NDArray[Any]]:
        """Path table: one entry per column, one row per grid value."""
        out: dict[str, NDArray[Any]] = {
            'penalty': self.penalties,
            'held_out_error': self.held_out_errors,
            'df': np.array([pt.df for pt in self.points]),
            'converged': np.array([pt.converged for pt in self.points]),
            'iterations': np.array([pt.iterations for pt in self.points]),
            INTERCEPT: self.intercepts,
        }
        coefs = self.coefficient_matrix
        for j, name in enumerate(self.column_names):
            out[name] = coefs[:, j]
        return out

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
        lines = [
            f"{self.kind.capitalize()} Regularization Path",
            "=" * 64,
            f"Grid points: {len(self.points)}   Columns: {len(self.column_names)}   "
            f"Rows: {self.info.get('n_retained')} train, {self.info.get('n_validation')} validation",
            "",
            f"{'':>2}{'Penalty':>14} {'df':>8} {'Held-out MSE':>14} {'Iter':>7} {'Conv':>6}",
            "-" * 64,
        ]
        for i, pt in enumerate(self.points):
            mark = '*' if i == self.selected_index else ' '
            lines.append(
                f"{mark:>2}{pt.penalty:>14.6g} {pt.df:>8.3f} {pt.held_out_error:>14.6g} "
                f"{pt.iterations:>7d} {'yes' if pt.converged else 'NO':>6}"
            )
        lines.append("-" * 64)
        lines.append(f"Selected penalty: {self.selected.penalty:.6g}")
        if self.warnings:
            lines.append(f"Warnings: {len(self.warnings)} (see .warnings)")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"RegularizationPath(kind={self.kind!r}, points={len(self.points)}, "
            f"selected_penalty={self.selected.penalty:.6g})"
        )
