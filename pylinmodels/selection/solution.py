"""
Forward-selection solution types.

SearchSolution wraps Result[tuple[SearchStep, ...]]: one step per model
size, starting from the intercept-only baseline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np

from pylinmodels.core.exceptions import ValidationError
from pylinmodels.core.result import Result
from pylinmodels.comparison._common import ModelScores
from pylinmodels.terms._terms import Term

if TYPE_CHECKING:
    from pylinmodels.regression.solution import FittedModel
    from pylinmodels.selection.design import SearchDesign

# metric -> True when larger is better
METRICS: dict[str, bool] = {
    'adjusted_r2': True,
    'held_out_mse': False,
    'bic': False,
    'aic': False,
}


@dataclass(frozen=True)
class SearchStep:
    """
    One accepted model of the search.

    Attributes:
        size: Number of selected terms (0 for the baseline)
        terms: Selected terms in the order they were added
        added: Term added at this step, None for the baseline
        model: Model fit on the training rows
        scores: The model under every comparison metric
        candidate_scores: (term name, criterion value) for every candidate
            evaluated at this step, in canonical order
        excluded: (term name, reason) for candidates dropped at this step
    """
    size: int
    terms: tuple[Term, ...]
    added: Term | None
    model: 'FittedModel'
    scores: ModelScores
    candidate_scores: tuple[tuple[str, float], ...] = ()
    excluded: tuple[tuple[str, str], ...] = ()

    def score(self, metric: str) -> float:
        return getattr(self.scores, metric)


def rank_key(value: float, maximize: bool) -> float:
    """Map a metric to 'smaller is better' with NaN last."""
    if np.isnan(value):
        return np.inf
    return -value if maximize else value


@dataclass
class SearchSolution:
    """
    Nested sequence of models from greedy forward selection.

    steps[k] holds k selected terms and contains steps[k - 1]'s terms.
    """
    _result: Result[tuple[SearchStep, ...]]
    _design: 'SearchDesign'

    @property
    def steps(self) -> tuple[SearchStep, ...]:
        return self._result.params

    @property
    def models(self) -> tuple['FittedModel', ...]:
        return tuple(step.model for step in self.steps)

    @property
    def criterion(self) -> str:
        return self._design.criterion

    @property
    def selected_terms(self) -> tuple[Term, ...]:
        """Terms of the largest model, in selection order."""
        return self.steps[-1].terms

    @property
    def stop_reason(self) -> str:
        """'exhausted', 'max_terms' or 'all_excluded'."""
        return self._result.info['stop_reason']

    @property
    def excluded(self) -> tuple[tuple[str, str], ...]:
        """Every candidate excluded during the search, with its reason."""
        return tuple(item for step in self.steps for item in step.excluded)

    def best(self, criterion: str | None = None) -> SearchStep:
        """
        Best step under a metric; ties go to the smaller model.

        Args:
            criterion: 'adjusted_r2', 'held_out_mse', 'bic' or 'aic';
                defaults to the criterion that drove the search
        """
        metric = self.criterion if criterion is None else criterion
        if metric not in METRICS:
            raise ValidationError(f"criterion must be one of {tuple(METRICS)}, got {metric!r}")
        maximize = METRICS[metric]
        return min(self.steps, key=lambda s: (rank_key(s.score(metric), maximize), s.size))

    def scores_table(self) -> dict[str, list[Any]]:
        """One column per field, one row per step."""
        return {
            'size': [s.size for s in self.steps],
            'added': [s.added.name if s.added else None for s in self.steps],
            'n_train': [s.scores.n_train for s in self.steps],
            'n_validation': [s.scores.n_validation for s in self.steps],
            'adjusted_r2': [s.scores.adjusted_r2 for s in self.steps],
            'bic': [s.scores.bic for s in self.steps],
            'aic': [s.scores.aic for s in self.steps],
            'held_out_mse': [s.scores.held_out_mse for s in self.steps],
        }

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
            "Forward Selection",
            "=" * 78,
            f"Criterion: {self.criterion}   Candidates: {len(self._design.candidates)}   "
            f"Stop: {self.stop_reason}",
            "",
            f"{'Size':>4}  {'Added':<24} {'n':>6} {'Adj.R2':>10} {'BIC':>12} {'Held-out MSE':>14}",
            "-" * 78,
        ]
        for s in self.steps:
            added = s.added.name if s.added else '(baseline)'
            lines.append(
                f"{s.size:>4}  {added[:24]:<24} {s.scores.n_train:>6d} "
                f"{s.scores.adjusted_r2:>10.5f} {s.scores.bic:>12.4f} "
                f"{s.scores.held_out_mse:>14.6g}"
            )
        lines.append("-" * 78)
        best = self.best()
        lines.append(f"Best by {self.criterion}: size {best.size} "
                     f"({', '.join(t.name for t in best.terms) or 'intercept only'})")
        if self.excluded:
            lines.append(f"Excluded: {', '.join(name for name, _ in self.excluded)}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SearchSolution(criterion={self.criterion!r}, steps={len(self.steps)}, "
            f"stop_reason={self.stop_reason!r})"
        )
