"""
Greedy forward selection.

Public API:
    forward_select(observations, schema, split, candidates, ...) -> SearchSolution

The search starts from the intercept-only model on the training rows and
at each step adds the single remaining candidate that scores best under
the configured criterion. It never backtracks, so the result is a chain
of nested term sets but not necessarily the best subset of each size.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable

import numpy as np
from numpy.typing import NDArray

from pylinmodels.core.exceptions import (
    DegenerateDesignError,
    RankDeficientError,
    ValidationError,
)
from pylinmodels.core.observations import ObservationTable
from pylinmodels.core.result import Result
from pylinmodels.core.split import Split
from pylinmodels.comparison._common import ModelScores
from pylinmodels.comparison.solvers import score_model
from pylinmodels.regression._weights import GroupWeights
from pylinmodels.regression.solution import FittedModel
from pylinmodels.regression.solvers import fit
from pylinmodels.selection.design import SearchDesign
from pylinmodels.selection.solution import SearchSolution, SearchStep, rank_key
from pylinmodels.terms._terms import Term
from pylinmodels.terms.design import DesignMatrix
from pylinmodels.terms.schema import VariableSchema

logger = logging.getLogger(__name__)

WeightSource = GroupWeights | Callable[[DesignMatrix], NDArray[np.floating[Any]]]


@dataclass(frozen=True)
class _Evaluation:
    term: Term
    model: FittedModel | None
    scores: ModelScores | None
    reason: str | None = None


class _Context:
    """Shared read-only inputs of one search."""

    def __init__(
        self,
        observations: ObservationTable,
        schema: VariableSchema,
        split: Split,
        weights: WeightSource | None,
    ):
        self.observations = observations
        self.schema = schema
        self.split = split
        self.weights = weights
        self.held_out_rows = split.validation if split.validation else None

    def fit(self, design: DesignMatrix) -> FittedModel:
        if self.weights is None:
            w = None
        elif isinstance(self.weights, GroupWeights):
            w = self.weights.for_design(design, self.observations)
        else:
            w = self.weights(design)
        return fit(design, weights=w)

    def score(self, model: FittedModel) -> ModelScores:
        return score_model(model, self.observations, self.held_out_rows)

    def evaluate(self, selected: tuple[Term, ...], term: Term) -> _Evaluation:
        try:
            design = DesignMatrix.build(
                self.observations, selected + (term,), self.schema,
                rows=self.split.train,
            )
            model = self.fit(design)
        except (DegenerateDesignError, RankDeficientError) as e:
            return _Evaluation(term=term, model=None, scores=None, reason=str(e))
        return _Evaluation(term=term, model=model, scores=self.score(model))


def forward_select(
    observations: ObservationTable,
    schema: VariableSchema,
    split: Split,
    candidates: Iterable[Term | str],
    *,
    criterion: str = 'adjusted_r2',
    max_terms: int | None = None,
    weights: WeightSource | None = None,
    max_workers: int | None = None,
) -> SearchSolution:
    """
    Greedy forward selection over a candidate term universe.

    Args:
        observations: Source rows
        schema: Variable declarations
        split: Train/validation/test partition; models are fit on
            split.train and held-out MSE is measured on split.validation
        candidates: Candidate terms; their order is the tie-break order
        criterion: 'adjusted_r2' (maximised) or 'held_out_mse' (minimised)
        max_terms: Stop after this many terms; None exhausts the candidates
        weights: GroupWeights, or a callable mapping a DesignMatrix to
            row weights, applied to every fit
        max_workers: Evaluate each step's candidates on this many threads;
            None or 1 evaluates them in order on the calling thread

    Returns:
        SearchSolution with one step per size, baseline included

    Raises:
        ValidationError: Invalid configuration
        SchemaError: A candidate references an undeclared variable
        DegenerateDesignError: The intercept-only baseline has no rows

    Example:
        >>> split = split_rows(obs.row_ids, SplitConfig(seed=7))
        >>> result = forward_select(obs, schema, split, terms_with_interactions(['x', 'g']),
        ...                         criterion='held_out_mse', max_terms=3)
        >>> result.best().terms
    """
    t0 = time.perf_counter()
    design = SearchDesign.build(
        candidates, schema, split, criterion=criterion, max_terms=max_terms,
    )
    if max_workers is not None and max_workers < 1:
        raise ValidationError(f"max_workers: must be at least 1, got {max_workers}")

    ctx = _Context(observations, schema, split, weights)
    maximize = design.maximize

    baseline = ctx.fit(DesignMatrix.intercept_only(observations, schema, rows=split.train))
    steps: list[SearchStep] = [
        SearchStep(size=0, terms=(), added=None, model=baseline, scores=ctx.score(baseline))
    ]
    logger.info(
        "forward selection: %d candidates, criterion=%s, baseline n=%d",
        len(design.candidates), design.criterion, baseline.n,
    )

    selected: tuple[Term, ...] = ()
    remaining = list(design.candidates)
    n_evaluated = 0
    stop_reason = 'exhausted'

    executor = ThreadPoolExecutor(max_workers=max_workers) if (max_workers or 1) > 1 else None
    try:
        while remaining:
            if len(selected) >= design.size_limit:
                stop_reason = 'max_terms'
                break

            if executor is None:
                evaluations = [ctx.evaluate(selected, t) for t in remaining]
            else:
                # map() yields in submission order
                evaluations = list(executor.map(lambda t: ctx.evaluate(selected, t), remaining))
            n_evaluated += len(evaluations)

            excluded = tuple((e.term.name, e.reason) for e in evaluations if e.model is None)
            for name, reason in excluded:
                logger.debug("candidate %s excluded: %s", name, reason)
            usable = [e for e in evaluations if e.model is not None]
            if not usable:
                stop_reason = 'all_excluded'
                logger.info("forward selection: every remaining candidate excluded")
                break

            best = min(
                usable,
                key=lambda e: rank_key(getattr(e.scores, design.criterion), maximize),
            )
            # Excluded candidates stay unusable: later steps only lose rows
            # and gain columns.
            dropped = {e.term for e in evaluations if e.model is None} | {best.term}
            selected = selected + (best.term,)
            remaining = [t for t in remaining if t not in dropped]
            steps.append(SearchStep(
                size=len(selected),
                terms=selected,
                added=best.term,
                model=best.model,
                scores=best.scores,
                candidate_scores=tuple(
                    (e.term.name, getattr(e.scores, design.criterion)) for e in usable
                ),
                excluded=excluded,
            ))
            logger.info(
                "step %d: added %s (%s=%.6g, n=%d)",
                len(selected), best.term.name, design.criterion,
                getattr(best.scores, design.criterion), best.model.n,
            )
    finally:
        if executor is not None:
            executor.shutdown(wait=True)

    warnings: list[str] = []
    if design.criterion == 'held_out_mse' and any(
        np.isnan(s.scores.held_out_mse) for s in steps
    ):
        warnings.append("Held-out MSE unavailable for some steps (degenerate held-out design)")

    elapsed = time.perf_counter() - t0
    result = Result(
        params=tuple(steps),
        info={
            'method': 'greedy forward selection',
            'criterion': design.criterion,
            'stop_reason': stop_reason,
            'n_candidates': len(design.candidates),
            'n_evaluated': n_evaluated,
            'n_train': len(split.train),
            'n_validation': len(split.validation),
            'max_workers': max_workers,
        },
        timing={'total_seconds': elapsed},
        backend_name='cpu_qr',
        warnings=tuple(warnings),
    )
    return SearchSolution(_result=result, _design=design)
