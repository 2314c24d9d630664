"""
SearchDesign: validated forward-selection configuration.

Immutable after construction. Use SearchDesign.build().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

from pylinmodels.core.exceptions import ValidationError
from pylinmodels.core.split import Split
from pylinmodels.selection._universe import unique_terms
from pylinmodels.terms._terms import Term
from pylinmodels.terms.schema import VariableSchema

Criterion = Literal['adjusted_r2', 'held_out_mse']
CRITERIA: tuple[str, ...] = ('adjusted_r2', 'held_out_mse')


@dataclass(frozen=True)
class SearchDesign:
    """
    Forward-selection configuration.

    Attributes:
        candidates: Candidate universe in canonical (tie-break) order
        criterion: 'adjusted_r2' (maximised, in-sample) or 'held_out_mse'
            (minimised, on the validation partition)
        max_terms: Largest selected-term count; None means exhaust the
            candidates
    """
    candidates: tuple[Term, ...]
    criterion: Criterion
    max_terms: int | None

    @classmethod
    def build(
        cls,
        candidates: Iterable[Term | str],
        schema: VariableSchema,
        split: Split,
        *,
        criterion: str = 'adjusted_r2',
        max_terms: int | None = None,
    ) -> SearchDesign:
        """
        Raises:
            ValidationError: Empty candidates, unknown criterion, bad
                max_terms, or 'held_out_mse' with an empty validation
                partition
            SchemaError: A candidate references an undeclared variable or
                the response
        """
        terms = unique_terms(candidates)
        if not terms:
            raise ValidationError("candidates: at least one candidate term is required")
        for term in terms:
            schema.check_term(term)

        if criterion not in CRITERIA:
            raise ValidationError(
                f"criterion must be one of {CRITERIA}, got {criterion!r}"
            )
        if criterion == 'held_out_mse' and not split.validation:
            raise ValidationError(
                "criterion 'held_out_mse' needs a non-empty validation partition"
            )

        if max_terms is not None:
            if isinstance(max_terms, bool) or not isinstance(max_terms, int) or max_terms < 1:
                raise ValidationError(f"max_terms: must be a positive integer, got {max_terms!r}")

        return cls(candidates=terms, criterion=criterion, max_terms=max_terms)

    @property
    def maximize(self) -> bool:
        return self.criterion == 'adjusted_r2'

    @property
    def size_limit(self) -> int:
        if self.max_terms is None:
            return len(self.candidates)
        return min(self.max_terms, len(self.candidates))
