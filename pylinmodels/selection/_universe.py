"""
Candidate term universes for forward selection.

Every builder returns terms in a deterministic order, duplicates removed
with the first occurrence kept. That order is the canonical order used
to break ties during the search.
"""

from __future__ import annotations

from itertools import combinations
from typing import Iterable, Sequence

from pylinmodels.core.exceptions import ValidationError
from pylinmodels.terms._terms import MAX_ORDER, Term
from pylinmodels.terms.schema import VariableSchema


def unique_terms(terms: Iterable[Term | str]) -> tuple[Term, ...]:
    """Coerce to Terms and drop repeats, keeping first occurrences."""
    seen: set[Term] = set()
    out: list[Term] = []
    for t in terms:
        term = t if isinstance(t, Term) else Term.parse(t)
        if term not in seen:
            seen.add(term)
            out.append(term)
    return tuple(out)


def base_terms(schema: VariableSchema) -> tuple[Term, ...]:
    """One base term per predictor, in declaration order."""
    return tuple(Term.of(name) for name in schema.predictors)


def pairwise_interactions(names: Sequence[str]) -> tuple[Term, ...]:
    """All 2-way interactions of names; pairs follow the order of names."""
    return unique_terms(Term.of(a, b) for a, b in combinations(_distinct(names), 2))


def triple_interactions(names: Sequence[str]) -> tuple[Term, ...]:
    return unique_terms(Term.of(*c) for c in combinations(_distinct(names), 3))


def terms_with_interactions(names: Sequence[str], order: int = 2) -> tuple[Term, ...]:
    """
    Base terms followed by every interaction up to `order`.

    Args:
        names: Base variable names
        order: Highest interaction order, 1 to 3

    Example:
        >>> [t.name for t in terms_with_interactions(['a', 'b', 'c'])]
        ['a', 'b', 'c', 'a:b', 'a:c', 'b:c']
    """
    if not (1 <= order <= MAX_ORDER):
        raise ValidationError(f"order: must be between 1 and {MAX_ORDER}, got {order}")
    names = _distinct(names)
    terms: list[Term] = [Term.of(n) for n in names]
    if order >= 2:
        terms.extend(pairwise_interactions(names))
    if order >= 3:
        terms.extend(triple_interactions(names))
    return unique_terms(terms)


def _distinct(names: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(names))
