"""
Greedy forward selection over term universes.

Public API:
    forward_select(observations, schema, split, candidates, ...) -> SearchSolution
    base_terms(schema), pairwise_interactions(names),
    triple_interactions(names), terms_with_interactions(names, order=2)
"""

from pylinmodels.selection._universe import (
    base_terms,
    pairwise_interactions,
    terms_with_interactions,
    triple_interactions,
    unique_terms,
)
from pylinmodels.selection.design import CRITERIA, SearchDesign
from pylinmodels.selection.solution import SearchSolution, SearchStep
from pylinmodels.selection.solvers import forward_select

__all__ = [
    "forward_select",
    "SearchDesign",
    "SearchSolution",
    "SearchStep",
    "CRITERIA",
    "base_terms",
    "pairwise_interactions",
    "triple_interactions",
    "terms_with_interactions",
    "unique_terms",
]
