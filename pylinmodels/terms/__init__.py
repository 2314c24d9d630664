"""
Variable schema, terms, and design matrices.

Public API:
    VariableSchema / Variable     declared variable roles
    Term                          base term or 2-3 way interaction
    DesignMatrix.build(...)       complete-case design expansion
"""

from pylinmodels.terms._terms import Term
from pylinmodels.terms.schema import Variable, VariableSchema
from pylinmodels.terms.design import DesignMatrix, INTERCEPT

__all__ = [
    "Term",
    "Variable",
    "VariableSchema",
    "DesignMatrix",
    "INTERCEPT",
]
