"""
Term value objects.

A term is a base variable or an interaction of 2 or 3 distinct base
variables. Terms compare and hash by the set of their constituents, so
Term.of('a', 'b') == Term.of('b', 'a') == Term.parse('b:a').
"""

from __future__ import annotations

from dataclasses import dataclass

from pylinmodels.core.exceptions import ValidationError

MAX_ORDER = 3


@dataclass(frozen=True)
class Term:
    """
    Base term or interaction.

    Attributes:
        variables: Constituent variable names
    """
    variables: frozenset[str]

    def __post_init__(self) -> None:
        if not (1 <= len(self.variables) <= MAX_ORDER):
            raise ValidationError(
                f"Term: expected 1 to {MAX_ORDER} distinct variables, got {len(self.variables)}"
            )

    @classmethod
    def of(cls, *names: str) -> Term:
        """
        Build a term from variable names.

        Raises:
            ValidationError: On repeated names or an unsupported order
        """
        if len(set(names)) != len(names):
            raise ValidationError(f"Term: repeated variable in {names}")
        return cls(variables=frozenset(str(n) for n in names))

    @classmethod
    def parse(cls, text: str) -> Term:
        """Parse 'a' or 'a:b' / 'a:b:c' notation."""
        parts = [p.strip() for p in text.split(':')]
        if any(not p for p in parts):
            raise ValidationError(f"Term: cannot parse {text!r}")
        return cls.of(*parts)

    @property
    def order(self) -> int:
        return len(self.variables)

    @property
    def is_interaction(self) -> bool:
        return self.order > 1

    @property
    def name(self) -> str:
        return ':'.join(sorted(self.variables))

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Term({self.name!r})"


def as_terms(terms: list[Term | str] | tuple[Term | str, ...]) -> tuple[Term, ...]:
    """Coerce a mixed list of Term / 'a:b' strings to Terms."""
    return tuple(t if isinstance(t, Term) else Term.parse(t) for t in terms)


def referenced_variables(terms: tuple[Term, ...]) -> frozenset[str]:
    """Union of the constituents of every term."""
    names: set[str] = set()
    for term in terms:
        names.update(term.variables)
    return frozenset(names)
