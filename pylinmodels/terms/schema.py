"""
Variable schema: the declared role of every column.

Roles:
    numeric   passes through as one column
    nominal   unordered categories, treatment (indicator) coding
    ordinal   ordered categories, threshold coding; explicit order required
    response  the single continuous outcome

The schema is loaded once, validated on construction, and read-only for
the rest of the run.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Literal, Mapping

from pylinmodels.core.exceptions import SchemaError
from pylinmodels.terms._terms import Term

Role = Literal['numeric', 'nominal', 'ordinal', 'response']
ROLES = ('numeric', 'nominal', 'ordinal', 'response')
CATEGORICAL_ROLES = ('nominal', 'ordinal')


def as_label(value: Any) -> str:
    """
    Canonical string label for a categorical value.

    Integral floats lose their decimal point so a level declared as 2 and
    a column read as 2.0 refer to the same label.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Variable:
    """
    One declared variable.

    Attributes:
        name: Column name in the observation table
        role: One of ROLES
        levels: Declared level order (ordinal: required; nominal: optional,
            first level is the reference), as canonical labels
    """
    name: str
    role: Role
    levels: tuple[str, ...] | None = None

    @property
    def is_categorical(self) -> bool:
        return self.role in CATEGORICAL_ROLES


@dataclass(frozen=True)
class VariableSchema:
    """
    Validated set of variable declarations.

    Construct with VariableSchema.build(), from_dict() or from_json().
    Declaration order is preserved and fixes the constituent order of
    interaction columns.
    """
    variables: tuple[Variable, ...]

    @classmethod
    def build(cls, variables: list[Variable] | tuple[Variable, ...]) -> VariableSchema:
        """
        Validate declarations and build the schema.

        Raises:
            SchemaError: On duplicate names, unknown roles, a response count
                other than one, or malformed level declarations
        """
        seen: set[str] = set()
        normalized: list[Variable] = []
        for var in variables:
            if var.name in seen:
                raise SchemaError(f"duplicate variable '{var.name}'", variable=var.name)
            seen.add(var.name)
            normalized.append(_validate_variable(var))

        responses = [v.name for v in normalized if v.role == 'response']
        if len(responses) != 1:
            raise SchemaError(
                f"schema must declare exactly one response variable, got {len(responses)}"
                + (f": {responses}" if responses else "")
            )

        return cls(variables=tuple(normalized))

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> VariableSchema:
        """
        Build from a declaration mapping.

        Format:
            {
                "response": "y",
                "variables": {
                    "age": "numeric",
                    "site": {"role": "nominal"},
                    "grade": {"role": "ordinal", "levels": ["low", "mid", "high"]}
                }
            }
        """
        if 'response' not in config or 'variables' not in config:
            raise SchemaError("schema config requires 'response' and 'variables' keys")

        response = str(config['response'])
        declared: list[Variable] = [Variable(name=response, role='response')]
        for name, entry in config['variables'].items():
            if name == response:
                raise SchemaError(
                    f"'{name}' is declared as the response and as a predictor",
                    variable=name,
                )
            if isinstance(entry, str):
                declared.append(Variable(name=str(name), role=entry))
            elif isinstance(entry, Mapping):
                if 'role' not in entry:
                    raise SchemaError(f"'{name}': missing 'role'", variable=str(name))
                levels = entry.get('levels')
                declared.append(Variable(
                    name=str(name),
                    role=entry['role'],
                    levels=tuple(levels) if levels is not None else None,
                ))
            else:
                raise SchemaError(
                    f"'{name}': declaration must be a role string or a mapping, "
                    f"got {type(entry).__name__}",
                    variable=str(name),
                )
        return cls.build(declared)

    @classmethod
    def from_json(cls, path: str | Path) -> VariableSchema:
        """Build from a JSON file in the from_dict() format."""
        with open(path) as f:
            return cls.from_dict(json.load(f))

    # === Access ===

    def __iter__(self) -> Iterator[Variable]:
        return iter(self.variables)

    def __contains__(self, name: str) -> bool:
        return any(v.name == name for v in self.variables)

    def __getitem__(self, name: str) -> Variable:
        for v in self.variables:
            if v.name == name:
                return v
        raise SchemaError(f"variable '{name}' is not declared in the schema", variable=name)

    @property
    def response(self) -> str:
        return next(v.name for v in self.variables if v.role == 'response')

    @property
    def predictors(self) -> tuple[str, ...]:
        return tuple(v.name for v in self.variables if v.role != 'response')

    def role(self, name: str) -> Role:
        return self[name].role

    def position(self, name: str) -> int:
        """Declaration index, used to order interaction constituents."""
        for i, v in enumerate(self.variables):
            if v.name == name:
                return i
        raise SchemaError(f"variable '{name}' is not declared in the schema", variable=name)

    def ordered(self, term: Term) -> tuple[str, ...]:
        """Constituents of a term in declaration order."""
        return tuple(sorted(term.variables, key=self.position))

    def check_term(self, term: Term) -> None:
        """
        Verify a term only references declared, non-response variables.

        Raises:
            SchemaError: On an undeclared variable or the response
        """
        for name in term.variables:
            if name not in self:
                raise SchemaError(
                    f"term '{term.name}' references undeclared variable '{name}'",
                    variable=name,
                )
            if self.role(name) == 'response':
                raise SchemaError(
                    f"term '{term.name}' references the response '{name}'",
                    variable=name,
                )


def _validate_variable(var: Variable) -> Variable:
    if var.role not in ROLES:
        raise SchemaError(
            f"'{var.name}': unknown role {var.role!r}, expected one of {ROLES}",
            variable=var.name,
        )

    if var.role in ('numeric', 'response'):
        if var.levels is not None:
            raise SchemaError(
                f"'{var.name}': {var.role} variables cannot declare levels",
                variable=var.name,
            )
        return var

    if var.levels is None:
        if var.role == 'ordinal':
            raise SchemaError(
                f"'{var.name}': ordinal variables require an explicit level order",
                variable=var.name,
            )
        return var

    labels = tuple(as_label(level) for level in var.levels)
    if len(set(labels)) != len(labels):
        raise SchemaError(f"'{var.name}': repeated levels in {labels}", variable=var.name)
    if len(labels) < 2:
        raise SchemaError(
            f"'{var.name}': need at least 2 levels, got {len(labels)}",
            variable=var.name,
        )
    return Variable(name=var.name, role=var.role, levels=labels)
