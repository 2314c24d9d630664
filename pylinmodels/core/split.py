"""
Deterministic train / validation / test partitioning.

A Split is generated once per seed and passed explicitly to every
component that needs it; nothing in the library keeps a run-wide split.

The test fraction is carved from the full row set first; the validation
fraction is then carved from what remains, so

    n_test       = round(test_fraction * n)
    n_validation = round(validation_fraction * (n - n_test))
    n_train      = n - n_test - n_validation
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np
from numpy.typing import NDArray

from pylinmodels.core.exceptions import ValidationError
from pylinmodels.core.validation import check_fraction

PARTITIONS = ('train', 'validation', 'test')


@dataclass(frozen=True)
class SplitConfig:
    """
    Seed and fractions for split_rows().

    Attributes:
        seed: Seed for numpy's default_rng
        test_fraction: Share of all rows held out as test
        validation_fraction: Share of the non-test rows held out as validation
    """
    seed: int
    test_fraction: float = 0.2
    validation_fraction: float = 0.25

    def __post_init__(self) -> None:
        check_fraction(self.test_fraction, 'test_fraction')
        check_fraction(self.validation_fraction, 'validation_fraction')


@dataclass(frozen=True)
class Split:
    """
    Three disjoint row-id partitions covering the full observation set.

    Each partition keeps the rows in their original table order.
    """
    train: tuple[Any, ...]
    validation: tuple[Any, ...]
    test: tuple[Any, ...]
    seed: int

    def partition(self, name: str) -> tuple[Any, ...]:
        if name not in PARTITIONS:
            raise ValidationError(f"partition must be one of {PARTITIONS}, got {name!r}")
        return getattr(self, name)

    @property
    def sizes(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in PARTITIONS}

    @property
    def train_and_validation(self) -> tuple[Any, ...]:
        """Train followed by validation rows, for a refit before testing."""
        return self.train + self.validation


def split_rows(row_ids: Iterable[Any] | NDArray[Any], config: SplitConfig) -> Split:
    """
    Partition row ids reproducibly.

    Identical ids (in identical order), seed and fractions always yield
    identical partitions.

    Args:
        row_ids: All row identifiers, e.g. ObservationTable.row_ids
        config: Seed and fractions

    Returns:
        Split with disjoint train/validation/test partitions

    Raises:
        ValidationError: If ids repeat or the train partition would be empty
    """
    ids = list(np.asarray(row_ids).tolist())
    n = len(ids)
    if len(set(ids)) != n:
        raise ValidationError("row_ids: contains duplicates")

    n_test = int(round(config.test_fraction * n))
    n_validation = int(round(config.validation_fraction * (n - n_test)))
    n_train = n - n_test - n_validation
    if n_train <= 0:
        raise ValidationError(
            f"Split leaves no training rows: n={n}, test={n_test}, validation={n_validation}"
        )

    rng = np.random.default_rng(config.seed)
    order = rng.permutation(n)

    test_pos = np.sort(order[:n_test])
    validation_pos = np.sort(order[n_test:n_test + n_validation])
    train_pos = np.sort(order[n_test + n_validation:])

    return Split(
        train=tuple(ids[i] for i in train_pos),
        validation=tuple(ids[i] for i in validation_pos),
        test=tuple(ids[i] for i in test_pos),
        seed=config.seed,
    )
