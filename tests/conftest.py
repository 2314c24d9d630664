"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pylinmodels.core.observations import ObservationTable
from pylinmodels.terms.schema import VariableSchema


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def line_table(rng):
    """100 rows of y = 3 + 2x + small noise."""
    n = 100
    x = rng.uniform(-2.0, 2.0, n)
    y = 3.0 + 2.0 * x + rng.standard_normal(n) * 0.05
    return ObservationTable.from_columns({'x': x, 'y': y})


@pytest.fixture
def line_schema():
    return VariableSchema.from_dict({'response': 'y', 'variables': {'x': 'numeric'}})


@pytest.fixture
def mixed_schema():
    return VariableSchema.from_dict({
        'response': 'y',
        'variables': {
            'x1': 'numeric',
            'x2': 'numeric',
            'g': {'role': 'nominal', 'levels': ['a', 'b', 'c']},
            'grade': {'role': 'ordinal', 'levels': ['low', 'mid', 'high']},
        },
    })


@pytest.fixture
def mixed_table(rng):
    """
    120 rows with two numerics, a 3-level nominal and a 3-level ordinal.

    y depends on x1, g and grade but not on x2. Rows 5 and 17 miss x2,
    row 9 misses g.
    """
    n = 120
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    g = np.array(['a', 'b', 'c'] * (n // 3), dtype=object)
    grade = np.array(['low', 'mid', 'high', 'mid'] * (n // 4), dtype=object)
    effect_g = {'a': 0.0, 'b': 1.5, 'c': -1.0}
    effect_grade = {'low': 0.0, 'mid': 0.5, 'high': 2.0}
    y = (
        1.0 + 2.0 * x1
        + np.array([effect_g[v] for v in g])
        + np.array([effect_grade[v] for v in grade])
        + rng.standard_normal(n) * 0.3
    )
    x2[[5, 17]] = np.nan
    g = g.copy()
    g[9] = None
    return ObservationTable.from_columns({'x1': x1, 'x2': x2, 'g': g, 'grade': grade, 'y': y})
