"""
Tests for the Result[P] envelope.

Validates:
    - Generic payloads
    - Frozen immutability
    - Default warnings tuple and has_warning()
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pylinmodels.core.result import Result


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


# ═══════════════════════════════════════════════════════════════════════
# Construction and field access
# ═══════════════════════════════════════════════════════════════════════


class TestResultConstruction:
    """Test Result envelope construction."""

    def test_basic_creation(self):
        result = Result(
            params=FakeParams(value=42.0),
            info={'method': 'qr', 'n_retained': 10},
            timing={'total_seconds': 0.01},
            backend_name='cpu_qr',
        )
        assert result.params.value == 42.0
        assert result.info['method'] == 'qr'
        assert result.timing['total_seconds'] == 0.01
        assert result.backend_name == 'cpu_qr'

    def test_timing_none(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name='cpu')
        assert result.timing is None

    def test_tuple_payload(self):
        result = Result(params=(1, 2, 3), info={}, timing=None, backend_name='cpu')
        assert result.params == (1, 2, 3)


class TestResultImmutability:
    """Result is frozen."""

    def test_cannot_reassign_params(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name='cpu')
        with pytest.raises(FrozenInstanceError):
            result.params = FakeParams(2.0)

    def test_cannot_reassign_warnings(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name='cpu')
        with pytest.raises(FrozenInstanceError):
            result.warnings = ("late",)


class TestWarnings:
    """Warnings stored on the envelope."""

    def test_default_empty(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name='cpu')
        assert result.warnings == ()
        assert not result.has_warning("anything")

    def test_has_warning_substring(self):
        result = Result(
            params=FakeParams(1.0), info={}, timing=None, backend_name='cpu',
            warnings=("Lasso did not converge at penalty 0.1",),
        )
        assert result.has_warning("did not converge")
        assert not result.has_warning("rank")
