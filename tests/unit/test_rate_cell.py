"""
test_rate_cell.py - Unit tests for rate.py
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from accrual import RateCell, RateChange, RateIncreaseRejected


class TestRateCell:

    def test_initial_state(self):
        cell = RateCell(100)
        assert cell.value == 100
        assert cell.version == 0
        assert cell.history == ()

    def test_lower_records_change(self):
        cell = RateCell(100)
        change = cell.lower(80, timestamp=5)
        assert change == RateChange(old_rate=100, new_rate=80, version=1, timestamp=5)
        assert cell.value == 80
        assert cell.history == (change,)

    def test_equal_value_accepted(self):
        cell = RateCell(100)
        cell.lower(100)
        assert cell.value == 100
        assert cell.version == 1

    def test_increase_rejected(self):
        cell = RateCell(100)
        with pytest.raises(RateIncreaseRejected) as info:
            cell.lower(101)
        assert info.value.current == 100
        assert info.value.requested == 101
        assert cell.value == 100
        assert cell.version == 0

    def test_lower_to_zero(self):
        cell = RateCell(100)
        cell.lower(0)
        with pytest.raises(RateIncreaseRejected):
            cell.lower(1)

    @pytest.mark.parametrize("bad", [-1, 1.0, True])
    def test_invalid_values(self, bad):
        with pytest.raises(ValueError):
            RateCell(100).lower(bad)
        with pytest.raises(ValueError):
            RateCell(bad)

    def test_snapshot_restore(self):
        cell = RateCell(100)
        snap = cell.snapshot()
        cell.lower(50)
        cell.restore(snap)
        assert cell.value == 100
        assert cell.version == 0
        assert cell.history == ()

    def test_clone_independent(self):
        cell = RateCell(100)
        cloned = cell.clone()
        cloned.lower(1)
        assert cell.value == 100


class TestRateCellProperties:

    @given(st.lists(st.integers(min_value=0, max_value=10 ** 12), max_size=30))
    @settings(max_examples=100)
    def test_value_never_increases(self, requests):
        """
        PROPERTY: Whatever sequence of updates is attempted, the observed
        value is non-increasing and only accepted updates bump the version.
        """
        cell = RateCell(10 ** 11)
        accepted = 0
        for requested in requests:
            before = cell.value
            try:
                cell.lower(requested)
                accepted += 1
                assert cell.value == requested
            except RateIncreaseRejected:
                assert requested > before
                assert cell.value == before
            assert cell.value <= before
        assert cell.version == accepted
        assert len(cell.history) == accepted
