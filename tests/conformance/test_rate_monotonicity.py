"""
Rate Monotonicity Conformance Tests

INVARIANT: The global rate never increases.

    ∀ accepted updates u1 before u2:
        new_rate(u2) <= new_rate(u1) <= initial_rate

An attempted increase is rejected outright and changes nothing.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from accrual import RateIncreaseRejected, DEFAULT_GLOBAL_RATE

from tests.ledger_helpers import ADMIN, make_ledger


class TestRateMonotonicityProperties:

    @given(st.lists(st.integers(min_value=0, max_value=2 * DEFAULT_GLOBAL_RATE), max_size=25))
    @settings(max_examples=200)
    def test_rate_is_non_increasing(self, attempts):
        """
        PROPERTY: Whatever is requested, the observed rate only goes down.
        """
        ledger = make_ledger()
        observed = [ledger.global_rate]

        for requested in attempts:
            current = ledger.global_rate
            if requested > current:
                with pytest.raises(RateIncreaseRejected):
                    ledger.set_global_rate(requested, caller=ADMIN)
                assert ledger.global_rate == current
            else:
                ledger.set_global_rate(requested, caller=ADMIN)
                assert ledger.global_rate == requested
            observed.append(ledger.global_rate)

        assert observed == sorted(observed, reverse=True)

    @given(st.lists(st.integers(min_value=0, max_value=2 * DEFAULT_GLOBAL_RATE), max_size=25))
    @settings(max_examples=100)
    def test_version_counts_accepted_updates(self, attempts):
        """
        PROPERTY: rate_version equals the number of accepted updates, and the
        history chains old_rate to the previous new_rate.
        """
        ledger = make_ledger()
        accepted = 0
        for requested in attempts:
            try:
                ledger.set_global_rate(requested, caller=ADMIN)
                accepted += 1
            except RateIncreaseRejected:
                pass

        assert ledger.rate_version == accepted
        previous = DEFAULT_GLOBAL_RATE
        for change in ledger.rate_history:
            assert change.old_rate == previous
            assert change.new_rate <= change.old_rate
            previous = change.new_rate


class TestRateMonotonicityExamples:

    def test_zero_is_terminal(self, ledger):
        ledger.set_global_rate(0, caller=ADMIN)
        with pytest.raises(RateIncreaseRejected):
            ledger.set_global_rate(1, caller=ADMIN)
        assert ledger.global_rate == 0
