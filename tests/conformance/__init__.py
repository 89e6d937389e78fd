"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the accrual ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. atomicity.py - All-or-nothing operation semantics
2. conservation.py - Supply accounting across principals
3. rate_monotonicity.py - The global rate never increases
4. rate_inheritance.py - Pinning on zero-balance recipients
5. temporal.py - Linear accrual and event ordering
6. idempotency.py - Repeated settlement materializes nothing
7. determinism.py - Reproducible behavior

These tests use hypothesis for property-based testing.
"""
