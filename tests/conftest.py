"""
conftest.py - Shared pytest fixtures for accrual ledger tests

Provides common fixtures used across unit, conformance and functional tests:
- Ledgers with a role registry (admin + vault holding MINT_BURN)
- Funded ledgers at the default global rate
- A vault backed by an underlying asset book
"""

import pytest

from accrual import PrincipalBook, Vault, SCALE

from tests.ledger_helpers import MINTER, make_ledger, make_roles


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def roles():
    return make_roles()


@pytest.fixture
def ledger():
    """Fresh ledger at the default global rate, t=0."""
    return make_ledger()


@pytest.fixture
def funded_ledger(ledger):
    """Ledger with alice holding 1e18 units minted at t=0."""
    ledger.mint("alice", SCALE, caller=MINTER)
    return ledger


# =============================================================================
# VAULT FIXTURES
# =============================================================================

@pytest.fixture
def asset():
    """Underlying asset book with alice, bob and treasury funded."""
    book = PrincipalBook("underlying")
    book.issue("alice", 10 * SCALE)
    book.issue("bob", 10 * SCALE)
    book.issue("treasury", 100 * SCALE)
    return book


@pytest.fixture
def vault(ledger, asset):
    return Vault(ledger, asset, address=MINTER)
