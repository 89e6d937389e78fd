"""
test_vault_lifecycle.py - Deposit and redemption through the custodial pool

Tests:
- Deposit identity: claims minted equal underlying received
- Full redemption at the same timestamp returns the deposit
- Redemption with interest needs a funded reward reserve
- A failed payout rolls back the burn on both books
"""

import pytest

from accrual import (
    Vault, Capability, SCALE, DEFAULT_GLOBAL_RATE, ALL,
    TransferFailed, InsufficientBalance, Unauthorized,
    accrued_balance,
)

from tests.ledger_helpers import TWO_HOURS, make_ledger, ledger_snapshot


class TestDeposit:

    def test_deposit_identity(self, vault, ledger, asset):
        assert vault.deposit("alice", SCALE) == SCALE
        assert ledger.effective_balance_of("alice") == SCALE
        assert ledger.rate_of("alice") == DEFAULT_GLOBAL_RATE
        assert asset.balance_of("alice") == 9 * SCALE
        assert vault.reserve() == SCALE

    def test_deposit_without_underlying_fails_cleanly(self, vault, ledger, asset):
        with pytest.raises(TransferFailed):
            vault.deposit("alice", 11 * SCALE)
        assert "alice" not in ledger.list_accounts()
        assert asset.balance_of("alice") == 10 * SCALE
        assert vault.reserve() == 0

    def test_vault_without_mint_capability(self, ledger, asset):
        rogue = Vault(ledger, asset, address="rogue")
        with pytest.raises(Unauthorized):
            rogue.deposit("alice", SCALE)
        assert asset.balance_of("alice") == 10 * SCALE
        assert asset.balance_of("rogue") == 0


class TestRedeem:

    def test_full_redeem_same_time_returns_deposit(self, vault, ledger, asset):
        vault.deposit("alice", SCALE)
        assert vault.redeem("alice", ALL) == SCALE
        assert asset.balance_of("alice") == 10 * SCALE
        assert ledger.effective_balance_of("alice") == 0
        assert vault.reserve() == 0

    def test_partial_redeem(self, vault, ledger, asset):
        vault.deposit("alice", SCALE)
        vault.redeem("alice", 100)
        assert ledger.principal_of("alice") == SCALE - 100
        assert asset.balance_of("alice") == 9 * SCALE + 100

    def test_redeem_more_than_claims(self, vault, ledger, asset):
        vault.deposit("alice", SCALE)
        with pytest.raises(InsufficientBalance):
            vault.redeem("alice", SCALE + 1)
        assert vault.reserve() == SCALE

    def test_interest_without_reserve_fails_and_unburns(self, vault, ledger, asset):
        vault.deposit("alice", SCALE)
        ledger.advance_by(TWO_HOURS)
        before = ledger_snapshot(ledger)

        with pytest.raises(TransferFailed):
            vault.redeem("alice", ALL)

        assert ledger_snapshot(ledger) == before
        assert ledger.principal_of("alice") == SCALE
        assert ledger.last_synced_at("alice") == 0
        assert asset.balance_of("alice") == 9 * SCALE
        assert vault.reserve() == SCALE

    def test_funded_rewards_pay_interest(self, vault, ledger, asset):
        vault.deposit("alice", SCALE)
        vault.fund_rewards("treasury", SCALE)
        ledger.advance_by(TWO_HOURS)

        paid = vault.redeem("alice", ALL)

        assert paid == accrued_balance(SCALE, DEFAULT_GLOBAL_RATE, TWO_HOURS)
        assert asset.balance_of("alice") == 9 * SCALE + paid
        assert vault.reserve() == 2 * SCALE - paid
        assert ledger.effective_balance_of("alice") == 0


class TestTwoDepositors:

    def test_late_depositor_gets_lower_rate(self, vault, ledger, asset):
        vault.deposit("alice", SCALE)
        ledger.set_global_rate(DEFAULT_GLOBAL_RATE // 2, caller="admin")
        vault.deposit("bob", SCALE)
        vault.fund_rewards("treasury", SCALE)
        ledger.advance_by(10 * TWO_HOURS)

        alice_paid = vault.redeem("alice")
        bob_paid = vault.redeem("bob")

        assert alice_paid > bob_paid > SCALE
        assert asset.verify_supply()['valid']
        assert ledger.verify_supply()['valid']


def test_vault_on_custom_address(asset):
    ledger = make_ledger()
    ledger.authorizer.grant("admin", Capability.MINT_BURN, "pool")
    pool = Vault(ledger, asset, address="pool")
    pool.deposit("bob", 5)
    assert pool.reserve() == 5
    assert ledger.effective_balance_of("bob") == 5
