#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Accrual Ledger Step by Step

A pedagogical walk through the interest-accruing ledger. Each step builds
on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:   Foundation      - Roles, the vault, the first deposit
  4-6:   Accrual         - Lazy growth, linear deltas, settlement
  7-9:   Rates           - Lowering the global rate, inheritance, the re-pin
  10-11: Safety          - Rejections roll back, redemption and the reserve

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from accrual import (
    AccrualLedger, PrincipalBook, Vault, RoleRegistry, Capability,
    ALL, SCALE, DEFAULT_GLOBAL_RATE,
    LedgerError, TransferFailed,
    annualized_rate, summarize_events,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    # Roles
    admin: str = "admin"
    vault_address: str = "vault"

    # Rates, scaled by SCALE per second
    initial_rate: int = DEFAULT_GLOBAL_RATE
    lowered_rate: int = 4 * 10 ** 10

    # Timing
    sample_step: int = 7_200       # two hours
    samples: int = 3

    # Initial underlying holdings
    alice_underlying: int = 10 * SCALE
    bob_underlying: int = 10 * SCALE
    treasury_underlying: int = 100 * SCALE

    alice_deposit: int = SCALE
    reward_funding: int = SCALE


CONFIG = DemoConfig()

# Global state for interactive mode
QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def fmt(amount: int) -> str:
    """Base units as whole tokens with 18 decimals."""
    whole, frac = divmod(amount, SCALE)
    return f"{whole}.{frac:018d}"


def show_account(ledger: AccrualLedger, account: str):
    record = ledger.get_account(account)
    print(f"  {account:<8} principal={fmt(record.principal)}  "
          f"effective={fmt(ledger.effective_balance_of(account))}  "
          f"rate={record.rate}  synced@{record.last_synced_at}")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_roles_and_ledger():
    """Create the role registry and an empty ledger."""
    step_header(1, "Roles and the Empty Ledger",
        "Capabilities are an injected predicate, separate from the math.")

    print(f">>> roles = RoleRegistry({CONFIG.admin!r}, {{Capability.MINT_BURN: [{CONFIG.vault_address!r}]}})")
    roles = RoleRegistry(CONFIG.admin, {Capability.MINT_BURN: [CONFIG.vault_address]})
    ledger = AccrualLedger("tutorial", initial_rate=CONFIG.initial_rate,
                           authorizer=roles, verbose=True)

    section_header("Initial State")
    print(f"Ledger:          {ledger!r}")
    print(f"Global rate:     {ledger.global_rate} per second (x1e-18)")
    print(f"Annualized:      {annualized_rate(ledger.global_rate):.2%}")
    print(f"Event log:       {len(ledger.event_log)} entries")
    return ledger


def step_02_vault(ledger: AccrualLedger):
    """Set up the underlying asset and the custodial pool."""
    step_header(2, "The Custodial Pool",
        "Claims are minted only against underlying held by the vault.")

    usdc = PrincipalBook("underlying")
    usdc.issue("alice", CONFIG.alice_underlying)
    usdc.issue("bob", CONFIG.bob_underlying)
    usdc.issue("treasury", CONFIG.treasury_underlying)
    vault = Vault(ledger, usdc, address=CONFIG.vault_address)

    positions = {a: fmt(b) for a, b in usdc.get_positions().items()}
    print(f"Underlying positions: {positions}")
    print(f"Vault: {vault!r}")
    return vault


def step_03_first_deposit(ledger: AccrualLedger, vault: Vault):
    """Deposit pins the account to the global rate."""
    step_header(3, "First Deposit",
        "A zero-balance account is pinned to the global rate when funded.")

    print(f">>> vault.deposit('alice', {CONFIG.alice_deposit})")
    vault.deposit("alice", CONFIG.alice_deposit)
    show_account(ledger, "alice")
    print(f"\nVault reserve: {fmt(vault.reserve())}")


# ============================================================================
# PHASE 2: ACCRUAL (Steps 4-6)
# ============================================================================

def step_04_lazy_growth(ledger: AccrualLedger):
    """Effective balance grows without any write."""
    step_header(4, "Lazy Growth",
        "Reads compute interest on the fly; principal does not change.")

    events_before = len(ledger.event_log)
    samples = [ledger.effective_balance_of("alice")]
    for _ in range(CONFIG.samples):
        ledger.advance_by(CONFIG.sample_step)
        samples.append(ledger.effective_balance_of("alice"))
        show_account(ledger, "alice")

    section_header("Linear Deltas")
    deltas = [b - a for a, b in zip(samples, samples[1:])]
    for i, delta in enumerate(deltas, 1):
        print(f"  interval {i}: +{delta}")
    print(f"\nEvents written by reads: {len(ledger.event_log) - events_before}")


def step_05_settlement(ledger: AccrualLedger):
    """settle() folds pending interest into principal."""
    step_header(5, "Settlement",
        "Interest becomes principal only when the account is touched.")

    print(f"Pending before: {ledger.pending_interest('alice')}")
    delta = ledger.settle("alice")
    print(f"Materialized:   {delta}")
    print(f"Settle again:   {ledger.settle('alice')}")
    show_account(ledger, "alice")


def step_06_supply(ledger: AccrualLedger):
    """total_supply counts principal only."""
    step_header(6, "Two Notions of Supply",
        "Stored principal undercounts interest no one has settled yet.")

    ledger.advance_by(CONFIG.sample_step)
    print(f"total_supply():           {fmt(ledger.total_supply())}")
    print(f"total_effective_supply(): {fmt(ledger.total_effective_supply())}")
    print(f"verify_supply():          {ledger.verify_supply()}")


# ============================================================================
# PHASE 3: RATES (Steps 7-9)
# ============================================================================

def step_07_lower_rate(ledger: AccrualLedger):
    """The global rate only goes down."""
    step_header(7, "Lowering the Global Rate",
        "New entrants get the lower rate; increases are rejected.")

    ledger.set_global_rate(CONFIG.lowered_rate, caller=CONFIG.admin)
    try:
        ledger.set_global_rate(CONFIG.initial_rate, caller=CONFIG.admin)
    except LedgerError as exc:
        print(f"Increase refused: {exc}")
    show_account(ledger, "alice")


def step_08_inheritance(ledger: AccrualLedger):
    """An empty recipient inherits the sender's rate."""
    step_header(8, "Rate Inheritance",
        "Transfers into an empty account copy the sender's rate, not the global one.")

    ledger.transfer("alice", "bob", CONFIG.alice_deposit // 4)
    show_account(ledger, "alice")
    show_account(ledger, "bob")
    print(f"\nGlobal rate is {ledger.global_rate}, bob earns {ledger.rate_of('bob')}")


def step_09_repin(ledger: AccrualLedger):
    """Draining and refilling revives an early rate."""
    step_header(9, "The Zero-Balance Re-pin",
        "One holder with two accounts can keep the early rate alive.")

    print(">>> ledger.transfer('bob', 'alice', ALL)     # bob drained")
    ledger.transfer("bob", "alice", ALL)
    print(">>> ledger.transfer('alice', 'bob', ...)     # bob refilled")
    ledger.transfer("alice", "bob", CONFIG.alice_deposit // 4)
    show_account(ledger, "bob")
    print("\nbob is back on the early rate although the global rate has dropped.")


# ============================================================================
# PHASE 4: SAFETY (Steps 10-11)
# ============================================================================

def step_10_rejection(ledger: AccrualLedger, vault: Vault):
    """A failed payout un-burns."""
    step_header(10, "All or Nothing",
        "If the vault cannot pay, the burn is rolled back on both books.")

    ledger.advance_by(10 * CONFIG.sample_step)
    before = {a: ledger.get_account(a) for a in ("alice", "bob")}
    print(f"Owed: {fmt(ledger.total_effective_supply())}  reserve: {fmt(vault.reserve())}")
    try:
        with ledger.atomic("redeem everyone"), vault.asset.atomic():
            vault.redeem("alice", ALL)
            vault.redeem("bob", ALL)
    except TransferFailed as exc:
        print(f"Redeem failed: {exc}")
    after = {a: ledger.get_account(a) for a in ("alice", "bob")}
    print(f"Accounts unchanged: {after == before}")


def step_11_redeem(ledger: AccrualLedger, vault: Vault):
    """Fund rewards, then redeem with interest."""
    step_header(11, "Redemption",
        "Interest is paid from a reserve funded separately from deposits.")

    vault.fund_rewards("treasury", CONFIG.reward_funding)
    for account in ("alice", "bob"):
        paid = vault.redeem(account, ALL)
        print(f"  {account} redeemed {fmt(paid)}")
    print(f"\nVault reserve: {fmt(vault.reserve())}")
    print(f"Events: {summarize_events(ledger.event_log)}")


# ============================================================================
# MAIN
# ============================================================================

def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       ACCRUAL LEDGER - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    ledger = step_01_roles_and_ledger()
    wait_for_enter()
    vault = step_02_vault(ledger)
    wait_for_enter()
    step_03_first_deposit(ledger, vault)
    wait_for_enter()

    step_04_lazy_growth(ledger)
    wait_for_enter()
    step_05_settlement(ledger)
    wait_for_enter()
    step_06_supply(ledger)
    wait_for_enter()

    step_07_lower_rate(ledger)
    wait_for_enter()
    step_08_inheritance(ledger)
    wait_for_enter()
    step_09_repin(ledger)
    wait_for_enter()

    step_10_rejection(ledger, vault)
    wait_for_enter()
    step_11_redeem(ledger, vault)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    You've learned:
      - Effective balance grows lazily; only settlement writes it down
      - Rates are pinned when an account goes from empty to funded
      - Transfers into an empty account inherit the sender's rate
      - The global rate can only be lowered
      - Every operation is all-or-nothing

    Next steps:
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
