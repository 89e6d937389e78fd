"""
accrual - Interest-Accruing Balance Ledger

Claims on a custodial pool whose redeemable balance grows linearly at a
per-account rate, pinned when the account is first funded to a
protocol-wide rate that can only ever be lowered.

Usage:
    from accrual import AccrualLedger, PrincipalBook, Vault, RoleRegistry, Capability, ALL

    roles = RoleRegistry("admin", {Capability.MINT_BURN: ["vault"]})
    ledger = AccrualLedger("rebase", authorizer=roles)

    usdc = PrincipalBook("usdc")
    usdc.issue("alice", 1_000)
    vault = Vault(ledger, usdc)

    # Deposit pins alice to the current global rate
    vault.deposit("alice", 1_000)

    # Interest accrues lazily; reads never mutate
    ledger.advance_by(7_200)
    ledger.effective_balance_of("alice")

    # Transfers settle both sides; an empty recipient inherits the sender's rate
    ledger.transfer("alice", "bob", 400)

    # Only ever downwards
    ledger.set_global_rate(4 * 10**10, caller="admin")
"""

# Core types
from .core import (
    AccountRecord,
    BalanceRequest,
    ALL,
    Quantity,
    LedgerView,
    LedgerEvent,
    Transfer,
    InterestSettled,
    RatePinned,
    GlobalRateUpdated,
    Approval,
    LedgerError,
    Unauthorized,
    RateIncreaseRejected,
    InsufficientBalance,
    InsufficientAllowance,
    TransferFailed,
    SCALE,
    DEFAULT_GLOBAL_RATE,
    SYSTEM_WALLET,
    SECONDS_PER_YEAR,
)

# Interest math
from .core import (
    accrual_factor,
    accrued_balance,
    effective_balance,
    pending_interest,
    projected_balance,
    annualized_rate,
    rate_for_annual,
    summarize_events,
)

# Books and the global rate cell
from .book import PrincipalBook
from .rate import RateCell, RateChange
from .allowances import AllowanceBook

# Capabilities
from .auth import (
    Capability,
    Authorizer,
    RoleRegistry,
    single_owner,
    allow_all,
    require,
)

# Ledger and custodial pool
from .ledger import AccrualLedger
from .vault import Vault


__all__ = [
    # Core
    'AccountRecord', 'BalanceRequest', 'ALL', 'Quantity',
    'LedgerView', 'LedgerEvent',
    'Transfer', 'InterestSettled', 'RatePinned', 'GlobalRateUpdated', 'Approval',
    'LedgerError', 'Unauthorized', 'RateIncreaseRejected',
    'InsufficientBalance', 'InsufficientAllowance', 'TransferFailed',
    'SCALE', 'DEFAULT_GLOBAL_RATE', 'SYSTEM_WALLET', 'SECONDS_PER_YEAR',
    # Interest math
    'accrual_factor', 'accrued_balance', 'effective_balance', 'pending_interest',
    'projected_balance', 'annualized_rate', 'rate_for_annual', 'summarize_events',
    # Books
    'PrincipalBook', 'RateCell', 'RateChange', 'AllowanceBook',
    # Capabilities
    'Capability', 'Authorizer', 'RoleRegistry', 'single_owner', 'allow_all', 'require',
    # Ledger
    'AccrualLedger', 'Vault',
]

__version__ = '1.0.0'
