"""
Core types and pure functions for the interest-accruing ledger.

This module provides the foundational data structures and protocols:
1. Protocols: LedgerView for read-only ledger access
2. Immutable data structures: AccountRecord and the event records
3. Exceptions: LedgerError and domain-specific error types
4. Balance requests: the ALL sentinel and the Quantity alias
5. Interest math: pure fixed-point functions used by every balance read

All functions in this module are pure and operate on plain integers or on
read-only views. No function can mutate ledger state directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Protocol, Set, Union, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Fixed-point precision for rates and the linear accrual factor.
SCALE = 10 ** 18

# Starting protocol-wide rate: interest per unit per second, scaled by SCALE.
DEFAULT_GLOBAL_RATE = 5 * 10 ** 10

# Reserved wallet for issuance and retirement.
# Mints originate here and burns terminate here; it never holds a balance.
SYSTEM_WALLET = "system"

SECONDS_PER_YEAR = 365 * 24 * 60 * 60


# ============================================================================
# BALANCE REQUESTS
# ============================================================================

class BalanceRequest(Enum):
    """
    Explicit request for the full current balance.

    Used by burn, transfer and approve instead of overloading a numeric
    maximum, so a legitimately large literal amount is never reinterpreted.
    """
    ALL = "all"

    def __repr__(self) -> str:
        return "ALL"


ALL = BalanceRequest.ALL

# An explicit amount, or ALL.
Quantity = Union[int, BalanceRequest]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class Unauthorized(LedgerError):
    """Raised when a caller lacks the capability a guarded operation requires."""

    def __init__(self, caller: str, capability: str):
        self.caller = caller
        self.capability = capability
        super().__init__(f"{caller} lacks capability {capability}")


class RateIncreaseRejected(LedgerError):
    """Raised when the global rate update would increase the rate."""

    def __init__(self, current: int, requested: int):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Global rate can only decrease: requested {requested} > current {current}"
        )


class InsufficientBalance(LedgerError):
    """Raised when a burn or transfer exceeds the settled principal."""

    def __init__(self, account: str, available: int, requested: int):
        self.account = account
        self.available = available
        self.requested = requested
        super().__init__(
            f"{account}: requested {requested} exceeds available {available}"
        )


class InsufficientAllowance(LedgerError):
    """Raised when a delegated transfer exceeds the approved allowance."""

    def __init__(self, owner: str, spender: str, allowance: int, requested: int):
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.requested = requested
        super().__init__(
            f"{spender} may move {allowance} of {owner}'s balance, requested {requested}"
        )


class TransferFailed(LedgerError):
    """Raised by the custodial pool when an underlying-asset payout fails."""
    pass


# ============================================================================
# ACCOUNT RECORD
# ============================================================================

@dataclass(frozen=True, slots=True)
class AccountRecord:
    """
    Persisted per-account accrual state.

    Attributes:
        principal: Materialized balance, excluding interest not yet settled.
        rate: Pinned per-second rate, scaled by SCALE.
        last_synced_at: Timestamp of the last settlement.
    """
    principal: int = 0
    rate: int = 0
    last_synced_at: int = 0

    @property
    def is_drained(self) -> bool:
        return self.principal == 0

    def __repr__(self) -> str:
        return (f"AccountRecord(principal={self.principal}, rate={self.rate}, "
                f"last_synced_at={self.last_synced_at})")



# ============================================================================
# EVENTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class Transfer:
    """A principal movement. Mints come from SYSTEM_WALLET, burns go to it."""
    sequence: int
    timestamp: int
    source: str
    dest: str
    amount: int

    def __repr__(self) -> str:
        return f"Transfer({self.amount}: {self.source}→{self.dest})"


@dataclass(frozen=True, slots=True)
class InterestSettled:
    """Accrued interest folded into an account's principal."""
    sequence: int
    timestamp: int
    account: str
    amount: int


@dataclass(frozen=True, slots=True)
class RatePinned:
    """
    An account's rate was (re)pinned on its transition from zero balance.

    source is "global" for mints, otherwise the sending account.
    """
    sequence: int
    timestamp: int
    account: str
    rate: int
    source: str


@dataclass(frozen=True, slots=True)
class GlobalRateUpdated:
    sequence: int
    timestamp: int
    old_rate: int
    new_rate: int
    version: int


@dataclass(frozen=True, slots=True)
class Approval:
    sequence: int
    timestamp: int
    owner: str
    spender: str
    amount: Quantity


LedgerEvent = Union[Transfer, InterestSettled, RatePinned, GlobalRateUpdated, Approval]


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class LedgerView(Protocol):
    """
    Read-only interface to accrual ledger state.

    Functions accepting a LedgerView parameter declare their read-only intent.
    AccrualLedger implements this protocol but also provides mutation methods.
    For testing, FakeView provides a truly immutable implementation.
    """

    @property
    def current_time(self) -> int:
        """Return the current logical time of the ledger."""
        ...

    @property
    def global_rate(self) -> int:
        """Return the rate a fresh deposit would be pinned to."""
        ...

    def get_account(self, account: str) -> AccountRecord:
        """
        Return the account's persisted record.

        Returns an empty record if the account has never been credited.
        """
        ...

    def list_accounts(self) -> Set[str]:
        """Return every account that has ever been credited."""
        ...


# ============================================================================
# VALIDATION
# ============================================================================

def validate_address(address: str, label: str = "account") -> None:
    if not isinstance(address, str) or not address.strip():
        raise ValueError(f"{label} cannot be empty")


def validate_amount(amount: int, label: str = "amount") -> None:
    """Amounts and rates are unsigned integers. bool is rejected explicitly."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"{label} must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"{label} cannot be negative, got {amount}")


def validate_quantity(quantity: Quantity, label: str = "amount") -> None:
    if quantity is ALL:
        return
    validate_amount(quantity, label)


# ============================================================================
# INTEREST MATH
# ============================================================================

def accrual_factor(rate: int, elapsed: int) -> int:
    """Linear growth factor since last settlement, scaled by SCALE."""
    return SCALE + rate * elapsed


def accrued_balance(principal: int, rate: int, elapsed: int) -> int:
    """
    Effective balance after `elapsed` seconds of linear accrual.

    The multiply happens before the division by SCALE. The result is
    floored, so it can sit one unit below the exact real-valued balance;
    comparisons across time must allow a tolerance of 1.

    Raises:
        ValueError: If elapsed is negative.
    """
    if elapsed < 0:
        raise ValueError(f"elapsed cannot be negative, got {elapsed}")
    return principal * accrual_factor(rate, elapsed) // SCALE


def effective_balance(record: AccountRecord, now: int) -> int:
    """Effective balance of a record at `now`."""
    return accrued_balance(record.principal, record.rate, now - record.last_synced_at)


def pending_interest(record: AccountRecord, now: int) -> int:
    """Interest accrued since the last settlement and not yet materialized."""
    return effective_balance(record, now) - record.principal


def projected_balance(view: LedgerView, account: str, at_time: Optional[int] = None) -> int:
    """
    Project an account's effective balance at a future time.

    Assumes no intervening settlement. Reads only through the view.

    Args:
        view: Read-only ledger access
        account: Account to project
        at_time: Target time (default: the view's current time)

    Raises:
        ValueError: If at_time is before the account's last settlement.
    """
    record = view.get_account(account)
    target = view.current_time if at_time is None else at_time
    return effective_balance(record, target)


def annualized_rate(rate: int) -> Decimal:
    """
    Express a per-second fixed-point rate as a yearly simple-interest fraction.

    Example:
        annualized_rate(5 * 10**10) == Decimal("1.5768")  # ~157.7% per year
    """
    return Decimal(rate) * SECONDS_PER_YEAR / Decimal(SCALE)


def rate_for_annual(fraction: Union[Decimal, str]) -> int:
    """Inverse of annualized_rate, floored to an integer per-second rate."""
    if not isinstance(fraction, Decimal):
        fraction = Decimal(str(fraction))
    if fraction < 0:
        raise ValueError(f"annual rate cannot be negative, got {fraction}")
    return int(fraction * SCALE / SECONDS_PER_YEAR)


def summarize_events(events: List[LedgerEvent]) -> Dict[str, int]:
    """Count events by type name. Handy for audit assertions."""
    counts: Dict[str, int] = {}
    for event in events:
        name = type(event).__name__
        counts[name] = counts.get(name, 0) + 1
    return counts
