"""
ledger.py - Interest-Accruing Balance Ledger

The AccrualLedger is the central state manager of the system. Every
account carries a materialized principal, a pinned per-second rate and
the time of its last settlement; its effective balance grows linearly
between settlements without any background process.

Key responsibilities:
    - Implements LedgerView for safe read-only access by pure functions
    - Settles accrued interest into principal before every mutation
    - Pins an account's rate when it goes from zero balance to funded
    - Guards the global rate so it can only ever decrease
    - Executes every operation atomically (all state restored on failure)
    - Always logs - every change lands in the ordered event log

Rate pinning is deliberately asymmetric. A recipient with zero balance
inherits the sender's rate on transfer, whatever the global rate is now.
One holder with two accounts can therefore keep an early, higher rate
alive indefinitely: drain one account, then refill it from the other.
This behavior is kept as-is; changing it alters who earns what.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from .core import (
    # Types
    AccountRecord, LedgerEvent, Quantity,
    InterestSettled, RatePinned, GlobalRateUpdated, Approval,
    # Constants
    ALL, DEFAULT_GLOBAL_RATE, SYSTEM_WALLET,
    # Exceptions
    LedgerError,
    # Pure functions
    effective_balance, pending_interest,
    validate_address, validate_amount, validate_quantity,
)
from .book import PrincipalBook
from .journal import JournaledDict
from .rate import RateCell, RateChange
from .allowances import AllowanceBook
from .auth import Authorizer, Capability, RoleRegistry, require


class AccrualLedger:
    """
    Accrual ledger with lazy interest materialization and an audit trail.

    Implements the LedgerView protocol, allowing the ledger to be passed to
    pure functions that access only read-only methods.

    Design Principles:
        - Settle first: no operation reads or writes an account's principal
          while accrued interest for that account is still unmaterialized.
        - All or nothing: a rejected operation leaves principal, rates,
          timestamps, the global rate, allowances and the event log exactly
          as they were.

    Thread Safety:
        Not thread-safe. Operations are totally ordered by the caller.

    Caller Identity:
        Capability checks use the caller passed in. transfer() and the
        allowance methods take the acting account on trust; authenticating
        it is the job of whatever sits in front of the ledger.

    Example:
        roles = RoleRegistry("admin", {Capability.MINT_BURN: ["vault"]})
        ledger = AccrualLedger("rebase", authorizer=roles)
        ledger.mint("alice", 1_000, caller="vault")
        ledger.advance_by(3600)
        ledger.effective_balance_of("alice")   # > 1_000
        ledger.transfer("alice", "bob", 500)
    """

    def __init__(
        self,
        name: str,
        initial_rate: int = DEFAULT_GLOBAL_RATE,
        authorizer: Optional[Authorizer] = None,
        initial_time: int = 0,
        verbose: bool = True,
    ):
        """
        Create a ledger.

        Args:
            name: Ledger identifier
            initial_rate: Starting global rate, scaled by SCALE
            authorizer: Capability predicate (default: RoleRegistry owned by "admin")
            initial_time: Starting logical time in seconds (default: 0)
            verbose: Print rejections and rate changes (default: True)
        """
        validate_amount(initial_time, "initial_time")
        self.name = name
        self.verbose = verbose
        self.authorizer: Authorizer = authorizer if authorizer is not None else RoleRegistry("admin")
        self._current_time: int = initial_time
        self._book = PrincipalBook(name, time_source=lambda: self._current_time)
        # account -> (rate, last_synced_at); principal lives in the book
        self._terms: JournaledDict[str, Tuple[int, int]] = JournaledDict()
        self._rate = RateCell(initial_rate)
        self._allowances = AllowanceBook()
        self._atomic_depth = 0

    # ========================================================================
    # LedgerView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    @property
    def current_time(self) -> int:
        return self._current_time

    @property
    def global_rate(self) -> int:
        return self._rate.value

    def get_account(self, account: str) -> AccountRecord:
        """Persisted record, or an empty record for a never-credited account."""
        rate, last_synced_at = self._terms.get(account, (0, 0))
        return AccountRecord(
            principal=self._book.balance_of(account),
            rate=rate,
            last_synced_at=last_synced_at,
        )

    def list_accounts(self) -> Set[str]:
        return self._book.list_accounts()

    # ========================================================================
    # BALANCE READS
    # ========================================================================

    def effective_balance_of(self, account: str) -> int:
        """
        Principal grown by the account's linear accrual factor since its
        last settlement. Never mutates state.
        """
        return effective_balance(self.get_account(account), self._current_time)

    balance_of = effective_balance_of

    def principal_of(self, account: str) -> int:
        """Materialized principal, excluding unsettled interest."""
        return self._book.balance_of(account)

    def rate_of(self, account: str) -> int:
        """Pinned rate (0 if the account has never been credited)."""
        return self._terms.get(account, (0, 0))[0]

    def last_synced_at(self, account: str) -> int:
        return self._terms.get(account, (0, 0))[1]

    def pending_interest(self, account: str) -> int:
        return pending_interest(self.get_account(account), self._current_time)

    def get_positions(self) -> Dict[str, int]:
        """Non-zero principals by account."""
        return self._book.get_positions()

    def total_supply(self) -> int:
        """
        Sum of materialized principal.

        Undercounts interest that individual accounts have accrued but not
        yet settled; see total_effective_supply().
        """
        return self._book.total_supply()

    def total_effective_supply(self) -> int:
        return sum(self.effective_balance_of(a) for a in sorted(self._book.list_accounts()))

    def verify_supply(self) -> Dict[str, Any]:
        """Check that principals sum to everything issued minus everything burned."""
        return self._book.verify_supply()

    @property
    def rate_version(self) -> int:
        return self._rate.version

    @property
    def rate_history(self) -> Tuple[RateChange, ...]:
        return self._rate.history

    @property
    def event_log(self) -> List[LedgerEvent]:
        return list(self._book.event_log)

    def allowance(self, owner: str, spender: str) -> Quantity:
        return self._allowances.allowance(owner, spender)

    # ========================================================================
    # TIME MANAGEMENT
    # ========================================================================

    def advance_time(self, new_time: int) -> None:
        """
        Advance the logical clock. Time can only move forward.

        Raises:
            ValueError: If new_time is before the current time
        """
        validate_amount(new_time, "new_time")
        if new_time < self._current_time:
            raise ValueError(
                f"Cannot move time backwards: {new_time} < {self._current_time}"
            )
        self._current_time = new_time

    def advance_by(self, seconds: int) -> int:
        validate_amount(seconds, "seconds")
        self._current_time += seconds
        return self._current_time

    # ========================================================================
    # ATOMICITY
    # ========================================================================

    @contextmanager
    def atomic(self, label: str = "atomic") -> Iterator[AccrualLedger]:
        """
        Group ledger calls into one all-or-nothing unit.

        If anything inside raises, every piece of ledger state is restored
        to what it was on entry and the exception propagates. Units nest;
        only the outermost one reports the rejection.

        Example:
            with ledger.atomic("redeem"):
                burned = ledger.burn("alice", ALL, caller="vault")
                pay_out("alice", burned)   # a failure here un-burns
        """
        snap = self._snapshot()
        self._atomic_depth += 1
        try:
            yield self
        except Exception as exc:
            self._restore(snap)
            if self.verbose and self._atomic_depth == 1 and isinstance(exc, LedgerError):
                print(f"✗ REJECTED {label}: {exc}")
            raise
        finally:
            self._release()
            self._atomic_depth -= 1

    def _snapshot(self):
        # marks only; writes are journaled per key until release
        return (
            self._book.snapshot(),
            self._terms.mark(),
            self._rate.snapshot(),
            self._allowances.snapshot(),
        )

    def _restore(self, snap) -> None:
        book, terms, rate, allowances = snap
        self._book.restore(book)
        self._terms.rollback(terms)
        self._rate.restore(rate)
        self._allowances.restore(allowances)

    def _release(self) -> None:
        self._book.release()
        self._terms.release()
        self._allowances.release()

    # ========================================================================
    # SETTLEMENT
    # ========================================================================

    def _settle(self, account: str) -> int:
        if not self._book.has_account(account):
            return 0
        record = self.get_account(account)
        delta = pending_interest(record, self._current_time)
        self._terms[account] = (record.rate, self._current_time)
        if delta > 0:
            self._book.issue(account, delta)
            self._book.emit(InterestSettled, account=account, amount=delta)
        return delta

    def settle(self, account: str) -> int:
        """
        Fold accrued interest into principal and restart the account's clock.

        This is the only path by which interest becomes principal. Calling
        it twice at the same timestamp materializes nothing the second time.

        Returns:
            The amount of interest materialized (0 for an account that was
            never credited).
        """
        validate_address(account)
        with self.atomic("settle"):
            return self._settle(account)

    def _pin(self, account: str, rate: int, source: str) -> None:
        self._book.touch(account)
        self._terms[account] = (rate, self._current_time)
        self._book.emit(RatePinned, account=account, rate=rate, source=source)
        if self.verbose:
            print(f"📝 Rate pinned: {account} @ {rate} (from {source})")

    # ========================================================================
    # MINT / BURN (Mutating, MINT_BURN capability)
    # ========================================================================

    def mint(self, account: str, amount: int, caller: str) -> int:
        """
        Issue `amount` new claims to `account`.

        The account is settled first. If it then holds nothing, its rate is
        pinned to the current global rate.

        Returns:
            The amount minted.

        Raises:
            Unauthorized: If caller lacks MINT_BURN.
        """
        with self.atomic("mint"):
            require(self.authorizer, caller, Capability.MINT_BURN)
            validate_address(account)
            validate_amount(amount)
            if account == SYSTEM_WALLET:
                raise ValueError("Cannot mint to the system wallet")
            self._settle(account)
            if self.effective_balance_of(account) == 0:
                self._pin(account, self._rate.value, "global")
            self._book.issue(account, amount)
        return amount

    def burn(self, account: str, amount: Quantity, caller: str) -> int:
        """
        Destroy claims held by `account`.

        ALL burns the account's full effective balance, computed after
        settlement.

        Returns:
            The amount burned.

        Raises:
            Unauthorized: If caller lacks MINT_BURN.
            InsufficientBalance: If amount exceeds the settled principal.
        """
        with self.atomic("burn"):
            require(self.authorizer, caller, Capability.MINT_BURN)
            validate_address(account)
            validate_quantity(amount)
            if account == SYSTEM_WALLET:
                raise ValueError("Cannot burn from the system wallet")
            self._settle(account)
            if amount is ALL:
                amount = self._book.balance_of(account)
            self._book.retire(account, amount)
        return amount

    # ========================================================================
    # TRANSFERS (Mutating)
    # ========================================================================

    def transfer(
        self,
        sender: str,
        recipient: str,
        amount: Quantity,
        caller: Optional[str] = None,
    ) -> int:
        """
        Move claims from sender to recipient.

        Both accounts are settled first. ALL moves the sender's full settled
        balance. If the recipient then holds nothing, it inherits the
        sender's pinned rate, not the global rate; a recipient that already
        holds a balance keeps its own rate.

        Args:
            sender: Account debited
            recipient: Account credited
            amount: Explicit amount or ALL
            caller: Who initiates the transfer (default: sender). Any other
                    caller spends the sender's allowance for it. The ledger
                    does not authenticate callers: whoever invokes it is
                    trusted to name itself, so omitting caller asserts that
                    the sender is acting.

        Returns:
            The amount moved.

        Raises:
            InsufficientBalance: If amount exceeds the sender's settled principal.
            InsufficientAllowance: If a delegated caller's allowance is too small.
        """
        caller = sender if caller is None else caller
        validate_address(sender, "sender")
        validate_address(recipient, "recipient")
        validate_address(caller, "caller")
        validate_quantity(amount)
        if SYSTEM_WALLET in (sender, recipient):
            raise ValueError("Transfers cannot involve the system wallet; use mint() or burn()")
        with self.atomic("transfer"):
            self._settle(sender)
            self._settle(recipient)
            if amount is ALL:
                amount = self._book.balance_of(sender)
            if caller != sender:
                self._allowances.spend(sender, caller, amount)
            if self.effective_balance_of(recipient) == 0:
                self._pin(recipient, self.rate_of(sender), sender)
            self._book.move(sender, recipient, amount)
        return amount

    # ========================================================================
    # ALLOWANCES (Mutating)
    # ========================================================================

    def approve(self, owner: str, spender: str, amount: Quantity) -> None:
        """
        Set spender's allowance over owner's balance. ALL means unlimited.

        The invoker is trusted to be owner; like transfer(), the ledger does
        not authenticate who is calling.
        """
        with self.atomic("approve"):
            self._allowances.approve(owner, spender, amount)
            self._book.emit(Approval, owner=owner, spender=spender, amount=amount)

    def increase_allowance(self, owner: str, spender: str, amount: int) -> Quantity:
        with self.atomic("increase_allowance"):
            new_amount = self._allowances.increase(owner, spender, amount)
            self._book.emit(Approval, owner=owner, spender=spender, amount=new_amount)
        return new_amount

    def decrease_allowance(self, owner: str, spender: str, amount: int) -> Quantity:
        with self.atomic("decrease_allowance"):
            new_amount = self._allowances.decrease(owner, spender, amount)
            self._book.emit(Approval, owner=owner, spender=spender, amount=new_amount)
        return new_amount

    # ========================================================================
    # GLOBAL RATE (Mutating, ADMIN capability)
    # ========================================================================

    def set_global_rate(self, new_rate: int, caller: str) -> RateChange:
        """
        Lower the rate offered to new entrants.

        Existing accounts keep their pinned rates.

        Returns:
            The accepted RateChange (old rate, new rate, version).

        Raises:
            Unauthorized: If caller lacks ADMIN.
            RateIncreaseRejected: If new_rate exceeds the current global rate.
        """
        with self.atomic("set_global_rate"):
            require(self.authorizer, caller, Capability.ADMIN)
            change = self._rate.lower(new_rate, timestamp=self._current_time)
            self._book.emit(
                GlobalRateUpdated,
                old_rate=change.old_rate,
                new_rate=change.new_rate,
                version=change.version,
            )
        if self.verbose:
            print(f"✓ Global rate: {change.old_rate} → {change.new_rate} (v{change.version})")
        return change

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> AccrualLedger:
        """
        Create an independent copy of this ledger.

        The authorizer is shared, not copied: it is policy, not ledger state.
        """
        cloned = AccrualLedger.__new__(AccrualLedger)
        cloned.name = self.name
        cloned.verbose = self.verbose
        cloned.authorizer = self.authorizer
        cloned._current_time = self._current_time
        cloned._book = self._book.clone(time_source=lambda: cloned._current_time)
        cloned._terms = JournaledDict(self._terms.copy())
        cloned._rate = self._rate.clone()
        cloned._allowances = self._allowances.clone()
        cloned._atomic_depth = 0
        return cloned

    def __repr__(self) -> str:
        return (f"AccrualLedger({self.name!r}, t={self._current_time}, "
                f"global_rate={self._rate.value}, accounts={len(self._book.list_accounts())})")
