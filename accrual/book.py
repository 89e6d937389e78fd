"""
book.py - Raw Principal Book

The PrincipalBook is the minimal base ledger the accrual ledger composes:
it reads raw principal, mutates raw principal, and records every change
in an ordered event log. It knows nothing about interest.

Key responsibilities:
    - Stores one raw balance per account (no interest, no rates)
    - Issues from and retires to SYSTEM_WALLET, tracking issued/retired totals
    - Assigns a monotonic sequence number to every recorded event
    - Journals balance writes so a failed unit rolls back only what it touched

The same class doubles as the underlying-asset book held by the Vault.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Tuple

from .journal import JournaledDict
from .core import (
    # Types
    LedgerEvent, Transfer,
    # Constants
    SYSTEM_WALLET,
    # Exceptions
    InsufficientBalance,
    # Validation
    validate_address, validate_amount,
)


# (balance journal mark, issued, retired, log length, next sequence)
BookSnapshot = Tuple[int, int, int, int, int]


class PrincipalBook:
    """
    Single-asset balance book with an ordered audit trail.

    Thread Safety:
        Not thread-safe. Callers serialize access; the accrual ledger
        executes every operation to completion before starting the next.

    Example:
        book = PrincipalBook("usdc")
        book.issue("alice", 1_000)
        book.move("alice", "bob", 250)
        book.balance_of("bob")  # 250
    """

    def __init__(self, name: str, time_source: Optional[Callable[[], int]] = None):
        """
        Create a book.

        Args:
            name: Book identifier
            time_source: Callable returning the current timestamp for events
                         (default: always 0)
        """
        self.name = name
        self._balances: JournaledDict[str, int] = JournaledDict()
        self._time_source = time_source or (lambda: 0)
        self.event_log: List[LedgerEvent] = []
        self._next_sequence: int = 0
        self._issued: int = 0
        self._retired: int = 0

    # ========================================================================
    # READS
    # ========================================================================

    def balance_of(self, account: str) -> int:
        """Raw balance (0 if the account has never been credited)."""
        return self._balances.get(account, 0)

    def has_account(self, account: str) -> bool:
        return account in self._balances

    def list_accounts(self) -> Set[str]:
        """All accounts ever credited, including drained ones."""
        return set(self._balances)

    def get_positions(self) -> Dict[str, int]:
        """All non-zero balances."""
        return {a: b for a, b in self._balances.items() if b != 0}

    def total_supply(self) -> int:
        """Sum of raw balances, accumulated in sorted account order."""
        return sum(self._balances[a] for a in sorted(self._balances))

    @property
    def issued(self) -> int:
        return self._issued

    @property
    def retired(self) -> int:
        return self._retired

    def verify_supply(self) -> Dict[str, Any]:
        """
        Verify that the sum of balances equals everything issued minus
        everything retired.

        Returns:
            Dict with keys:
            - 'valid': bool
            - 'supply': current sum of balances
            - 'expected': issued - retired
            - 'negative': accounts with a negative balance (always empty
              unless the book was corrupted)

        Example:
            result = book.verify_supply()
            assert result['valid'], result
        """
        supply = self.total_supply()
        expected = self._issued - self._retired
        negative = sorted(a for a, b in self._balances.items() if b < 0)
        return {
            'valid': supply == expected and not negative,
            'supply': supply,
            'expected': expected,
            'negative': negative,
        }

    # ========================================================================
    # MUTATIONS
    # ========================================================================

    def emit(self, event_type: type, **fields) -> LedgerEvent:
        """
        Record an event, stamping it with the next sequence number and the
        current time.
        """
        event = event_type(
            sequence=self._next_sequence,
            timestamp=self._time_source(),
            **fields,
        )
        self._next_sequence += 1
        self.event_log.append(event)
        return event

    def touch(self, account: str) -> None:
        """Make an account known to the book without changing its balance."""
        validate_address(account)
        self._balances.setdefault(account, 0)

    def issue(self, account: str, amount: int) -> None:
        """Create `amount` new units in `account`."""
        validate_address(account)
        validate_amount(amount)
        if account == SYSTEM_WALLET:
            raise ValueError("Cannot issue to the system wallet")
        self._balances[account] = self.balance_of(account) + amount
        self._issued += amount
        self.emit(Transfer, source=SYSTEM_WALLET, dest=account, amount=amount)

    def retire(self, account: str, amount: int) -> None:
        """
        Destroy `amount` units held by `account`.

        Raises:
            InsufficientBalance: If the account holds less than amount.
        """
        validate_address(account)
        validate_amount(amount)
        available = self.balance_of(account)
        if amount > available:
            raise InsufficientBalance(account, available, amount)
        if amount == 0 and account not in self._balances:
            return
        self._balances[account] = available - amount
        self._retired += amount
        self.emit(Transfer, source=account, dest=SYSTEM_WALLET, amount=amount)

    def move(self, source: str, dest: str, amount: int) -> None:
        """
        Move `amount` from source to dest.

        A move to oneself is checked against the balance and recorded, but
        leaves the balance unchanged. A zero move involving an account the book has never seen is a no-op.

        Raises:
            InsufficientBalance: If source holds less than amount.
        """
        validate_address(source, "source")
        validate_address(dest, "dest")
        validate_amount(amount)
        if SYSTEM_WALLET in (source, dest):
            raise ValueError("Use issue() or retire() for system wallet flows")
        available = self.balance_of(source)
        if amount > available:
            raise InsufficientBalance(source, available, amount)
        if amount == 0 and (source not in self._balances or dest not in self._balances):
            return
        self._balances[source] = available - amount
        self._balances[dest] = self.balance_of(dest) + amount
        self.emit(Transfer, source=source, dest=dest, amount=amount)

    # ========================================================================
    # SNAPSHOTS
    # ========================================================================

    def snapshot(self) -> BookSnapshot:
        """
        Open a rollback point. Every snapshot must be paired with release().
        """
        return (
            self._balances.mark(),
            self._issued,
            self._retired,
            len(self.event_log),
            self._next_sequence,
        )

    def restore(self, snap: BookSnapshot) -> None:
        """Roll the book back to a snapshot taken earlier on this book."""
        mark, issued, retired, log_length, next_sequence = snap
        self._balances.rollback(mark)
        self._issued = issued
        self._retired = retired
        del self.event_log[log_length:]
        self._next_sequence = next_sequence

    def release(self) -> None:
        """Close the most recent snapshot."""
        self._balances.release()

    @contextmanager
    def atomic(self) -> Iterator[PrincipalBook]:
        """Restore the book to its entry state if the body raises."""
        snap = self.snapshot()
        try:
            yield self
        except Exception:
            self.restore(snap)
            raise
        finally:
            self.release()

    def clone(self, time_source: Optional[Callable[[], int]] = None) -> PrincipalBook:
        """
        Create an independent copy of this book.

        Events are immutable, so the log list is copied shallowly.
        """
        cloned = PrincipalBook(self.name, time_source or self._time_source)
        cloned._balances = JournaledDict(self._balances.copy())
        cloned.event_log = list(self.event_log)
        cloned._next_sequence = self._next_sequence
        cloned._issued = self._issued
        cloned._retired = self._retired
        return cloned

    def __repr__(self) -> str:
        return f"PrincipalBook({self.name!r}, {len(self._balances)} accounts, supply={self.total_supply()})"
