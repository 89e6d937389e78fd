"""
allowances.py - Delegated Transfer Allowances

Standard token-ledger allowance bookkeeping: an owner approves a spender
for an amount, and each delegated transfer consumes it. Approving ALL
grants an unlimited allowance that is never consumed.
"""

from __future__ import annotations
from typing import Tuple

from .journal import JournaledDict
from .core import (
    ALL, Quantity,
    InsufficientAllowance,
    validate_address, validate_amount, validate_quantity,
)


class AllowanceBook:

    def __init__(self):
        self._allowances: JournaledDict[Tuple[str, str], Quantity] = JournaledDict()

    def allowance(self, owner: str, spender: str) -> Quantity:
        """Current allowance: an int, or ALL for unlimited."""
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: Quantity) -> None:
        """Overwrite the allowance."""
        validate_address(owner, "owner")
        validate_address(spender, "spender")
        validate_quantity(amount)
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def increase(self, owner: str, spender: str, amount: int) -> Quantity:
        validate_amount(amount)
        current = self.allowance(owner, spender)
        if current is ALL:
            return ALL
        self.approve(owner, spender, current + amount)
        return current + amount

    def decrease(self, owner: str, spender: str, amount: int) -> Quantity:
        """
        Raises:
            InsufficientAllowance: If amount exceeds a finite allowance.
        """
        validate_amount(amount)
        current = self.allowance(owner, spender)
        if current is ALL:
            return ALL
        if amount > current:
            raise InsufficientAllowance(owner, spender, current, amount)
        self.approve(owner, spender, current - amount)
        return current - amount

    def spend(self, owner: str, spender: str, amount: int) -> None:
        """
        Consume amount from the allowance. Unlimited allowances are untouched.

        Raises:
            InsufficientAllowance: If amount exceeds the allowance.
        """
        current = self.allowance(owner, spender)
        if current is ALL:
            return
        if amount > current:
            raise InsufficientAllowance(owner, spender, current, amount)
        self.approve(owner, spender, current - amount)

    def snapshot(self) -> int:
        return self._allowances.mark()

    def restore(self, snap: int) -> None:
        self._allowances.rollback(snap)

    def release(self) -> None:
        self._allowances.release()

    def clone(self) -> AllowanceBook:
        cloned = AllowanceBook()
        cloned._allowances = JournaledDict(self._allowances.copy())
        return cloned
