"""
vault.py - Custodial Pool

The Vault holds the underlying asset and exchanges it 1:1 for ledger
claims. It is the collaborator that drives the accrual ledger's mint and
burn legs, and it holds the MINT_BURN capability on the ledger.

Pattern:
    Deposit:
        - Underlying moves account → vault
        - Ledger mints the same amount of claims to the account
    Redeem:
        - Ledger burns the claims (ALL = everything currently owed)
        - Underlying moves vault → account, exactly the burned amount

Both legs of each flow run in one atomic unit across the two books: if
the payout fails after the burn, the burn is rolled back together with
it and TransferFailed is raised.
"""

from __future__ import annotations

from .core import (
    Quantity, ALL,
    InsufficientBalance, TransferFailed,
    validate_address, validate_amount, validate_quantity,
)
from .book import PrincipalBook
from .ledger import AccrualLedger


class Vault:
    """
    Custodial pool backing an AccrualLedger with an underlying asset book.

    Example:
        usdc = PrincipalBook("usdc")
        usdc.issue("alice", 1_000)
        vault = Vault(ledger, usdc)             # vault holds MINT_BURN on ledger
        vault.deposit("alice", 1_000)
        ledger.advance_by(86_400)
        vault.redeem("alice", ALL)              # pays principal plus interest
    """

    def __init__(self, ledger: AccrualLedger, asset: PrincipalBook, address: str = "vault"):
        validate_address(address, "address")
        self.ledger = ledger
        self.asset = asset
        self.address = address

    def reserve(self) -> int:
        """Underlying units currently held by the vault."""
        return self.asset.balance_of(self.address)

    def deposit(self, account: str, amount: int) -> int:
        """
        Take `amount` underlying from account and mint as many claims.

        Returns:
            The amount of claims minted.

        Raises:
            TransferFailed: If the account cannot pay the underlying.
        """
        validate_address(account)
        validate_amount(amount)
        with self.ledger.atomic("deposit"), self.asset.atomic():
            self._collect(account, amount)
            self.ledger.mint(account, amount, caller=self.address)
        return amount

    def redeem(self, account: str, amount: Quantity = ALL) -> int:
        """
        Burn claims and pay out exactly the burned amount in underlying.

        ALL redeems the account's full effective balance, interest included.

        Returns:
            The amount burned and paid.

        Raises:
            InsufficientBalance: If amount exceeds the account's claims.
            TransferFailed: If the payout fails; the burn is undone.
        """
        validate_address(account)
        validate_quantity(amount)
        with self.ledger.atomic("redeem"), self.asset.atomic():
            burned = self.ledger.burn(account, amount, caller=self.address)
            self._pay(account, burned)
        return burned

    def fund_rewards(self, funder: str, amount: int) -> int:
        """
        Add underlying to the reserve without minting claims.

        Accrued interest is paid out of this surplus on redemption.
        """
        validate_address(funder, "funder")
        validate_amount(amount)
        with self.asset.atomic():
            self._collect(funder, amount)
        return amount

    def _collect(self, account: str, amount: int) -> None:
        try:
            self.asset.move(account, self.address, amount)
        except InsufficientBalance as exc:
            raise TransferFailed(f"Cannot collect {amount} from {account}: {exc}") from exc

    def _pay(self, account: str, amount: int) -> None:
        try:
            self.asset.move(self.address, account, amount)
        except InsufficientBalance as exc:
            raise TransferFailed(f"Cannot pay {amount} to {account}: {exc}") from exc

    def __repr__(self) -> str:
        return f"Vault({self.address!r}, reserve={self.reserve()})"
