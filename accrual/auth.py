"""
auth.py - Capability Checks

Authorization is an injected predicate: (caller, capability) -> bool.
The accrual ledger checks it at the top of each guarded operation and
never looks inside it, so a single owner, an allowlist, or any other
policy can be swapped in without touching the interest math.
"""

from __future__ import annotations
from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Set

from .core import Unauthorized, validate_address


class Capability(Enum):
    """
    ADMIN: may change the global rate and manage grants.
    MINT_BURN: may mint and burn claims (granted to the custodial pool).
    """
    ADMIN = "admin"
    MINT_BURN = "mint_burn"


Authorizer = Callable[[str, Capability], bool]


def require(authorizer: Authorizer, caller: str, capability: Capability) -> None:
    """
    Raises:
        Unauthorized: If the authorizer denies caller the capability.
    """
    if not authorizer(caller, capability):
        raise Unauthorized(caller, capability.value)


def single_owner(owner: str) -> Authorizer:
    """Authorizer granting every capability to one owner and nothing to anyone else."""
    validate_address(owner, "owner")

    def _is_owner(caller: str, capability: Capability) -> bool:
        return caller == owner

    return _is_owner


def allow_all() -> Authorizer:
    """Authorizer that grants everything. For simulations only."""
    return lambda caller, capability: True


class RoleRegistry:
    """
    Owner plus an allowlist per capability.

    The owner implicitly holds every capability and is the only caller
    allowed to grant or revoke. Instances are callable and can be passed
    directly as the ledger's authorizer.

    Example:
        roles = RoleRegistry("admin")
        roles.grant("admin", Capability.MINT_BURN, "vault")
        ledger = AccrualLedger("rebase", authorizer=roles)
    """

    def __init__(self, owner: str, grants: Optional[Dict[Capability, Iterable[str]]] = None):
        validate_address(owner, "owner")
        self.owner = owner
        self._grants: Dict[Capability, Set[str]] = {c: set() for c in Capability}
        for capability, holders in (grants or {}).items():
            self._grants[capability].update(holders)

    def __call__(self, caller: str, capability: Capability) -> bool:
        return self.has(caller, capability)

    def has(self, caller: str, capability: Capability) -> bool:
        return caller == self.owner or caller in self._grants[capability]

    def holders(self, capability: Capability) -> Set[str]:
        """Explicit grantees (the owner is not listed)."""
        return set(self._grants[capability])

    def grant(self, caller: str, capability: Capability, grantee: str) -> None:
        """
        Raises:
            Unauthorized: If caller is not the owner.
        """
        self._require_owner(caller)
        validate_address(grantee, "grantee")
        self._grants[capability].add(grantee)

    def revoke(self, caller: str, capability: Capability, grantee: str) -> None:
        self._require_owner(caller)
        self._grants[capability].discard(grantee)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self._require_owner(caller)
        validate_address(new_owner, "new_owner")
        self.owner = new_owner

    def _require_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise Unauthorized(caller, "owner")

    def __repr__(self) -> str:
        counts = ", ".join(f"{c.value}={len(h)}" for c, h in self._grants.items())
        return f"RoleRegistry(owner={self.owner!r}, {counts})"
