"""
test_auth.py - Unit tests for auth.py
"""

import pytest

from accrual import (
    Capability, RoleRegistry, single_owner, allow_all, require, Unauthorized,
)


class TestRoleRegistry:

    def test_owner_holds_everything(self):
        roles = RoleRegistry("admin")
        assert roles("admin", Capability.ADMIN)
        assert roles("admin", Capability.MINT_BURN)

    def test_grant_is_per_capability(self):
        roles = RoleRegistry("admin", {Capability.MINT_BURN: ["vault"]})
        assert roles.has("vault", Capability.MINT_BURN)
        assert not roles.has("vault", Capability.ADMIN)
        assert roles.holders(Capability.MINT_BURN) == {"vault"}

    def test_grant_and_revoke(self):
        roles = RoleRegistry("admin")
        roles.grant("admin", Capability.MINT_BURN, "pool")
        assert roles.has("pool", Capability.MINT_BURN)
        roles.revoke("admin", Capability.MINT_BURN, "pool")
        assert not roles.has("pool", Capability.MINT_BURN)

    def test_only_owner_can_grant(self):
        roles = RoleRegistry("admin")
        with pytest.raises(Unauthorized):
            roles.grant("mallory", Capability.MINT_BURN, "mallory")
        assert not roles.has("mallory", Capability.MINT_BURN)

    def test_transfer_ownership(self):
        roles = RoleRegistry("admin")
        roles.transfer_ownership("admin", "dao")
        assert roles.has("dao", Capability.ADMIN)
        assert not roles.has("admin", Capability.ADMIN)

    def test_empty_owner_rejected(self):
        with pytest.raises(ValueError):
            RoleRegistry("")


class TestPredicates:

    def test_single_owner(self):
        auth = single_owner("root")
        assert auth("root", Capability.ADMIN)
        assert not auth("alice", Capability.MINT_BURN)

    def test_allow_all(self):
        auth = allow_all()
        assert auth("anyone", Capability.ADMIN)

    def test_require_raises_with_context(self):
        with pytest.raises(Unauthorized) as info:
            require(single_owner("root"), "alice", Capability.ADMIN)
        assert info.value.caller == "alice"
        assert info.value.capability == "admin"

    def test_require_accepts_plain_callable(self):
        require(lambda caller, cap: cap is Capability.MINT_BURN, "x", Capability.MINT_BURN)
