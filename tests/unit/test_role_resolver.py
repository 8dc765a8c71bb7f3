"""Unit tests for role resolution against the ordered role stores."""

from __future__ import annotations

import pytest
from src.domain import Resolution, ResolutionOutcome, Route
from src.domain.errors import (
    NoAccountError,
    PendingApprovalError,
    RoleLookupError,
    StoreUnavailableError,
)
from src.domain.services.role_resolver import (
    ROLE_STORES,
    RoleResolver,
    collection_for,
    destination_for,
    ensure_eligible,
    is_approved,
    role_from_record,
)

from tests.utils import FakeDocumentStore, FakeIdentity, approved, pending


class TestStoreOrder:
    def test_stores_are_probed_admin_first_users_last(self) -> None:
        assert [store.collection for store in ROLE_STORES] == [
            "Admin",
            "Waiters",
            "Chefs",
            "Cashiers",
            "Users",
        ]

    def test_only_staff_stores_are_approval_gated(self) -> None:
        gated = {store.collection for store in ROLE_STORES if store.approval_gated}
        assert gated == {"Waiters", "Chefs", "Cashiers"}

    def test_collection_for_staff_role(self) -> None:
        assert collection_for("chef") == "Chefs"

    def test_collection_for_generic_role_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            collection_for("user")


class TestDestinations:
    @pytest.mark.parametrize(
        ("role", "route"),
        [
            ("admin", Route.ADMIN_DASHBOARD),
            ("waiter", Route.WAITER_DASHBOARD),
            ("chef", Route.CHEF_DASHBOARD),
            ("cashier", Route.CASHIER_DASHBOARD),
            ("user", Route.HOME),
            ("customer", Route.HOME),
        ],
    )
    def test_destination_for(self, role: str, route: Route) -> None:
        assert destination_for(role) is route


class TestApprovalGate:
    def test_approved_and_active(self) -> None:
        assert is_approved({"approval": True, "status": "active"})

    def test_approved_without_status(self) -> None:
        assert is_approved({"approval": True})

    def test_pending_status_blocks_even_when_approved(self) -> None:
        assert not is_approved({"approval": True, "status": "pending"})

    def test_missing_approval_blocks(self) -> None:
        assert not is_approved({"status": "active"})

    def test_truthy_non_boolean_approval_blocks(self) -> None:
        assert not is_approved({"approval": "true", "status": "active"})


class TestRoleFromRecord:
    def test_role_field_wins(self) -> None:
        assert role_from_record({"role": "cashier", "userType": "chef"}) == "cashier"

    def test_user_type_fallback(self) -> None:
        assert role_from_record({"userType": "chef"}) == "chef"

    def test_literal_fallback(self) -> None:
        assert role_from_record({"name": "Guest"}) == "user"

    def test_empty_role_falls_through(self) -> None:
        assert role_from_record({"role": "", "userType": "waiter"}) == "waiter"


class TestResolve:
    """Tests for RoleResolver.resolve."""

    @pytest.mark.asyncio
    async def test_admin_record_is_eligible_without_gate(self, store: FakeDocumentStore) -> None:
        store.put("Admin", "a1", {"fullName": "Ada"})
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("a1"))

        assert resolution == Resolution(
            role="admin",
            eligible=True,
            destination=Route.ADMIN_DASHBOARD,
            outcome=ResolutionOutcome.ELIGIBLE,
        )
        assert store.probes == [("Admin", "a1")]

    @pytest.mark.asyncio
    async def test_approved_waiter(self, store: FakeDocumentStore) -> None:
        store.put("Waiters", "u1", {"approval": True, "status": "active"})
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("u1"))

        assert resolution.role == "waiter"
        assert resolution.eligible is True
        assert resolution.destination is Route.WAITER_DASHBOARD
        assert store.probes == [("Admin", "u1"), ("Waiters", "u1")]

    @pytest.mark.asyncio
    async def test_admin_wins_over_other_stores(self, store: FakeDocumentStore) -> None:
        store.put("Admin", "u2", {})
        store.put("Cashiers", "u2", approved("cashier"))
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("u2"))

        assert resolution.role == "admin"
        assert resolution.destination is Route.ADMIN_DASHBOARD
        assert ("Cashiers", "u2") not in store.probes

    @pytest.mark.asyncio
    async def test_unapproved_chef_is_pending(self, store: FakeDocumentStore) -> None:
        store.put("Chefs", "u3", {"approval": False})
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("u3"))

        assert resolution == Resolution(
            role="chef",
            eligible=False,
            destination=None,
            outcome=ResolutionOutcome.PENDING_APPROVAL,
        )

    @pytest.mark.asyncio
    async def test_pending_staff_record_does_not_fall_through(
        self, store: FakeDocumentStore
    ) -> None:
        store.put("Cashiers", "c1", pending("cashier"))
        store.put("Users", "c1", {"role": "user"})
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("c1"))

        assert resolution.outcome is ResolutionOutcome.PENDING_APPROVAL
        assert resolution.role == "cashier"
        assert ("Users", "c1") not in store.probes

    @pytest.mark.asyncio
    async def test_approval_true_with_pending_status_is_pending(
        self, store: FakeDocumentStore
    ) -> None:
        store.put("Waiters", "w1", {"approval": True, "status": "pending"})
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("w1"))

        assert resolution.outcome is ResolutionOutcome.PENDING_APPROVAL

    @pytest.mark.asyncio
    async def test_users_record_role_field_maps_to_dashboard(
        self, store: FakeDocumentStore
    ) -> None:
        store.put("Users", "x1", {"role": "cashier"})
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("x1"))

        assert resolution.role == "cashier"
        assert resolution.eligible is True
        assert resolution.destination is Route.CASHIER_DASHBOARD

    @pytest.mark.asyncio
    async def test_users_record_without_role_goes_home(self, store: FakeDocumentStore) -> None:
        store.put("Users", "x2", {"fullName": "Guest"})
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("x2"))

        assert resolution.role == "user"
        assert resolution.destination is Route.HOME

    @pytest.mark.asyncio
    async def test_no_record_anywhere(self, store: FakeDocumentStore) -> None:
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("ghost"))

        assert resolution == Resolution.no_account()
        assert [collection for collection, _ in store.probes] == [
            "Admin",
            "Waiters",
            "Chefs",
            "Cashiers",
            "Users",
        ]

    @pytest.mark.asyncio
    async def test_resolve_is_idempotent(self, store: FakeDocumentStore) -> None:
        store.put("Chefs", "k1", approved("chef"))
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        first = await resolver.resolve(FakeIdentity("k1"))
        second = await resolver.resolve(FakeIdentity("k1"))

        assert first == second

    @pytest.mark.asyncio
    async def test_store_failure_is_an_error_outcome(self, store: FakeDocumentStore) -> None:
        store.failures["Chefs"] = ConnectionError("connection reset")
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("k2"))

        assert resolution.outcome is ResolutionOutcome.ERROR
        assert resolution.eligible is False
        assert "Chefs" in (resolution.error or "")

    @pytest.mark.asyncio
    async def test_probe_timeout_is_an_error_outcome(self, store: FakeDocumentStore) -> None:
        store.delays["Admin"] = 0.5
        resolver = RoleResolver(store, probe_timeout_seconds=0.01)

        resolution = await resolver.resolve(FakeIdentity("slow"))

        assert resolution.outcome is ResolutionOutcome.ERROR
        assert "Timed out" in (resolution.error or "")
        assert store.probes == [("Admin", "slow")]

    @pytest.mark.asyncio
    async def test_non_mapping_record_is_malformed(self, store: FakeDocumentStore) -> None:
        store.raw[("Admin", "m1")] = ["not", "a", "document"]
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("m1"))

        assert resolution.outcome is ResolutionOutcome.ERROR
        assert "Malformed" in (resolution.error or "")

    @pytest.mark.asyncio
    async def test_non_string_role_is_malformed(self, store: FakeDocumentStore) -> None:
        store.put("Users", "m2", {"role": 42})
        resolver = RoleResolver(store, probe_timeout_seconds=1.0)

        resolution = await resolver.resolve(FakeIdentity("m2"))

        assert resolution.outcome is ResolutionOutcome.ERROR


class TestEnsureEligible:
    def test_eligible_passes_through(self) -> None:
        resolution = Resolution(
            role="chef",
            eligible=True,
            destination=Route.CHEF_DASHBOARD,
            outcome=ResolutionOutcome.ELIGIBLE,
        )
        assert ensure_eligible(resolution) is resolution

    def test_pending_raises_with_role(self) -> None:
        resolution = Resolution(
            role="waiter",
            eligible=False,
            destination=None,
            outcome=ResolutionOutcome.PENDING_APPROVAL,
        )
        with pytest.raises(PendingApprovalError) as exc_info:
            ensure_eligible(resolution)
        assert exc_info.value.role == "waiter"

    def test_no_account_raises(self) -> None:
        with pytest.raises(NoAccountError):
            ensure_eligible(Resolution.no_account())

    def test_error_raises_lookup_error(self) -> None:
        with pytest.raises(RoleLookupError) as exc_info:
            ensure_eligible(Resolution.failed("store down"))
        assert not isinstance(exc_info.value, StoreUnavailableError)
        assert str(exc_info.value) == "store down"
