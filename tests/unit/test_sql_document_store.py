from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.domain.services.role_resolver import RoleResolver
from src.infrastructure.repositories.documents import SqlDocumentStore

from tests.utils import FakeIdentity


@pytest.fixture()
def sql_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlDocumentStore:
    return SqlDocumentStore(session_factory)


class TestSqlDocumentStore:
    @pytest.mark.asyncio
    async def test_missing_document_is_none(self, sql_store: SqlDocumentStore) -> None:
        assert await sql_store.get_document("Admin", "nobody") is None

    @pytest.mark.asyncio
    async def test_set_then_overwrite(self, sql_store: SqlDocumentStore) -> None:
        await sql_store.set_document("Users", "u1", {"role": "user"})
        await sql_store.set_document("Users", "u1", {"role": "cashier"})

        assert await sql_store.get_document("Users", "u1") == {"role": "cashier"}

    @pytest.mark.asyncio
    async def test_collections_are_isolated(self, sql_store: SqlDocumentStore) -> None:
        await sql_store.set_document("Chefs", "k1", {"approval": True})

        assert await sql_store.get_document("Waiters", "k1") is None

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, sql_store: SqlDocumentStore) -> None:
        await sql_store.set_document("Chefs", "k1", {"status": "pending", "approval": False})

        merged = await sql_store.update_document("Chefs", "k1", {"status": "active", "approval": True})

        assert merged == {"status": "active", "approval": True}
        assert await sql_store.get_document("Chefs", "k1") == merged

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, sql_store: SqlDocumentStore) -> None:
        assert await sql_store.update_document("Chefs", "nobody", {"status": "active"}) is None

    @pytest.mark.asyncio
    async def test_add_list_and_delete(self, sql_store: SqlDocumentStore) -> None:
        first = await sql_store.add_document("MenuItems", {"name": "Tiramisu", "isVisible": True})
        await sql_store.add_document("MenuItems", {"name": "Iced Coffee", "isVisible": False})

        visible = await sql_store.list_documents("MenuItems", where={"isVisible": True})
        deleted = await sql_store.delete_document("MenuItems", first)
        deleted_again = await sql_store.delete_document("MenuItems", first)

        assert visible == [(first, {"name": "Tiramisu", "isVisible": True})]
        assert deleted is True
        assert deleted_again is False
        assert len(await sql_store.list_documents("MenuItems")) == 1

    @pytest.mark.asyncio
    async def test_resolver_over_sql_store(self, sql_store: SqlDocumentStore) -> None:
        await sql_store.set_document("Waiters", "u1", {"approval": True, "status": "active"})

        resolution = await RoleResolver(sql_store, probe_timeout_seconds=5.0).resolve(
            FakeIdentity("u1")
        )

        assert resolution.role == "waiter"
        assert resolution.eligible is True
