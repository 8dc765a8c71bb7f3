"""Document store backed by the ``documents`` SQL table."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.domain.errors import StoreUnavailableError
from src.infrastructure.db.models import DocumentModel


def _matches(data: Mapping[str, Any], where: Mapping[str, Any] | None) -> bool:
    if not where:
        return True
    return all(data.get(field) == value for field, value in where.items())


class SqlDocumentStore:
    """Collections of JSON documents, each row addressed by (collection, key).

    Every call opens its own session so the store can be shared across requests.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get_document(self, collection: str, key: str) -> dict[str, Any] | None:
        try:
            async with self.session_factory() as session:
                row = await self._fetch(session, collection, key)
                return dict(row.data) if row is not None else None
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Document store unavailable: {exc}") from exc

    async def set_document(self, collection: str, key: str, data: Mapping[str, Any]) -> None:
        try:
            async with self.session_factory() as session:
                row = await self._fetch(session, collection, key)
                if row is None:
                    session.add(DocumentModel(collection=collection, key=key, data=dict(data)))
                else:
                    row.data = dict(data)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Document store unavailable: {exc}") from exc

    async def add_document(self, collection: str, data: Mapping[str, Any]) -> str:
        key = uuid.uuid4().hex
        await self.set_document(collection, key, data)
        return key

    async def update_document(
        self, collection: str, key: str, changes: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        try:
            async with self.session_factory() as session:
                row = await self._fetch(session, collection, key)
                if row is None:
                    return None
                # Reassign so the JSON column is flagged dirty.
                row.data = {**row.data, **changes}
                await session.commit()
                return dict(row.data)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Document store unavailable: {exc}") from exc

    async def delete_document(self, collection: str, key: str) -> bool:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    delete(DocumentModel).where(
                        DocumentModel.collection == collection, DocumentModel.key == key
                    )
                )
                await session.commit()
                return bool(result.rowcount)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Document store unavailable: {exc}") from exc

    async def list_documents(
        self, collection: str, where: Mapping[str, Any] | None = None
    ) -> list[tuple[str, dict[str, Any]]]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(DocumentModel)
                    .where(DocumentModel.collection == collection)
                    .order_by(DocumentModel.created_at)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Document store unavailable: {exc}") from exc

        return [(row.key, dict(row.data)) for row in rows if _matches(row.data, where)]

    async def ping(self) -> None:
        async with self.session_factory() as session:
            await session.execute(select(DocumentModel.id).limit(1))

    async def _fetch(
        self, session: AsyncSession, collection: str, key: str
    ) -> DocumentModel | None:
        result = await session.execute(
            select(DocumentModel).where(
                DocumentModel.collection == collection, DocumentModel.key == key
            )
        )
        return result.scalar_one_or_none()
