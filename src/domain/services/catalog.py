"""Menu catalog: categories, subcategories and menu items.

Categories form a two-level tree by name: a subcategory stores its parent's
name in ``parentCategory``. Menu items reference categories by name only.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import structlog
from src.domain.errors import CatalogError, CatalogNotFoundError
from src.domain.models import Category, MenuItem
from src.domain.ports import DocumentStore

logger = structlog.get_logger()

CATEGORIES = "Categories"
MENU_ITEMS = "MenuItems"

_ITEM_FIELDS = {
    "name",
    "price",
    "category",
    "description",
    "subcategory",
    "isVisible",
    "createdAt",
    "updatedAt",
}


def _category_from_document(key: str, data: Mapping[str, Any]) -> Category:
    return Category(
        id=key,
        name=data.get("name", ""),
        description=data.get("description", ""),
        parent_category=data.get("parentCategory") or "",
    )


def _item_from_document(key: str, data: Mapping[str, Any]) -> MenuItem:
    try:
        price = float(data.get("price", 0))
    except (TypeError, ValueError):
        price = 0.0
    return MenuItem(
        id=key,
        name=data.get("name", ""),
        price=price,
        category=data.get("category", ""),
        description=data.get("description", ""),
        subcategory=data.get("subcategory") or "",
        is_visible=data.get("isVisible", True) is not False,
        extra={k: v for k, v in data.items() if k not in _ITEM_FIELDS},
    )


def main_categories(categories: list[Category]) -> list[Category]:
    return [category for category in categories if category.is_parent]


def subcategories(categories: list[Category], parent: str) -> list[Category]:
    return [category for category in categories if category.parent_category == parent]


def _check_parent(categories: list[Category], parent_category: str) -> Category:
    parent = next((c for c in categories if c.name == parent_category), None)
    if parent is None:
        raise CatalogNotFoundError(f"Parent category {parent_category!r} not found")
    if not parent.is_parent:
        raise CatalogError("Subcategories cannot be nested more than one level")
    return parent


def filter_items(
    items: list[MenuItem],
    *,
    category: str | None = None,
    subcategory: str | None = None,
    search: str | None = None,
) -> list[MenuItem]:
    """Filter items by category name, subcategory name and free-text search."""
    needle = (search or "").strip().lower()
    result = []
    for item in items:
        if category and category != "All" and item.category != category:
            continue
        if subcategory and item.subcategory != subcategory:
            continue
        if needle and needle not in item.name.lower() and needle not in item.description.lower():
            continue
        result.append(item)
    return result


class CatalogService:
    """CRUD and browsing over the menu collections."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def list_categories(self) -> list[Category]:
        documents = await self.store.list_documents(CATEGORIES)
        categories = [_category_from_document(key, data) for key, data in documents]
        return sorted(categories, key=lambda category: category.name.lower())

    async def category_tree(self) -> list[tuple[Category, list[Category]]]:
        """Return parent categories paired with their subcategories."""
        categories = await self.list_categories()
        return [
            (parent, subcategories(categories, parent.name))
            for parent in main_categories(categories)
        ]

    async def create_category(
        self, *, name: str, description: str = "", parent_category: str = ""
    ) -> Category:
        categories = await self.list_categories()
        if any(category.name == name for category in categories):
            raise CatalogError(f"Category {name!r} already exists")
        if parent_category:
            _check_parent(categories, parent_category)

        now = datetime.now(UTC).isoformat()
        data = {
            "name": name,
            "description": description,
            "parentCategory": parent_category,
            "createdAt": now,
            "updatedAt": now,
        }
        key = await self.store.add_document(CATEGORIES, data)
        await logger.ainfo("category_created", category_id=key, name=name, parent=parent_category)
        return _category_from_document(key, data)

    async def update_category(self, category_id: str, changes: Mapping[str, Any]) -> Category:
        categories = await self.list_categories()
        current = next((c for c in categories if c.id == category_id), None)
        if current is None:
            raise CatalogNotFoundError(f"Category {category_id} not found")

        name = changes.get("name", current.name)
        parent_category = changes.get("parentCategory", current.parent_category) or ""
        others = [category for category in categories if category.id != category_id]
        children = subcategories(categories, current.name)

        if name != current.name and any(category.name == name for category in others):
            raise CatalogError(f"Category {name!r} already exists")
        if parent_category:
            if parent_category in (current.name, name):
                raise CatalogError("A category cannot be its own parent")
            _check_parent(others, parent_category)
            if children:
                raise CatalogError("Subcategories cannot be nested more than one level")

        payload = dict(changes)
        payload["updatedAt"] = datetime.now(UTC).isoformat()
        data = await self.store.update_document(CATEGORIES, category_id, payload)
        if data is None:
            raise CatalogNotFoundError(f"Category {category_id} not found")

        if name != current.name:
            for child in children:
                await self.store.update_document(
                    CATEGORIES,
                    child.id,
                    {"parentCategory": name, "updatedAt": payload["updatedAt"]},
                )
            await logger.ainfo(
                "category_renamed", category_id=category_id, name=name, subcategories=len(children)
            )
        return _category_from_document(category_id, data)

    async def delete_category(self, category_id: str) -> None:
        if not await self.store.delete_document(CATEGORIES, category_id):
            raise CatalogNotFoundError(f"Category {category_id} not found")
        await logger.ainfo("category_deleted", category_id=category_id)

    async def list_items(
        self,
        *,
        category: str | None = None,
        subcategory: str | None = None,
        search: str | None = None,
        visible_only: bool = True,
    ) -> list[MenuItem]:
        documents = await self.store.list_documents(MENU_ITEMS)
        items = [_item_from_document(key, data) for key, data in documents]
        if visible_only:
            items = [item for item in items if item.is_visible]
        items = filter_items(items, category=category, subcategory=subcategory, search=search)
        return sorted(items, key=lambda item: item.name.lower())

    async def create_item(self, data: Mapping[str, Any]) -> MenuItem:
        now = datetime.now(UTC).isoformat()
        payload = dict(data)
        payload["price"] = float(payload.get("price", 0))
        payload.setdefault("isVisible", True)
        payload["createdAt"] = now
        payload["updatedAt"] = now
        key = await self.store.add_document(MENU_ITEMS, payload)
        await logger.ainfo("menu_item_created", item_id=key, name=payload.get("name"))
        return _item_from_document(key, payload)

    async def update_item(self, item_id: str, changes: Mapping[str, Any]) -> MenuItem:
        payload = dict(changes)
        if "price" in payload:
            payload["price"] = float(payload["price"])
        payload["updatedAt"] = datetime.now(UTC).isoformat()
        data = await self.store.update_document(MENU_ITEMS, item_id, payload)
        if data is None:
            raise CatalogNotFoundError(f"Menu item {item_id} not found")
        return _item_from_document(item_id, data)

    async def toggle_visibility(self, item_id: str) -> MenuItem:
        data = await self.store.get_document(MENU_ITEMS, item_id)
        if data is None:
            raise CatalogNotFoundError(f"Menu item {item_id} not found")
        return await self.update_item(item_id, {"isVisible": data.get("isVisible", True) is False})

    async def delete_item(self, item_id: str) -> None:
        if not await self.store.delete_document(MENU_ITEMS, item_id):
            raise CatalogNotFoundError(f"Menu item {item_id} not found")
        await logger.ainfo("menu_item_deleted", item_id=item_id)
