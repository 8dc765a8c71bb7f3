#!/usr/bin/env python3
"""Populate the Categories and MenuItems collections with sample data."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.deps import get_document_store
from src.core.logging import setup_logging
from src.domain.reference_data import MENU_CATEGORIES, MENU_ITEMS
from src.domain.services.catalog import CATEGORIES, MENU_ITEMS as MENU_ITEMS_COLLECTION


async def seed() -> tuple[int, int]:
    store = get_document_store()

    existing = {data.get("name") for _, data in await store.list_documents(CATEGORIES)}
    categories = 0
    for category in MENU_CATEGORIES:
        if category["name"] in existing:
            continue
        await store.add_document(CATEGORIES, category)
        categories += 1

    existing = {data.get("name") for _, data in await store.list_documents(MENU_ITEMS_COLLECTION)}
    items = 0
    for item in MENU_ITEMS:
        if item["name"] in existing:
            continue
        await store.add_document(MENU_ITEMS_COLLECTION, item)
        items += 1

    return categories, items


def main() -> None:
    setup_logging()
    categories, items = asyncio.run(seed())
    print(f"Seeded {categories} categories and {items} menu items")


if __name__ == "__main__":
    main()
