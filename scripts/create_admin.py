#!/usr/bin/env python3
"""Create an admin account and its Admin role record.

Usage: python scripts/create_admin.py <email> <password> [full name]
"""

from __future__ import annotations

import asyncio
import sys
from datetime import UTC, datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.deps import get_document_store, get_identity_provider
from src.core.logging import setup_logging
from src.domain.services.role_resolver import collection_for


async def create_admin(email: str, password: str, full_name: str) -> str:
    provider = get_identity_provider()
    store = get_document_store()

    identity = await provider.create_account(email, password)
    await store.set_document(
        collection_for("admin"),
        identity.uid,
        {
            "fullName": full_name,
            "email": email,
            "role": "admin",
            "createdAt": datetime.now(UTC).isoformat(),
        },
    )
    return identity.uid


def main() -> None:
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)

    setup_logging()
    email, password = sys.argv[1], sys.argv[2]
    full_name = sys.argv[3] if len(sys.argv) > 3 else "Administrator"
    uid = asyncio.run(create_admin(email, password, full_name))
    print(f"Admin created: {email} (uid={uid})")


if __name__ == "__main__":
    main()
