#!/usr/bin/env python3
"""Issue an id token for manual API testing.

Usage: python scripts/generate_test_token.py <uid> [email]

The uid must have a role record (e.g. in Admin) for role-gated routes to accept it.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.auth import create_id_token

if len(sys.argv) < 2:
    print(__doc__)
    sys.exit(1)

uid = sys.argv[1]
email = sys.argv[2] if len(sys.argv) > 2 else None
print(f"Bearer token for {uid}:\n{create_id_token(uid, email=email)}")
