"""Clients for external Firebase services."""

from src.libs.firebase_auth import (
    FirebaseAuthClient,
    FirebaseAuthError,
    FirebaseIdentity,
    FirebaseIdentityProvider,
)
from src.libs.firestore_client import FirestoreDocumentStore

__all__ = [
    "FirebaseAuthClient",
    "FirebaseAuthError",
    "FirebaseIdentity",
    "FirebaseIdentityProvider",
    "FirestoreDocumentStore",
]
