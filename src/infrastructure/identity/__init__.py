from src.infrastructure.identity.base import ListenerRegistry
from src.infrastructure.identity.local import LocalIdentity, LocalIdentityProvider

__all__ = ["ListenerRegistry", "LocalIdentity", "LocalIdentityProvider"]
