from __future__ import annotations

import structlog
from src.domain.ports import Identity, IdentityCallback, Unsubscribe

logger = structlog.get_logger()


class ListenerRegistry:
    """Current-identity holder that notifies subscribers on every change."""

    def __init__(self, current: Identity | None = None) -> None:
        self._current = current
        self._listeners: list[IdentityCallback] = []

    def current_identity(self) -> Identity | None:
        return self._current

    async def on_identity_change(self, callback: IdentityCallback) -> Unsubscribe:
        self._listeners.append(callback)
        await callback(self._current)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _set_current(self, identity: Identity | None) -> None:
        self._current = identity
        await logger.adebug(
            "identity_changed",
            uid=identity.uid if identity is not None else None,
            listeners=len(self._listeners),
        )
        for callback in list(self._listeners):
            await callback(identity)

    async def restore_session(self, identity: Identity | None) -> None:
        """Adopt an identity presented by the client, e.g. from a bearer token."""
        self._current = identity
