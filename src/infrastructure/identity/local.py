"""Identity provider backed by the ``accounts`` table with bcrypt passwords."""

from __future__ import annotations

from datetime import UTC, datetime

import structlog
from passlib.context import CryptContext
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.core.auth import TokenError, create_id_token, decode_id_token
from src.domain.errors import (
    AccountExistsError,
    FreshnessCheckFailedError,
    InvalidCredentialsError,
    StoreUnavailableError,
)
from src.infrastructure.db.models import AccountModel
from src.infrastructure.identity.base import ListenerRegistry

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


class LocalIdentity:
    """Identity holding a signed id token issued by ``LocalIdentityProvider``."""

    def __init__(
        self, uid: str, email: str, id_token: str, provider: LocalIdentityProvider
    ) -> None:
        self._uid = uid
        self._email = email
        self.id_token = id_token
        self._provider = provider

    @property
    def uid(self) -> str:
        return self._uid

    @property
    def email(self) -> str:
        return self._email

    async def get_freshness_proof(self, force_refresh: bool = False) -> str:
        if force_refresh:
            self.id_token = await self._provider.reissue_token(self._uid)
            return self.id_token

        try:
            decode_id_token(self.id_token)
        except TokenError as exc:
            raise FreshnessCheckFailedError(str(exc)) from exc
        return self.id_token

    def __repr__(self) -> str:
        return f"<LocalIdentity(uid={self._uid})>"


class LocalIdentityProvider(ListenerRegistry):
    """Email/password identity provider issuing signed id tokens."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__()
        self.session_factory = session_factory

    async def sign_in(self, email: str, password: str) -> LocalIdentity:
        await logger.ainfo("sign_in_attempt", email=email)

        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(AccountModel).where(AccountModel.email == email.lower())
                )
                account = result.scalar_one_or_none()

                if account is None or not verify_password(password, account.hashed_password):
                    await logger.awarning("sign_in_rejected", email=email)
                    raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

                if account.disabled:
                    await logger.awarning("sign_in_disabled_account", email=email)
                    raise InvalidCredentialsError("Account is disabled")

                await session.execute(
                    update(AccountModel)
                    .where(AccountModel.id == account.id)
                    .values(last_login_at=datetime.now(UTC))
                )
                await session.commit()
                uid, account_email = account.id, account.email
        except SQLAlchemyError as exc:
            await logger.aerror("sign_in_store_error", email=email, error=str(exc))
            raise StoreUnavailableError("Account store unavailable, please try again") from exc

        identity = self._identity(uid, account_email)
        await self._set_current(identity)
        await logger.ainfo("sign_in_success", uid=uid)
        return identity

    async def sign_out(self) -> None:
        await self._set_current(None)

    async def create_account(self, email: str, password: str) -> LocalIdentity:
        account = AccountModel(email=email.lower(), hashed_password=hash_password(password))
        async with self.session_factory() as session:
            try:
                session.add(account)
                await session.commit()
                await session.refresh(account)
            except IntegrityError as exc:
                await session.rollback()
                await logger.awarning("create_account_duplicate_email", email=email)
                raise AccountExistsError(f"Account with email {email} already exists") from exc
            except SQLAlchemyError as exc:
                raise StoreUnavailableError("Account store unavailable, please try again") from exc

        await logger.ainfo("account_created", uid=account.id)
        return self._identity(account.id, account.email)

    async def delete_account(self, identity: LocalIdentity) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(delete(AccountModel).where(AccountModel.id == identity.uid))
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Account store unavailable, please try again") from exc
        await logger.ainfo("account_deleted", uid=identity.uid)

    async def identity_from_token(self, token: str) -> LocalIdentity | None:
        """Rebuild an identity from a presented token without checking expiry."""
        try:
            payload = decode_id_token(token, verify_exp=False)
        except TokenError:
            return None
        return LocalIdentity(payload["sub"], payload.get("email", ""), token, self)

    async def reissue_token(self, uid: str) -> str:
        try:
            async with self.session_factory() as session:
                account = await session.get(AccountModel, uid)
        except SQLAlchemyError as exc:
            raise FreshnessCheckFailedError("Account lookup failed") from exc

        if account is None or account.disabled:
            raise FreshnessCheckFailedError("Account no longer active")
        return create_id_token(account.id, email=account.email)

    def _identity(self, uid: str, email: str) -> LocalIdentity:
        return LocalIdentity(uid, email, create_id_token(uid, email=email), self)
