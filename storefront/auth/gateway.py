"""Auth gateway: sign-in, sign-up, sign-out, Discord login and the admin flag.

A session is either unauthenticated or authenticated. Successful sign-in,
sign-up or OAuth callback creates a session token; sign-out or expiry ends
it. Admin is derived, never stored: the signed-in email must equal the one
configured admin address.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable

import bcrypt
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from storefront.auth.discord import AuthError, DiscordOAuthClient
from storefront.config import Settings
from storefront.content.store import NOT_CONFIGURED, ContentStore
from storefront.db.models import AuthSession, User, utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72  # bcrypt limit
INVALID_CREDENTIALS = "Invalid login credentials"
SERVICE_UNAVAILABLE = "Authentication service unavailable"

AuthStateCallback = Callable[["Identity | None"], None]


@dataclass
class Identity:
    """The signed-in user as pages see it."""

    id: str
    email: str | None = None
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    provider: str = "email"

    @property
    def display_name(self) -> str:
        """Name attached to reviews: full name, username, email local part, "User"."""
        if self.full_name:
            return self.full_name
        if self.username:
            return self.username
        if self.email:
            return self.email.split("@")[0]
        return "User"

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            full_name=user.full_name,
            avatar_url=user.avatar_url,
            provider=user.provider,
        )


@dataclass
class AuthResult:
    """Outcome of a sign-in attempt: a session token or an error message."""

    identity: Identity | None = None
    token: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.token is not None


class AuthGateway:
    def __init__(
        self,
        store: ContentStore,
        settings: Settings,
        discord: DiscordOAuthClient | None = None,
    ):
        self._store = store
        self._settings = settings
        self._discord = discord
        self._listeners: dict[int, AuthStateCallback] = {}
        self._next_listener_id = 0

    # --- Admin ---

    def is_admin(self, identity: Identity | None) -> bool:
        admin_email = self._settings.admin_email
        return bool(identity and admin_email and identity.email == admin_email)

    # --- State change listeners ---

    def on_auth_state_change(self, callback: AuthStateCallback) -> int:
        self._next_listener_id += 1
        self._listeners[self._next_listener_id] = callback
        return self._next_listener_id

    def remove_listener(self, listener_id: int) -> None:
        self._listeners.pop(listener_id, None)

    def _emit(self, identity: Identity | None) -> None:
        for callback in list(self._listeners.values()):
            try:
                callback(identity)
            except Exception as e:
                logger.warning(f"Auth state listener failed: {e}")

    # --- Sessions ---

    async def current_user(self, token: str | None) -> Identity | None:
        """Resolve a session token. Expired sessions are removed and count as signed out."""
        if not token or not self._store.configured:
            return None
        try:
            async with self._store.session() as session:
                result = await session.execute(
                    select(AuthSession, User)
                    .join(User, User.id == AuthSession.user_id)
                    .where(AuthSession.token == token)
                )
                row = result.first()
                if row is None:
                    return None
                auth_session, user = row
                if auth_session.expires_at <= utcnow():
                    await session.delete(auth_session)
                    await session.commit()
                    logger.info(f"Session for user {user.id} expired")
                    self._emit(None)
                    return None
                return Identity.from_user(user)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to resolve session: {e}")
            return None

    async def _start_session(self, user: User) -> AuthResult:
        token = secrets.token_urlsafe(32)
        expires_at = utcnow() + timedelta(hours=self._settings.session_ttl_hours)
        async with self._store.session() as session:
            session.add(AuthSession(token=token, user_id=user.id, expires_at=expires_at))
            await session.commit()

        identity = Identity.from_user(user)
        logger.info(f"Signed in user {user.id} via {user.provider}")
        self._emit(identity)
        return AuthResult(identity=identity, token=token)

    # --- Email / password ---

    async def sign_in(self, email: str, password: str) -> AuthResult:
        if not self._store.configured:
            return AuthResult(error=NOT_CONFIGURED)

        email = email.strip().lower()
        try:
            async with self._store.session() as session:
                result = await session.execute(select(User).where(User.email == email))
                user = result.scalar_one_or_none()

            if user is None or not user.password_hash:
                return AuthResult(error=INVALID_CREDENTIALS)
            if len(password.encode()) > MAX_PASSWORD_BYTES:
                return AuthResult(error=INVALID_CREDENTIALS)
            if not bcrypt.checkpw(password.encode(), user.password_hash.encode()):
                return AuthResult(error=INVALID_CREDENTIALS)

            return await self._start_session(user)
        except SQLAlchemyError as e:
            logger.warning(f"Sign-in failed for {email}: {e}")
            return AuthResult(error=SERVICE_UNAVAILABLE)

    async def sign_up(self, email: str, password: str) -> AuthResult:
        if not self._store.configured:
            return AuthResult(error=NOT_CONFIGURED)

        email = email.strip().lower()
        if "@" not in email:
            return AuthResult(error="Invalid email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            return AuthResult(
                error=f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            return AuthResult(error="Password is too long")

        hashed = bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()
        try:
            async with self._store.session() as session:
                existing = await session.execute(select(User.id).where(User.email == email))
                if existing.first() is not None:
                    return AuthResult(error="User already registered")
                user = User(email=email, password_hash=hashed, provider="email")
                session.add(user)
                await session.commit()

            logger.info(f"Registered user {user.id}")
            return await self._start_session(user)
        except SQLAlchemyError as e:
            logger.warning(f"Sign-up failed for {email}: {e}")
            return AuthResult(error=SERVICE_UNAVAILABLE)

    async def sign_out(self, token: str | None) -> None:
        if token and self._store.configured:
            try:
                async with self._store.session() as session:
                    await session.execute(delete(AuthSession).where(AuthSession.token == token))
                    await session.commit()
            except SQLAlchemyError as e:
                logger.warning(f"Failed to remove session on sign-out: {e}")
        self._emit(None)

    # --- Discord ---

    def external_sign_in_url(self, state: str) -> str | None:
        if self._discord is None or not self._discord.configured:
            return None
        return self._discord.authorize_url(state)

    async def complete_external_sign_in(self, code: str) -> AuthResult:
        """Finish the Discord callback: load the profile, upsert the user, start a session."""
        if not self._store.configured or self._discord is None or not self._discord.configured:
            return AuthResult(error=NOT_CONFIGURED)

        try:
            profile = await self._discord.fetch_profile(code)
        except AuthError as e:
            return AuthResult(error=str(e))

        try:
            async with self._store.session() as session:
                result = await session.execute(
                    select(User).where(User.provider == "discord", User.provider_id == profile.id)
                )
                user = result.scalar_one_or_none()
                if user is None:
                    user = User(provider="discord", provider_id=profile.id)
                    session.add(user)
                user.username = profile.username
                user.full_name = profile.global_name
                user.avatar_url = profile.avatar_url
                await session.commit()

            return await self._start_session(user)
        except SQLAlchemyError as e:
            logger.warning(f"Discord sign-in failed for {profile.id}: {e}")
            return AuthResult(error=SERVICE_UNAVAILABLE)
