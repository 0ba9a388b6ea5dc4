"""Tests for the auth gateway: sessions, email/password, Discord and the admin flag."""

from datetime import timedelta

import httpx
import pytest
from conftest import ADMIN_EMAIL, run
from sqlalchemy import update

from storefront.auth.discord import DiscordOAuthClient
from storefront.auth.gateway import INVALID_CREDENTIALS, AuthGateway, Identity
from storefront.content.store import NOT_CONFIGURED
from storefront.db.models import AuthSession, utcnow


@pytest.fixture
def discord(http_client):
    return DiscordOAuthClient(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://testserver/auth/discord/callback",
        http_client=http_client,
    )


@pytest.fixture
def auth(store, settings, discord):
    return AuthGateway(store, settings, discord)


class TestIdentity:
    def test_display_name_precedence(self):
        assert Identity(id="1", email="a@b.c", username="nick", full_name="Full Name").display_name == "Full Name"
        assert Identity(id="1", email="a@b.c", username="nick").display_name == "nick"
        assert Identity(id="1", email="sam@example.com").display_name == "sam"
        assert Identity(id="1").display_name == "User"


class TestIsAdmin:
    def test_exact_email_match(self, auth):
        assert auth.is_admin(Identity(id="1", email=ADMIN_EMAIL)) is True

    def test_other_email(self, auth):
        assert auth.is_admin(Identity(id="1", email="someone@example.com")) is False

    def test_case_sensitive(self, auth):
        assert auth.is_admin(Identity(id="1", email=ADMIN_EMAIL.upper())) is False

    def test_signed_out(self, auth):
        assert auth.is_admin(None) is False

    def test_no_admin_configured(self, store, settings):
        gateway = AuthGateway(store, settings.model_copy(update={"admin_email": ""}))
        assert gateway.is_admin(Identity(id="1", email="")) is False


class TestEmailPassword:
    def test_sign_up_then_resolve_session(self, auth):
        result = run(auth.sign_up("New@Example.com", "hunter22"))
        assert result.ok
        assert result.identity.email == "new@example.com"

        identity = run(auth.current_user(result.token))
        assert identity.id == result.identity.id

    def test_sign_in(self, auth):
        run(auth.sign_up("sam@example.com", "hunter22"))
        result = run(auth.sign_in("sam@example.com", "hunter22"))
        assert result.ok
        assert result.identity.provider == "email"

    def test_wrong_password(self, auth):
        run(auth.sign_up("sam@example.com", "hunter22"))
        result = run(auth.sign_in("sam@example.com", "wrong-pass"))
        assert not result.ok
        assert result.error == INVALID_CREDENTIALS

    def test_unknown_user(self, auth):
        assert run(auth.sign_in("nobody@example.com", "hunter22")).error == INVALID_CREDENTIALS

    def test_duplicate_sign_up(self, auth):
        run(auth.sign_up("sam@example.com", "hunter22"))
        assert run(auth.sign_up("sam@example.com", "other-pass")).error == "User already registered"

    def test_short_password(self, auth):
        assert run(auth.sign_up("sam@example.com", "123")).error == (
            "Password should be at least 6 characters"
        )

    def test_invalid_email(self, auth):
        assert run(auth.sign_up("not-an-email", "hunter22")).error == "Invalid email address"

    def test_sign_out_ends_session(self, auth):
        token = run(auth.sign_up("sam@example.com", "hunter22")).token
        run(auth.sign_out(token))
        assert run(auth.current_user(token)) is None

    def test_unknown_token(self, auth):
        assert run(auth.current_user("not-a-token")) is None
        assert run(auth.current_user(None)) is None


class TestSessionExpiry:
    def test_expired_session_is_signed_out(self, auth, store):
        token = run(auth.sign_up("sam@example.com", "hunter22")).token

        async def expire():
            async with store.session() as session:
                await session.execute(
                    update(AuthSession)
                    .where(AuthSession.token == token)
                    .values(expires_at=utcnow() - timedelta(minutes=1))
                )
                await session.commit()

        run(expire())
        events = []
        auth.on_auth_state_change(events.append)

        assert run(auth.current_user(token)) is None
        assert events == [None]


class TestAuthStateListeners:
    def test_sign_in_and_out_notify(self, auth):
        events = []
        listener_id = auth.on_auth_state_change(events.append)

        token = run(auth.sign_up("sam@example.com", "hunter22")).token
        run(auth.sign_out(token))
        assert events[0].email == "sam@example.com"
        assert events[1] is None

        auth.remove_listener(listener_id)
        run(auth.sign_up("other@example.com", "hunter22"))
        assert len(events) == 2


class TestDiscordSignIn:
    def test_sign_in_url(self, auth):
        url = auth.external_sign_in_url("state-123")
        assert url.startswith("https://discord.com/api/oauth2/authorize?")
        assert "state=state-123" in url
        assert "scope=identify" in url

    def test_callback_creates_user(self, auth):
        result = run(auth.complete_external_sign_in("auth-code"))
        assert result.ok
        assert result.identity.provider == "discord"
        assert result.identity.username == "nelly"
        assert result.identity.display_name == "Nelly"
        assert result.identity.avatar_url == (
            "https://cdn.discordapp.com/avatars/80351110224678912/abc123.png"
        )

    def test_second_login_reuses_user(self, auth):
        first = run(auth.complete_external_sign_in("auth-code"))
        second = run(auth.complete_external_sign_in("auth-code"))
        assert first.identity.id == second.identity.id
        assert first.token != second.token

    def test_provider_failure(self, store, settings):
        failing = DiscordOAuthClient(
            "client-id",
            "client-secret",
            "http://testserver/auth/discord/callback",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(401))),
        )
        result = run(AuthGateway(store, settings, failing).complete_external_sign_in("bad"))
        assert not result.ok
        assert result.error == "Discord sign-in failed"

    def test_discord_not_configured(self, store, settings):
        gateway = AuthGateway(store, settings, DiscordOAuthClient("", "", "http://x/cb"))
        assert gateway.external_sign_in_url("s") is None
        assert run(gateway.complete_external_sign_in("code")).error == NOT_CONFIGURED


class TestUnconfiguredStore:
    def test_sign_in_reports_not_configured(self, unconfigured_store, settings):
        gateway = AuthGateway(unconfigured_store, settings)
        assert run(gateway.sign_in("sam@example.com", "hunter22")).error == NOT_CONFIGURED
        assert run(gateway.sign_up("sam@example.com", "hunter22")).error == NOT_CONFIGURED
        assert run(gateway.current_user("token")) is None
