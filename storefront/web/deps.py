from fastapi import Depends, Request

from storefront.auth.gateway import AuthGateway, Identity
from storefront.config import Settings
from storefront.content.store import ContentStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ContentStore:
    return request.app.state.store


def get_auth(request: Request) -> AuthGateway:
    return request.app.state.auth


def session_token(request: Request) -> str | None:
    return request.cookies.get(request.app.state.settings.session_cookie_name)


async def get_current_user(
    request: Request,
    auth: AuthGateway = Depends(get_auth),
) -> Identity | None:
    return await auth.current_user(session_token(request))
