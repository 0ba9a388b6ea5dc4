import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from storefront.auth.discord import DiscordOAuthClient
from storefront.auth.gateway import AuthGateway
from storefront.config import Settings, settings as default_settings
from storefront.content.store import ContentStore
from storefront.db.session import create_engine_from_settings
from storefront.web import admin, auth as auth_routes, events, pages

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    store: ContentStore | None = None,
    auth: AuthGateway | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the web app around one explicitly constructed content store.

    Tests pass their own settings, store and HTTP client; in production all
    of them come from the environment.
    """
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if store is None:
        store = ContentStore(create_engine_from_settings(settings))
    if auth is None:
        discord = DiscordOAuthClient(
            client_id=settings.discord_client_id,
            client_secret=settings.discord_client_secret,
            redirect_uri=f"{settings.public_base_url}/auth/discord/callback",
            http_client=http_client,
        )
        auth = AuthGateway(store, settings, discord)

    if not store.configured:
        logger.warning("DATABASE_URL not set: pages will render without content")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_create_schema:
            await store.create_schema()
        yield
        await store.dispose()

    app = FastAPI(
        title="3D Modeling Storefront",
        description="Portfolio, pricing, reviews and terms for a 3D-modeling freelancer",
        version="0.1.0",
        debug=settings.app_debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.auth = auth
    app.state.http_client = http_client

    app.include_router(pages.router, tags=["pages"])
    app.include_router(auth_routes.router, prefix="/auth", tags=["auth"])
    app.include_router(admin.router, prefix="/admin", tags=["admin"])
    app.include_router(events.router, tags=["events"])

    @app.get("/health")
    async def health():
        return {"status": "ok", "env": settings.app_env, "store": store.configured}

    return app


app = create_app()
