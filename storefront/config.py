from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    app_env: str = "development"
    app_debug: bool = True
    app_port: int = 8000
    log_level: str = "INFO"
    public_base_url: str = "http://localhost:8000"

    # Content store (empty URL disables every store operation)
    database_url: str = ""
    auto_create_schema: bool = False

    # Admin (single account, matched on exact email)
    admin_email: str = ""

    # Contact link shown on pricing/terms pages
    discord_url: str = ""

    # Discord OAuth (reviews sign-in)
    discord_client_id: str = ""
    discord_client_secret: str = ""

    # Sessions
    session_cookie_name: str = "storefront_session"
    session_ttl_hours: int = 24 * 7

    # Download-all pacing between image fetches
    download_delay_ms: int = 300

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def store_configured(self) -> bool:
        return bool(self.database_url)


settings = Settings()
