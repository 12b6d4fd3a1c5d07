from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service settings loaded from environment."""

    # Service
    service_name: str = "social-publisher"
    log_level: str = "INFO"
    app_base_url: str = "http://localhost:3000"  # Dashboard the OAuth callback redirects to
    public_api_url: str = "http://localhost:8000"

    # Database
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "social_publisher"
    db_user: str = "dbadmin"
    db_password: str = ""
    database_url_override: str | None = None  # e.g. sqlite+aiosqlite:///./dev.db

    # Authentication
    auth_enabled: bool = False  # Disable in development
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    secret_key: str = "change-me"  # Signs OAuth state

    # Sweep trigger
    cron_secret: str | None = None  # Bearer secret for the sweep endpoint
    sweep_batch_size: int = 50
    sweep_interval_minutes: int = 30
    claim_timeout_minutes: int = 10  # Publishing claims older than this are released as failed

    # Outbound HTTP
    http_timeout_seconds: float = 30.0

    # Meta (Facebook, Instagram)
    meta_app_id: str = ""
    meta_app_secret: str = ""
    meta_graph_version: str = "v21.0"

    # LinkedIn
    linkedin_client_id: str = ""
    linkedin_client_secret: str = ""

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def meta_graph_url(self) -> str:
        return f"https://graph.facebook.com/{self.meta_graph_version}"

    @property
    def oauth_redirect_uri(self) -> str:
        return f"{self.public_api_url.rstrip('/')}/api/v1/social/callback"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
