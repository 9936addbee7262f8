import os

from dotenv import load_dotenv


class Config:
    def __init__(self, env_file=None):
        """
        Initialize configuration by loading environment variables and setting default attributes.

        Loads environment variables from the provided .env file path when `env_file` is given;
        otherwise loads from the default environment. After loading, sets web, security,
        database, admin bootstrap and maintenance settings using environment values with
        sensible defaults.

        Parameters:
            env_file (str | None): Optional path to a .env file to load environment variables from.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        # Logging
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # Web application configuration
        self.WEB_ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*")
        self.WEB_PORT = int(os.getenv("PORT", "5000"))
        self.LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "10/minute")

        # Public base URL for share links, embeds and RSS feeds.
        # When empty, URLs are derived from the incoming request.
        web_base_url = os.getenv("WEB_BASE_URL", "")
        if web_base_url and not web_base_url.lower().startswith(("http://", "https://")):
            raise ValueError(
                f"WEB_BASE_URL must start with http:// or https://, got: {web_base_url}"
            )
        self.WEB_BASE_URL = web_base_url.rstrip("/") if web_base_url else ""

        # JWT configuration
        self.JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
        self.JWT_ALGORITHM = "HS256"
        self.JWT_EXPIRATION_DAYS = int(os.getenv("JWT_EXPIRATION_DAYS", "7"))

        # Cookie configuration
        self.COOKIE_DOMAIN = os.getenv("COOKIE_DOMAIN", None) or None  # None = current domain
        self.COOKIE_SECURE = os.getenv("COOKIE_SECURE", "true").lower() == "true"

        # Database configuration
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./podcasthub.db")
        self.DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
        self.DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
        self.DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"
        # Create tables at startup instead of running Alembic migrations
        self.DB_CREATE_TABLES = os.getenv("DB_CREATE_TABLES", "false").lower() == "true"

        # Initial admin account, created at startup when no admin exists.
        # ADMIN_PASSWORD also enables the emergency password reset endpoint.
        self.ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
        self.ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@podcasthub.local")
        self.ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")

        # Outbound HTTP (audio size lookups)
        self.HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
        self.BACKFILL_DELAY_SECONDS = float(os.getenv("BACKFILL_DELAY_SECONDS", "0.5"))
