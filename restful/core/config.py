"""Central application configuration (Pydantic Settings).

- Loads variables from the .env at the project root.
- Groups settings by area: App, CORS, Mongo, Auth/JWT, Password hashing, Logging.
"""
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the .env at the project root (independent of the CWD)
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    """Configuration values with sensible defaults.

    Every value can be overridden through environment variables (.env).
    """
    # App
    app_name: str = "Restful Users API"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    cors_allow_any: bool = False  # allow every origin (use with care)

    # Mongo
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "restful_db"
    mongo_tls: bool = False
    # TLS relax options (dev only)
    mongo_tls_insecure: bool = False
    mongo_tls_allow_invalid_hostnames: bool = False
    mongo_server_selection_timeout_ms: int = 15000

    # Auth / JWT
    jwt_secret: str | None = Field(
        None,
        validation_alias=AliasChoices("JWT_SECRET", "JWT_SECRET_KEY", "jwt_secret"),
    )
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 3

    # Password hashing (argon2id)
    password_time_cost: int = 2
    password_memory_cost: int = 51200
    password_parallelism: int = 2

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # do not fail on unused variables
        populate_by_name=True,
    )

    @property
    def api_prefix_normalized(self) -> str:
        """Return `api_prefix` in a consistent shape.

        - Always starts with '/'
        - No trailing '/' (except when it is just '/')
        - Empty string when unset
        """
        pref = (self.api_prefix or "").strip()
        if not pref:
            return ""
        if not pref.startswith('/'):
            pref = '/' + pref
        if len(pref) > 1 and pref.endswith('/'):
            pref = pref[:-1]
        return pref

    @property
    def jwt_configured(self) -> bool:
        return bool(self.jwt_secret)


settings = Settings()
