import secrets
import warnings
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import (
    BeforeValidator,
    HttpUrl,
    computed_field,
    model_validator,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


def parse_cors(v: Any) -> Union[List[str], str]:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, (list, str)):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_empty=True, extra="ignore"
    )
    API_V1_STR: str = "/api"
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    PROJECT_NAME: str = "Keygate"
    SENTRY_DSN: Optional[HttpUrl] = None

    # Fernet key (urlsafe base64, 32 bytes) used for integration configs.
    # Generate one with `keygate generate-key`.
    ENCRYPTION_KEY: Optional[str] = None

    # Database configuration - defaults to SQLite for easy setup
    # Set POSTGRES_SERVER to use PostgreSQL instead
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "app"
    POSTGRES_PASSWORD: str = "changethis"
    POSTGRES_DB: str = "app"

    SQLITE_DB_PATH: str = "keygate.db"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.POSTGRES_SERVER:
            return str(
                MultiHostUrl.build(
                    scheme="postgresql+psycopg",
                    username=self.POSTGRES_USER,
                    password=self.POSTGRES_PASSWORD,
                    host=self.POSTGRES_SERVER,
                    port=self.POSTGRES_PORT,
                    path=self.POSTGRES_DB,
                )
            )
        return f"sqlite:///{self.SQLITE_DB_PATH}"

    # AI Gateway managed keys
    AI_GATEWAY_MANAGED_KEYS_ENABLED: bool = False
    VERCEL_API_BASE_URL: str = "https://api.vercel.com"
    VERCEL_API_TIMEOUT_SECONDS: float = 10.0
    VERCEL_API_CONNECT_TIMEOUT_SECONDS: float = 5.0

    # OAuth (the code exchange itself lives in the auth provider)
    VERCEL_CLIENT_ID: Optional[str] = None
    VERCEL_CLIENT_SECRET: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def vercel_oauth_scopes(self) -> List[str]:
        # read-write:team grants the APIKey permissions needed for managed keys
        scopes = ["openid", "email", "profile"]
        if self.AI_GATEWAY_MANAGED_KEYS_ENABLED:
            scopes.append("read-write:team")
        return scopes

    # Base URL resolution for auth callbacks, in priority order
    AUTH_URL: Optional[str] = None
    APP_URL: Optional[str] = None
    VERCEL_URL: Optional[str] = None
    TRUSTED_ORIGIN: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def base_url(self) -> str:
        if self.AUTH_URL:
            return self.AUTH_URL
        if self.APP_URL:
            return self.APP_URL
        if self.VERCEL_URL:
            # VERCEL_URL carries no scheme
            return f"https://{self.VERCEL_URL}"
        return "http://localhost:3000"

    BACKEND_CORS_ORIGINS: Annotated[
        Union[List[str], str], BeforeValidator(parse_cors)
    ] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def trusted_origins(self) -> List[str]:
        origins = [str(origin).strip("/") for origin in self.BACKEND_CORS_ORIGINS]
        if self.TRUSTED_ORIGIN:
            origins.append(self.TRUSTED_ORIGIN.strip("/"))
        return origins

    def _check_default_secret(self, var_name: str, value: Optional[str]) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("SECRET_KEY", self.SECRET_KEY)
        if self.POSTGRES_SERVER:
            self._check_default_secret("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)
        return self

    @model_validator(mode="after")
    def _require_encryption_key(self) -> Self:
        if not self.ENCRYPTION_KEY:
            message = (
                "ENCRYPTION_KEY is not set; integration configs will be "
                "encrypted with a key derived from SECRET_KEY."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)
        return self


settings = Settings()  # type: ignore
