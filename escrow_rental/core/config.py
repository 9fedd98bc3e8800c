from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(alias="DATABASE_URL")

    # JWT Configuration
    secret_key: str = Field(alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")
    access_token_expire_minutes: int = Field(default=30, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Marketplace administrator, seeded once by the initial migration
    admin_address: str = Field(alias="ADMIN_ADDRESS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Frontend URL allowed by CORS
    frontend_url: str | None = Field(default=None, alias="FRONTEND_URL")

    @field_validator("admin_address", mode="before")
    @classmethod
    def strip_admin_address(cls, v: str) -> str:
        """Principals are compared verbatim, so drop surrounding whitespace."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("frontend_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for optional string fields."""
        if v == "":
            return None
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
