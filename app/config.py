# app/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices


class Settings(BaseSettings):
    # read .env, ignore unknown keys
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # Database
    DATABASE_URL: str = "sqlite:///./encho.db"
    AUTO_CREATE_TABLES: bool = True

    # Business calendar: "today" and the current week are taken in this zone
    TIMEZONE: str = Field(
        default="Asia/Kolkata",
        validation_alias=AliasChoices("TIMEZONE", "TZ_NAME"),
    )

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: str = "*"

    APP_TITLE: str = "ENCHO • Drivers Performance & Weekly Entry"

    @property
    def allowed_origins(self) -> list[str]:
        origins = [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]
        return origins or ["*"]


settings = Settings()
