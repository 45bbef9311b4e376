# Logging adapter for application-wide logging
from ess.adapters.logging_adapter import LoggingAdapter

from pydantic import AliasChoices, Field, HttpUrl, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings
from rich import print

from ess.core.interfaces.logging import LoggingPort

# using pydantic_settings to manage environment variables
# and do automatic type casting in a central place
class EssSettings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore"
    }
    ESS_LOG_LEVEL: str = "INFO"
    ESS_HOST: str = "0.0.0.0"
    ESS_PORT: int = Field(default=3001, validation_alias=AliasChoices("ESS_PORT", "PORT"))
    # Seconds between status checks of one remote search job
    ESS_POLL_INTERVAL: float = 30.0
    # Number of experts requested per search
    ESS_RESULT_LIMIT: int = 30
    ESS_CORS_ORIGINS: list[str] = ["*"]

    CLADO_API_URL: HttpUrl = HttpUrl("https://search.clado.ai")
    CLADO_API_KEY: SecretStr | None = None

    SUPABASE_URL: HttpUrl | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
    )
    SUPABASE_SERVICE_ROLE_KEY: SecretStr | None = None

    @computed_field
    @property
    def SUPABASE_REST_URL(self) -> str | None:
        """Constructs the PostgREST base URL of the Supabase project"""
        if self.SUPABASE_URL is None:
            return None
        return str(self.SUPABASE_URL).rstrip("/") + "/rest/v1"

    def print_settings(self, logger: LoggingPort):
        """Prints the settings for debugging purposes"""
        logger.info("ESS Settings:")
        print(self)

    @field_validator("CLADO_API_KEY", "SUPABASE_SERVICE_ROLE_KEY", mode="before")
    def empty_secret_is_unset(cls, value):
        """Treat empty credential variables as not configured."""
        if isinstance(value, str) and not value.strip():
            return None
        return value


app_settings = EssSettings()

logger = LoggingAdapter("ess", app_settings.ESS_LOG_LEVEL)
