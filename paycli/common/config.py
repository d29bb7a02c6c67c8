"""Central environment-driven settings for the payment command interpreter.

The front end loads this once at startup. Behavior that an operator may tune
(log level, prompt, batch file handling) is controlled by environment
variables or an optional `.env` file. Business rules are not configurable.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "paycli"
    log_level: str = "WARNING"
    prompt: str = ">"
    batch_file_suffix: str = ".txt"
    metrics_file: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
