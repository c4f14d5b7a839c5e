from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", populate_by_name=True)

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3001, alias="PORT")
    service_name: str = Field(default="dslm-sample-app", alias="SERVICE_NAME")
    service_version: str = Field(default="1.0.0", alias="SERVICE_VERSION")
    environment: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    loki_url: str = Field(default="http://loki:3100", alias="LOKI_URL")
    loki_job: str = Field(default="sample-service", alias="LOKI_JOB")
    loki_timeout_seconds: float = Field(default=5.0, alias="LOKI_TIMEOUT_SECONDS")

    tracing_enabled: bool = Field(default=True, alias="TRACING_ENABLED")
    otlp_traces_endpoint: str = Field(default="http://tempo:4318/v1/traces", alias="OTLP_TRACES_ENDPOINT")

    periodic_activity_interval_seconds: float = Field(default=30.0, alias="PERIODIC_ACTIVITY_INTERVAL_SECONDS")
    homepage_max_delay_seconds: float = Field(default=0.1, alias="HOMEPAGE_MAX_DELAY_SECONDS")
    random_seed: int | None = Field(default=None, alias="RANDOM_SEED")

    @property
    def loki_enabled(self) -> bool:
        return bool(self.loki_url.strip())

    @property
    def loki_push_url(self) -> str:
        return self.loki_url.rstrip("/") + "/loki/api/v1/push"

    @property
    def loki_labels(self) -> dict[str, str]:
        return {"app": self.service_name, "job": self.loki_job}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
