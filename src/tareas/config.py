from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="TAREAS_"
    )

    # AI classification
    anthropic_api_key: str = ""
    classifier_model: str = "claude-haiku-4-5-20251001"
    classifier_endpoint: str = ""  # optional /api/classify style proxy
    classifier_timeout: float = 15.0

    # Connectivity
    connectivity_check_url: str = "https://api.anthropic.com"
    connectivity_timeout: float = 3.0
    connectivity_poll_seconds: int = 30

    # Sentry error tracking
    sentry_dsn: str = ""
    sentry_environment: str = "production"

    user_timezone: str = "Europe/Madrid"
    parse_debounce_ms: int = 150
    log_level: str = "INFO"
    data_dir: str = "~/.tareas"

    @property
    def has_anthropic(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def has_classifier_endpoint(self) -> bool:
        return bool(self.classifier_endpoint)

    @property
    def has_sentry(self) -> bool:
        return bool(self.sentry_dsn)

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def store_path(self) -> Path:
        return self.data_path / "store.json"

    @property
    def queue_path(self) -> Path:
        return self.data_path / "queue" / "pending.jsonl"

    @property
    def debounce_seconds(self) -> float:
        return self.parse_debounce_ms / 1000


settings = Settings()
