#lxc_scheduler\config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulerSettings(BaseSettings):
    """Service configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # HTTP listener
    listen_host: str = "0.0.0.0"
    listen_port: int = 8000

    # Metrics source
    prometheus_url: str = "http://localhost:9090"
    metrics_query: str = "node_load1"
    metrics_poll_interval: float = 15.0
    metrics_timeout: float = 5.0

    # Host agents
    agent_port: int = 8443
    agent_scheme: str = "http"
    agent_timeout: float = 10.0
    agent_dispatch_enabled: bool = False

    log_level: str = "INFO"
