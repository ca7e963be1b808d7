# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(v: object) -> list[str]:
    if isinstance(v, str):
        return [item.strip() for item in v.split(",") if item.strip()]
    return v if isinstance(v, list) else []


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="THREATWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # Rule set
    rules_file: str = ""
    seed_default_rules: bool = True

    # Monitoring engine
    cycle_interval_seconds: float = 300.0
    source_fetch_timeout: float = 20.0

    # Dashboard
    trend_timezone: str = "UTC"
    dashboard_recent_alerts: int = 50

    # Indicator feeds
    ransomwatch_url: str = "https://raw.githubusercontent.com/joshhighet/ransomwatch/main/posts.json"
    threatfox_url: str = "https://threatfox-api.abuse.ch/api/v1/"
    threatfox_auth_key: str = ""
    urlhaus_url: str = "https://urlhaus-api.abuse.ch/v1/urls/recent/"
    urlhaus_auth_key: str = ""
    feed_lookback_days: int = 1
    feed_max_records: int = 500
    feed_degraded_latency_ms: float = 5000.0

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_keys: list[str] = []
    cors_origins: list[str] = ["*"]

    @field_validator("api_keys", "cors_origins", mode="before")
    @classmethod
    def _parse_csv_lists(cls, v: object) -> list[str]:
        return _split_csv(v)

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Alert delivery channels (fallbacks for rule actions without config)
    slack_webhook_url: str = ""
    teams_webhook_url: str = ""
    pagerduty_routing_key: str = ""
    webhook_url: str = ""
    webhook_secret: str = ""
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    smtp_from: str = ""
    smtp_to: list[str] = []

    @field_validator("smtp_to", mode="before")
    @classmethod
    def _parse_smtp_to(cls, v: object) -> list[str]:
        return _split_csv(v)


def get_settings() -> Settings:
    return Settings()
