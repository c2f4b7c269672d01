"""
Configuration management for the ordbit server.
"""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    network: Literal["mainnet", "testnet", "signet", "regtest"] = "mainnet"

    http_host: str = "0.0.0.0"
    http_port: int = 3000

    tracker_url: str = "http://127.0.0.1:3001"
    mempool_api_url: str = "https://mempool.space/api"
    request_timeout: float = 30.0

    tokens_file: Path = Path("tokens.json")

    # "package.module:factory" returning a TokenTxBuilder; called with the settings
    tx_builder: str = ""

    merge_backoff_seconds: float = 6.0

    log_level: str = "INFO"


def get_settings() -> Settings:
    return Settings()
