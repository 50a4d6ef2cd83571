"""Configuration system using pydantic-settings with environment variable loading."""

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SolanaSettings(BaseSettings):
    """Solana RPC and venue registry connection settings."""

    model_config = SettingsConfigDict(env_prefix="SOLANA_")

    # Provider URLs commonly embed an API key in the path
    rpc_url: SecretStr = SecretStr("https://api.mainnet-beta.solana.com")
    commitment: Literal["processed", "confirmed", "finalized"] = "confirmed"
    request_timeout: float = 30.0
    raydium_api_url: str = "https://api-v3.raydium.io"
    bonding_curve_program: str = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"


class SyncSettings(BaseSettings):
    """Price history derivation parameters.

    Controls pagination ceilings, batch sizing, retry behavior and the
    cooperative pauses observed between provider requests.
    All fields configurable via SYNC_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="SYNC_")

    max_signatures: int = 5000  # per run, after dropping failed transactions
    page_size: int = 1000  # getSignaturesForAddress hard limit
    batch_size: int = 100
    max_retries: int = 5  # total attempts per batch
    retry_delay: float = 1.0
    page_delay: float = 1.0
    batch_delay: float = 1.0
    token_decimals: int = 6
    scan_interval: int = 300  # seconds between scheduled sync cycles
    max_concurrent_assets: int = 1


class DatabaseSettings(BaseSettings):
    """SQLite persistence configuration."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    db_path: str = "data/price_history.db"


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8080
    enabled: bool = True
    history_limit: int = 1000  # rows considered when building a chart


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    solana: SolanaSettings = SolanaSettings()
    sync: SyncSettings = SyncSettings()
    database: DatabaseSettings = DatabaseSettings()
    api: ApiSettings = ApiSettings()
