from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_CONFIG = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True)


class AppSettings(BaseSettings):
    """General application settings."""

    model_config = ENV_CONFIG

    name: str = Field("Transaction Simulation Engine", validation_alias="APP_NAME")
    debug: bool = Field(False, validation_alias="DEBUG")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[str] = Field(None, validation_alias="LOG_FILE")


class RpcSettings(BaseSettings):
    """Settings related to the Ethereum node JSON-RPC connection."""

    model_config = ENV_CONFIG

    provider_uris: str = Field(
        default="https://ethereum-rpc.publicnode.com",
        validation_alias="RPC_PROVIDER_URIS",
        description="Comma separated JSON-RPC URLs, tried in order on failure",
    )
    sepolia_provider_uris: str = Field(
        default="https://ethereum-sepolia-rpc.publicnode.com",
        validation_alias="SEPOLIA_RPC_PROVIDER_URIS",
    )
    # Timeout for RPC calls (seconds)
    timeout: int = Field(default=30, gt=0, validation_alias="RPC_TIMEOUT")
    max_retries: int = Field(default=3, gt=0, validation_alias="RPC_MAX_RETRIES")
    # Minimum delay between two requests (seconds)
    min_request_interval: float = Field(default=0.15, ge=0, validation_alias="RPC_MIN_REQUEST_INTERVAL")

    def urls_for(self, network: str) -> List[str]:
        raw = self.sepolia_provider_uris if network == "sepolia" else self.provider_uris
        return [url.strip() for url in raw.split(",") if url.strip()]


class SimulationSettings(BaseSettings):
    """Defaults applied to simulation requests."""

    model_config = ENV_CONFIG

    default_network: str = Field("mainnet", validation_alias="DEFAULT_NETWORK")
    # Overrides for the fallback gas table, keyed by function category (e.g. {"transfer": 70000})
    default_gas_overrides: Dict[str, int] = Field(default_factory=dict, validation_alias="DEFAULT_GAS_OVERRIDES")
    reference_price_usd: float = Field(2000.0, gt=0, validation_alias="REFERENCE_ETH_PRICE_USD")
    large_amount_threshold: int = Field(1_000_000_000, gt=0, validation_alias="LARGE_AMOUNT_THRESHOLD")
    trace_enabled: bool = Field(True, validation_alias="TRACE_ENABLED")


class CacheSettings(BaseSettings):
    """Result cache bounds."""

    model_config = ENV_CONFIG

    ttl_seconds: float = Field(300.0, gt=0, validation_alias="CACHE_TTL_SECONDS")
    max_entries: int = Field(100, gt=0, validation_alias="CACHE_MAX_ENTRIES")


class Settings(BaseSettings):
    """
    Main Settings class that composes all sub-settings.
    Each sub-settings reads its own flat env vars through validation_alias.
    """

    app: AppSettings = Field(default_factory=AppSettings)
    rpc: RpcSettings = Field(default_factory=RpcSettings)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    # Config to load from .env file
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Singleton instance
settings = Settings()
