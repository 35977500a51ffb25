"""Application configuration using pydantic-settings.

Chain identity, bech32 prefix, ledger endpoints and fee defaults are read
from environment variables (or a ``.env`` file).
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Chain
    # ======================
    chain_id: str = Field(default="columbus-5", description="Chain ID baked into sign documents")
    bech32_prefix: str = Field(default="terra", description="Account address human-readable prefix")
    coin_type: int = Field(default=330, description="BIP44 coin type used for key derivation")

    # ======================
    # Ledger service
    # ======================
    lcd_url: str = Field(default="https://lcd.terra.dev", description="LCD REST endpoint")
    fcd_url: str = Field(default="https://fcd.terra.dev", description="FCD endpoint (gas prices)")
    request_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    broadcast_mode: str = Field(default="sync", description="Broadcast mode: sync, async or block")

    # ======================
    # Fees
    # ======================
    gas_price: str = Field(default="0.15uluna", description="Gas price used to compute fees")
    gas_adjustment: float = Field(default=1.4, description="Multiplier applied to gas estimates")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Wallet
    # ======================
    wallet_seed_phrase: Optional[str] = Field(
        default=None, description="BIP39 seed phrase for HD derivation"
    )
    wallet_passphrase: str = Field(default="", description="Optional BIP39 passphrase")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def has_wallet(self) -> bool:
        """Check if wallet seed phrase is configured."""
        return bool(self.wallet_seed_phrase and len(self.wallet_seed_phrase.split()) >= 12)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "chain": {
                "chain_id": self.chain_id,
                "bech32_prefix": self.bech32_prefix,
                "coin_type": self.coin_type,
            },
            "ledger": {
                "lcd": self.lcd_url,
                "fcd": self.fcd_url,
                "timeout": self.request_timeout,
                "broadcast_mode": self.broadcast_mode,
            },
            "fees": {
                "gas_price": self.gas_price,
                "gas_adjustment": self.gas_adjustment,
            },
            "wallet_configured": self.has_wallet,
            "wallet_seed_phrase": "***" if self.wallet_seed_phrase else "(not set)",
            "wallet_passphrase": "***" if self.wallet_passphrase else "(not set)",
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
