"""Core configuration - centralized config for the veilshare package.

All environment-based configuration should flow through this module.
This provides a single source of truth and consistent defaults.

Usage:
    from veilshare.core.config import get_config
    config = get_config()

    propagate = config.propagate_grants_on_rescore
    log_level = config.log_level
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_BIT_WIDTHS = (8, 16, 32, 64, 128)


class CoreSettings(BaseSettings):
    """Core configuration settings for Veilshare.

    Settings are read from VEILSHARE_ prefixed environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="VEILSHARE_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="VEILSHARE_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="VEILSHARE_LOG_FILE",
    )

    # ==========================================================================
    # REGISTRY SETTINGS
    # ==========================================================================

    propagate_grants_on_rescore: bool = Field(
        default=True,
        description="Re-issue decryption grants on the replacement quality handle after a rescore",
        validation_alias="VEILSHARE_PROPAGATE_GRANTS_ON_RESCORE",
    )

    # ==========================================================================
    # ORACLE SETTINGS
    # ==========================================================================

    value_bit_width: int = Field(
        default=32,
        description="Bit width used when wrapping dataset values",
        validation_alias="VEILSHARE_VALUE_BIT_WIDTH",
    )
    quality_bit_width: int = Field(
        default=8,
        description="Bit width used when wrapping quality scores",
        validation_alias="VEILSHARE_QUALITY_BIT_WIDTH",
    )
    budget_bit_width: int = Field(
        default=64,
        description="Bit width used when wrapping request budgets",
        validation_alias="VEILSHARE_BUDGET_BIT_WIDTH",
    )
    reward_bit_width: int = Field(
        default=64,
        description="Bit width used when wrapping reward amounts",
        validation_alias="VEILSHARE_REWARD_BIT_WIDTH",
    )
    oracle_key: str | None = Field(
        default=None,
        description="AES-256 key (64 hex chars) for the local encryption oracle; random if unset",
        validation_alias="VEILSHARE_ORACLE_KEY",
    )

    @field_validator("value_bit_width", "quality_bit_width", "budget_bit_width", "reward_bit_width")
    @classmethod
    def _check_bit_width(cls, v: int) -> int:
        if v not in SUPPORTED_BIT_WIDTHS:
            raise ValueError(f"bit width must be one of {SUPPORTED_BIT_WIDTHS}")
        return v

    @property
    def oracle_key_bytes(self) -> bytes | None:
        """Decoded oracle key, or None when the oracle should generate one."""
        if not self.oracle_key:
            return None
        return bytes.fromhex(self.oracle_key)


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
