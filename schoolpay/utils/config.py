"""Application configuration.

Pydantic-based settings, overridable through environment variables or a
``.env`` file.

Environment Variables:
- SCHOOLPAY_CURRENCY_CODE: ISO 4217 code used in receipts and logs (default: NGN)
- SCHOOLPAY_CURRENCY_SYMBOL: Symbol used when formatting amounts (default: ₦)
- SCHOOLPAY_MINOR_UNIT_DIGITS: Decimal places of the currency (default: 2)
- SCHOOLPAY_MAX_ALLOCATIONS_PER_PAYMENT: Fee allocation rows per payment (default: 20)
- SCHOOLPAY_REFERENCE_PREFIX: Payment reference prefix (default: PAY)
- SCHOOLPAY_LOG_LEVEL / SCHOOLPAY_JSON_LOGS / SCHOOLPAY_DEV_MODE: logging output
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from schoolpay.exceptions import ConfigurationError, wrap_exception


class Settings(BaseSettings):
    """SchoolPay configuration.

    Example:
        >>> settings = Settings()
        >>> settings.minor_unit_digits
        2
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHOOLPAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Currency
    currency_code: str = Field(default="NGN", min_length=3, max_length=3)
    currency_symbol: str = Field(default="₦", description="Symbol prefixed to amounts")
    minor_unit_digits: int = Field(
        default=2,
        ge=0,
        le=4,
        description="Number of decimal places amounts are quantized to",
    )

    # Payments
    max_allocations_per_payment: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Maximum fee allocation rows accepted on a single payment",
    )
    reference_prefix: str = Field(
        default="PAY",
        pattern=r"^[A-Z]{2,6}$",
        description="Prefix of generated payment references (PREFIX-YYYY-XXXXXXXX)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")
    dev_mode: bool = Field(default=True, description="Colorful console log output")

    @field_validator("currency_code")
    @classmethod
    def normalize_currency_code(cls, v: str) -> str:
        """Store currency codes upper-case."""
        return v.upper()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings instance.

    Raises:
        ConfigurationError: If an environment override is invalid
    """
    try:
        return Settings()
    except PydanticValidationError as e:
        raise wrap_exception(
            e,
            "Invalid SchoolPay configuration",
            exception_class=ConfigurationError,
            errors=e.error_count(),
        ) from e


def reload_settings() -> Settings:
    """Drop the cached settings and read the environment again."""
    get_settings.cache_clear()
    return get_settings()
