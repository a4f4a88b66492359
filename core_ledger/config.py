"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """Core ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Ledger configuration
    currency: str = "EUR"
    account_number_prefix: str = "ES"
    account_number_width: int = 8
    first_account_sequence: int = 1000
    report_recent_transactions: int = 10
    seed_demo_data: bool = False

    # Savings product
    savings_annual_rate: str = "0.03"
    savings_daily_limit: str = "500.00"
    savings_low_balance_threshold: str = "100.00"
    savings_low_balance_fee: str = "5.00"

    # Checking product
    checking_daily_limit: str = "2000.00"
    checking_overdraft_limit: str = "500.00"
    checking_maintenance_fee: str = "10.00"
    checking_overdraft_fee_rate: str = "0.05"

    # Investment product
    investment_annual_rate: str = "0.06"
    investment_lock_months: int = 12

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
