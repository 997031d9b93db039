"""Configuration service for the deposit gateway.
Loads configuration from environment variables, ``.env`` files and an optional secrets file.
"""

import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, cast

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.utils.utils import lookup_dotted

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_API_URL = "https://api.moneymotion.io/v1/checkout/sessions"


class PaymentsSection(BaseModel):
    """Immutable payment-provider settings, read once at startup and injected into the payment services."""

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    webhook_secret: str = ""
    api_url: str = DEFAULT_PROVIDER_API_URL
    success_url: str = "https://your-website-url.com/payment-success"
    cancel_url: str = "https://your-website-url.com/payment-cancelled"
    currency: str = "usd"
    min_amount: Decimal = Decimal("1.00")
    max_amount: Decimal = Decimal("999999.99")
    minor_unit_factor: int = 100
    request_timeout_seconds: float = 10.0
    webhook_tolerance_seconds: int = 300
    signature_header: str = "MoneyMotion-Signature"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


def _env_flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "t", "yes")


class ConfigService:
    """Service for loading and accessing application configuration.
    Combines environment variables and secrets from a YAML file.
    """

    payments: PaymentsSection

    def __init__(self) -> None:
        self._config: dict[str, Any] = {}
        self._secrets: dict[str, Any] = {}

        self._env = os.getenv("APP_ENV", "local")

        self._load_env_file()
        self._load_env_vars()
        self._load_secrets()

        defaults = PaymentsSection()
        self.payments = PaymentsSection(
            api_key=str(self.get("moneymotion.api_key") or ""),
            webhook_secret=str(self.get("moneymotion.webhook_secret") or ""),
            api_url=str(self.get("moneymotion.api_url") or defaults.api_url),
            success_url=str(self.get("payments.success_url") or defaults.success_url),
            cancel_url=str(self.get("payments.cancel_url") or defaults.cancel_url),
            currency=str(self.get("payments.currency") or defaults.currency).lower(),
            min_amount=Decimal(str(self.get("payments.min_amount") or defaults.min_amount)),
            max_amount=Decimal(str(self.get("payments.max_amount") or defaults.max_amount)),
            minor_unit_factor=int(self.get("payments.minor_unit_factor") or defaults.minor_unit_factor),
            request_timeout_seconds=float(self.get("payments.request_timeout_seconds") or defaults.request_timeout_seconds),
            webhook_tolerance_seconds=int(self.get("webhooks.tolerance_seconds") or defaults.webhook_tolerance_seconds),
            signature_header=str(self.get("webhooks.signature_header") or defaults.signature_header),
        )

    def _load_env_file(self) -> None:
        """Load the appropriate .env file based on environment"""
        base_dir = Path(__file__).resolve().parent.parent.parent

        env_files_to_try: list[Path] = [base_dir / f".env.{self._env}", base_dir / ".env"]

        for env_file in env_files_to_try:
            if env_file.exists():
                logger.info(f"Loading environment from {env_file}")
                _ = load_dotenv(env_file)
                return

        logger.debug("No environment file found. Using process environment only.")

    def _load_env_vars(self) -> None:
        """Load configuration from environment variables"""
        config: dict[str, Any] = {
            "app_env": self._env,
            "port": int(os.getenv("PORT", "3000")),
            "host": os.getenv("HOST", "0.0.0.0"),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "log_json_format": _env_flag("LOG_JSON_FORMAT"),
        }

        # Only set values shadow the secrets file
        optional_env = {
            "moneymotion.api_key": "MONEYMOTION_API_KEY",
            "moneymotion.webhook_secret": "MONEYMOTION_WEBHOOK_SECRET",
            "moneymotion.api_url": "MONEYMOTION_API_URL",
            "payments.success_url": "PAYMENT_SUCCESS_URL",
            "payments.cancel_url": "PAYMENT_CANCEL_URL",
            "payments.currency": "PAYMENT_CURRENCY",
            "payments.min_amount": "PAYMENT_MIN_AMOUNT",
            "payments.max_amount": "PAYMENT_MAX_AMOUNT",
            "payments.minor_unit_factor": "PAYMENT_MINOR_UNIT_FACTOR",
            "payments.request_timeout_seconds": "PAYMENT_PROVIDER_TIMEOUT_SECONDS",
            "webhooks.tolerance_seconds": "WEBHOOK_TOLERANCE_SECONDS",
            "webhooks.signature_header": "WEBHOOK_SIGNATURE_HEADER",
        }
        for key, env_name in optional_env.items():
            value = os.getenv(env_name, "").strip()
            if value:
                config[key] = value

        self._config = config

    def _load_secrets(self) -> None:
        """Load secrets from YAML file"""
        base_dir = Path(__file__).resolve().parent.parent.parent

        secrets_files_to_try: list[Path] = [base_dir / f"secrets.{self._env}.yaml", base_dir / "secrets.yaml"]

        secrets_file = next((path for path in secrets_files_to_try if path.exists()), None)
        if secrets_file is None:
            self._secrets = {}
            return

        try:
            with open(secrets_file) as f:
                loaded: Any = yaml.safe_load(f)
            self._secrets = cast(dict[str, Any], loaded) if isinstance(loaded, dict) else {}
            logger.info(f"Loaded secrets from {secrets_file}")
        except (OSError, yaml.YAMLError) as e:
            logger.exception(f"Error loading secrets file: {e}")
            self._secrets = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by key.
        Priority order:
        1. Environment variables (from _config dict)
        2. Local secrets file (dot notation walks nested keys)
        3. Direct environment variable lookup (os.getenv)
        4. Default value
        """
        if key in self._config:
            return self._config[key]

        found, value = lookup_dotted(self._secrets, key)
        if found:
            return value

        env_value = os.getenv(key)
        if env_value is not None:
            return env_value

        return default

    def get_database_url(self) -> str:
        """Get database URL.
        Priority:
        1. DATABASE_URL environment variable
        2. ``database.url`` from the secrets file
        3. Local SQLite file
        """
        db_url = os.getenv("DATABASE_URL")
        if db_url:
            return db_url

        found, value = lookup_dotted(self._secrets, "database.url")
        if found and value:
            return str(value)

        return "sqlite+aiosqlite:///./ledger.db"

    def get_environment(self) -> str:
        """Get the current environment name"""
        return self._env

    def is_production(self) -> bool:
        """Check if the application is running in production mode"""
        return self._env.lower() == "production"

    def is_testing(self) -> bool:
        """Check if the application is running in test mode"""
        return self._env.lower() in ("test", "testing")


class Settings(BaseSettings):
    """HTTP-level application settings"""

    model_config = SettingsConfigDict(case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "Deposit Gateway"
    CORS_ORIGINS: str = "*"

    @property
    def BACKEND_CORS_ORIGINS(self) -> list[str]:
        """Returns the CORS origins as a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
