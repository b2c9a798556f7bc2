"""Application configuration settings.

This module provides centralized configuration management using environment
variables with sensible defaults.
"""

import os
from dataclasses import dataclass, field

# Magento-style store id that stands for "every store"
ALL_STORES = 0


def _get_bool_env(name: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable.

    Args:
        name: Environment variable name.
        default: Default value if not set.

    Returns:
        Boolean value from environment.
    """
    value = os.getenv(name, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    return default


def _split_list(value: str | None) -> list[str]:
    """Split a comma-separated value, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass(frozen=True)
class DispatchConfig:
    """Configuration values read once per dispatch call.

    Attributes:
        enabled: Global webhook delivery toggle.
        alert_enabled: Send an alert when a hook fails.
        send_to: Alert recipients.
        email_template: Template identifier handed to the notifier.
        default_store_id: Store used when an item carries no store id.
    """

    enabled: bool = True
    alert_enabled: bool = False
    send_to: tuple[str, ...] = ()
    email_template: str = "mp_webhook_alert"
    default_store_id: int = 1


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        WEBHOOK_ENABLED: Enable outbound webhook delivery.
        WEBHOOK_ALERT_ENABLED: Alert recipients when a hook fails.
        WEBHOOK_SEND_TO: Alert recipients.
        WEBHOOK_EMAIL_TEMPLATE: Alert email template identifier.
        DEFAULT_STORE_ID: Store used when an item exposes none.
        STOREFRONT_URL: Public base URL used to build cart links.
        HTTP_TIMEOUT_SECONDS: Transport timeout for outbound requests.
        WEBHOOK_DB_PATH: SQLite database path for hooks and history.
        CRON_SCHEDULE: Schedule for cron-triggered hooks.
        CRON_START_TIME: Start time for cron-triggered hooks ("HH,MM").
        LOG_LEVEL: Logging level.
    """

    # Delivery
    WEBHOOK_ENABLED: bool = True
    WEBHOOK_ALERT_ENABLED: bool = False
    WEBHOOK_SEND_TO: list[str] = field(default_factory=list)
    WEBHOOK_EMAIL_TEMPLATE: str = "mp_webhook_alert"

    # Store
    DEFAULT_STORE_ID: int = 1
    STOREFRONT_URL: str = "https://localhost"

    # Transport
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Storage
    WEBHOOK_DB_PATH: str = "./data/webhooks.db"

    # Cron
    CRON_SCHEDULE: str = "none"
    CRON_START_TIME: str = "0,0"

    # Logging
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables.

        Returns:
            Settings instance populated from environment.
        """
        return cls(
            WEBHOOK_ENABLED=_get_bool_env("WEBHOOK_ENABLED", default=True),
            WEBHOOK_ALERT_ENABLED=_get_bool_env("WEBHOOK_ALERT_ENABLED", default=False),
            WEBHOOK_SEND_TO=_split_list(os.getenv("WEBHOOK_SEND_TO")),
            WEBHOOK_EMAIL_TEMPLATE=os.getenv("WEBHOOK_EMAIL_TEMPLATE", "mp_webhook_alert"),
            DEFAULT_STORE_ID=int(os.getenv("DEFAULT_STORE_ID", "1")),
            STOREFRONT_URL=os.getenv("STOREFRONT_URL", "https://localhost"),
            HTTP_TIMEOUT_SECONDS=float(os.getenv("HTTP_TIMEOUT_SECONDS", "30")),
            WEBHOOK_DB_PATH=os.getenv("WEBHOOK_DB_PATH", "./data/webhooks.db"),
            CRON_SCHEDULE=os.getenv("CRON_SCHEDULE", "none"),
            CRON_START_TIME=os.getenv("CRON_START_TIME", "0,0"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )

    def dispatch_config(self) -> DispatchConfig:
        """Snapshot the values the orchestrator needs for one dispatch."""
        return DispatchConfig(
            enabled=self.WEBHOOK_ENABLED,
            alert_enabled=self.WEBHOOK_ALERT_ENABLED,
            send_to=tuple(self.WEBHOOK_SEND_TO),
            email_template=self.WEBHOOK_EMAIL_TEMPLATE,
            default_store_id=self.DEFAULT_STORE_ID,
        )


# Global settings instance
settings = Settings.from_env()
