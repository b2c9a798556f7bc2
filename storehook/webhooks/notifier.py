"""Failure alert notifier interface.

The engine hands alerts to a Notifier; mail delivery itself lives outside
this package. LoggingNotifier is the default and records the alert as a
structured log event.
"""

from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class Notifier(Protocol):
    """Sends an alert to a list of recipients."""

    async def send(
        self,
        recipients: list[str],
        message: str,
        template_id: str,
        store_id: int,
    ) -> bool: ...


class LoggingNotifier:
    """Notifier that only logs alerts."""

    def __init__(self) -> None:
        self._logger = logger.bind(component="logging_notifier")

    async def send(
        self,
        recipients: list[str],
        message: str,
        template_id: str,
        store_id: int,
    ) -> bool:
        """Log the alert.

        Args:
            recipients: Alert recipients.
            message: Alert text.
            template_id: Email template identifier.
            store_id: Store context for the template.

        Returns:
            True when the alert was recorded.
        """
        alert = {
            "recipients": list(recipients),
            "message": message,
            "template_id": template_id,
            "store_id": store_id,
        }
        self._logger.warning("webhook_alert", **alert)
        return True
