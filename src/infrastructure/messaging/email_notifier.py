"""
Outbound e-mail via the mailer worker.

Messages are queued on the notifications exchange as ``{to, subject, html}``
JSON; SMTP delivery happens in the worker. A broker failure propagates to the
caller so it can report the message as undelivered.
"""
import asyncio
import json
from functools import partial

import structlog

from src.application.interfaces.notifier import EmailMessage, Notifier
from src.config import settings
from src.infrastructure.messaging.rabbitmq_publisher import blocking_publish

logger = structlog.get_logger(__name__)

NOTIFICATIONS_EXCHANGE = "backoffice.notifications"
EMAIL_ROUTING_KEY = "email.send"


class RabbitMQEmailNotifier(Notifier):
    def __init__(self, rabbitmq_url: str = settings.rabbitmq_url) -> None:
        self._url = rabbitmq_url

    async def send(self, message: EmailMessage) -> None:
        body = json.dumps({"to": message.to, "subject": message.subject, "html": message.html_body})
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None,
            partial(blocking_publish, self._url, NOTIFICATIONS_EXCHANGE, EMAIL_ROUTING_KEY, body),
        )
        logger.info("email_queued", to=message.to, subject=message.subject)


class LoggingNotifier(Notifier):
    """Logs instead of sending. Used in tests and local development."""

    async def send(self, message: EmailMessage) -> None:
        logger.info("email_not_sent", to=message.to, subject=message.subject)
