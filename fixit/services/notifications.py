# fil: fixit/services/notifications.py

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from fixit.server.schemas.repair import RepairRecord

if TYPE_CHECKING:
    from fixit.server.settings.config import Settings

logger = logging.getLogger(__name__)


class NotificationChannel:
    """
    En utgående kanal (WhatsApp, e-post, ...).

    send() returnerar vid lyckad leverans och kastar vid fel,
    helst NotificationFailure. Ett anrop = ett försök, inga omförsök.
    """

    name = "channel"

    def send(self, text: str) -> None:
        raise NotImplementedError


def compose_summary(record: RepairRecord) -> str:
    return (
        "New Repair Request\n"
        f"Name: {record.name}\n"
        f"Device: {record.device}\n"
        f"Issue: {record.issue}\n"
        f"Contact: {record.contact}"
    )


class NotificationDispatcher:
    """
    Skickar en sammanfattning av en ny post till alla registrerade kanaler.

    Varje kanal körs för sig: ett fel i en kanal påverkar inte de andra och
    notify() kastar aldrig. Utan kanaler är notify() en no-op.
    """

    def __init__(self, channels: Optional[Iterable[NotificationChannel]] = None) -> None:
        self._channels: List[NotificationChannel] = list(channels or [])

    @property
    def channels(self) -> List[NotificationChannel]:
        return list(self._channels)

    def register(self, channel: NotificationChannel) -> None:
        self._channels.append(channel)

    def notify(self, record: RepairRecord) -> Dict[str, bool]:
        """
        Returnerar {kanalnamn: levererad} för loggning och tester.
        """
        if not self._channels:
            logger.debug("no notification channels configured, skipping repair %s", record.id)
            return {}

        text = compose_summary(record)
        results: Dict[str, bool] = {}
        for channel in self._channels:
            try:
                channel.send(text)
            except Exception as e:
                logger.warning("%s alert failed for repair %s: %s", channel.name, record.id, e)
                results[channel.name] = False
            else:
                logger.info("%s alert sent for repair %s", channel.name, record.id)
                results[channel.name] = True
        return results


def build_channels(settings: "Settings") -> List[NotificationChannel]:
    """
    Skapar de kanaler som har kompletta inställningar.
    Saknas nyckel eller mottagare hoppas kanalen över.
    """
    from fixit.services.email_client import EmailChannel
    from fixit.services.whatsapp_client import WhatsAppChannel

    channels: List[NotificationChannel] = []

    if settings.twilio_account_sid and settings.twilio_auth_token and settings.whatsapp_to:
        channels.append(
            WhatsAppChannel(
                account_sid=settings.twilio_account_sid,
                auth_token=settings.twilio_auth_token,
                from_number=settings.whatsapp_from,
                to_number=settings.whatsapp_to,
                timeout=settings.notify_timeout,
            )
        )
    else:
        logger.info("WhatsApp alerts disabled (TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN/WHATSAPP_TO not set)")

    recipients = [a.strip() for a in settings.mail_to.split(",") if a.strip()]
    if settings.smtp_host and recipients:
        channels.append(
            EmailChannel(
                host=settings.smtp_host,
                port=settings.smtp_port,
                sender=settings.mail_from or settings.smtp_username,
                recipients=recipients,
                username=settings.smtp_username or None,
                password=settings.smtp_password or None,
                starttls=settings.smtp_starttls,
                timeout=settings.notify_timeout,
            )
        )
    else:
        logger.info("email alerts disabled (SMTP_HOST/MAIL_TO not set)")

    return channels
