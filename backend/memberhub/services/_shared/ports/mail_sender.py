from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OutgoingMail:
    to: str
    subject: str
    html: str


class MailSender(Protocol):
    """Port for outbound email."""

    def send_mail(self, to: str, subject: str, html: str) -> None: ...


class LoggingMailSender(MailSender):
    """
    Default adapter: records the send in the application log.

    Bodies embed password-setup links, so only the recipient and subject
    are logged.
    """

    def __init__(self, sender: str) -> None:
        self.sender = sender

    def send_mail(self, to: str, subject: str, html: str) -> None:
        log.info("mail.send from=%s to=%s subject=%s", self.sender, to, subject)


class InMemoryMailSender(MailSender):
    """Collect messages in ``outbox`` for assertions in tests."""

    def __init__(self) -> None:
        self.outbox: list[OutgoingMail] = []

    def send_mail(self, to: str, subject: str, html: str) -> None:
        self.outbox.append(OutgoingMail(to=to, subject=subject, html=html))
