"""
memberhub.services._shared.ports
================================

Ports (hexagonal interfaces) the service layer depends on, together with
the in-memory doubles used by unit tests.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider`, abstraction for signing access tokens.

- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore`, :class:`~.RefreshTokenRecord` and
    :class:`~.RefreshTokenState` for refresh-token persistence.

- :mod:`mail_sender`:
    :class:`~.MailSender` for outbound email.

Concrete adapters live under ``memberhub.infra``.
"""

from __future__ import annotations

from .mail_sender import InMemoryMailSender, LoggingMailSender, MailSender, OutgoingMail
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenState,
    RefreshTokenStore,
    generate_token,
)
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "TokenProvider",
    "StubTokenProvider",
    "RefreshTokenStore",
    "RefreshTokenRecord",
    "RefreshTokenState",
    "InMemoryRefreshTokenStore",
    "generate_token",
    "MailSender",
    "LoggingMailSender",
    "InMemoryMailSender",
    "OutgoingMail",
]
