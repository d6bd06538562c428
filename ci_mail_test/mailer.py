from __future__ import annotations

import logging
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Any, Dict, Optional, Protocol

import aiosmtplib

from .config import MailTestConfig

logger = logging.getLogger(__name__)


class MailError(Exception):
    """Raised when mail sending fails."""


class SendError(MailError):
    """Raised when the SMTP transport fails to deliver the message."""


class MailSender(Protocol):
    provider: str

    async def send(self, message: EmailMessage) -> str: ...


@dataclass(frozen=True)
class TransportConfig:
    name: str
    host: str
    port: int
    username: str
    password: str
    secure: bool = False
    require_tls: bool = True
    debug: bool = True
    timeout: Optional[float] = None

    def __repr__(self) -> str:
        return (
            f"TransportConfig(name={self.name!r}, host={self.host!r}, port={self.port}, "
            f"username={self.username!r}, secure={self.secure}, require_tls={self.require_tls}, "
            f"debug={self.debug}, timeout={self.timeout})"
        )


def build_transport(
    config: MailTestConfig,
    *,
    debug: bool = True,
    timeout: Optional[float] = None,
) -> TransportConfig:
    """
    Transport for the mail test:
    - EHLO as <component>.local
    - plaintext connect, STARTTLS required before auth
    """
    return TransportConfig(
        name=f"{config.component}.local",
        host=config.smtp.host,
        port=config.smtp.port,
        username=config.smtp.login,
        password=config.smtp.password,
        secure=False,
        require_tls=True,
        debug=debug,
        timeout=timeout,
    )


class SmtpMailer:
    provider = "smtp"

    def __init__(self, transport: TransportConfig):
        self._transport = transport
        if transport.debug:
            logger.setLevel(logging.DEBUG)

    @property
    def transport(self) -> TransportConfig:
        return self._transport

    def _client_kwargs(self) -> Dict[str, Any]:
        t = self._transport
        # STARTTLS and AUTH are issued explicitly in send() so each reply can be traced
        kwargs: Dict[str, Any] = {
            "hostname": t.host,
            "port": t.port,
            "local_hostname": t.name,
            "use_tls": t.secure,
            "start_tls": False,
        }
        if t.timeout is not None:
            kwargs["timeout"] = t.timeout
        return kwargs

    def _trace(self, command: str, response: Any) -> None:
        if not self._transport.debug:
            return
        code = getattr(response, "code", None)
        text = getattr(response, "message", response)
        for line in str(text).splitlines() or [""]:
            logger.debug("S: %s %s %s", command, code if code is not None else "", line)

    async def send(self, message: EmailMessage) -> str:
        """Send ``message`` once and return the server's final response text.

        The session is plaintext until STARTTLS; a server without STARTTLS
        fails the send before credentials are exchanged.
        """
        t = self._transport
        logger.debug("Connecting with %r", t)
        smtp = aiosmtplib.SMTP(**self._client_kwargs())
        try:
            sender = _bare_address(message["From"])
            recipients = [_bare_address(message["To"])]
            self._trace("CONNECT", await smtp.connect())
            self._trace("EHLO", await smtp.ehlo())
            if not t.secure and t.require_tls:
                if not smtp.supports_extension("starttls"):
                    raise SendError("SMTP STARTTLS extension not supported by server.")
                self._trace("STARTTLS", await smtp.starttls())
                self._trace("EHLO", await smtp.ehlo())
            self._trace("AUTH", await smtp.login(t.username, t.password))
            errors, response = await smtp.send_message(message, sender=sender, recipients=recipients)
        except SendError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise SendError(str(exc) or exc.__class__.__name__) from exc
        finally:
            await self._quit(smtp)
        for recipient, refused in errors.items():
            logger.debug("Recipient %s refused: %s", recipient, refused)
        self._trace("DATA", response)
        return response

    async def _quit(self, smtp: aiosmtplib.SMTP) -> None:
        if not smtp.is_connected:
            return
        try:
            self._trace("QUIT", await smtp.quit())
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.debug("QUIT failed: %s", exc)
            smtp.close()


def build_mailer(
    config: MailTestConfig,
    *,
    debug: bool = True,
    timeout: Optional[float] = None,
) -> MailSender:
    return SmtpMailer(build_transport(config, debug=debug, timeout=timeout))


def _bare_address(header_value: Any) -> str:
    # EmailMessage exposes Address objects on parsed headers
    addresses = getattr(header_value, "addresses", None)
    if addresses:
        return addresses[0].addr_spec
    return str(header_value)
