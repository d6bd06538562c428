from __future__ import annotations

import textwrap

import aiosmtplib
import pytest

VALID_CONFIG = textwrap.dedent(
    """\
    component: 'ci-runner'
    smtp:
      host: 'smtp.example.com'
      port: 587
      login: 'mailer@example.com'
      password: 's3cret'
      email_address: 'mailer@example.com'
    """
)


@pytest.fixture
def config_file(tmp_path):
    p = tmp_path / ".env"
    p.write_text(VALID_CONFIG, encoding="utf-8")
    return p


class FakeSMTPServer:
    """Stands in for ``aiosmtplib.SMTP``; records every client it hands out."""

    def __init__(self):
        self.clients = []
        self.starttls = True
        self.fail_on: dict[str, Exception] = {}
        self.response = "250 2.0.0 Ok: queued as XYZ"

    def client_class(self):
        server = self

        class FakeSMTP:
            def __init__(self, **kwargs):
                self.kwargs = kwargs
                self.commands = []
                self.messages = []
                self.is_connected = False
                server.clients.append(self)

            def _step(self, name, response):
                self.commands.append(name)
                if name in server.fail_on:
                    raise server.fail_on[name]
                return response

            async def connect(self):
                response = self._step("connect", aiosmtplib.SMTPResponse(220, "fake ESMTP ready"))
                self.is_connected = True
                return response

            async def ehlo(self):
                lines = ["fake.example.com", "AUTH PLAIN LOGIN"]
                if server.starttls:
                    lines.append("STARTTLS")
                return self._step("ehlo", aiosmtplib.SMTPResponse(250, "\n".join(lines)))

            def supports_extension(self, name):
                return name.lower() == "starttls" and server.starttls

            async def starttls(self):
                return self._step("starttls", aiosmtplib.SMTPResponse(220, "2.0.0 Ready to start TLS"))

            async def login(self, username, password):
                self.login_args = (username, password)
                return self._step("login", aiosmtplib.SMTPResponse(235, "2.7.0 Authentication successful"))

            async def send_message(self, message, sender=None, recipients=None):
                self.messages.append({"message": message, "sender": sender, "recipients": recipients})
                return self._step("send_message", ({}, server.response))

            async def quit(self):
                self.is_connected = False
                return self._step("quit", aiosmtplib.SMTPResponse(221, "Bye"))

            def close(self):
                self.is_connected = False

        return FakeSMTP

    @property
    def messages(self):
        return [m["message"] for c in self.clients for m in c.messages]


@pytest.fixture
def fake_smtp(monkeypatch):
    from ci_mail_test import mailer as mailer_module

    server = FakeSMTPServer()
    monkeypatch.setattr(mailer_module.aiosmtplib, "SMTP", server.client_class())
    return server
