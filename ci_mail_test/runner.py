from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from . import config
from .config import ConfigLoadError, MailTestConfig, load_config
from .gha import github_run_id
from .mailer import MailError, MailSender, build_mailer
from .message import build_message
from .models import SendResult

logger = logging.getLogger(__name__)


def load_configuration(path: str | Path) -> Optional[MailTestConfig]:
    try:
        return load_config(path)
    except ConfigLoadError as exc:
        logger.error("Config Load failed: %s", exc)
        return None


async def send_test_message(
    mail_config: MailTestConfig,
    *,
    run_id: str,
    debug: bool = True,
    timeout: float | None = None,
    mailer: MailSender | None = None,
) -> SendResult:
    """Send the single test mail and log the outcome. Never raises MailError."""
    sender = mailer if mailer is not None else build_mailer(mail_config, debug=debug, timeout=timeout)
    logger.info(
        "Sending test mail to %s via %s:%s (provider=%s)",
        mail_config.smtp.email_address,
        mail_config.smtp.host,
        mail_config.smtp.port,
        sender.provider,
    )
    try:
        message = build_message(mail_config, run_id)
        response = await sender.send(message)
    except (MailError, ValueError) as exc:
        logger.error("Email failed: %s", exc)
        return SendResult(status="failed", error=str(exc))
    logger.info("Email sent: %s", response)
    return SendResult(status="sent", response=response)


async def run(settings: config.Settings) -> Optional[SendResult]:
    mail_config = load_configuration(settings.config_path)
    if mail_config is None:
        return None

    run_id = github_run_id()
    logger.info("Mail test for component=%s run_id=%s config=%s", mail_config.component, run_id, settings.config_path)
    return await send_test_message(
        mail_config,
        run_id=run_id,
        debug=settings.debug,
        timeout=settings.timeout,
    )
