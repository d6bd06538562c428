from __future__ import annotations

from email.message import EmailMessage
from email.utils import formataddr

from .config import MailTestConfig

BODY_RULE = "============================="
BODY_TEXT = "my Node test email message"


def build_subject(component: str, run_id: str) -> str:
    return f"[Mail Test - {component}] Node Email Test ({run_id})"


def build_body(component: str, run_id: str) -> str:
    return f"Mail Test ({run_id}) - {component}\n{BODY_RULE}\n\n{BODY_TEXT}"


def build_message(config: MailTestConfig, run_id: str) -> EmailMessage:
    """Build the test mail; the configured mailbox is both sender and recipient."""
    address = config.smtp.email_address
    msg = EmailMessage()
    if config.smtp.full_name:
        msg["From"] = formataddr((config.smtp.full_name, address))
    else:
        msg["From"] = address
    msg["To"] = address
    msg["Subject"] = build_subject(config.component, run_id)
    msg.set_content(build_body(config.component, run_id))
    return msg
