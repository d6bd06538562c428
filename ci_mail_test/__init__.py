"""One-shot SMTP delivery check for CI runs."""

__all__ = [
    "config",
    "gha",
    "message",
    "mailer",
    "models",
    "runner",
]
