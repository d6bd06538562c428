from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

# --------------------------------
# Settings

# Relative to the working directory (the CI job runs from scripts/mailer/)
DEFAULT_CONFIG_PATH = "../../.env"

# Embedded in subject and body when GITHUB_RUN_ID is not set
RUN_ID_UNSET = "undefined"

SMTP_REQUIRED_FIELDS = ("host", "port", "login", "password", "email_address")
# --------------------------------


class ConfigLoadError(ValueError):
    """Raised when the mail test configuration cannot be loaded."""


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    login: str
    password: str
    email_address: str
    full_name: Optional[str] = None


@dataclass(frozen=True)
class MailTestConfig:
    component: str
    smtp: SmtpConfig

    @staticmethod
    def from_mapping(data: Any) -> "MailTestConfig":
        if not isinstance(data, Mapping):
            raise ConfigLoadError(f"Expected a mapping at top level, got {type(data).__name__}")
        component = _require_str(data, "component")
        smtp = data.get("smtp")
        if not isinstance(smtp, Mapping):
            raise ConfigLoadError("Field 'smtp' is required and must be a mapping.")
        for name in SMTP_REQUIRED_FIELDS:
            if smtp.get(name) is None:
                raise ConfigLoadError(f"Field 'smtp.{name}' is required.")

        full_name = str(smtp.get("full_name") or "").strip() or None
        if full_name is not None:
            _check_single_line("smtp.full_name", full_name)
        return MailTestConfig(
            component=component,
            smtp=SmtpConfig(
                host=_require_str(smtp, "host", prefix="smtp."),
                port=_parse_port(smtp["port"]),
                login=_require_str(smtp, "login", prefix="smtp."),
                password=str(smtp["password"]),
                email_address=_require_str(smtp, "email_address", prefix="smtp."),
                full_name=full_name,
            ),
        )


def load_config(path: str | Path) -> MailTestConfig:
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Config file {p}: read failed: {exc}") from exc
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"Config file {p}: parse failed: {exc}") from exc
    return MailTestConfig.from_mapping(data)


def _require_str(data: Mapping, name: str, *, prefix: str = "") -> str:
    value = data.get(name)
    if value is None or not str(value).strip():
        raise ConfigLoadError(f"Field '{prefix}{name}' is required.")
    text = str(value).strip()
    _check_single_line(f"{prefix}{name}", text)
    return text


def _check_single_line(field: str, value: str) -> None:
    # values end up in mail headers and the EHLO name
    if "\r" in value or "\n" in value:
        raise ConfigLoadError(f"Field '{field}' must not contain line breaks.")


def _parse_port(value: Any) -> int:
    # bool is an int subclass; "port: yes" must not become 1
    if isinstance(value, bool):
        raise ConfigLoadError(f"Field 'smtp.port' must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ConfigLoadError(f"Field 'smtp.port' must be an integer, got {value!r}")


@dataclass
class Settings:
    config_path: str = DEFAULT_CONFIG_PATH
    timeout: float | None = None
    debug: bool = True

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> "Settings":
        e = env if env is not None else os.environ

        def optional(name: str) -> str | None:
            value = e.get(name)
            if value is None or not value.strip():
                return None
            return value.strip()

        def optional_with_default(name: str, default: str) -> str:
            value = optional(name)
            return default if value is None else value

        timeout: float | None = None
        raw_timeout = optional("MAIL_TEST_TIMEOUT")
        if raw_timeout is not None:
            try:
                timeout = float(raw_timeout)
            except ValueError as exc:
                raise ValueError(f"MAIL_TEST_TIMEOUT must be a number, got {raw_timeout!r}") from exc
            if timeout <= 0:
                raise ValueError(f"MAIL_TEST_TIMEOUT must be positive, got {raw_timeout!r}")

        debug = optional_with_default("MAIL_TEST_DEBUG", "true").lower() in ("1", "true", "yes", "y", "on")

        return Settings(
            config_path=optional_with_default("MAIL_TEST_CONFIG", DEFAULT_CONFIG_PATH),
            timeout=timeout,
            debug=debug,
        )
