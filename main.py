from __future__ import annotations

import asyncio
import logging
import sys

from ci_mail_test import config
from ci_mail_test.runner import run


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        stream=sys.stdout,
    )
    try:
        settings = config.Settings.from_env()
    except ValueError as exc:
        logging.error("Invalid settings: %s", exc)
        return 0

    try:
        asyncio.run(run(settings))
    except Exception as exc:  # noqa: BLE001
        logging.exception("Mail test run failed: %s", exc)
    # Delivery problems are reported in the log only; the job itself stays green.
    return 0


if __name__ == "__main__":
    sys.exit(main())
