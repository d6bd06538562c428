from __future__ import annotations

import os
from typing import Mapping

from .config import RUN_ID_UNSET


def github_run_id(env: Mapping[str, str] | None = None) -> str:
    """Return GITHUB_RUN_ID verbatim, or the unset placeholder outside of Actions.

    An empty value is kept as-is; only a missing variable maps to the placeholder.
    """

    e = env if env is not None else os.environ
    run_id = e.get("GITHUB_RUN_ID")
    if run_id is None:
        return RUN_ID_UNSET
    return run_id
