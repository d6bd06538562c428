from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class SendResult:
    status: str  # "sent" | "failed"
    response: Optional[str] = None
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == "sent"
