"""User-facing notifications (toast-style messages) produced by a selection session."""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .logger import get_logger

logger = get_logger()

SEVERITIES = ("info", "success", "warn", "error")


@dataclass(frozen=True)
class Notification:
    severity: str
    summary: str
    detail: str

    def __str__(self) -> str:
        return f"[{self.severity}] {self.summary}: {self.detail}"


class Notifier:
    """Collects notifications and forwards each one to an optional callback."""

    def __init__(self, callback: Optional[Callable[[Notification], None]] = None):
        self.callback = callback
        self.history: List[Notification] = []

    def show(self, severity: str, summary: str, detail: str) -> Notification:
        if severity not in SEVERITIES:
            raise ValueError(f"Unknown severity {severity!r}; expected one of {', '.join(SEVERITIES)}")
        notification = Notification(severity=severity, summary=summary, detail=detail)
        self.history.append(notification)
        logger.debug("Notification", severity=severity, summary=summary, detail=detail)
        if self.callback is not None:
            self.callback(notification)
        return notification

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None
