from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class NotificationLevel(str, Enum):
    success = "success"
    error = "error"
    warning = "warning"
    info = "info"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    title: str
    description: Optional[str] = None


@dataclass
class Notifier:
    """Collects toast-style messages for the UI. Nothing is acknowledged."""

    items: list[Notification] = field(default_factory=list)

    def notify(self, level: NotificationLevel, title: str, description: Optional[str] = None) -> None:
        self.items.append(Notification(level=level, title=title, description=description))

    def success(self, title: str, description: Optional[str] = None) -> None:
        self.notify(NotificationLevel.success, title, description)

    def error(self, title: str, description: Optional[str] = None) -> None:
        self.notify(NotificationLevel.error, title, description)

    def warning(self, title: str, description: Optional[str] = None) -> None:
        self.notify(NotificationLevel.warning, title, description)

    def info(self, title: str, description: Optional[str] = None) -> None:
        self.notify(NotificationLevel.info, title, description)

    def of_level(self, level: NotificationLevel) -> list[Notification]:
        return [item for item in self.items if item.level == level]
