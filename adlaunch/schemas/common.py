from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from adlaunch.notifications import Notification


class NotificationOut(BaseModel):
    level: str
    title: str
    description: Optional[str] = None

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationOut":
        return cls(
            level=notification.level.value,
            title=notification.title,
            description=notification.description,
        )
