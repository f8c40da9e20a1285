from __future__ import annotations

import logging

logger = logging.getLogger("cache.invalidation")


class PathRevalidator:
    """Records dashboard paths whose rendered data is stale."""

    def __init__(self) -> None:
        self.revalidated: list[str] = []

    def revalidate_path(self, path: str) -> None:
        self.revalidated.append(path)
        logger.info("Revalidating path", extra={"path": path})


revalidator = PathRevalidator()


def get_revalidator() -> PathRevalidator:
    return revalidator
