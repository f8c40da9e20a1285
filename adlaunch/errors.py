from __future__ import annotations

from typing import Any, Optional


class AdLaunchError(RuntimeError):
    """Base error; also used for unexpected failures."""

    code = "unexpected"

    def __init__(self, message: str, *, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnauthenticatedError(AdLaunchError):
    code = "unauthenticated"

    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message, status_code=401)


class NotFoundError(AdLaunchError):
    code = "not_found"

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=404)


class ValidationFailedError(AdLaunchError):
    code = "validation_failed"

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400)


class ExternalCallFailedError(AdLaunchError):
    code = "external_call_failed"

    def __init__(
        self,
        message: str,
        *,
        provider_status: Optional[int] = None,
        error_payload: Any = None,
    ) -> None:
        super().__init__(message, status_code=502)
        self.provider_status = provider_status
        self.error_payload = error_payload
