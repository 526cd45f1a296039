from __future__ import annotations

from fastapi import status


class DomainError(Exception):
    """Base error raised by services and translated to an HTTP response by endpoints."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BusinessAccessError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN


class ForecastDataError(DomainError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
