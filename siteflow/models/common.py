"""Response envelope shared by every siteflow endpoint."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    """Machine readable code plus context describing a failed request."""

    code: str = Field(..., description="Machine readable error code")
    message: str = Field(..., description="Human readable error message")
    details: dict[str, Any] | None = Field(
        default=None, description="Identifiers involved in the failure, when known"
    )


class ResponseEnvelope(BaseModel, Generic[T]):
    """Wrapper carrying either a payload or an error for API responses."""

    success: bool = Field(True, description="Indicates if the request was successful")
    data: T | None = Field(default=None, description="Payload of a successful response")
    error: ErrorDetail | None = Field(
        default=None, description="Error payload when success is False"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the envelope was generated",
    )

    @classmethod
    def success_payload(cls, data: T | None = None) -> "ResponseEnvelope[T]":
        return cls(success=True, data=data)

    @classmethod
    def error_payload(
        cls, code: str, message: str, details: dict[str, Any] | None = None
    ) -> "ResponseEnvelope[Any]":
        return cls(
            success=False,
            error=ErrorDetail(code=code, message=message, details=details),
        )

    @classmethod
    def from_exception(
        cls, exc: Exception, *, default_code: str = "internal_error"
    ) -> "ResponseEnvelope[Any]":
        """Build an error envelope from an exception exposing ``code`` and ``details``."""

        return cls.error_payload(
            code=getattr(exc, "code", None) or default_code,
            message=str(exc),
            details=getattr(exc, "details", None),
        )
