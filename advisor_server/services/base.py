"""Shared service result envelopes."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Generic, TypeVar

from advisor_server.engine.errors import AdvisorError
from advisor_server.portfolio.validation import ValidationIssue

T = TypeVar("T")


@dataclass
class ErrorEnvelope:
    code: str
    message: str
    retriable: bool = True
    details: list[dict[str, Any]] | None = None


@dataclass
class ServiceResult(Generic[T]):
    data: T | None
    source: str | None = None
    warning: str | None = None
    error: ErrorEnvelope | None = None
    fetched_at: float | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def envelope_from_error(error: AdvisorError, retriable: bool = False) -> ErrorEnvelope:
    return ErrorEnvelope(code=error.code, message=error.message, retriable=retriable)


def validation_failure(issues: list[ValidationIssue]) -> ServiceResult[Any]:
    return ServiceResult(
        data=None,
        error=ErrorEnvelope(
            code="VALIDATION_ERROR",
            message="; ".join(issue.message for issue in issues),
            retriable=False,
            details=[asdict(issue) for issue in issues],
        ),
    )


def not_found(message: str) -> ServiceResult[Any]:
    return ServiceResult(data=None, error=ErrorEnvelope(code="NOT_FOUND", message=message, retriable=False))
