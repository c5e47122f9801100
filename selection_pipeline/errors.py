"""Structured error types and helpers for API responses."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    status_code = 500
    code = "internal_error"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.message = message
        self.details = details
        self.payload = build_error_payload(self.code, message, details)


class ValidationError(AppError):
    """Input failed one or more declared constraints; carries every violation."""

    status_code = 422
    code = "validation_error"

    def __init__(self, messages: Iterable[str]):
        self.messages: List[str] = list(messages)
        super().__init__("; ".join(self.messages) or "invalid input", {"messages": self.messages})


class NotFoundError(AppError):
    """An id does not exist in the target collection."""

    status_code = 404
    code = "not_found"

    def __init__(self, collection: str, entity_id: Any, message: Optional[str] = None):
        self.collection = collection
        self.entity_id = entity_id
        super().__init__(
            message or f"{collection} {entity_id} not found",
            {"collection": collection, "id": str(entity_id)},
        )


class ConflictError(AppError):
    """Uniqueness or concurrent-mutation conflict detected at write time."""

    status_code = 409
    code = "conflict"


class InvalidStateTransition(ConflictError):
    """The progress row is in a state that does not allow the requested move."""

    code = "invalid_state_transition"

    def __init__(self, message: str, current_status: str):
        self.current_status = current_status
        super().__init__(message, {"current_status": current_status})


class DependencyError(AppError):
    """The data store or an outbound collaborator failed."""

    status_code = 502
    code = "dependency_error"

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.cause = cause
        details = dict(details or {})
        if cause is not None:
            details["cause"] = repr(cause)
        super().__init__(message, details or None)
        if cause is not None:
            self.__cause__ = cause


class RuleEvaluationError(AppError):
    """A transition rule cannot be evaluated (bad type, bad config, duplicates)."""

    status_code = 422
    code = "rule_evaluation_error"

    def __init__(self, message: str, rule_id: Any = None):
        self.rule_id = rule_id
        details = {"rule_id": str(rule_id)} if rule_id is not None else None
        super().__init__(message, details)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)
