"""
Error hierarchy for the client.

    JotterError
    ├── ValidationError   input rejected locally, no request was made
    ├── RequestError      backend answered with a non-success status, or was unreachable
    └── StructuralError   components wired together incorrectly (a bug, not a user error)
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class JotterError(Exception):
    """Base error. `message` is safe to show the user; `context` is for logs only."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(JotterError):
    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class RequestError(JotterError):
    """A request that did not succeed.

    `status_code` is None when no response was received at all.
    """

    def __init__(
        self,
        message: str = "Request failed",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class StructuralError(JotterError):
    pass
