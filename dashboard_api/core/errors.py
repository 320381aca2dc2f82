"""
Typed failures raised by the permission, revenue and payee services.

They subclass ``HTTPException`` so FastAPI maps them to status codes
directly; services raise them the same way they would raise an
``HTTPException``.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import HTTPException


class DashboardError(HTTPException):
    status_code = 500
    default_detail: Any = "Internal Server Error"

    def __init__(self, detail: Optional[Any] = None):
        super().__init__(
            status_code=self.status_code,
            detail=self.default_detail if detail is None else detail,
        )


class BadRequestError(DashboardError):
    status_code = 400
    default_detail = "Bad Request"


class UnauthorizedError(DashboardError):
    """Not authenticated, or authenticated without a sufficient role."""

    status_code = 401
    default_detail = "Unauthorized"


class ForbiddenError(DashboardError):
    """A specific ownership check failed (e.g. choosing another site's payee)."""

    status_code = 403
    default_detail = "Forbidden"


class NotFoundError(DashboardError):
    status_code = 404
    default_detail = "Not Found"


class UnprocessableEntityError(DashboardError):
    """Well-formed request that breaks a business rule."""

    status_code = 422
    default_detail = "Unprocessable Entity"
