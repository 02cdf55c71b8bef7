from typing import Any, Dict, Optional

PROBLEM_BASE_URI = "https://api.shop.am/problems"


class ProblemError(Exception):
    """
    Base class for every error a service may raise.

    Carries the fields of a problem-details body. The Flask error handler
    renders it verbatim, adding the request URL as ``instance``.
    """

    status: int = 500
    problem: str = "internal-error"
    default_title: str = "Internal Server Error"

    def __init__(
        self,
        detail: Optional[str] = None,
        title: Optional[str] = None,
        errors: Optional[Dict[str, Any]] = None,
        internal_message: Optional[str] = None,
    ):
        self.detail = detail
        self.title = title or self.default_title
        self.errors = errors or {}
        self.internal_message = internal_message or detail or self.title
        super().__init__(self.internal_message)

    @property
    def type(self) -> str:
        return f"{PROBLEM_BASE_URI}/{self.problem}"

    def to_problem(self, instance: Optional[str] = None) -> Dict[str, Any]:
        """Convert exception to a problem-details dictionary"""
        body: Dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "status": self.status,
        }
        if self.detail:
            body["detail"] = self.detail
        if self.errors:
            body["errors"] = self.errors
        if instance is not None:
            body["instance"] = instance
        return body


class ValidationError(ProblemError):
    """Raised when request validation fails"""
    status = 400
    problem = "validation-error"
    default_title = "Validation Error"


class UnauthorizedError(ProblemError):
    """Raised when the caller is not authenticated"""
    status = 401
    problem = "unauthorized"
    default_title = "Unauthorized"


class ForbiddenError(ProblemError):
    """Raised when the caller lacks permission for the requested action"""
    status = 403
    problem = "forbidden"
    default_title = "Forbidden"


class NotFoundError(ProblemError):
    """Raised when a requested resource is not found"""
    status = 404
    problem = "not-found"
    default_title = "Not Found"

    def __init__(self, resource: str = "Resource", detail: Optional[str] = None):
        super().__init__(detail=detail, title=f"{resource} not found")


class ConflictError(ProblemError):
    """Raised when a write collides with existing data"""
    status = 409
    problem = "conflict"
    default_title = "Conflict"


class BusinessLogicError(ProblemError):
    """Raised when business rules are violated"""
    status = 422
    problem = "business-rule-violation"
    default_title = "Business Rule Violation"


class InternalServerError(ProblemError):
    """Raised for unexpected internal errors"""


class DatabaseError(InternalServerError):
    """Raised when database operations fail"""

    def __init__(self, message: str = "Database operation failed"):
        # Don't expose internal database details to users
        super().__init__(
            detail="An internal error occurred. Please try again later.",
            internal_message=message,
        )


def problem_from_status(status: int, title: str, detail: Optional[str] = None) -> ProblemError:
    """Build the problem matching a bare HTTP status code"""
    for cls in (ValidationError, UnauthorizedError, ForbiddenError, ConflictError, BusinessLogicError):
        if cls.status == status:
            return cls(detail=detail)
    if status == 404:
        return NotFoundError(detail=detail)

    error = ProblemError(detail=detail, title=title if status < 500 else None)
    error.status = status
    if status < 500:
        error.problem = title.lower().replace(" ", "-")
    return error
