"""
TechNotes Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for the user record operations.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{"message": ...}` JSON bodies with the matching HTTP status.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    TechNotesError (base)      → 500 Internal Server Error
    ├── ValidationError        → 400 Bad Request (missing input, unknown id on
    │                                update, user still owns notes)
    ├── NotFoundError          → 404 Not Found
    ├── ConflictError          → 409 Conflict (duplicate username)
    └── DatabaseError          → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class TechNotesError(Exception):
    """
    Base exception for all TechNotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TechNotesError):
    """
    Raised when a request cannot be applied as given.

    When:    Missing or empty fields, empty roles, a non-boolean `active`,
             an update aimed at an unknown id, or a delete of a user who
             still owns notes.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(TechNotesError):
    """
    Raised when a requested resource does not exist.

    When:    Listing an empty user collection, deleting an unknown user id.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        message: Optional[str] = None,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(TechNotesError):
    """
    Raised when a write would break a uniqueness rule.

    When:    Creating or renaming a user to a username that another user
             already holds, whether caught by the lookup or by the unique
             index at flush time.
    HTTP:    409 Conflict
    """

    status_code = 409

    def __init__(
        self,
        message: str = "Username already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(TechNotesError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. Detailed error
    info is logged server-side only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
