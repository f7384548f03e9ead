"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    NOT_A_MEMBER = "NOT_A_MEMBER"
    NOT_INVITED = "NOT_INVITED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Not found errors (404)
    USER_NOT_FOUND = "USER_NOT_FOUND"
    GROUP_NOT_FOUND = "GROUP_NOT_FOUND"
    GROUP_MEMBER_NOT_FOUND = "GROUP_MEMBER_NOT_FOUND"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    LAST_ADMIN = "LAST_ADMIN"

    # Conflict errors (409)
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    ALREADY_A_GROUP_MEMBER = "ALREADY_A_GROUP_MEMBER"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    """Input is malformed or missing."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
            details=details,
        )


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class InvalidTokenError(AuthenticationError):
    """Token is malformed, tampered with, or missing required claims."""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message=message, error_code=ErrorCode.INVALID_TOKEN)


class TokenExpiredError(AuthenticationError):
    """Token signature is valid but the token has expired."""

    def __init__(self, message: str = "Please login again") -> None:
        super().__init__(message=message, error_code=ErrorCode.TOKEN_EXPIRED)


class InvalidCredentialsError(AppException):
    """Email/password combination does not match."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_CREDENTIALS,
            message="Invalid credentials",
            status_code=400,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class NotAGroupMemberError(AppException):
    """User does not hold an active membership in the group."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_A_MEMBER,
            message="Not a member of this group",
            status_code=403,
            details={"group_id": group_id},
        )


class NotInvitedError(AppException):
    """User has no membership (pending or active) in the group."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_INVITED,
            message="You are not invited to this group",
            status_code=403,
            details={"group_id": group_id},
        )


class InsufficientPermissionsError(AppException):
    """User does not have sufficient permissions."""

    def __init__(self, required_role: str = "admin") -> None:
        super().__init__(
            error_code=ErrorCode.INSUFFICIENT_PERMISSIONS,
            message="Admin access required",
            status_code=403,
            details={"required_role": required_role},
        )


class UserNotFoundError(AppException):
    """User not found."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message="User not found",
            status_code=404,
            details={"email": email},
        )


class GroupNotFoundError(AppException):
    """Group not found."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_NOT_FOUND,
            message=f"Group not found: {group_id}",
            status_code=404,
            details={"group_id": group_id},
        )


class GroupMemberNotFoundError(AppException):
    """Group member not found."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_MEMBER_NOT_FOUND,
            message="User not found in group",
            status_code=404,
            details={"email": email},
        )


class TaskNotFoundError(AppException):
    """Task not found."""

    def __init__(self, task_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.TASK_NOT_FOUND,
            message=f"Task not found: {task_id}",
            status_code=404,
            details={"task_id": task_id},
        )


class LastAdminError(AppException):
    """Cannot remove the last admin of a group."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.LAST_ADMIN,
            message="Cannot remove the last admin",
            status_code=400,
        )


class UserAlreadyExistsError(AppException):
    """An account with this email already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_ALREADY_EXISTS,
            message="User already exists",
            status_code=409,
            details={"email": email},
        )


class AlreadyAGroupMemberError(AppException):
    """User is already an active member of the group."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_A_GROUP_MEMBER,
            message="You are already a member",
            status_code=409,
            details={"email": email},
        )
