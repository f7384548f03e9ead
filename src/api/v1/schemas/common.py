"""Common Pydantic schemas shared across the API."""

import re
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel

from domain.entities.user import normalize_identity

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _validate_email(value: str) -> str:
    normalized = normalize_identity(value)
    if not _EMAIL_RE.match(normalized) or len(normalized) > 255:
        raise ValueError("Invalid email address")
    return normalized


# Trimmed, lower-cased email address
EmailAddress = Annotated[str, AfterValidator(_validate_email)]


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error_code: str
    message: str
    details: Any | None = None


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
