"""API errors and validation helpers."""

import re


class NotFoundError(Exception):
    """Resource not found."""

    def __init__(self, message: str = "Resource not found"):
        self.message = message
        super().__init__(self.message)


class ValidationError(Exception):
    """Validation error."""

    def __init__(self, message: str = "Validation error"):
        self.message = message
        super().__init__(self.message)


# Tenant and conversation ids: opaque, URL-safe tokens
ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
MAX_QUESTION_LENGTH = 2000


def validate_tenant_id(tenant_id: str) -> None:
    """Validate tenant_id format."""
    if not isinstance(tenant_id, str) or not ID_PATTERN.match(tenant_id):
        raise ValidationError(f"Invalid tenant_id: {tenant_id!r}")


def validate_conversation_id(conversation_id: str) -> None:
    if not isinstance(conversation_id, str) or not ID_PATTERN.match(conversation_id):
        raise ValidationError(f"Invalid conversation_id: {conversation_id!r}")


def validate_question(question: str) -> str:
    """Return the trimmed question; reject empty or oversized input."""
    if not isinstance(question, str) or not question.strip():
        raise ValidationError("Question must not be empty")
    if len(question) > MAX_QUESTION_LENGTH:
        raise ValidationError(f"Question exceeds {MAX_QUESTION_LENGTH} characters")
    return question.strip()
