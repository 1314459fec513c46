"""Input validation rules.

Each ``validate_*`` function checks every rule for every field and returns
the full list of violations; callers raise ``ValidationFailed`` when the list
is non-empty. Nothing here short-circuits on the first failure.
"""

import re

from email_validator import EmailNotValidError, validate_email

from postboard.exceptions import FieldViolation, ValidationFailed
from postboard.schemas.auth import SetPasswordRequest
from postboard.schemas.post import PostCreate, PostUpdate

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
CONTENT_MIN_LENGTH = 10
PASSWORD_MIN_LENGTH = 8

PASSWORD_CHARACTER_RULES = [
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
    (re.compile(r"[^a-zA-Z0-9]"), "Password must contain at least one special character"),
]


def raise_if_invalid(errors: list[FieldViolation]) -> None:
    """Raise ``ValidationFailed`` carrying all collected violations."""
    if errors:
        raise ValidationFailed(errors)


def is_valid_email(email: str) -> bool:
    """Check email syntax without DNS lookups."""
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def check_email(email: str | None) -> list[FieldViolation]:
    errors = []
    if not email or not email.strip():
        errors.append(FieldViolation("email", "Email is required"))
    if not is_valid_email(email or ""):
        errors.append(FieldViolation("email", "Email is not a valid email address"))
    return errors


def check_username(username: str | None) -> list[FieldViolation]:
    errors = []
    value = username or ""
    if not value.strip():
        errors.append(FieldViolation("username", "Username is required"))
    if len(value) < USERNAME_MIN_LENGTH:
        errors.append(
            FieldViolation(
                "username", f"Username must be at least {USERNAME_MIN_LENGTH} characters"
            )
        )
    if len(value) > USERNAME_MAX_LENGTH:
        errors.append(
            FieldViolation("username", f"Username cannot exceed {USERNAME_MAX_LENGTH} characters")
        )
    return errors


def check_title(title: str, required: bool = True) -> list[FieldViolation]:
    errors = []
    if required and not title.strip():
        errors.append(FieldViolation("title", "Title is required"))
    if len(title) < TITLE_MIN_LENGTH:
        errors.append(
            FieldViolation("title", f"Title must be at least {TITLE_MIN_LENGTH} characters")
        )
    if len(title) > TITLE_MAX_LENGTH:
        errors.append(FieldViolation("title", f"Title cannot exceed {TITLE_MAX_LENGTH} characters"))
    return errors


def check_content(content: str, required: bool = True) -> list[FieldViolation]:
    errors = []
    if required and not content.strip():
        errors.append(FieldViolation("content", "Content is required"))
    if len(content) < CONTENT_MIN_LENGTH:
        errors.append(
            FieldViolation("content", f"Content must be at least {CONTENT_MIN_LENGTH} characters")
        )
    return errors


def validate_post_create(data: PostCreate) -> list[FieldViolation]:
    """Validate a new post: both title and content are required."""
    return check_title(data.title) + check_content(data.content)


def validate_post_update(data: PostUpdate) -> list[FieldViolation]:
    """Validate a partial post update; omitted fields are not checked."""
    errors = []
    if data.title is not None:
        errors.extend(check_title(data.title, required=False))
    if data.content is not None:
        errors.extend(check_content(data.content, required=False))
    return errors


def validate_set_password(data: SetPasswordRequest) -> list[FieldViolation]:
    """Validate password strength, confirmation and token presence."""
    errors = []
    if not data.password:
        errors.append(FieldViolation("password", "Password is required"))
    if len(data.password) < PASSWORD_MIN_LENGTH:
        errors.append(
            FieldViolation(
                "password", f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
            )
        )
    for pattern, message in PASSWORD_CHARACTER_RULES:
        if not pattern.search(data.password):
            errors.append(FieldViolation("password", message))

    if data.confirm_password != data.password:
        errors.append(FieldViolation("confirm_password", "Passwords must match"))

    if not data.token or not data.token.strip():
        errors.append(FieldViolation("token", "Token is required"))
    return errors
