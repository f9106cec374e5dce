import re
import uuid

from marshmallow import ValidationError, validate

NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")
PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")
SLUG_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
# at least one lower-case letter, one upper-case letter and one digit
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def name_validators(label: str) -> list:
    return [
        validate.Length(min=2, max=50, error=f"{label} must be between 2 and 50 characters"),
        validate.Regexp(
            NAME_RE,
            error=f"{label} can only contain letters, spaces, hyphens, and apostrophes",
        ),
    ]


phone_validators = [
    validate.Regexp(PHONE_RE, error="Please provide a valid phone number"),
    validate.Length(min=10, max=20, error="Phone number must be between 10 and 20 characters"),
]

slug_validators = [
    validate.Length(min=1, max=100, error="Slug must be between 1 and 100 characters"),
    validate.Regexp(SLUG_RE, error="Slug can only contain letters, numbers, hyphens, and underscores"),
]


def norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def strip_blank(data: dict, keys) -> dict:
    """
    Trim string values and drop empty ones, so optional fields sent as ""
    count as absent.
    """
    out = dict(data)
    for key in keys:
        if key not in out:
            continue
        value = out[key]
        if isinstance(value, str):
            value = value.strip()
        if value in ("", None):
            del out[key]
        else:
            out[key] = value
    return out


def flatten_errors(messages, parent: str | None = None) -> list[dict]:
    """
    Turn marshmallow's nested error dict into [{field, message}, ...].
    Schema-level errors are reported against "body".
    """
    if isinstance(messages, (list, tuple)):
        errors = []
        for item in messages:
            if isinstance(item, (dict, list, tuple)):
                errors.extend(flatten_errors(item, parent))
            else:
                errors.append({"field": parent or "body", "message": str(item)})
        return errors
    if isinstance(messages, dict):
        errors = []
        for key, value in messages.items():
            field = "body" if key == "_schema" else str(key)
            if parent and key != "_schema":
                field = f"{parent}.{field}"
            errors.extend(flatten_errors(value, field))
        return errors
    return [{"field": parent or "body", "message": str(messages)}]


def validate_uuid(label: str):
    def _check(value):
        try:
            uuid.UUID(str(value))
        except ValueError:
            raise ValidationError(f"{label} must be a valid UUID")
    return _check
