import re

from pydantic import EmailStr, TypeAdapter, ValidationError

from guestlist.errors import ValidationFailedError

_email_adapter = TypeAdapter(EmailStr)
PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9 ()\-.]{5,24}$")


def validate_email(value: str, field: str = "email") -> str:
    try:
        return str(_email_adapter.validate_python(value.strip()))
    except (ValidationError, AttributeError) as e:
        raise ValidationFailedError(f"Invalid email address: {value!r}", field=field) from e


def validate_optional_email(value: str | None, field: str = "email") -> str | None:
    if value is None or not value.strip():
        return None
    return validate_email(value, field=field)


def validate_phone(value: str | None, field: str = "phone") -> str | None:
    if value is None or not value.strip():
        return None
    value = value.strip()
    if not PHONE_PATTERN.match(value) or sum(ch.isdigit() for ch in value) < 6:
        raise ValidationFailedError(f"Invalid phone number: {value!r}", field=field)
    return value


def validate_name(value: str | None, field: str = "name") -> str:
    if value is None or not value.strip():
        raise ValidationFailedError("Name is required", field=field)
    return value.strip()


def normalize_tags(values: list[str] | None) -> list[str]:
    """Deduplicate a list of free-text tags (dietary needs, allergies)."""
    return sorted({v.strip() for v in values or [] if v and v.strip()})
