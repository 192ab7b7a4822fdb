from marshmallow import ValidationError


def strip_or_none(value):
    """Trim surrounding whitespace from strings; leave anything else untouched."""
    return value.strip() if isinstance(value, str) else value


def normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


def normalize_username(value):
    return value.strip().lower() if isinstance(value, str) else value


def validate_not_blank(value: str) -> None:
    if value is None or not str(value).strip():
        raise ValidationError("Field may not be blank.")


def validate_username(value: str) -> None:
    validate_not_blank(value)
    if any(ch.isspace() for ch in value.strip()):
        raise ValidationError("Username may not contain whitespace.")
