import re
from typing import List, Mapping

EMAIL_REGEX = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
PHONE_REGEX = re.compile(r"\+?[1-9]\d{0,15}", re.ASCII)
PHONE_SEPARATORS = re.compile(r"[\s\-()]")

# (field, message, trim before the emptiness check)
REQUIRED_FIELDS = (
    ("firstName", "First name is required", True),
    ("lastName", "Last name is required", True),
    ("email", "Email is required", True),
    ("subject", "Subject is required", False),  # picked from a fixed list
    ("message", "Message is required", True),
)


def is_valid_email(email: str) -> bool:
    return EMAIL_REGEX.fullmatch(email) is not None


def is_valid_phone(phone: str) -> bool:
    return PHONE_REGEX.fullmatch(PHONE_SEPARATORS.sub("", phone)) is not None


def validate_contact(data: Mapping[str, str]) -> List[str]:
    """
    Check one form submission. Returns every problem found, in a fixed order;
    an empty list means the submission is valid.
    """
    errors = []
    for field, message, trim in REQUIRED_FIELDS:
        value = data.get(field) or ""
        if not (value.strip() if trim else value):
            errors.append(message)

    email = data.get("email") or ""
    if email and not is_valid_email(email):
        errors.append("Please enter a valid email address")

    phone = data.get("phone") or ""
    if phone.strip() and not is_valid_phone(phone):
        errors.append("Please enter a valid phone number")
    return errors


def format_errors(errors: List[str]) -> str:
    return ". ".join(errors) + "." if errors else ""
