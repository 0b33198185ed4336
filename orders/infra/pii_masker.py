"""
PII (Personally Identifiable Information) masking utilities.
"""
from typing import Any


def mask_email(email: str) -> str:
    """Mask email address."""
    if "@" not in email:
        return mask_text(email)
    local, domain = email.split("@", 1)
    if len(local) <= 2:
        masked = "**"
    else:
        masked = local[:2] + "*" * (len(local) - 2)
    return f"{masked}@{domain}"


def mask_phone(phone: str) -> str:
    """Mask phone number, keeping the country prefix and last two digits."""
    if len(phone) <= 4:
        return "*" * len(phone)
    return phone[:2] + "*" * (len(phone) - 4) + phone[-2:]


def mask_name(name: str) -> str:
    """Mask name."""
    if len(name) <= 2:
        return "**"
    return name[0] + "*" * (len(name) - 2) + name[-1]


def mask_text(value: str) -> str:
    """Mask free text entirely, keeping its length hint."""
    return "*" * min(len(value), 8)


MASKERS = {
    "customer_email": mask_email,
    "email": mask_email,
    "customer_phone": mask_phone,
    "phone": mask_phone,
    "phone_number": mask_phone,
    "customer_name": mask_name,
    "name": mask_name,
    "delivery_address": mask_text,
    "address": mask_text,
}


def mask_pii_in_dict(data: dict) -> dict:
    """Mask PII in dictionary recursively."""
    masked: dict[str, Any] = {}

    for key, value in data.items():
        masker = MASKERS.get(key.lower())

        if isinstance(value, dict):
            masked[key] = mask_pii_in_dict(value)
        elif isinstance(value, list):
            masked[key] = [mask_pii_in_dict(item) if isinstance(item, dict) else item for item in value]
        elif masker is not None and isinstance(value, str):
            masked[key] = masker(value)
        else:
            masked[key] = value

    return masked
