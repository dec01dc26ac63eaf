"""
Customer input validators for checkout and the contact form.

Both functions return a (value, error) tuple instead of raising, so pydantic
validators and route handlers can decide how to surface the message.
"""

import logging
from typing import Optional, Tuple

import phonenumbers
from email_validator import EmailNotValidError, validate_email

from .config import DEFAULT_MARKET

logger = logging.getLogger(__name__)


def validate_email_address(email: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Validate an email address using the email-validator library.

    Syntax only: check_deliverability=False skips DNS/MX lookups.

    Returns:
        Tuple of (normalized_email, error_message).
        If valid: (normalized_email, None)
        If invalid: (None, error message)
    """
    if not email or not email.strip():
        return (None, "Email address is required")

    try:
        result = validate_email(email.strip(), check_deliverability=False)
        return (result.normalized, None)
    except EmailNotValidError as e:
        error_str = str(e).lower()
        if "@" not in email:
            return (None, "Email address must contain an @ sign")
        elif "after the @" in error_str or "domain" in error_str:
            return (None, "Email address domain is not valid")
        return (None, "Please enter a valid email address")


def validate_phone_number(
    phone: Optional[str],
    country: Optional[str] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """
    Validate a phone number using Google's phonenumbers library.

    Numbers without a leading "+" are parsed in the region of the billing
    country (GB if unknown). "UK" is accepted as an alias for GB.

    Returns:
        Tuple of (e164_phone, error_message).
        - If valid: ("+447911123456", None)
        - If invalid: (None, error message)
    """
    if not phone or not phone.strip():
        return (None, "Phone number is required")

    region = (country or DEFAULT_MARKET).strip().upper()
    if region == "UK":
        region = "GB"

    try:
        parsed_number = phonenumbers.parse(phone.strip(), region)
    except phonenumbers.NumberParseException as e:
        logger.debug("Phone number parse error: %s", e)
        return (None, "Phone number could not be understood")

    if not phonenumbers.is_valid_number(parsed_number):
        return (None, "Please enter a valid phone number")

    return (
        phonenumbers.format_number(parsed_number, phonenumbers.PhoneNumberFormat.E164),
        None,
    )
