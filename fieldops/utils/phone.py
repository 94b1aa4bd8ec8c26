"""
Phone number cleanup and formatting utilities.
"""
import re
from typing import Optional, Tuple
import logging

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

logger = logging.getLogger("fieldops.phone")


def cleanup_phone_number(raw: str) -> str:
    """
    Clean up a raw phone number string before parsing.

    - Converts full-width digits to ASCII.
    - Removes extension info (e.g., "x123", "ext 456", "#789").
    - Strips out any characters except digits and a leading '+'.

    Args:
        raw (str): The raw phone number input.

    Returns:
        str: The cleaned phone number.
    """
    if not isinstance(raw, str):
        return ""

    raw = raw.translate(str.maketrans('０１２３４５６７８９', '0123456789'))

    # Normalize leading 00 / 001 international prefix to +
    raw = re.sub(r'^\s*(?:001|00)[\s\-\.]*', '+', raw)

    raw = re.sub(r'(ext\.?|x|extension|#)\s*\d+', '', raw, flags=re.IGNORECASE)

    raw = re.sub(r'[\s\-\.\(\)]', '', raw)

    if raw.startswith('+'):
        return '+' + re.sub(r'[^\d]', '', raw[1:])
    return re.sub(r'[^\d]', '', raw)


def parse_phone(number: str, default_region: Optional[str] = "US") -> Tuple[bool, str, Optional[str]]:
    """
    Parse and validate a phone number with the phonenumbers library.

    Args:
        number: Phone number to validate
        default_region: Region used for numbers without a country code

    Returns:
        Tuple[bool, str, str]: (is_valid, formatted_number, error_message)
    """
    cleaned = cleanup_phone_number(number)
    if not cleaned:
        return False, number, "Empty phone number"

    try:
        if cleaned.startswith('+'):
            parsed = phonenumbers.parse(cleaned, None)
        else:
            parsed = phonenumbers.parse(cleaned, default_region or "US")
    except NumberParseException as e:
        return False, number, f"Parse error: {str(e)}"

    if not phonenumbers.is_valid_number(parsed):
        return False, number, "Invalid phone number"

    return True, phonenumbers.format_number(parsed, PhoneNumberFormat.E164), None


def format_phone(number: Optional[str], default_region: Optional[str] = "US") -> Optional[str]:
    """
    Format a phone number in E.164 when it is valid.

    Invalid numbers are kept as typed (trimmed) so nothing the operator
    entered is lost; blank input gives None.
    """
    if number is None:
        return None
    trimmed = str(number).strip()
    if not trimmed:
        return None

    is_valid, formatted, error = parse_phone(trimmed, default_region)
    if not is_valid:
        logger.debug(f"Keeping unparsed phone number '{trimmed}': {error}")
        return trimmed
    return formatted
