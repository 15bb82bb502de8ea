"""Phone number normalization utility.

Single source of truth for the E.164-style format stored on contacts
and used to build messaging deep links.
"""

from typing import Optional

from keepwarm.core.exceptions import ValidationError

# North American Numbering Plan: 10 national digits, area code starts 2-9
NANP_COUNTRY_CODE = "1"


def normalize_phone_e164(phone: Optional[str], default_country_code: str = "1") -> Optional[str]:
    """Normalize phone to "+<digits>" international format.

    Rules, after stripping everything but digits:
        - "+..." or "00..." is already international (the 00 is dropped)
        - a leading 0 is a national trunk prefix: it is replaced by the
          default country code
        - 10 digits starting 2-9 are NANP when the default is "1"
        - anything else is taken as international digits

    Args:
        phone: Phone number in any format
        default_country_code: Calling code for numbers typed without one

    Returns:
        Normalized phone (e.g., "+17135551234"), or None when no digits

    Raises:
        ValidationError: If a trunk-prefixed national number comes in while
            the default country is NANP, which has no trunk 0

    Examples:
        >>> normalize_phone_e164("(713) 555-1234")
        '+17135551234'
        >>> normalize_phone_e164("0033612345678")
        '+33612345678'
        >>> normalize_phone_e164("06 12 34 56 78", default_country_code="33")
        '+33612345678'
    """
    if not phone:
        return None
    digits = phone_digits(phone)
    if not digits:
        return None
    if phone.strip().startswith("+"):
        return f"+{digits}"
    if digits.startswith("00"):
        return f"+{digits[2:]}"

    country_code = default_country_code.lstrip("+")
    if digits.startswith("0"):
        if country_code == NANP_COUNTRY_CODE:
            raise ValidationError(
                f"Phone {phone!r} looks like a national number; include the country code"
            )
        return f"+{country_code}{digits[1:]}"
    if len(digits) == 10 and digits[0] in "23456789" and country_code == NANP_COUNTRY_CODE:
        return f"+{country_code}{digits}"
    return f"+{digits}"


def phone_digits(phone: str) -> str:
    """Return only the digits of a phone number."""
    return "".join(c for c in phone if c.isdigit())
