"""WhatsApp deep links for sending a drafted message.

The core only supplies the text; opening the link is the caller's job.

Usage:
    from keepwarm.integrations.whatsapp import create_whatsapp_link

    url = create_whatsapp_link(contact.phone_e164, draft.text)
"""

from urllib.parse import quote

from keepwarm.core.exceptions import ValidationError
from keepwarm.core.phone import phone_digits

WHATSAPP_BASE_URL = "https://wa.me"


def create_whatsapp_link(phone_e164: str, text: str) -> str:
    """Build a wa.me URL with a prefilled message.

    Args:
        phone_e164: Recipient phone, e.g. "+33612345678"
        text: Message to prefill

    Returns:
        URL like "https://wa.me/33612345678?text=Salut%20..."

    Raises:
        ValidationError: If the phone has no digits
    """
    digits = phone_digits(phone_e164 or "")
    if not digits:
        raise ValidationError(f"Cannot build WhatsApp link for phone {phone_e164!r}")
    return f"{WHATSAPP_BASE_URL}/{digits}?text={quote(text, safe='')}"
