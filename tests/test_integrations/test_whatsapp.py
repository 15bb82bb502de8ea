"""Tests for WhatsApp deep links."""

import pytest

from keepwarm.core.exceptions import ValidationError
from keepwarm.integrations.whatsapp import create_whatsapp_link


class TestCreateWhatsAppLink:
    def test_basic(self):
        assert (
            create_whatsapp_link("+33612345678", "Salut Camille !")
            == "https://wa.me/33612345678?text=Salut%20Camille%20%21"
        )

    def test_formatting_stripped(self):
        url = create_whatsapp_link("+1 (512) 555-0134", "Hi")
        assert url.startswith("https://wa.me/15125550134?")

    def test_reserved_characters_encoded(self):
        url = create_whatsapp_link("+15125550134", "Q&A? 100% / yes#1")
        assert url.endswith("?text=Q%26A%3F%20100%25%20%2F%20yes%231")

    def test_unicode_encoded(self):
        url = create_whatsapp_link("+33612345678", "Ça va ?")
        assert "text=%C3%87a%20va%20%3F" in url

    def test_empty_text(self):
        assert create_whatsapp_link("+15125550134", "") == "https://wa.me/15125550134?text="

    @pytest.mark.parametrize("phone", ["", "n/a"])
    def test_no_digits(self, phone):
        with pytest.raises(ValidationError):
            create_whatsapp_link(phone, "Hi")
