# cardapio/services/whatsapp.py

# Outbound WhatsApp channel. dispatch is the only place the order leaves the
# service: it builds the wa.me deep link and hands it to an opener. The opener
# is injected; the HTTP layer passes None and returns the link to the browser.
# Numbers of up to 11 digits are local (area code + subscriber) and always get
# the country code, even when the area code itself is 55.

from __future__ import annotations
from typing import Callable, Optional
from urllib.parse import quote

from cardapio.config import settings
from cardapio.logger import setup_logger
from cardapio.utils.validators import clean_phone

logger = setup_logger(__name__)

Opener = Callable[[str], object]

# characters encodeURIComponent leaves alone besides letters, digits and "-_.~"
_URI_COMPONENT_SAFE = "!*'()"


def normalize_phone(phone: str, country_code: Optional[str] = None) -> str:
    country_code = country_code or settings.DEFAULT_COUNTRY_CODE
    digits = clean_phone(phone)
    # area code + subscriber is at most 11 digits, so "(55) 9..." is still local
    if len(digits) <= 11 or not digits.startswith(country_code):
        return f"{country_code}{digits}"
    return digits


def build_whatsapp_url(phone: str, text: str) -> str:
    encoded = quote(text, safe=_URI_COMPONENT_SAFE)
    return f"{settings.WHATSAPP_BASE_URL}/{normalize_phone(phone)}?text={encoded}"


def dispatch(phone: str, text: str, opener: Optional[Opener] = None) -> str:
    if not clean_phone(phone):
        raise ValueError("dispatch needs a destination phone number")

    url = build_whatsapp_url(phone, text)
    if opener is not None:
        opener(url)
    logger.info(f"Order message dispatched to WhatsApp {normalize_phone(phone)}")
    return url
