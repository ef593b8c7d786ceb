"""Link de compose manual do WhatsApp Web (fallback sem sessão pareada)."""

from __future__ import annotations

import re
from urllib.parse import quote

from config.settings.dispatch import DEFAULT_DEEP_LINK_BASE_URL

_NON_DIGITS = re.compile(r"\D")

# Mesmo conjunto preservado por encodeURIComponent
_TEXT_SAFE_CHARS = "!~*'()"


def normalize_phone(phone: str | None, default_country_code: str = "91") -> str:
    """Reduz o telefone a dígitos.

    Números de 10 dígitos que ainda não começam com o DDI ganham o prefixo.
    """
    digits = _NON_DIGITS.sub("", phone or "")
    if (
        len(digits) == 10
        and default_country_code
        and not digits.startswith(default_country_code)
    ):
        return f"{default_country_code}{digits}"
    return digits


def build_manual_link(
    phone: str,
    body: str,
    *,
    base_url: str = DEFAULT_DEEP_LINK_BASE_URL,
    default_country_code: str = "91",
) -> str:
    """Monta https://web.whatsapp.com/send?phone=<dígitos>&text=<corpo codificado>.

    Raises:
        ValueError: Se o telefone não contém dígitos.
    """
    digits = normalize_phone(phone, default_country_code)
    if not digits:
        raise ValueError("Telefone sem dígitos")
    text = quote(body or "", safe=_TEXT_SAFE_CHARS)
    return f"{base_url}?phone={digits}&text={text}"
