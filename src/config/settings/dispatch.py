"""Settings do despacho de mensagens e do fallback manual."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_DEEP_LINK_BASE_URL: str = "https://web.whatsapp.com/send"


@dataclass(frozen=True)
class DispatchSettings:
    """Configurações do despacho.

    Attributes:
        bulk_concurrency: Envios simultâneos no envio em massa
        deep_link_base_url: URL do compose manual (fallback)
        default_country_code: DDI prefixado a números locais de 10 dígitos
    """

    bulk_concurrency: int = 4
    deep_link_base_url: str = DEFAULT_DEEP_LINK_BASE_URL
    default_country_code: str = "91"

    def validate(self) -> list[str]:
        errors: list[str] = []

        if self.bulk_concurrency < 1:
            errors.append("DISPATCH_BULK_CONCURRENCY deve ser >= 1")

        if not self.deep_link_base_url.startswith(("http://", "https://")):
            errors.append("DISPATCH_DEEP_LINK_BASE_URL deve ser http(s)")

        if not self.default_country_code.isdigit():
            errors.append("DISPATCH_DEFAULT_COUNTRY_CODE deve conter apenas dígitos")

        return errors


def _load_dispatch_from_env() -> DispatchSettings:
    """Carrega DispatchSettings de variáveis de ambiente."""
    return DispatchSettings(
        bulk_concurrency=int(os.getenv("DISPATCH_BULK_CONCURRENCY", "4")),
        deep_link_base_url=os.getenv("DISPATCH_DEEP_LINK_BASE_URL", DEFAULT_DEEP_LINK_BASE_URL),
        default_country_code=os.getenv("DISPATCH_DEFAULT_COUNTRY_CODE", "91"),
    )


@lru_cache(maxsize=1)
def get_dispatch_settings() -> DispatchSettings:
    """Retorna instância cacheada de DispatchSettings."""
    return _load_dispatch_from_env()
