"""Settings do backend de sessão WhatsApp Web.

Endereço e limites de rede do serviço que mantém a sessão pareada
(initialize, status, terminate, send, send-bulk).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_BACKEND_BASE_URL: str = "http://localhost:8745"
DEFAULT_API_PREFIX: str = "/api/whatsapp"


@dataclass(frozen=True)
class SessionBackendSettings:
    """Configurações do backend de sessão.

    Attributes:
        base_url: URL base do backend (sem barra final)
        api_prefix: Prefixo das rotas de sessão/mensagem
        request_timeout_seconds: Timeout de cada requisição individual
        max_retries: Retentativas de transporte dentro do HttpClient.
            O Poller controla a própria política de retry, por isso 0.
        verify_ssl: Validação de certificado TLS
    """

    base_url: str = DEFAULT_BACKEND_BASE_URL
    api_prefix: str = DEFAULT_API_PREFIX
    request_timeout_seconds: float = 10.0
    max_retries: int = 0
    verify_ssl: bool = True

    @property
    def api_endpoint(self) -> str:
        """URL base completa com prefixo."""
        prefix = self.api_prefix.strip("/")
        base = self.base_url.rstrip("/")
        return f"{base}/{prefix}" if prefix else base

    def get_endpoint(self, path: str) -> str:
        """Monta URL absoluta para um caminho (ex: 'session/status')."""
        return f"{self.api_endpoint}/{path.lstrip('/')}"

    def validate(self) -> list[str]:
        """Valida configurações mínimas do backend.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.base_url.startswith(("http://", "https://")):
            errors.append("SESSION_BACKEND_BASE_URL deve começar com http:// ou https://")

        if self.request_timeout_seconds <= 0:
            errors.append("SESSION_BACKEND_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("SESSION_BACKEND_MAX_RETRIES deve ser >= 0")

        return errors


def _load_from_env() -> SessionBackendSettings:
    """Carrega SessionBackendSettings a partir de variáveis de ambiente."""
    return SessionBackendSettings(
        base_url=os.getenv("SESSION_BACKEND_BASE_URL", DEFAULT_BACKEND_BASE_URL),
        api_prefix=os.getenv("SESSION_BACKEND_API_PREFIX", DEFAULT_API_PREFIX),
        request_timeout_seconds=float(
            os.getenv("SESSION_BACKEND_REQUEST_TIMEOUT_SECONDS", "10")
        ),
        max_retries=int(os.getenv("SESSION_BACKEND_MAX_RETRIES", "0")),
        verify_ssl=os.getenv("SESSION_BACKEND_VERIFY_SSL", "true").lower() in ("true", "1"),
    )


@lru_cache(maxsize=1)
def get_session_backend_settings() -> SessionBackendSettings:
    """Retorna instância cacheada de SessionBackendSettings."""
    return _load_from_env()
