"""Settings do pareamento por QR e do polling de status.

Todos os tempos em segundos.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

DEFAULT_MANAGER_ROLES: frozenset[str] = frozenset({"customer"})


@dataclass(frozen=True)
class PairingSettings:
    """Configurações do fluxo de pareamento.

    Attributes:
        poll_interval_seconds: Intervalo entre consultas de status
        max_consecutive_failures: Falhas de transporte seguidas até FAILED
        soft_checkpoint_attempts: Tentativas até revalidar o QR com o backend
        hard_timeout_seconds: Orçamento total de uma execução de polling
        request_timeout_seconds: Timeout de cada check_status no polling
        qr_fetch_attempts: Tentativas de obter o QR após initialize
        qr_fetch_delay_seconds: Espera entre tentativas de obter o QR
        qr_soft_stale_seconds: Idade em que o QR passa a ser considerado velho
        qr_hard_expiry_seconds: Idade em que o QR deixa de ser exibido
        manager_roles: Roles autorizados a criar/alterar a sessão do tenant
    """

    poll_interval_seconds: float = 3.0
    max_consecutive_failures: int = 3
    soft_checkpoint_attempts: int = 20
    hard_timeout_seconds: float = 180.0
    request_timeout_seconds: float = 10.0
    qr_fetch_attempts: int = 15
    qr_fetch_delay_seconds: float = 2.0
    qr_soft_stale_seconds: float = 60.0
    qr_hard_expiry_seconds: float = 180.0
    manager_roles: frozenset[str] = field(default_factory=lambda: DEFAULT_MANAGER_ROLES)

    def validate(self) -> list[str]:
        """Valida limites do pareamento."""
        errors: list[str] = []

        if self.poll_interval_seconds <= 0:
            errors.append("PAIRING_POLL_INTERVAL_SECONDS deve ser > 0")

        if self.max_consecutive_failures < 1:
            errors.append("PAIRING_MAX_CONSECUTIVE_FAILURES deve ser >= 1")

        if self.soft_checkpoint_attempts < 1:
            errors.append("PAIRING_SOFT_CHECKPOINT_ATTEMPTS deve ser >= 1")

        if self.hard_timeout_seconds <= self.poll_interval_seconds:
            errors.append(
                "PAIRING_HARD_TIMEOUT_SECONDS deve ser maior que o intervalo de polling"
            )

        if self.qr_fetch_attempts < 1:
            errors.append("PAIRING_QR_FETCH_ATTEMPTS deve ser >= 1")

        if self.qr_soft_stale_seconds > self.qr_hard_expiry_seconds:
            errors.append("PAIRING_QR_SOFT_STALE_SECONDS não pode exceder a expiração")

        if not self.manager_roles:
            errors.append("PAIRING_MANAGER_ROLES não pode ser vazio")

        return errors


def _parse_roles(raw: str) -> frozenset[str]:
    roles = {item.strip().lower() for item in raw.split(",") if item.strip()}
    return frozenset(roles) or DEFAULT_MANAGER_ROLES


def _load_pairing_from_env() -> PairingSettings:
    """Carrega PairingSettings de variáveis de ambiente."""
    return PairingSettings(
        poll_interval_seconds=float(os.getenv("PAIRING_POLL_INTERVAL_SECONDS", "3")),
        max_consecutive_failures=int(os.getenv("PAIRING_MAX_CONSECUTIVE_FAILURES", "3")),
        soft_checkpoint_attempts=int(os.getenv("PAIRING_SOFT_CHECKPOINT_ATTEMPTS", "20")),
        hard_timeout_seconds=float(os.getenv("PAIRING_HARD_TIMEOUT_SECONDS", "180")),
        request_timeout_seconds=float(os.getenv("PAIRING_REQUEST_TIMEOUT_SECONDS", "10")),
        qr_fetch_attempts=int(os.getenv("PAIRING_QR_FETCH_ATTEMPTS", "15")),
        qr_fetch_delay_seconds=float(os.getenv("PAIRING_QR_FETCH_DELAY_SECONDS", "2")),
        qr_soft_stale_seconds=float(os.getenv("PAIRING_QR_SOFT_STALE_SECONDS", "60")),
        qr_hard_expiry_seconds=float(os.getenv("PAIRING_QR_HARD_EXPIRY_SECONDS", "180")),
        manager_roles=_parse_roles(os.getenv("PAIRING_MANAGER_ROLES", "customer")),
    )


@lru_cache(maxsize=1)
def get_pairing_settings() -> PairingSettings:
    """Retorna instância cacheada de PairingSettings."""
    return _load_pairing_from_env()
