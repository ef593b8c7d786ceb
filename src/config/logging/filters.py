"""Filters de logging para injeção de contexto.

Campos injetados:
- correlation_id: ID de rastreamento da requisição
- tenant_id: Tenant dono da sessão WhatsApp em operação
- service: Nome do serviço

Nunca adicionar credenciais, corpo de mensagem ou telefone completo nos logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class ContextFilter(logging.Filter):
    """Injeta correlation_id, tenant_id e service em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
        tenant_id_getter: Função que retorna o tenant_id atual.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        tenant_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")
        self._get_tenant_id = tenant_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record; valores passados via `extra` têm precedência.

        Returns:
            True sempre (não filtra, apenas enriquece).
        """
        existing_corr = getattr(record, "correlation_id", None)
        record.correlation_id = existing_corr if existing_corr else self._get_correlation_id()
        existing_tenant = getattr(record, "tenant_id", None)
        record.tenant_id = existing_tenant if existing_tenant else self._get_tenant_id()
        record.service = self._service_name
        return True
