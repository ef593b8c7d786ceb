"""Configuração centralizada de logging.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização do serviço (app/bootstrap/)
    configure_logging(level="INFO", service_name="whatsapp-session-bridge")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("session_state_changed", extra={"to_state": "IDLE"})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import ContextFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "whatsapp-session-bridge"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    tenant_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado para o serviço.

    Deve ser chamada uma vez na inicialização (app/bootstrap/).

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Retorna o correlation_id do contexto atual.
        tenant_id_getter: Retorna o tenant_id do contexto atual.

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(ContextFilter(service_name, correlation_id_getter, tenant_id_getter))

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo (o filter injeta service/correlation/tenant)."""
    return logging.getLogger(name)


def mask_phone(phone: str | None) -> str:
    """Mascara telefone para logs, preservando só os 4 últimos dígitos."""
    digits = "".join(ch for ch in phone or "" if ch.isdigit())
    if len(digits) <= 4:
        return "***"
    return f"***{digits[-4:]}"


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Log observável de fallback usado (sem PII).

    Ex.: despacho caiu para o link manual porque não há sessão pareada.

    Args:
        logger: Logger instance.
        component: Nome do componente (ex: "message_dispatch").
        reason: Razão do fallback (ex: "session_not_authenticated").
        elapsed_ms: Tempo decorrido em ms (quando aplicável).
    """
    extra: dict[str, object] = {
        "fallback_used": True,
        "component": component,
    }
    if reason:
        extra["reason"] = reason
    if elapsed_ms is not None:
        extra["elapsed_ms"] = elapsed_ms

    logger.info(
        "Fallback applied for %s",
        component,
        extra=extra,
    )


def log_transition(
    logger: logging.Logger,
    tenant_id: str,
    from_state: str,
    to_state: str,
    *,
    trigger: str,
    reason: str | None = None,
) -> None:
    """Log estruturado de transição do ciclo de vida da sessão."""
    logger.info(
        "session_state_changed",
        extra={
            "tenant_id": tenant_id,
            "from_state": from_state,
            "to_state": to_state,
            "trigger": trigger,
            "reason": reason,
        },
    )
