"""Configuração de logging estruturado.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização (bootstrap)
    configure_logging(level="INFO", service_name="whatsapp-session-bridge")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("poll_attempt", extra={"attempt": 3})

Campos obrigatórios em todo log: correlation_id, tenant_id, service,
level, logger, message, asctime.
"""

from config.logging.config import (
    configure_logging,
    get_logger,
    log_fallback,
    log_transition,
    mask_phone,
)
from config.logging.filters import ContextFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "ContextFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_fallback",
    "log_transition",
    "mask_phone",
]
