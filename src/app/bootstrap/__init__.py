"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, create_session_registry

    # Na inicialização do serviço
    initialize_app()
"""

from __future__ import annotations

import logging

from app.bootstrap.dependencies import (
    create_dispatcher,
    create_send_invoice_use_case,
    create_session_backend,
    create_session_registry,
)
from app.observability import get_correlation_id, get_tenant_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_dispatch_settings,
    get_pairing_settings,
    get_session_backend_settings,
)

STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)

__all__ = [
    "create_dispatcher",
    "create_send_invoice_use_case",
    "create_session_backend",
    "create_session_registry",
    "initialize_app",
    "initialize_test_app",
    "validate_runtime_settings",
]


def initialize_app() -> None:
    """Inicializa a aplicação com todas as configurações necessárias.

    Deve ser chamada uma vez no início do serviço.

    Configura:
    - Logging estruturado JSON com correlation_id e tenant_id
    """
    base = get_base_settings()
    configure_logging(
        level=base.log_level,
        service_name=base.service_name,
        correlation_id_getter=get_correlation_id,
        tenant_id_getter=get_tenant_id,
    )


def initialize_test_app() -> None:
    """Inicializa a aplicação para testes (logging em DEBUG)."""
    configure_logging(
        level="DEBUG",
        service_name=f"{get_base_settings().service_name}_test",
        correlation_id_getter=get_correlation_id,
        tenant_id_getter=get_tenant_id,
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development`/`test` mantém alerta sem bloquear execução local.
    """
    environment = get_base_settings().environment.lower()
    strict_mode = environment in STRICT_VALIDATION_ENVS
    errors: list[str] = []

    errors.extend(f"base: {e}" for e in get_base_settings().validate())
    errors.extend(f"session_backend: {e}" for e in get_session_backend_settings().validate())
    errors.extend(f"pairing: {e}" for e in get_pairing_settings().validate())
    errors.extend(f"dispatch: {e}" for e in get_dispatch_settings().validate())

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")
