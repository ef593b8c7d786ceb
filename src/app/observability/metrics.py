"""Registro de métricas via structured logging.

As métricas são logs estruturados agregáveis depois (BigQuery,
CloudWatch Insights, etc.).

Métricas suportadas:
- Latência: tempo das chamadas ao backend de sessão
- Poll outcome: resultado de cada execução de polling
- Dispatch: resultado de cada envio (live ou manual)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    tenant_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "session_backend")
        operation: Nome da operação (ex: "check_status")
        latency_ms: Latência em milissegundos
        tenant_id: Tenant da operação
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "tenant_id": tenant_id,
        },
    )


def record_poll_outcome(
    tenant_id: str,
    outcome: str,
    attempts: int,
    elapsed_seconds: float,
) -> None:
    """Registra o desfecho de uma execução de polling."""
    logger.info(
        "metric_poll_outcome",
        extra={
            "metric_type": "poll_outcome",
            "tenant_id": tenant_id,
            "outcome": outcome,
            "attempts": attempts,
            "elapsed_seconds": round(elapsed_seconds, 2),
        },
    )


def record_dispatch(
    tenant_id: str,
    mode: str,
    manual: bool,
    accepted: bool,
) -> None:
    """Registra um envio (single/bulk, live/manual)."""
    logger.info(
        "metric_dispatch",
        extra={
            "metric_type": "dispatch",
            "tenant_id": tenant_id,
            "mode": mode,
            "manual": manual,
            "accepted": accepted,
        },
    )
