"""Observabilidade — contexto de rastreamento e métricas.

Uso:
    from app.observability import get_correlation_id, set_tenant_id
    from app.observability import record_latency, record_poll_outcome
"""

from app.observability.correlation import (
    get_correlation_id,
    get_tenant_id,
    reset_correlation_id,
    reset_tenant_id,
    set_correlation_id,
    set_tenant_id,
)
from app.observability.metrics import (
    record_dispatch,
    record_latency,
    record_poll_outcome,
)

__all__ = [
    "get_correlation_id",
    "get_tenant_id",
    "record_dispatch",
    "record_latency",
    "record_poll_outcome",
    "reset_correlation_id",
    "reset_tenant_id",
    "set_correlation_id",
    "set_tenant_id",
]
