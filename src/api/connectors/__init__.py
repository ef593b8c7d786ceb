"""Connectors — adapters de borda para serviços externos.

Estrutura:
- session_backend/: backend que mantém a sessão WhatsApp Web pareada
  (initialize, status, terminate, send, send-bulk)
"""

__all__: list[str] = []
