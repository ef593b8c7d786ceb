"""Rotas HTTP da API — adapters de entrada.

Responsabilidades:
- Definir endpoints HTTP (sessão WhatsApp, health)
- Montar o contexto do chamador a partir dos headers
- Delegação para o controlador de sessão e o despacho
- Respostas HTTP apropriadas

Estrutura:
- routes/session/: pareamento e envio de mensagens
- routes/health/: health checks e readiness

Agregação:
- router.py: registra todos os routers no app principal
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
