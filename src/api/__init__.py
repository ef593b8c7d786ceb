"""API — camada de borda.

Subpastas:
- connectors/: clientes HTTP de serviços externos (backend de sessão)
- routes/: endpoints HTTP (sessão WhatsApp, health)

NÃO PODE conter: FSM, regras de sessão, orquestração de use cases.
"""
