"""App — orquestração da sessão WhatsApp e casos de uso.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- use_cases/: despacho de mensagens e envio de faturas
- protocols/: contratos/interfaces
- sessions/: modelos, permissões, poller, controlador e registro
- observability/: contexto de rastreamento e métricas
- constants/: mensagens exibíveis por motivo

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
