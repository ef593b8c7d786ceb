"""Registro de controladores: um SessionController autoritativo por tenant."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from app.sessions.controller import SessionController
from config.settings import PairingSettings

if TYPE_CHECKING:
    from app.protocols import SessionBackendProtocol

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Endereça controladores por tenant_id, criando sob demanda."""

    def __init__(
        self,
        backend: SessionBackendProtocol,
        settings: PairingSettings | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._backend = backend
        self._settings = settings or PairingSettings()
        self._clock = clock
        self._sleep = sleep
        self._controllers: dict[str, SessionController] = {}

    def get_or_create(self, tenant_id: str) -> SessionController:
        if not tenant_id:
            raise ValueError("tenant_id é obrigatório")
        controller = self._controllers.get(tenant_id)
        if controller is None:
            controller = SessionController(
                tenant_id,
                self._backend,
                self._settings,
                clock=self._clock,
                sleep=self._sleep,
            )
            self._controllers[tenant_id] = controller
            logger.debug("session_controller_created", extra={"tenant_id": tenant_id})
        return controller

    def get(self, tenant_id: str) -> SessionController | None:
        return self._controllers.get(tenant_id)

    def __len__(self) -> int:
        return len(self._controllers)

    async def close_all(self) -> None:
        """Cancela todos os pollers (shutdown)."""
        controllers = list(self._controllers.values())
        await asyncio.gather(*(c.close() for c in controllers))
        logger.info("session_registry_closed", extra={"controllers": len(controllers)})
