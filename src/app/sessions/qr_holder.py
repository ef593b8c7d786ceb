"""Guarda o desafio QR vigente de um tenant."""

from __future__ import annotations

from app.sessions.models import QRChallenge


class QRChallengeHolder:
    """Mantém no máximo um QRChallenge; um novo sempre substitui o anterior."""

    def __init__(self) -> None:
        self._current: QRChallenge | None = None

    @property
    def current(self) -> QRChallenge | None:
        return self._current

    def store(self, challenge: QRChallenge) -> None:
        self._current = challenge

    def is_stale(self, now: float, freshness_window: float) -> bool:
        """Holder vazio conta como velho."""
        if self._current is None:
            return True
        return self._current.age(now) >= freshness_window

    def clear(self) -> None:
        self._current = None
