"""Filtro de remetentes liberados para encaminhamento ao webhook.

Em dev/teste só números conhecidos chegam ao backend, evitando spam.
A comparação é por igualdade do user id (não por substring).
"""

from __future__ import annotations

from collections.abc import Iterable

from config.settings import parse_csv


class SenderFilter:
    """Allow-list imutável de user ids remotos."""

    __slots__ = ("_allowed",)

    def __init__(self, allowed: Iterable[str]) -> None:
        self._allowed = frozenset(item.strip() for item in allowed if item and item.strip())

    @classmethod
    def from_csv(cls, raw: str | None) -> SenderFilter:
        """Cria filtro a partir de lista separada por vírgula."""
        return cls(parse_csv(raw))

    @property
    def allowed(self) -> frozenset[str]:
        return self._allowed

    def is_allowed(self, user_id: str) -> bool:
        """True se o user id está na allow-list."""
        return user_id in self._allowed

    def __len__(self) -> int:
        return len(self._allowed)

    def __repr__(self) -> str:
        return f"SenderFilter(size={len(self._allowed)})"
