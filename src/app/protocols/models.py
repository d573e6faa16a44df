"""Modelos trocados entre o core e os adapters."""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.jid import user_of


@dataclass(frozen=True, slots=True)
class DeviceHandle:
    """Referência a um device no store de credenciais.

    Attributes:
        jid: JID persistido (ex: 5561999990000:12@s.whatsapp.net); None
            para device novo, ainda não pareado
        uuid: Identificador do device novo para a biblioteca
    """

    jid: str | None = None
    uuid: str | None = None

    @property
    def is_new(self) -> bool:
        return self.jid is None

    @property
    def user(self) -> str:
        """Parte "user" do JID persistido (vazio para device novo)."""
        return user_of(self.jid) if self.jid else ""


@dataclass(frozen=True, slots=True)
class SendReceipt:
    """Confirmação de envio devolvida pela biblioteca."""

    message_id: str
    timestamp: int = 0
