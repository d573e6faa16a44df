"""Eventos da biblioteca WhatsApp, já traduzidos para o domínio.

O adapter da biblioteca converte os eventos nativos nestas variantes;
o handler da instância faz pattern matching sobre elas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class MessageReceived:
    """Mensagem recebida (ou ecoada, quando `is_from_me`).

    Attributes:
        sender_user: Parte "user" do JID do remetente (ex: 5561999990000)
        sender_jid: JID completo do remetente
        chat_jid: JID da conversa (igual ao remetente em chats diretos)
        is_from_me: Mensagem enviada pela própria conta
        message_id: ID da mensagem no protocolo
        timestamp: Epoch em segundos
        push_name: Nome exibido pelo remetente
        message: Conteúdo da mensagem como dict
    """

    sender_user: str
    sender_jid: str
    chat_jid: str
    is_from_me: bool
    message_id: str
    timestamp: int
    push_name: str = ""
    message: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Connected:
    """Sessão autenticada e pronta para enviar/receber."""


@dataclass(frozen=True, slots=True)
class LoggedOut:
    """Device desvinculado pelo celular ou pelo servidor."""

    reason: str = ""


@dataclass(frozen=True, slots=True)
class PairSuccess:
    """Pareamento por QR concluído; o device passa a ter JID."""

    jid: str = ""


LibraryEvent = MessageReceived | Connected | LoggedOut | PairSuccess


QR_EVENT_CODE = "code"
QR_EVENT_SUCCESS = "success"
QR_EVENT_TIMEOUT = "timeout"


@dataclass(frozen=True, slots=True)
class QrItem:
    """Elemento do canal de QR.

    Attributes:
        event: "code" para um novo código; outros valores sinalizam desfecho
        code: Payload ASCII do QR (vazio quando event != "code")
    """

    event: str
    code: str = ""

    @property
    def is_code(self) -> bool:
        return self.event == QR_EVENT_CODE
