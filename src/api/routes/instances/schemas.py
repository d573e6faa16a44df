"""Modelos de request/response das rotas de instâncias."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class SendRequest(BaseModel):
    """Corpo de POST /instances/{id}/send.

    `text` vazio é aceito; quem decide é a biblioteca.
    """

    model_config = ConfigDict(extra="ignore")

    to: StrictStr = Field(description="JID ou número do destinatário")
    text: StrictStr = Field(description="Texto da mensagem")


class InstanceSnapshot(BaseModel):
    """Visão pública de uma instância."""

    id: str
    status: Literal["DISCONNECTED", "CONNECTING", "CONNECTED"]
    qr: str = ""


class ConnectResponse(BaseModel):
    message: str = "starting"
    status: str = "CONNECTING"


class DisconnectResponse(BaseModel):
    message: str = "disconnected"
    status: str = "DISCONNECTED"


class SendResponse(BaseModel):
    success: bool = True
