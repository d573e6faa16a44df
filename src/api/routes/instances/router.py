"""Endpoints de controle das instâncias.

Endpoints:
- GET /instances: snapshot {id: {id, status, qr}}
- GET /instances/{id}: snapshot de uma instância
- POST /instances/{id}/connect: inicia ou retoma a sessão
- POST /instances/{id}/send: envia texto ({to, text})
- POST /instances/{id}/disconnect: desconecta e remove a instância

As operações do registry bloqueiam (store, biblioteca) e rodam em
thread via asyncio.to_thread; erros do engine viram JSON no handler
registrado em app.app.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request

from api.routes.instances.schemas import (
    ConnectResponse,
    DisconnectResponse,
    InstanceSnapshot,
    SendRequest,
    SendResponse,
)
from app.observability import instance_scope
from utils.errors import SendError

if TYPE_CHECKING:
    from app.bootstrap import EngineContext

logger = logging.getLogger(__name__)

router = APIRouter()


def _context(request: Request) -> EngineContext:
    return request.app.state.context


@router.get("")
async def list_instances(request: Request) -> dict[str, Any]:
    """Lista todas as instâncias registradas."""
    registry = _context(request).registry
    return await asyncio.to_thread(registry.list)


@router.get("/{instance_id}", response_model=InstanceSnapshot)
async def get_instance(instance_id: str, request: Request) -> dict[str, Any]:
    """Snapshot de uma instância (404 se desconhecida)."""
    registry = _context(request).registry
    return await asyncio.to_thread(registry.get, instance_id)


@router.post("/{instance_id}/connect", response_model=ConnectResponse)
async def connect_instance(instance_id: str, request: Request) -> ConnectResponse:
    """Cria a instância e dispara o pareamento/conexão."""
    registry = _context(request).registry
    with instance_scope(instance_id):
        await asyncio.to_thread(registry.connect, instance_id)
        logger.info("connect_accepted")
    return ConnectResponse()


@router.post("/{instance_id}/send", response_model=SendResponse)
async def send_message(
    instance_id: str,
    payload: SendRequest,
    request: Request,
) -> SendResponse:
    """Envia texto pela instância.

    O timeout encerra só a espera da requisição: a thread do envio não é
    interrompida, então a mensagem ainda pode ser entregue depois da
    resposta 500 "Tempo de envio esgotado".
    """
    context = _context(request)
    with instance_scope(instance_id):
        try:
            await asyncio.wait_for(
                asyncio.to_thread(context.registry.send, instance_id, payload.to, payload.text),
                timeout=context.engine.send_timeout_seconds,
            )
        except TimeoutError as exc:
            logger.warning("send_timeout")
            raise SendError("Tempo de envio esgotado") from exc
    return SendResponse()


@router.post("/{instance_id}/disconnect", response_model=DisconnectResponse)
async def disconnect_instance(instance_id: str, request: Request) -> DisconnectResponse:
    """Desconecta e remove a instância (emite status DISCONNECTED)."""
    registry = _context(request).registry
    with instance_scope(instance_id):
        await asyncio.to_thread(registry.disconnect, instance_id)
        logger.info("disconnect_accepted")
    return DisconnectResponse()
