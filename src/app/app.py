"""Aplicação ASGI da API de controle (FastAPI).

O supervisor (app.supervisor) monta o EngineContext e serve o app com
uvicorn. Para desenvolvimento também funciona via factory:

    uvicorn --factory app.app:create_app --port 3002
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import create_api_router
from app.bootstrap import auto_restore, build_context, log_restorable_devices
from app.observability import get_correlation_id, reset_correlation_id, set_correlation_id
from config.logging import get_logger
from utils.errors import EngineError, InfrastructureError, PayloadError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from fastapi import Response

    from app.bootstrap import EngineContext

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Vincula o dispatcher ao event loop
    - Loga devices persistidos (ou reconecta, com AUTO_RESTORE)

    Shutdown:
    - Desconecta todas as instâncias sem emitir envelopes
    - Fecha o dispatcher e o store
    """
    context: EngineContext = app.state.context
    logger.info("app_starting", extra={"store_path": context.store.path})

    await context.dispatcher.start()
    if context.engine.auto_restore:
        await asyncio.to_thread(auto_restore, context)
    else:
        await asyncio.to_thread(log_restorable_devices, context.store)

    yield

    logger.info("app_shutting_down")
    context.dispatcher.seal()
    await asyncio.to_thread(context.registry.disconnect_all)
    await context.dispatcher.aclose()
    await asyncio.to_thread(context.store.close)
    logger.info("app_stopped")


async def _engine_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, EngineError)
    if isinstance(exc, InfrastructureError):
        logger.error(
            "request_failed",
            extra={"error": exc.code, "path": request.url.path, "status_code": exc.http_status},
        )
        message = str(exc)
    else:
        logger.info(
            "request_rejected",
            extra={"error": exc.code, "path": request.url.path, "status_code": exc.http_status},
        )
        message = exc.code
    return JSONResponse(status_code=exc.http_status, content={"error": message})


async def _validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info(
        "request_rejected",
        extra={"error": PayloadError.code, "path": request.url.path, "status_code": 400},
    )
    return JSONResponse(status_code=PayloadError.http_status, content={"error": PayloadError.code})


async def _correlation_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    token = set_correlation_id(request.headers.get(CORRELATION_HEADER))
    try:
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = get_correlation_id()
    finally:
        reset_correlation_id(token)
    return response


def create_app(context: EngineContext | None = None) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        context: Dependências do processo; montado das envs se None.

    Returns:
        Aplicação FastAPI configurada.
    """
    if context is None:
        context = build_context()

    fastapi_app = FastAPI(
        title="zap-multi-engine",
        description="Ponte multi-instância entre WhatsApp e o backend via webhook",
        version="1.0.0",
        lifespan=lifespan,
    )
    fastapi_app.state.context = context

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=list(context.engine.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    fastapi_app.middleware("http")(_correlation_middleware)

    fastapi_app.add_exception_handler(EngineError, _engine_error_handler)
    fastapi_app.add_exception_handler(RequestValidationError, _validation_error_handler)

    fastapi_app.include_router(create_api_router())

    logger.info("app_configured")
    return fastapi_app
