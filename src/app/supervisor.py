"""Supervisor do processo: bootstrap, API e shutdown gracioso.

Fluxo:
1. Configura logging e valida settings
2. Abre o store de credenciais (falha → exit 1)
3. Monta o EngineContext e o app FastAPI
4. Serve com uvicorn até SIGINT/SIGTERM
5. O lifespan desconecta as instâncias e fecha dispatcher e store

Uso:
    zap-engine
    python -m app.supervisor
"""

from __future__ import annotations

import contextlib
import logging
import signal
import sys
import threading
from typing import TYPE_CHECKING

import uvicorn

from app.app import create_app
from app.bootstrap import build_context, initialize_app, validate_runtime_settings
from utils.errors import OpenError

if TYPE_CHECKING:
    from types import FrameType

    from app.bootstrap import EngineContext

logger = logging.getLogger(__name__)


def _signal_name(sig: int) -> str:
    try:
        return signal.Signals(sig).name
    except ValueError:
        return str(sig)


class EngineServer(uvicorn.Server):
    """Servidor uvicorn com recepção de sinal idempotente.

    O primeiro sinal sela o dispatcher (nenhum envelope depois dele) e
    inicia o shutdown gracioso; sinais repetidos são só logados.
    """

    def __init__(self, config: uvicorn.Config, context: EngineContext) -> None:
        super().__init__(config)
        self._context = context
        self._signal_lock = threading.Lock()
        self._signals_received = 0

    @property
    def signals_received(self) -> int:
        return self._signals_received

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        with self._signal_lock:
            self._signals_received += 1
            first = self._signals_received == 1

        if not first:
            logger.info("shutdown_signal_ignored", extra={"signal": _signal_name(sig)})
            return

        logger.info("shutdown_signal_received", extra={"signal": _signal_name(sig)})
        self._context.dispatcher.seal()
        super().handle_exit(sig, frame)


def create_server(context: EngineContext) -> EngineServer:
    """Configura uvicorn para o app do contexto."""
    engine = context.engine
    config = uvicorn.Config(
        create_app(context),
        host=engine.host,
        port=engine.port,
        log_config=None,
        lifespan="on",
        timeout_graceful_shutdown=max(1, int(engine.shutdown_grace_seconds)),
    )
    return EngineServer(config, context)


def main() -> None:
    """Entrypoint do processo (console script `zap-engine`)."""
    initialize_app()

    try:
        validate_runtime_settings()
    except RuntimeError as exc:
        logger.critical("settings_invalid", extra={"error": str(exc)})
        sys.exit(1)

    try:
        context = build_context()
    except OpenError as exc:
        logger.critical("credential_store_open_failed", extra={"error": str(exc)})
        sys.exit(1)

    server = create_server(context)
    logger.info(
        "engine_starting",
        extra={"host": context.engine.host, "port": context.engine.port},
    )

    # uvicorn re-levanta o sinal capturado ao sair; SIGINT vira KeyboardInterrupt
    with contextlib.suppress(KeyboardInterrupt):
        server.run()

    logger.info("engine_stopped")


if __name__ == "__main__":
    main()
