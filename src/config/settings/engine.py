"""Settings do processo engine (API de controle e supervisor)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from config.settings.base.core import parse_bool, parse_csv

DEFAULT_PORT = 3002
DEFAULT_STORE_PATH = "session.db"


@dataclass(frozen=True)
class EngineSettings:
    """Configurações da API de controle e do ciclo de vida do processo.

    Attributes:
        host: Interface de bind da API
        port: Porta da API de controle
        store_path: Arquivo SQLite do store de credenciais
        shutdown_grace_seconds: Limite do shutdown gracioso
        send_timeout_seconds: Timeout de cada envio outbound
        auto_restore: Reconecta devices persistidos no boot
        qr_terminal: Renderiza QR codes no stdout
        cors_origins: Origens liberadas no CORS
    """

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    store_path: str = DEFAULT_STORE_PATH
    shutdown_grace_seconds: float = 10.0
    send_timeout_seconds: float = 30.0
    auto_restore: bool = False
    qr_terminal: bool = False
    cors_origins: tuple[str, ...] = ("*",)

    def validate(self) -> list[str]:
        """Valida configurações do engine.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not 1 <= self.port <= 65535:
            errors.append(f"PORT fora do intervalo: {self.port}")

        if not self.store_path:
            errors.append("STORE_PATH não pode ser vazio")

        if self.shutdown_grace_seconds <= 0:
            errors.append("SHUTDOWN_GRACE_SECONDS deve ser > 0")

        if self.send_timeout_seconds <= 0:
            errors.append("SEND_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _parse_port(raw: str | None) -> int:
    try:
        return int(raw) if raw else DEFAULT_PORT
    except ValueError:
        return -1


def _load_engine_from_env() -> EngineSettings:
    """Carrega EngineSettings de variáveis de ambiente."""
    return EngineSettings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=_parse_port(os.getenv("PORT")),
        store_path=os.getenv("STORE_PATH", DEFAULT_STORE_PATH),
        shutdown_grace_seconds=float(os.getenv("SHUTDOWN_GRACE_SECONDS", "10")),
        send_timeout_seconds=float(os.getenv("SEND_TIMEOUT_SECONDS", "30")),
        auto_restore=parse_bool(os.getenv("AUTO_RESTORE")),
        qr_terminal=parse_bool(os.getenv("QR_TERMINAL")),
        cors_origins=parse_csv(os.getenv("CORS_ORIGINS", "*")) or ("*",),
    )


@lru_cache(maxsize=1)
def get_engine_settings() -> EngineSettings:
    """Retorna instância cacheada de EngineSettings."""
    return _load_engine_from_env()
