"""Store de credenciais sobre o SQLite compartilhado com a biblioteca.

A biblioteca cria e migra o schema (tabela `whatsmeow_device`); este
adapter apenas lê JIDs persistidos e aloca handles para devices novos.

Cada operação abre sua própria conexão curta: a biblioteca escreve no
mesmo arquivo a partir de outras threads, então nenhuma transação é
compartilhada entre tasks.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import closing, contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from app.domain.jid import user_of
from app.protocols.credential_store import CredentialStoreProtocol
from app.protocols.models import DeviceHandle
from utils.errors import OpenError, StoreError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

DEVICE_TABLE = "whatsmeow_device"
CONNECT_TIMEOUT_SECONDS = 5.0


class SqliteCredentialStore(CredentialStoreProtocol):
    """Fachada fina sobre a tabela de devices."""

    def __init__(self, path: str) -> None:
        self._path = path
        self._closed = False

    @classmethod
    def open(cls, path: str) -> SqliteCredentialStore:
        """Abre (ou cria) o arquivo do store com foreign keys ligadas.

        Raises:
            OpenError: Se o arquivo não puder ser aberto.
        """
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            store = cls(path)
            with store._connection() as conn:
                conn.execute("SELECT 1").fetchone()
        except (OSError, sqlite3.Error) as exc:
            raise OpenError(f"Falha ao abrir store {path}: {exc}") from exc

        logger.info("credential_store_opened", extra={"store_path": path})
        return store

    @property
    def path(self) -> str:
        return self._path

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        if self._closed:
            raise StoreError("Store de credenciais fechado")
        with closing(sqlite3.connect(self._path, timeout=CONNECT_TIMEOUT_SECONDS)) as conn:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn

    @staticmethod
    def _has_device_table(conn: sqlite3.Connection) -> bool:
        row = conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (DEVICE_TABLE,),
        ).fetchone()
        return row is not None

    def _query_jids(self, where: str = "", params: tuple[str, ...] = ()) -> list[str]:
        try:
            with self._connection() as conn:
                # Store recém-criado: a biblioteca ainda não migrou o schema
                if not self._has_device_table(conn):
                    return []
                rows = conn.execute(
                    f"SELECT jid FROM {DEVICE_TABLE} {where} ORDER BY jid",  # noqa: S608
                    params,
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Falha ao ler devices: {exc}") from exc
        return [row[0] for row in rows if row[0]]

    def list_devices(self) -> list[DeviceHandle]:
        """Todos os devices persistidos."""
        return [DeviceHandle(jid=jid) for jid in self._query_jids()]

    def get_device(self, instance_id: str) -> DeviceHandle | None:
        """Device cujo user id é `instance_id`, ou None."""
        escaped = instance_id.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        candidates = self._query_jids("WHERE jid LIKE ? ESCAPE '\\'", (f"{escaped}%",))
        for jid in candidates:
            if user_of(jid) == instance_id:
                return DeviceHandle(jid=jid)
        return None

    def new_device(self) -> DeviceHandle:
        """Handle não persistido; a biblioteca preenche durante o pareamento."""
        return DeviceHandle(jid=None, uuid=uuid.uuid4().hex)

    def ping(self) -> bool:
        """Verifica se o arquivo continua acessível."""
        try:
            with self._connection() as conn:
                conn.execute("SELECT 1").fetchone()
        except (StoreError, sqlite3.Error):
            return False
        return True

    def close(self) -> None:
        """Marca o store como fechado (conexões são por operação)."""
        if not self._closed:
            self._closed = True
            logger.info("credential_store_closed", extra={"store_path": self._path})
