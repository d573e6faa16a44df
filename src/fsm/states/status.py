"""
Estados de conexão de uma instância WhatsApp.

DISCONNECTED → (connect) → CONNECTING → (Connected) → CONNECTED
→ (LoggedOut) → DISCONNECTED. Sucessivos QR codes não mudam o estado.
"""

from enum import StrEnum


class InstanceStatus(StrEnum):
    """
    Status observável de uma instância.

    - CONNECTING: cliente criado; pareamento por QR ou retomada em curso
    - CONNECTED: sessão autenticada; QR sempre vazio
    - DISCONNECTED: deslogada ou encerrada; objeto não volta a conectar
    """

    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"

    def __str__(self) -> str:
        return self.value


# Uma instância DISCONNECTED é substituída por outra em novo connect
TERMINAL_STATUSES: frozenset[InstanceStatus] = frozenset({InstanceStatus.DISCONNECTED})

DEFAULT_INITIAL_STATUS: InstanceStatus = InstanceStatus.CONNECTING


def is_terminal(status: InstanceStatus) -> bool:
    """Verifica se o status é terminal para o objeto da instância."""
    return status in TERMINAL_STATUSES


def is_valid_status(value: str) -> bool:
    """Verifica se a string corresponde a um status conhecido."""
    try:
        InstanceStatus(value)
    except ValueError:
        return False
    return True
