"""Protocolo do store de credenciais (devices persistidos pela biblioteca)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.protocols.models import DeviceHandle


class CredentialStoreProtocol(ABC):
    """Contrato mínimo sobre a tabela de devices.

    O schema pertence à biblioteca; o adapter só lê e aloca handles.
    """

    @property
    @abstractmethod
    def path(self) -> str: ...

    @abstractmethod
    def list_devices(self) -> list[DeviceHandle]: ...

    @abstractmethod
    def get_device(self, instance_id: str) -> DeviceHandle | None: ...

    @abstractmethod
    def new_device(self) -> DeviceHandle: ...

    @abstractmethod
    def ping(self) -> bool: ...

    @abstractmethod
    def close(self) -> None: ...
