"""Sessões WhatsApp: instâncias, registry e lock de leitores/escritor."""

from app.sessions.instance import WhatsAppInstance
from app.sessions.locks import ReadWriteLock
from app.sessions.registry import InstanceRegistry

__all__ = [
    "InstanceRegistry",
    "ReadWriteLock",
    "WhatsAppInstance",
]
