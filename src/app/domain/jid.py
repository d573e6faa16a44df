"""Parsing de JIDs (identificadores de destinatário do WhatsApp).

Formatos aceitos:
    5561999990000                      → 5561999990000@s.whatsapp.net
    5561999990000@s.whatsapp.net
    5561999990000:12@s.whatsapp.net    (device)
    120363000000000000@g.us            (grupo)
"""

from __future__ import annotations

from dataclasses import dataclass

from config.settings import DEFAULT_USER_SERVER
from utils.errors import InvalidRecipient

KNOWN_SERVERS = frozenset(
    {
        DEFAULT_USER_SERVER,
        "g.us",
        "lid",
        "broadcast",
        "newsletter",
        "c.us",
    }
)


@dataclass(frozen=True, slots=True)
class Jid:
    """JID decomposto."""

    user: str
    server: str = DEFAULT_USER_SERVER
    device: int = 0
    agent: int = 0

    def __str__(self) -> str:
        user = self.user
        if self.agent:
            user = f"{user}.{self.agent}"
        if self.device:
            user = f"{user}:{self.device}"
        return f"{user}@{self.server}"

    @property
    def bare(self) -> str:
        """JID sem agent/device (ex: 5561999990000@s.whatsapp.net)."""
        return f"{self.user}@{self.server}"


def _split_user(raw_user: str, original: str) -> tuple[str, int, int]:
    user, _, device_part = raw_user.partition(":")
    user, _, agent_part = user.partition(".")
    try:
        device = int(device_part) if device_part else 0
        agent = int(agent_part) if agent_part else 0
    except ValueError as exc:
        raise InvalidRecipient(f"JID inválido: {original!r}") from exc
    if not user:
        raise InvalidRecipient(f"JID sem usuário: {original!r}")
    return user, device, agent


def parse_jid(value: str) -> Jid:
    """Interpreta `value` como JID.

    Raises:
        InvalidRecipient: Se o valor não for um JID reconhecível.
    """
    if not isinstance(value, str) or not value or value != value.strip() or " " in value:
        raise InvalidRecipient(f"JID inválido: {value!r}")

    if "@" not in value:
        if not value.isdigit():
            raise InvalidRecipient(f"JID inválido: {value!r}")
        return Jid(user=value)

    raw_user, _, server = value.partition("@")
    if not server or "@" in server:
        raise InvalidRecipient(f"JID inválido: {value!r}")
    if server not in KNOWN_SERVERS:
        raise InvalidRecipient(f"Servidor desconhecido no JID: {value!r}")

    user, device, agent = _split_user(raw_user, value)
    return Jid(user=user, server=server, device=device, agent=agent)


def user_of(jid: str) -> str:
    """Extrai a parte "user" de um JID armazenado (sem validar o servidor)."""
    raw_user = jid.partition("@")[0]
    return raw_user.partition(":")[0].partition(".")[0]
