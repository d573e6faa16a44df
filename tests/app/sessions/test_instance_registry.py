"""Testes do InstanceRegistry com cliente e store fakes.

Testa:
    - Pareamento a frio (QR → CONNECTED)
    - Filtro de mensagens inbound
    - Conflitos de connect
    - Logout e reconexão com device persistido
    - Envio, disconnect explícito e shutdown silencioso
"""

from __future__ import annotations

import pytest

from app.domain.events import Connected
from app.services import SenderFilter
from app.sessions import InstanceRegistry
from fsm import InstanceStatus
from tests.fakes.fake_messaging import (
    FakeClientFactory,
    FakeCredentialStore,
    RecordingSink,
    wait_until,
)
from utils.errors import (
    AlreadyConnected,
    AlreadyConnecting,
    ConnectError,
    InstanceNotFound,
    InvalidRecipient,
    NotConnected,
    SendError,
)

# ──────────────────────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def store() -> FakeCredentialStore:
    return FakeCredentialStore()


@pytest.fixture
def factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def registry(
    store: FakeCredentialStore,
    factory: FakeClientFactory,
    sink: RecordingSink,
) -> InstanceRegistry:
    return InstanceRegistry(store, factory, sink, SenderFilter(["100"]))


def _connected(registry: InstanceRegistry, factory: FakeClientFactory, instance_id: str = "111"):
    registry.connect(instance_id)
    client = factory.last(instance_id)
    client.pair()
    return client


def _qr_reader(registry: InstanceRegistry, instance_id: str):
    instance = registry._instances[instance_id]
    assert instance.qr_reader is not None
    return instance.qr_reader


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Pareamento
# ──────────────────────────────────────────────────────────────────────────────


class TestColdPairing:
    """Pareamento com store vazio."""

    def test_connect_registers_connecting_entry(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
    ) -> None:
        """Entrada visível em list() com status CONNECTING e device novo."""
        registry.connect("111")

        assert registry.list() == {"111": {"id": "111", "status": "CONNECTING", "qr": ""}}
        client = factory.last("111")
        assert client.device.is_new
        assert client.connect_calls == 1
        assert len(client.handlers) == 1

    def test_qr_code_updates_entry_and_emits_envelope(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        """Cada código gera um envelope qr e sobrescreve o qr atual."""
        registry.connect("111")
        client = factory.last("111")

        client.emit_qr("abc")
        assert wait_until(lambda: len(sink.envelopes) == 1)
        client.emit_qr("def")
        assert wait_until(lambda: len(sink.envelopes) == 2)

        assert sink.payloads() == [
            {"instanceId": "111", "event": "qr", "data": {"code": "abc"}},
            {"instanceId": "111", "event": "qr", "data": {"code": "def"}},
        ]
        assert registry.get("111")["qr"] == "def"
        assert registry.get("111")["status"] == "CONNECTING"

    def test_connected_clears_qr_and_emits_status(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        """Connected move para CONNECTED com qr vazio."""
        registry.connect("111")
        client = factory.last("111")
        client.emit_qr("abc")
        assert wait_until(lambda: len(sink.envelopes) == 1)

        client.pair()

        assert registry.list() == {"111": {"id": "111", "status": "CONNECTED", "qr": ""}}
        assert sink.payloads()[-1] == {
            "instanceId": "111",
            "event": "status",
            "data": {"status": "CONNECTED"},
        }
        assert [envelope.event.value for envelope in sink.envelopes] == ["qr", "status"]

    def test_qr_after_connected_is_ignored(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        """Com a instância CONNECTED, qr permanece vazio."""
        registry.connect("111")
        client = factory.last("111")
        client.emit(Connected())
        client.emit_qr("late")
        client.qr_channel.close()
        reader = _qr_reader(registry, "111")
        reader.join(timeout=2.0)

        assert registry.get("111")["qr"] == ""
        assert [envelope.event.value for envelope in sink.envelopes] == ["status"]

    def test_connected_ends_qr_reader_for_paired_device(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        store: FakeCredentialStore,
    ) -> None:
        """Device já pareado: a biblioteca nunca fecha o canal de QR sozinha."""
        store.persist("111:7@s.whatsapp.net")
        registry.connect("111")
        client = factory.last("111")

        client.emit(Connected())

        assert wait_until(lambda: not _qr_reader(registry, "111").is_alive())
        assert client.qr_channel.closed is True

    def test_repeated_connected_emits_one_envelope_each(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        """Reconexão interna da biblioteca reporta CONNECTED de novo."""
        client = _connected(registry, factory)
        client.emit(Connected())

        statuses = [e.data["status"] for e in sink.envelopes if e.event.value == "status"]
        assert statuses == ["CONNECTED", "CONNECTED"]


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Mensagens inbound
# ──────────────────────────────────────────────────────────────────────────────


class TestInboundFilter:
    """Encaminhamento condicionado à allow-list."""

    def test_only_allowed_senders_are_forwarded(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        client = _connected(registry, factory)
        before = len(sink.envelopes)

        client.receive("200")
        assert len(sink.envelopes) == before

        client.receive("100", text="olá")
        messages = [e.to_dict() for e in sink.envelopes if e.event.value == "message"]
        assert len(messages) == 1
        data = messages[0]["data"]
        assert data["key"]["remoteJid"].split("@")[0].endswith("100")
        assert data["key"]["fromMe"] is False
        assert data["key"]["id"] == "ABC123"
        assert data["message"] == {"conversation": "olá"}
        assert data["pushName"] == "Fulano"
        assert data["messageTimestamp"] == 1_700_000_000

    def test_from_me_is_dropped_even_when_allowed(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        client = _connected(registry, factory)
        client.receive("100", is_from_me=True)

        assert all(e.event.value != "message" for e in sink.envelopes)

    def test_handler_failure_loses_only_that_event(
        self,
        store: FakeCredentialStore,
        factory: FakeClientFactory,
    ) -> None:
        """Exceção no despacho não escapa para a biblioteca."""

        class FlakySink(RecordingSink):
            def __init__(self) -> None:
                super().__init__()
                self.failures = 1

            def dispatch(self, envelope) -> None:
                if envelope.event.value == "message" and self.failures:
                    self.failures -= 1
                    raise RuntimeError("sink down")
                super().dispatch(envelope)

        sink = FlakySink()
        registry = InstanceRegistry(store, factory, sink, SenderFilter(["100"]))
        client = _connected(registry, factory)

        client.receive("100", message_id="first")
        client.receive("100", message_id="second")

        ids = [e.data["key"]["id"] for e in sink.envelopes if e.event.value == "message"]
        assert ids == ["second"]


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Conflitos e reconexão
# ──────────────────────────────────────────────────────────────────────────────


class TestConnectConflicts:
    """Regras de connect sobre entradas existentes."""

    def test_connect_while_connected_is_rejected(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
    ) -> None:
        _connected(registry, factory)
        snapshot = registry.list()

        with pytest.raises(AlreadyConnected):
            registry.connect("111")

        assert len(factory.created) == 1
        assert registry.list() == snapshot

    def test_connect_while_connecting_is_rejected(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
    ) -> None:
        registry.connect("111")

        with pytest.raises(AlreadyConnecting):
            registry.connect("111")

        assert len(factory.created) == 1
        assert len(factory.last("111").handlers) == 1

    def test_logout_then_reconnect_reuses_persisted_device(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        store: FakeCredentialStore,
        sink: RecordingSink,
    ) -> None:
        """Após LoggedOut o connect é aceito e usa o device do store."""
        first = _connected(registry, factory)
        store.persist("111:7@s.whatsapp.net")

        first.log_out()

        assert registry.get("111")["status"] == "DISCONNECTED"
        assert sink.payloads()[-1]["data"] == {"status": "DISCONNECTED"}

        registry.connect("111")

        second = factory.last("111")
        assert second is not first
        assert second.device.jid == "111:7@s.whatsapp.net"
        assert first.disconnect_calls == 1
        assert registry.get("111")["status"] == "CONNECTING"
        assert len(registry) == 1

    def test_late_events_from_replaced_client_are_ignored(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        first = _connected(registry, factory)
        first.log_out()
        registry.connect("111")
        before = len(sink.envelopes)

        first.emit(Connected())

        assert len(sink.envelopes) == before
        assert registry.get("111")["status"] == "CONNECTING"

    def test_connect_failure_leaves_entry_reconnectable(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        factory.connect_error = RuntimeError("socket closed")

        with pytest.raises(ConnectError):
            registry.connect("111")

        assert registry.get("111")["status"] == "DISCONNECTED"
        assert sink.envelopes == []

        factory.connect_error = None
        registry.connect("111")
        assert registry.get("111")["status"] == "CONNECTING"

    def test_background_connect_failure_allows_reconnect(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        """Cliente que morre ainda em CONNECTING não prende o id."""
        registry.connect("111")
        first = factory.last("111")

        first.crash()

        assert registry.get("111")["status"] == "DISCONNECTED"
        assert sink.payloads()[-1]["data"] == {"status": "DISCONNECTED"}
        assert wait_until(lambda: not _qr_reader(registry, "111").is_alive())

        registry.connect("111")

        assert factory.last("111") is not first
        assert registry.get("111")["status"] == "CONNECTING"


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Envio
# ──────────────────────────────────────────────────────────────────────────────


class TestSend:
    """Envio de texto pelo registry."""

    def test_unknown_instance_is_not_connected(self, registry: InstanceRegistry) -> None:
        with pytest.raises(NotConnected):
            registry.send("999", "5551234@s.whatsapp.net", "hi")

    def test_connecting_instance_is_not_connected(
        self,
        registry: InstanceRegistry,
    ) -> None:
        registry.connect("111")

        with pytest.raises(NotConnected):
            registry.send("111", "5551234@s.whatsapp.net", "hi")

    def test_send_delegates_to_client(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
    ) -> None:
        client = _connected(registry, factory)

        receipt = registry.send("111", "5551234@s.whatsapp.net", "hi")

        assert receipt.message_id == "msg-1"
        recipient, text = client.sent[0]
        assert str(recipient) == "5551234@s.whatsapp.net"
        assert text == "hi"

    def test_empty_text_is_forwarded_to_library(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
    ) -> None:
        client = _connected(registry, factory)

        registry.send("111", "5551234", "")

        assert client.sent[0][1] == ""

    def test_malformed_recipient(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
    ) -> None:
        client = _connected(registry, factory)

        with pytest.raises(InvalidRecipient):
            registry.send("111", "not a jid", "hi")
        assert client.sent == []

    def test_library_failure_propagates_send_error(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
    ) -> None:
        client = _connected(registry, factory)
        client.send_error = SendError("server returned error 479")

        with pytest.raises(SendError, match="479"):
            registry.send("111", "5551234@s.whatsapp.net", "hi")


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Disconnect e shutdown
# ──────────────────────────────────────────────────────────────────────────────


class TestDisconnect:
    """Disconnect explícito e shutdown do processo."""

    def test_disconnect_emits_status_and_removes_entry(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        client = _connected(registry, factory)

        registry.disconnect("111")

        assert "111" not in registry
        assert client.disconnect_calls == 1
        assert sink.released == ["111"]
        assert sink.payloads()[-1] == {
            "instanceId": "111",
            "event": "status",
            "data": {"status": "DISCONNECTED"},
        }

    def test_messages_after_disconnect_are_dropped(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        client = _connected(registry, factory)
        registry.disconnect("111")
        before = len(sink.envelopes)

        client.receive("100")

        assert len(sink.envelopes) == before

    def test_disconnect_unknown_instance(self, registry: InstanceRegistry) -> None:
        with pytest.raises(InstanceNotFound):
            registry.disconnect("999")

    def test_disconnect_all_is_silent(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
        sink: RecordingSink,
    ) -> None:
        """Shutdown move tudo para DISCONNECTED sem envelopes."""
        first = _connected(registry, factory, "111")
        second = _connected(registry, factory, "222")
        before = len(sink.envelopes)

        count = registry.disconnect_all()

        assert count == 2
        assert first.disconnect_calls == 1
        assert second.disconnect_calls == 1
        assert {entry["status"] for entry in registry.list().values()} == {"DISCONNECTED"}

        first.log_out()
        first.receive("100")
        second.emit(Connected())
        assert len(sink.envelopes) == before

    def test_status_machine_invariant_holds(
        self,
        registry: InstanceRegistry,
        factory: FakeClientFactory,
    ) -> None:
        """CONNECTED implica qr vazio em todas as entradas."""
        _connected(registry, factory, "111")
        registry.connect("222")
        factory.last("222").emit_qr("pending")
        wait_until(lambda: registry.get("222")["qr"] == "pending")

        for entry in registry.list().values():
            if entry["status"] == InstanceStatus.CONNECTED.value:
                assert entry["qr"] == ""
        assert registry.get("222")["qr"] == "pending"
