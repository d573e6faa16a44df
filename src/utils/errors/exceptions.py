"""Exceções de domínio do engine multi-instância.

Cada exceção carrega um `code` estável (devolvido no campo `error` da API)
e o status HTTP correspondente. A camada api traduz; o core só levanta.
"""

from __future__ import annotations


class EngineError(RuntimeError):
    """Base para falhas conhecidas do engine."""

    code: str = "EngineError"
    http_status: int = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


# ──────────────────────────────────────────────────────────────────────────────
# Erros de cliente (400)
# ──────────────────────────────────────────────────────────────────────────────


class ClientError(EngineError):
    """Falha causada pela requisição do chamador."""

    http_status = 400


class AlreadyConnected(ClientError):
    """Instância já está CONNECTED."""

    code = "AlreadyConnected"


class AlreadyConnecting(ClientError):
    """Instância está em pareamento; segundo connect duplicaria handlers."""

    code = "AlreadyConnecting"


class InvalidRecipient(ClientError):
    """Destinatário não pôde ser interpretado como JID."""

    code = "InvalidRecipient"


class NotConnected(ClientError):
    """Instância inexistente ou fora do estado CONNECTED."""

    code = "NotConnected"


class PayloadError(ClientError):
    """Corpo da requisição ausente, malformado ou com tipos errados."""

    code = "PayloadError"


class InstanceNotFound(EngineError):
    """Nenhuma instância registrada com o id informado."""

    code = "InstanceNotFound"
    http_status = 404


# ──────────────────────────────────────────────────────────────────────────────
# Erros de infraestrutura (500)
# ──────────────────────────────────────────────────────────────────────────────


class InfrastructureError(EngineError):
    """Base para falhas de store, biblioteca ou rede."""

    http_status = 500


class OpenError(InfrastructureError):
    """Store de credenciais não pôde ser aberto."""

    code = "OpenError"


class StoreError(InfrastructureError):
    """Falha de I/O no store de credenciais."""

    code = "StoreError"


class ConnectError(InfrastructureError):
    """Biblioteca recusou ou falhou ao iniciar a conexão."""

    code = "ConnectError"


class SendError(InfrastructureError):
    """Falha de transporte ao enviar mensagem."""

    code = "SendError"


class WebhookError(InfrastructureError):
    """Falha ao entregar envelope no webhook (sempre logada e descartada)."""

    code = "WebhookError"
