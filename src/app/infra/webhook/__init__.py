"""Entrega de envelopes ao webhook do backend."""

from app.infra.webhook.dispatcher import WebhookDispatcher

__all__ = ["WebhookDispatcher"]
