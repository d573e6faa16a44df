"""Adapters da biblioteca WhatsApp.

O adapter neonize é importado sob demanda (app.bootstrap) para que o
core e os testes não carreguem o módulo nativo.
"""

from app.infra.whatsapp.qr_channel import QrChannel

__all__ = ["QrChannel"]
