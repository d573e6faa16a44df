"""Serviços de aplicação.

Unidades reutilizáveis sem estado de sessão: allow-list de remetentes e
renderização de QR no terminal.
"""

from app.services.qr_terminal import TerminalQrPrinter, render_qr
from app.services.sender_filter import SenderFilter

__all__ = [
    "SenderFilter",
    "TerminalQrPrinter",
    "render_qr",
]
