"""Renderização de QR codes de pareamento no terminal (QR_TERMINAL=true)."""

from __future__ import annotations

import sys
from typing import TextIO

import qrcode


def render_qr(code: str) -> str:
    """Retorna o QR em ASCII, pronto para stdout."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=1,
        border=2,
    )
    qr.add_data(code)
    qr.make(fit=True)

    lines: list[str] = []
    for row in qr.get_matrix():
        lines.append("".join("██" if cell else "  " for cell in row))
    return "\n".join(lines)


class TerminalQrPrinter:
    """Imprime cada código recebido com o id da instância."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def __call__(self, instance_id: str, code: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(f"\nQR code da instância {instance_id}:\n")
        stream.write(render_qr(code))
        stream.write("\n\n")
        stream.flush()
