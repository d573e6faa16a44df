"""Testes da renderização de QR no terminal."""

from __future__ import annotations

import io

from app.services import TerminalQrPrinter, render_qr


def test_render_qr_produces_square_block() -> None:
    rendered = render_qr("2@abc,def,ghi")
    lines = rendered.splitlines()

    assert len(lines) > 10
    assert len({len(line) for line in lines}) == 1
    assert "██" in rendered


def test_printer_writes_instance_header() -> None:
    stream = io.StringIO()

    TerminalQrPrinter(stream)("111", "2@abc")

    output = stream.getvalue()
    assert "111" in output
    assert "██" in output
