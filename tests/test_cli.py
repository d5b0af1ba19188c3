"""Pruebas de la CLI contra la base configurada en DATABASE_URL (SQLite en memoria)."""

from datetime import datetime

import pytest

from consorcio import cli
from consorcio.db import get_session, crear_tablas
from consorcio.models import Base

from tests.conftest import crear_pensionado, detalle, pago


@pytest.fixture
def base_cli():
    from consorcio.db import engine

    crear_tablas()
    session = get_session()
    crear_pensionado(session, "P1", nombre="Ana Pérez", pagos=[
        pago("pg1", "1 abr. 2025 a 15 abr. 2025", datetime(2025, 4, 20), [
            detalle("470-Costas Procesales", 50000),
        ], valor_neto="50.000,00"),
    ])
    session.close()
    yield
    Base.metadata.drop_all(engine)


def test_analizar_listar_y_marcar(base_cli, capsys):
    assert cli.main(["analizar-sentencias", "--lote", "1"]) == 0
    salida = capsys.readouterr().out
    assert "1/1 pensionados procesados" in salida
    assert "1 consolidados" in salida

    assert cli.main(["listar-sentencias", "--categoria", "costas"]) == 0
    salida = capsys.readouterr().out
    assert "Ana Pérez" in salida
    assert "$50.000,00" in salida

    assert cli.main(["marcar-analizado", "P1"]) == 0
    assert cli.main(["listar-sentencias", "--pendiente"]) == 0
    assert "No hay consolidados" in capsys.readouterr().out


def test_pagos(base_cli, capsys):
    assert cli.main(["pagos", "P1", "--desde", "2025-04", "--hasta", "2025-04"]) == 0
    salida = capsys.readouterr().out
    assert "1 abr. 2025 a 15 abr. 2025" in salida
    assert "Neto=$50.000,00" in salida


def test_errores_no_fatales(base_cli, capsys):
    assert cli.main(["pagos", "NO-EXISTE"]) == 1
    assert "No se encontró" in capsys.readouterr().out
    assert cli.main(["marcar-analizado", "NO-EXISTE"]) == 1


def test_exportar(base_cli, tmp_path):
    destino = tmp_path / "salida" / "sentencias.xlsx"
    assert cli.main(["analizar-sentencias"]) == 0
    assert cli.main(["exportar-sentencias", "--out", str(destino)]) == 0
    assert destino.stat().st_size > 0


def test_sin_comando():
    assert cli.main([]) == 1
