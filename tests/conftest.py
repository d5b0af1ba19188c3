"""Fixtures de prueba.

Cada prueba recibe una base SQLite en memoria con el esquema completo y
helpers para crear pensionados con pagos y detalles de nómina.
"""

import os

# Antes de importar consorcio: la CLI usa consorcio.db, que crea el engine al importarse
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from consorcio.models import Base, Pensionado, Pariss1, Pago


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", future=True)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = Session()
    yield session
    session.close()


def detalle(nombre, ingresos=0, egresos=0, codigo=None):
    return {"codigo": codigo, "nombre": nombre, "ingresos": ingresos, "egresos": egresos}


def crear_pensionado(session, pensionado_id, nombre="Pensionado Prueba", dependencia="V1-TESORERIA",
                     centro_costo="CC-01", pagos=None, **campos):
    """
    Crea un pensionado con sus pagos. Cada pago es un dict con las columnas
    de Pago (id obligatorio).
    """
    pensionado = Pensionado(
        id=pensionado_id,
        empleado=nombre,
        pnl_dependencia=dependencia,
        pnl_centro_costo=centro_costo,
        **campos,
    )
    session.add(pensionado)
    for datos in pagos or []:
        session.add(Pago(pensionado_id=pensionado_id, **datos))
    session.commit()
    return pensionado


def crear_pariss1(session, pensionado_id, **campos):
    session.add(Pariss1(id=pensionado_id, **campos))
    session.commit()


def pago(pago_id, periodo, fecha, detalles, **campos):
    return {
        "id": pago_id,
        "periodo_pago": periodo,
        "fecha_procesado": fecha,
        "detalles": detalles,
        **campos,
    }


@pytest.fixture
def pensionados_con_sentencias(session):
    """Tres pensionados: dos con sentencias y uno sin ninguna."""
    crear_pensionado(session, "P1", nombre="Ana Pérez", dependencia="V2-JURIDICA", pagos=[
        pago("pg1", "1 abr. 2025 a 15 abr. 2025", datetime(2025, 4, 20), [
            detalle("470-Costas Procesales", 50000),
            detalle("999-OtroConcepto", 10000),
        ]),
    ])
    crear_pensionado(session, "P2", nombre="Luis Gómez", dependencia="V3-TESORERIA", pagos=[
        pago("pg1", "1 ene. 2024 a 31 ene. 2024", datetime(2024, 2, 5), [
            detalle("785-Retro Mesada Adicional M1", 100000),
        ]),
        pago("pg2", "1 mar. 2024 a 31 mar. 2024", datetime(2024, 4, 3), [
            detalle("215-Procesos Y Sentencia Judiciales", 300000, 20000),
            detalle("Mesada", 2000000),
        ]),
    ])
    crear_pensionado(session, "P3", nombre="Sin Sentencias", pagos=[
        pago("pg1", "1 may. 2025 a 31 may. 2025", datetime(2025, 6, 1), [
            detalle("Mesada", 1500000),
            detalle("470-Costas Procesales", 5000, 5000),
        ]),
    ])
    return session
