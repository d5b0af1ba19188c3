# Consulta de pensionados y de su historial de pagos

from datetime import date
import logging

from sqlalchemy import select, func, case, String
from sqlalchemy.exc import SQLAlchemyError

from .models import Pensionado, Pariss1, Pago
from .parsers import MESES_ES, parse_moneda, parse_periodo_pago, limpiar_dependencia

logger = logging.getLogger(__name__)


def opciones_filtro_pensionados(session) -> dict:
    """
    Centros de costo y dependencias distintos para los filtros de búsqueda.

    Las dependencias se muestran sin el prefijo "V<n>-"; el mapa guarda el
    primer valor original encontrado para cada nombre limpio.
    """
    try:
        centros = session.scalars(
            select(Pensionado.pnl_centro_costo)
            .where(Pensionado.pnl_centro_costo.is_not(None), Pensionado.pnl_centro_costo != "")
            .distinct()
        ).all()
        dependencias = session.scalars(
            select(Pensionado.pnl_dependencia)
            .where(Pensionado.pnl_dependencia.is_not(None), Pensionado.pnl_dependencia != "")
            .distinct()
            .order_by(Pensionado.pnl_dependencia)
        ).all()
    except SQLAlchemyError as e:
        logger.error(f"Error obteniendo opciones de filtro: {e}")
        raise

    mapa = {}
    for original in dependencias:
        mapa.setdefault(limpiar_dependencia(original), original)
    return {
        "centros_costo": sorted(centros),
        "dependencias": sorted(mapa),
        "mapa_dependencias": mapa,
    }


def buscar_pensionado(session, documento: str, centro_costo: str = None, dependencia: str = None) -> dict:
    """
    Busca un pensionado por documento y le agrega los datos de pariss1.

    Args:
        session: Sesión de SQLAlchemy
        documento: Número de documento (id del pensionado)
        centro_costo: Si se indica, el pensionado debe pertenecer a él
        dependencia: Nombre limpio de la dependencia a verificar

    Returns:
        Diccionario con los campos del pensionado y de pariss1

    Raises:
        ValueError: documento vacío, pensionado inexistente o filtros que no coinciden
    """
    documento = (documento or "").strip()
    if not documento:
        raise ValueError("Por favor, ingrese un número de documento.")

    pensionado = session.get(Pensionado, documento)
    if pensionado is None:
        raise ValueError("No se encontró ningún pensionado con el documento proporcionado.")

    if centro_costo and pensionado.pnl_centro_costo != centro_costo:
        raise ValueError(f"El pensionado con documento {documento} no pertenece al Centro de Costo '{centro_costo}'.")
    if dependencia and limpiar_dependencia(pensionado.pnl_dependencia) != dependencia:
        raise ValueError(f"El pensionado con documento {documento} no pertenece a la Dependencia '{dependencia}'.")

    datos = pensionado.a_dict()
    pariss1 = session.get(Pariss1, documento)
    if pariss1 is not None:
        datos.update(pariss1.a_dict())
    return datos


def buscar_por_nombre(session, texto: str, limite: int = 20) -> list[tuple[str, str]]:
    """
    Sugerencias de pensionados cuyo nombre o documento contiene `texto`.
    Primero los que empiezan por el texto, luego alfabético.
    """
    texto = (texto or "").strip().lower()
    if not texto:
        return []
    nombre = func.lower(func.coalesce(Pensionado.empleado, ""), type_=String)
    # autoescape: % y _ escritos por el usuario se buscan literalmente
    relevancia = case((nombre.startswith(texto, autoescape=True), 0), else_=1)
    filas = session.execute(
        select(Pensionado.id, Pensionado.empleado)
        .where(nombre.contains(texto, autoescape=True) | Pensionado.id.contains(texto, autoescape=True))
        .order_by(relevancia, nombre)
        .limit(limite)
    ).all()
    return [(f.id, f.empleado or "") for f in filas]


def periodo_de_pago(pago) -> tuple[int | None, int | None]:
    """
    (año, mes) al que corresponde un pago.

    El texto del periodo manda; la fecha de procesado puede ir atrasada
    respecto al periodo real. Si no se puede leer, se usa la fecha de
    procesado y por último el campo año (sin mes).
    """
    periodo = parse_periodo_pago(pago.periodo_pago)
    if periodo is not None:
        return periodo.anio, periodo.mes
    if pago.fecha_procesado is not None:
        return pago.fecha_procesado.year, pago.fecha_procesado.month
    if pago.anio and str(pago.anio).isdigit():
        return int(pago.anio), None
    return None, None


def listar_pagos(session, pensionado_id: str, desde: date = None, hasta: date = None) -> list:
    """Pagos del pensionado, el más reciente primero, opcionalmente dentro de [desde, hasta]."""
    try:
        pagos = session.scalars(
            select(Pago)
            .where(Pago.pensionado_id == pensionado_id)
            .order_by(Pago.fecha_procesado.desc())
        ).all()
    except SQLAlchemyError as e:
        logger.error(f"Error obteniendo pagos del pensionado {pensionado_id}: {e}")
        raise

    if desde is None and hasta is None:
        return list(pagos)

    filtrados = []
    for pago in pagos:
        anio, mes = periodo_de_pago(pago)
        if anio is None:
            continue
        inicio = date(anio, mes or 1, 1)
        if desde and inicio < date(desde.year, desde.month, 1):
            continue
        if hasta and inicio > hasta:
            continue
        filtrados.append(pago)
    return filtrados


def anios_disponibles(pagos) -> list[int]:
    anios = {periodo_de_pago(p)[0] for p in pagos}
    return sorted((a for a in anios if a is not None), reverse=True)


def meses_disponibles(pagos, anio: int) -> list[tuple[int, str]]:
    meses = set()
    for pago in pagos:
        a, m = periodo_de_pago(pago)
        if a == anio and m is not None:
            meses.add(m)
    return [(m, MESES_ES[m]) for m in sorted(meses)]


def seleccionar_pago(pagos, anio: int = None, mes: int = None):
    """Pago del año/mes indicados; sin filtros, el más reciente."""
    if not pagos:
        return None
    if anio is None and mes is None:
        return pagos[0]
    for pago in pagos:
        a, m = periodo_de_pago(pago)
        if a == anio and (mes is None or m == mes):
            return pago
    return None


def totales_pago(pago) -> dict:
    detalles = pago.detalles or []
    ingresos = sum(parse_moneda(d.get("ingresos")) for d in detalles if d.get("nombre") != "Totales:")
    egresos = sum(parse_moneda(d.get("egresos")) for d in detalles if d.get("nombre") != "Totales:")
    return {
        "ingresos": ingresos,
        "egresos": egresos,
        "neto": parse_moneda(pago.valor_neto),
    }
