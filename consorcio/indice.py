# Índice de sentencias: recorrido completo de pagos y consolidado por pensionado

from dataclasses import dataclass
from datetime import datetime
import logging
import re
from urllib.parse import quote

from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError

from . import settings
from .models import Pensionado, Pago, SentenciaIndex, UsuarioSentencia
from .parsers import limpiar_dependencia
from .sentencias import (
    ResumenSentencias,
    SentenciaDetalle,
    clasificar_pago,
    construir_resumen,
)

logger = logging.getLogger(__name__)


@dataclass
class ResultadoAnalisis:
    pensionados: int = 0
    pagos: int = 0
    coincidencias: int = 0
    resumenes: int = 0


def id_indice(pensionado_id: str, pago_id: str, concepto: str) -> str:
    """
    Id determinístico de una coincidencia, para que volver a analizar
    sobrescriba en lugar de duplicar.

    Las partes se separan con "|" y los ids se codifican con quote(), que
    nunca deja un "|" literal: ("A_B", "C") y ("A", "B_C") no chocan.
    """
    concepto_limpio = re.sub(r"[^A-Za-z0-9]", "_", concepto)
    return f"{quote(str(pensionado_id), safe='')}|{quote(str(pago_id), safe='')}|{concepto_limpio}"


def _resumen_a_fila(resumen: ResumenSentencias) -> UsuarioSentencia:
    return UsuarioSentencia(
        id=resumen.pensionado_id,
        nombre=resumen.nombre,
        dependencia=resumen.dependencia,
        centro_costo=resumen.centro_costo,
        sentencias=[d.a_dict() for d in resumen.sentencias],
        total_costas_proc=resumen.total_costas_proc,
        total_retro_mesada=resumen.total_retro_mesada,
        total_procesos=resumen.total_procesos,
        total_general=resumen.total_general,
        ultima_fecha_pago=resumen.ultima_fecha_pago,
        is_analyzed=resumen.is_analyzed,
        fecha_analisis=resumen.fecha_analisis,
        fecha_actualizacion=datetime.now(),
    )


def _fila_a_resumen(fila: UsuarioSentencia) -> ResumenSentencias:
    return ResumenSentencias(
        pensionado_id=fila.id,
        nombre=fila.nombre or "",
        dependencia=fila.dependencia or "",
        centro_costo=fila.centro_costo or "",
        sentencias=[SentenciaDetalle.desde_dict(d) for d in (fila.sentencias or [])],
        total_costas_proc=fila.total_costas_proc or 0.0,
        total_retro_mesada=fila.total_retro_mesada or 0.0,
        total_procesos=fila.total_procesos or 0.0,
        total_general=fila.total_general or 0.0,
        ultima_fecha_pago=fila.ultima_fecha_pago,
        is_analyzed=bool(fila.is_analyzed),
        fecha_analisis=fila.fecha_analisis,
    )


def _indexar_pensionado(session, pensionado: Pensionado, resultado: ResultadoAnalisis,
                        preservar_analisis: bool) -> None:
    detalles = []
    # Dos detalles del mismo pago con el mismo concepto comparten id: se suman
    entradas = {}
    for pago in pensionado.pagos:
        resultado.pagos += 1
        for detalle in clasificar_pago(pago):
            id_entrada = id_indice(pensionado.id, pago.id, detalle.concepto)
            detalles.append(detalle)
            if id_entrada in entradas:
                entradas[id_entrada].valor += detalle.valor
                continue
            entradas[id_entrada] = SentenciaIndex(
                id=id_entrada,
                pensionado_id=pensionado.id,
                pago_id=pago.id,
                concepto=detalle.concepto,
                valor=detalle.valor,
                fecha_pago=detalle.fecha_pago,
                periodo_pago=detalle.periodo_pago,
                nombre=pensionado.empleado,
                dependencia=limpiar_dependencia(pensionado.pnl_dependencia),
                centro_costo=pensionado.pnl_centro_costo,
                fecha_indexado=datetime.now(),
            )

    for entrada in entradas.values():
        session.merge(entrada)

    resumen = construir_resumen(pensionado, detalles)
    if resumen is None:
        return

    previo = session.get(UsuarioSentencia, pensionado.id)
    if previo is not None and previo.is_analyzed:
        if preservar_analisis:
            resumen.is_analyzed = True
            resumen.fecha_analisis = previo.fecha_analisis
        else:
            logger.warning(f"Pensionado {pensionado.id}: el recálculo reinicia la marca de analizado "
                           f"(fecha_analisis={previo.fecha_analisis})")

    session.merge(_resumen_a_fila(resumen))
    resultado.coincidencias += len(detalles)
    resultado.resumenes += 1


def analizar_sentencias(session, progreso=None, lote: int = None,
                        preservar_analisis: bool = None) -> ResultadoAnalisis:
    """
    Recorre todos los pagos de todos los pensionados y reconstruye el índice
    de sentencias y los consolidados por pensionado.

    Args:
        session: Sesión de SQLAlchemy
        progreso: Callable(procesados, total) llamado cada `lote` pensionados
            y al terminar
        lote: Tamaño del lote de notificación (default settings.LOTE_PROGRESO)
        preservar_analisis: Conservar la marca de analizado previa
            (default settings.PRESERVAR_ANALISIS)

    Returns:
        ResultadoAnalisis con los conteos del recorrido

    Se confirma la transacción después de cada pensionado: si falla a mitad
    de camino, lo escrito hasta ese punto queda guardado.
    """
    if lote is None:
        lote = settings.LOTE_PROGRESO
    if preservar_analisis is None:
        preservar_analisis = settings.PRESERVAR_ANALISIS
    lote = max(1, lote)

    resultado = ResultadoAnalisis()
    try:
        total = session.scalar(select(func.count()).select_from(Pensionado)) or 0
        logger.info(f"Iniciando análisis de sentencias sobre {total} pensionados")
        pensionados = session.scalars(select(Pensionado).order_by(Pensionado.id)).all()

        for pensionado in pensionados:
            _indexar_pensionado(session, pensionado, resultado, preservar_analisis)
            session.commit()
            resultado.pensionados += 1
            if resultado.pensionados % lote == 0:
                logger.info(f"Análisis de sentencias: {resultado.pensionados}/{total} pensionados")
                if progreso:
                    progreso(resultado.pensionados, total)

        if progreso and resultado.pensionados % lote != 0:
            progreso(resultado.pensionados, total)

        logger.info(f"Análisis completado: {resultado.pensionados} pensionados, {resultado.pagos} pagos, "
                    f"{resultado.coincidencias} coincidencias, {resultado.resumenes} consolidados")
        return resultado

    except SQLAlchemyError as e:
        logger.error(f"Error en el análisis de sentencias tras {resultado.pensionados} pensionados: {e}")
        session.rollback()
        raise


def cargar_resumenes(session) -> list[ResumenSentencias]:
    """Consolidados ya calculados, de mayor a menor total general."""
    try:
        filas = session.scalars(
            select(UsuarioSentencia).order_by(UsuarioSentencia.total_general.desc())
        ).all()
        return [_fila_a_resumen(f) for f in filas]
    except SQLAlchemyError as e:
        logger.error(f"Error cargando consolidados de sentencias: {e}")
        raise


def marcar_analizado(session, pensionado_id: str, analizado: bool = True, fecha: datetime = None) -> None:
    """
    Actualiza solo is_analyzed y fecha_analisis de un consolidado.
    """
    if analizado and fecha is None:
        fecha = datetime.now()
    try:
        resultado = session.execute(
            update(UsuarioSentencia)
            .where(UsuarioSentencia.id == pensionado_id)
            .values(is_analyzed=analizado, fecha_analisis=fecha if analizado else None)
        )
        if resultado.rowcount == 0:
            session.rollback()
            raise ValueError(f"No existe consolidado de sentencias para el pensionado {pensionado_id}")
        session.commit()
        logger.info(f"Pensionado {pensionado_id} marcado como {'analizado' if analizado else 'pendiente'}")
    except SQLAlchemyError as e:
        logger.error(f"Error marcando pensionado {pensionado_id}: {e}")
        session.rollback()
        raise


def cargar_pagos_referenciados(session, resumen: ResumenSentencias) -> list[Pago]:
    """Relee los pagos de origen de las sentencias de un consolidado."""
    ids = sorted({d.pago_id for d in resumen.sentencias})
    if not ids:
        return []
    try:
        return session.scalars(
            select(Pago)
            .where(Pago.pensionado_id == resumen.pensionado_id, Pago.id.in_(ids))
            .order_by(Pago.fecha_procesado.desc())
        ).all()
    except SQLAlchemyError as e:
        logger.error(f"Error leyendo pagos del pensionado {resumen.pensionado_id}: {e}")
        raise


def contar_indice(session) -> int:
    return session.scalar(select(func.count()).select_from(SentenciaIndex)) or 0
