"""
Detección y consolidación de pagos de sentencias judiciales.

Un concepto de nómina se considera pago de sentencia cuando su nombre
contiene alguno de los conceptos de referencia (sin el código numérico
inicial). Cada coincidencia con valor neto distinto de cero genera un
SentenciaDetalle; los detalles de un pensionado se consolidan en un
ResumenSentencias con subtotales por categoría.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime, date
import logging
import re

from .parsers import parse_moneda, parse_periodo_pago, limpiar_dependencia

logger = logging.getLogger(__name__)

CONCEPTOS_SENTENCIA = [
    "470-Costas Procesales",
    "785-Retro Mesada Adicional M1",
    "215-Procesos Y Sentencia Judiciales",
]

# Clave -> texto que identifica la categoría dentro del concepto
CATEGORIAS = {
    "costas": "Costas Procesales",
    "retro_mesada": "Retro Mesada",
    "procesos": "Procesos Y Sentencia",
}

_CODIGO_CONCEPTO = re.compile(r"^\d+-")


@dataclass
class SentenciaDetalle:
    concepto: str
    valor: float
    fecha_pago: datetime | None
    pago_id: str
    periodo_pago: str | None = None

    def a_dict(self) -> dict:
        datos = asdict(self)
        datos["fecha_pago"] = self.fecha_pago.isoformat() if self.fecha_pago else None
        return datos

    @classmethod
    def desde_dict(cls, datos: dict) -> "SentenciaDetalle":
        fecha = datos.get("fecha_pago")
        if isinstance(fecha, str):
            fecha = datetime.fromisoformat(fecha)
        return cls(
            concepto=datos.get("concepto", ""),
            valor=float(datos.get("valor") or 0),
            fecha_pago=fecha,
            pago_id=str(datos.get("pago_id", "")),
            periodo_pago=datos.get("periodo_pago"),
        )


@dataclass
class ResumenSentencias:
    pensionado_id: str
    nombre: str
    dependencia: str
    centro_costo: str
    sentencias: list = field(default_factory=list)
    total_costas_proc: float = 0.0
    total_retro_mesada: float = 0.0
    total_procesos: float = 0.0
    total_general: float = 0.0
    ultima_fecha_pago: datetime | None = None
    is_analyzed: bool = False
    fecha_analisis: datetime | None = None

    def total_categoria(self, categoria: str) -> float:
        return {
            "costas": self.total_costas_proc,
            "retro_mesada": self.total_retro_mesada,
            "procesos": self.total_procesos,
        }[categoria]


def texto_referencia(concepto: str) -> str:
    """"785-Retro Mesada Adicional M1" -> "Retro Mesada Adicional M1"."""
    return _CODIGO_CONCEPTO.sub("", concepto)


def clasificar_detalles(pago_id: str, detalles, fecha_pago: datetime | None = None,
                        periodo_pago: str | None = None) -> list[SentenciaDetalle]:
    """
    Busca conceptos de sentencia en los detalles de un pago.

    Args:
        pago_id: Id del pago de origen
        detalles: Lista de dicts {"nombre", "ingresos", "egresos", ...}
        fecha_pago: Fecha de procesado del pago
        periodo_pago: Texto del periodo ("1 abr. 2025 a 15 abr. 2025")

    Returns:
        Un SentenciaDetalle por cada (detalle, concepto de referencia) que
        coincida con valor neto distinto de cero. Un mismo detalle puede
        coincidir con varios conceptos.
    """
    encontrados = []
    for item in detalles or []:
        nombre = str(item.get("nombre") or "")
        if not nombre:
            continue
        for concepto in CONCEPTOS_SENTENCIA:
            if texto_referencia(concepto) not in nombre:
                continue
            valor = parse_moneda(item.get("ingresos")) - parse_moneda(item.get("egresos"))
            if valor == 0:
                logger.debug(f"Pago {pago_id}: '{nombre}' coincide con {concepto} pero su neto es 0, se descarta")
                continue
            encontrados.append(SentenciaDetalle(
                concepto=concepto,
                valor=valor,
                fecha_pago=fecha_pago,
                pago_id=pago_id,
                periodo_pago=periodo_pago,
            ))
    return encontrados


def clasificar_pago(pago) -> list[SentenciaDetalle]:
    return clasificar_detalles(pago.id, pago.detalles, pago.fecha_procesado, pago.periodo_pago)


def calcular_totales(detalles: list[SentenciaDetalle]) -> dict:
    """Subtotales por categoría, total general y fecha del pago más reciente."""
    totales = {}
    for clave, texto in CATEGORIAS.items():
        totales[clave] = sum(d.valor for d in detalles if texto in d.concepto)
    totales["general"] = totales["costas"] + totales["retro_mesada"] + totales["procesos"]
    fechas = [d.fecha_pago for d in detalles if d.fecha_pago]
    totales["ultima_fecha_pago"] = max(fechas) if fechas else None
    return totales


def construir_resumen(pensionado, detalles: list[SentenciaDetalle]) -> ResumenSentencias | None:
    """
    Consolida los detalles de un pensionado. Sin detalles no hay resumen.
    """
    if not detalles:
        return None
    totales = calcular_totales(detalles)
    return ResumenSentencias(
        pensionado_id=pensionado.id,
        nombre=pensionado.empleado or "",
        dependencia=limpiar_dependencia(pensionado.pnl_dependencia),
        centro_costo=pensionado.pnl_centro_costo or "",
        sentencias=list(detalles),
        total_costas_proc=totales["costas"],
        total_retro_mesada=totales["retro_mesada"],
        total_procesos=totales["procesos"],
        total_general=totales["general"],
        ultima_fecha_pago=totales["ultima_fecha_pago"],
    )


def detalle_mas_reciente(detalles: list[SentenciaDetalle]) -> SentenciaDetalle | None:
    # Los detalles sin fecha quedan al final
    if not detalles:
        return None
    return sorted(detalles, key=lambda d: d.fecha_pago or datetime.min, reverse=True)[0]


def resolver_anio_ultimo_periodo(detalles: list[SentenciaDetalle]) -> int | None:
    """
    Año del último periodo pagado.

    Se toma el detalle con la fecha de pago más reciente y se interpreta su
    periodo; si el periodo no se puede leer se usa el año de la fecha de pago.
    """
    ultimo = detalle_mas_reciente(detalles)
    if ultimo is None:
        return None
    periodo = parse_periodo_pago(ultimo.periodo_pago)
    if periodo is not None:
        return periodo.anio
    if ultimo.fecha_pago is not None:
        return ultimo.fecha_pago.year
    return None


def resolver_fecha_ultimo_periodo(detalles: list[SentenciaDetalle]) -> date | None:
    """Como resolver_anio_ultimo_periodo pero retorna la fecha completa."""
    ultimo = detalle_mas_reciente(detalles)
    if ultimo is None:
        return None
    periodo = parse_periodo_pago(ultimo.periodo_pago)
    if periodo is not None:
        return periodo.fecha
    if ultimo.fecha_pago is not None:
        return ultimo.fecha_pago.date()
    return None
