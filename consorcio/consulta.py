# Filtros y ordenamiento de los consolidados de sentencias (en memoria, sin escribir en BD)

from dataclasses import dataclass
from datetime import date, datetime

from .sentencias import (
    CATEGORIAS,
    ResumenSentencias,
    resolver_anio_ultimo_periodo,
    resolver_fecha_ultimo_periodo,
)

ORDENES = ("nombre", "total", "fecha", "periodo")


@dataclass
class FiltrosSentencias:
    texto: str | None = None
    dependencia: str | None = None
    categoria: str | None = None
    analizado: bool | None = None
    anio: int | None = None


def _cumple(resumen: ResumenSentencias, filtros: FiltrosSentencias) -> bool:
    if filtros.texto:
        buscado = filtros.texto.strip().lower()
        if buscado not in (resumen.nombre or "").lower() and buscado not in resumen.pensionado_id.lower():
            return False
    if filtros.dependencia and resumen.dependencia != filtros.dependencia:
        return False
    if filtros.categoria and resumen.total_categoria(filtros.categoria) <= 0:
        return False
    if filtros.analizado is not None and resumen.is_analyzed != filtros.analizado:
        return False
    if filtros.anio is not None and resolver_anio_ultimo_periodo(resumen.sentencias) != filtros.anio:
        return False
    return True


def filtrar_resumenes(resumenes: list[ResumenSentencias], filtros: FiltrosSentencias) -> list[ResumenSentencias]:
    """
    Aplica los filtros definidos (todos opcionales, combinados con AND).

    Raises:
        ValueError: si la categoría no es una de CATEGORIAS
    """
    if filtros.categoria and filtros.categoria not in CATEGORIAS:
        raise ValueError(f"Categoría desconocida: {filtros.categoria}")
    return [r for r in resumenes if _cumple(r, filtros)]


def ordenar_resumenes(resumenes: list[ResumenSentencias], orden: str = "total") -> list[ResumenSentencias]:
    """
    Ordena sin modificar la lista recibida.

    - nombre: alfabético
    - total: total general descendente
    - fecha: último pago descendente, sin fecha al final
    - periodo: último periodo pagado descendente, empates por total descendente
    """
    if orden == "nombre":
        return sorted(resumenes, key=lambda r: (r.nombre or "").lower())
    if orden == "total":
        return sorted(resumenes, key=lambda r: r.total_general, reverse=True)
    if orden == "fecha":
        con_fecha = [r for r in resumenes if r.ultima_fecha_pago]
        sin_fecha = [r for r in resumenes if not r.ultima_fecha_pago]
        return sorted(con_fecha, key=lambda r: r.ultima_fecha_pago, reverse=True) + sin_fecha
    if orden == "periodo":
        def clave(r):
            fecha = resolver_fecha_ultimo_periodo(r.sentencias) or date.min
            return (fecha, r.total_general)
        return sorted(resumenes, key=clave, reverse=True)
    raise ValueError(f"Orden desconocido: {orden}. Opciones: {', '.join(ORDENES)}")


def consultar(resumenes, filtros: FiltrosSentencias = None, orden: str = "total"):
    return ordenar_resumenes(filtrar_resumenes(resumenes, filtros or FiltrosSentencias()), orden)


def opciones_filtro(resumenes: list[ResumenSentencias]) -> dict:
    """Dependencias y años disponibles para los selectores."""
    dependencias = sorted({r.dependencia for r in resumenes if r.dependencia})
    anios = {resolver_anio_ultimo_periodo(r.sentencias) for r in resumenes}
    return {
        "dependencias": dependencias,
        "anios": sorted((a for a in anios if a is not None), reverse=True),
    }


def fecha_corta(valor: datetime | None) -> str:
    return valor.strftime("%d/%m/%Y") if valor else "N/A"
