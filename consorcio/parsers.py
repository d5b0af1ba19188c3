"""
Conversión de textos con formato colombiano (moneda y periodos de pago).

Los pagos llegan con valores como "1.234,56" y periodos como
"1 abr. 2025 a 15 abr. 2025". Estas funciones nunca lanzan errores hacia
la vista: un valor ilegible se convierte en 0 y un periodo ilegible en None.
La versión estricta del parser de periodos (interpretar_periodo_pago) sí
lanza PeriodoPagoInvalido para que quien la use decida el respaldo.
"""
from dataclasses import dataclass
from datetime import date
import math
import re

MESES_ABREV = {
    "ene": 1, "feb": 2, "mar": 3, "abr": 4, "may": 5, "jun": 6,
    "jul": 7, "ago": 8, "sep": 9, "oct": 10, "nov": 11, "dic": 12,
}

MESES_ES = {
    1: "Enero", 2: "Febrero", 3: "Marzo", 4: "Abril",
    5: "Mayo", 6: "Junio", 7: "Julio", 8: "Agosto",
    9: "Septiembre", 10: "Octubre", 11: "Noviembre", 12: "Diciembre",
}

# Abreviaturas y nombres completos ("abr", "abril"); cualquier otra palabra no es mes
MESES = {**MESES_ABREV, **{nombre.lower(): numero for numero, nombre in MESES_ES.items()}}

# "<dia> <mes>. <año>"; el punto después del mes es opcional
_PATRON_FECHA = re.compile(r"(\d{1,2})\s+([A-Za-zñÑ]+)\.?\s+(\d{4})")
_PREFIJO_DEPENDENCIA = re.compile(r"^V\d+-")
# Número al inicio del texto ya normalizado; lo que sigue ("COP", "pesos") se ignora
_NUMERO_INICIAL = re.compile(r"\s*[-+]?\d+(\.\d+)?")


class PeriodoPagoInvalido(ValueError):
    """El texto del periodo de pago no tiene una fecha reconocible."""


@dataclass(frozen=True)
class PeriodoPago:
    anio: int
    mes: int
    dia: int = 1

    @property
    def fecha(self) -> date:
        return date(self.anio, self.mes, self.dia)


def parse_moneda(valor) -> float:
    """
    Convierte "1.234,56" en 1234.56.

    Se eliminan todos los puntos (separador de miles) antes de cambiar la
    primera coma por punto decimal. Se toma el número inicial y se ignora
    el texto que lo siga ("1.234,56 COP"). Vacío, None o texto sin número
    al inicio retorna 0.
    """
    if valor is None:
        return 0
    if isinstance(valor, bool):
        return 0
    if isinstance(valor, (int, float)):
        return float(valor) if math.isfinite(valor) else 0
    texto = str(valor).strip()
    if not texto:
        return 0
    texto = texto.replace(".", "").replace(",", ".", 1)
    coincidencia = _NUMERO_INICIAL.match(texto)
    if not coincidencia:
        return 0
    numero = float(coincidencia.group())
    return numero if math.isfinite(numero) else 0


def interpretar_periodo_pago(texto) -> PeriodoPago:
    """
    Extrae año y mes de la primera fecha de un rango como
    "1 abr. 2025 a 15 abr. 2025".

    Raises:
        PeriodoPagoInvalido: si no hay fecha, el mes no está en la tabla
            de meses o el día no es válido para ese mes.
    """
    if not texto:
        raise PeriodoPagoInvalido("Periodo de pago vacío")
    coincidencia = _PATRON_FECHA.search(str(texto))
    if not coincidencia:
        raise PeriodoPagoInvalido(f"Periodo de pago sin fecha reconocible: {texto!r}")
    dia, mes_txt, anio = coincidencia.groups()
    mes = MESES.get(mes_txt.lower())
    if mes is None:
        raise PeriodoPagoInvalido(f"Mes desconocido '{mes_txt}' en periodo {texto!r}")
    periodo = PeriodoPago(anio=int(anio), mes=mes, dia=int(dia))
    try:
        periodo.fecha
    except ValueError as e:
        raise PeriodoPagoInvalido(f"Fecha inválida en periodo {texto!r}: {e}") from e
    return periodo


def parse_periodo_pago(texto) -> PeriodoPago | None:
    """Igual que interpretar_periodo_pago pero retorna None si falla."""
    try:
        return interpretar_periodo_pago(texto)
    except PeriodoPagoInvalido:
        return None


def formatear_moneda(valor, simbolo: bool = True) -> str:
    """Formato es-CO: 1234.5 -> "$1.234,50"."""
    numero = parse_moneda(valor) if isinstance(valor, str) else (valor or 0)
    texto = f"{float(numero):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"${texto}" if simbolo else texto


def limpiar_dependencia(dependencia) -> str:
    # "V12-TESORERIA" -> "TESORERIA"
    if not dependencia:
        return ""
    return _PREFIJO_DEPENDENCIA.sub("", str(dependencia))
