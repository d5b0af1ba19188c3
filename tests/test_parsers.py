"""Pruebas de conversión de moneda y periodos de pago."""

from datetime import date

import pytest

from consorcio.parsers import (
    PeriodoPago,
    PeriodoPagoInvalido,
    formatear_moneda,
    interpretar_periodo_pago,
    limpiar_dependencia,
    parse_moneda,
    parse_periodo_pago,
)


class TestParseMoneda:
    def test_miles_y_decimales(self):
        assert parse_moneda("1.234,56") == 1234.56

    def test_varios_separadores_de_miles(self):
        assert parse_moneda("12.345.678,9") == 12345678.9

    def test_sin_decimales(self):
        assert parse_moneda("2.500.000") == 2500000

    @pytest.mark.parametrize("valor", ["", None, "abc", "   "])
    def test_ilegible_retorna_cero(self, valor):
        assert parse_moneda(valor) == 0

    def test_numero_pasa_directo(self):
        assert parse_moneda(1500) == 1500.0
        assert parse_moneda(12.5) == 12.5

    def test_no_finito_retorna_cero(self):
        assert parse_moneda("nan") == 0
        assert parse_moneda(float("inf")) == 0

    def test_ignora_texto_despues_del_numero(self):
        assert parse_moneda("1.234,56 COP") == 1234.56
        assert parse_moneda("-2.000 pesos") == -2000
        assert parse_moneda("COP 1.234,56") == 0


class TestPeriodoPago:
    def test_rango_abril(self):
        periodo = parse_periodo_pago("1 abr. 2025 a 15 abr. 2025")
        assert periodo.anio == 2025
        assert periodo.mes == 4

    def test_texto_sin_fecha(self):
        assert parse_periodo_pago("garbage") is None

    def test_vacio(self):
        assert parse_periodo_pago("") is None
        assert parse_periodo_pago(None) is None

    def test_usa_la_primera_fecha(self):
        periodo = parse_periodo_pago("16 dic. 2024 a 15 ene. 2025")
        assert (periodo.anio, periodo.mes, periodo.dia) == (2024, 12, 16)

    def test_punto_opcional(self):
        assert parse_periodo_pago("1 jun 2023 a 30 jun 2023") == PeriodoPago(2023, 6, 1)

    def test_mayusculas(self):
        assert parse_periodo_pago("1 ENE. 2022 a 31 ENE. 2022").mes == 1

    def test_mes_desconocido(self):
        assert parse_periodo_pago("1 xyz. 2025 a 15 xyz. 2025") is None

    @pytest.mark.parametrize("texto", ["1 dicho 2025 a 15 dic. 2025", "1 marte 2025", "1 junta 2025"])
    def test_palabra_que_empieza_como_mes(self, texto):
        assert parse_periodo_pago(texto) is None

    def test_nombre_completo_del_mes(self):
        assert parse_periodo_pago("1 Abril 2025 a 30 Abril 2025") == PeriodoPago(2025, 4, 1)
        assert parse_periodo_pago("1 septiembre 2024").mes == 9

    def test_estricto_lanza_error(self):
        with pytest.raises(PeriodoPagoInvalido):
            interpretar_periodo_pago("sin periodo")

    def test_dia_invalido(self):
        with pytest.raises(PeriodoPagoInvalido):
            interpretar_periodo_pago("31 feb. 2025 a 28 feb. 2025")

    def test_fecha(self):
        assert PeriodoPago(2025, 4, 1).fecha == date(2025, 4, 1)


class TestFormatos:
    def test_formatear_moneda(self):
        assert formatear_moneda(1234.5) == "$1.234,50"
        assert formatear_moneda("1.234,56", simbolo=False) == "1.234,56"
        assert formatear_moneda(None) == "$0,00"

    def test_limpiar_dependencia(self):
        assert limpiar_dependencia("V12-TESORERIA") == "TESORERIA"
        assert limpiar_dependencia("JURIDICA") == "JURIDICA"
        assert limpiar_dependencia(None) == ""
