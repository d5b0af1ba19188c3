"""Pruebas del recorrido completo de pagos y del índice de sentencias."""

from datetime import datetime

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from consorcio.indice import (
    analizar_sentencias,
    cargar_pagos_referenciados,
    cargar_resumenes,
    contar_indice,
    id_indice,
    marcar_analizado,
)
from consorcio.models import SentenciaIndex, UsuarioSentencia

from tests.conftest import crear_pensionado, detalle, pago


class TestIdIndice:
    def test_determinista_y_sin_simbolos(self):
        assert id_indice("P1", "pg1", "785-Retro Mesada Adicional M1") == "P1|pg1|785_Retro_Mesada_Adicional_M1"
        assert id_indice("P1", "pg1", "470-Costas Procesales") == id_indice("P1", "pg1", "470-Costas Procesales")

    def test_guion_bajo_en_los_ids_no_choca(self):
        assert id_indice("A_B", "C", "470-Costas Procesales") != id_indice("A", "B_C", "470-Costas Procesales")
        assert id_indice("A|B", "C", "470-Costas Procesales") != id_indice("A", "B|C", "470-Costas Procesales")


class TestAnalisisCompleto:
    def test_escenario_un_pensionado(self, session):
        crear_pensionado(session, "P1", pagos=[
            pago("pg1", "1 abr. 2025 a 15 abr. 2025", datetime(2025, 4, 20), [
                detalle("470-Costas Procesales", 50000, 0),
                detalle("999-OtroConcepto", 10000, 0),
            ]),
        ])

        resultado = analizar_sentencias(session)

        assert resultado.pensionados == 1
        assert resultado.coincidencias == 1
        resumen = session.get(UsuarioSentencia, "P1")
        assert len(resumen.sentencias) == 1
        assert resumen.sentencias[0]["concepto"] == "470-Costas Procesales"
        assert resumen.sentencias[0]["valor"] == 50000
        assert resumen.total_costas_proc == 50000
        assert resumen.total_general == 50000
        assert contar_indice(session) == 1

    def test_solo_pensionados_con_coincidencias(self, pensionados_con_sentencias):
        session = pensionados_con_sentencias
        resultado = analizar_sentencias(session)

        assert resultado.pensionados == 3
        assert resultado.resumenes == 2
        ids = set(session.scalars(select(UsuarioSentencia.id)).all())
        assert ids == {"P1", "P2"}

    def test_totales_por_categoria(self, pensionados_con_sentencias):
        session = pensionados_con_sentencias
        analizar_sentencias(session)

        p2 = session.get(UsuarioSentencia, "P2")
        assert p2.total_retro_mesada == 100000
        assert p2.total_procesos == 280000
        assert p2.total_costas_proc == 0
        assert p2.total_general == 380000
        assert p2.ultima_fecha_pago == datetime(2024, 4, 3)
        assert p2.dependencia == "TESORERIA"

    def test_reanalizar_no_duplica(self, pensionados_con_sentencias):
        session = pensionados_con_sentencias
        analizar_sentencias(session)
        entradas = contar_indice(session)
        resumenes = len(cargar_resumenes(session))

        analizar_sentencias(session)

        assert contar_indice(session) == entradas == 3
        assert len(cargar_resumenes(session)) == resumenes == 2

    def test_mismo_concepto_dos_veces_en_un_pago(self, session):
        crear_pensionado(session, "P1", pagos=[
            pago("pg1", "1 abr. 2025 a 15 abr. 2025", datetime(2025, 4, 20), [
                detalle("470-Costas Procesales", 100),
                detalle("470-Costas Procesales", 200),
            ]),
        ])

        analizar_sentencias(session)

        assert contar_indice(session) == 1
        assert session.get(UsuarioSentencia, "P1").total_costas_proc == 300
        entrada = session.get(SentenciaIndex, id_indice("P1", "pg1", "470-Costas Procesales"))
        assert entrada.valor == 300

    def test_ids_con_guion_bajo_no_se_sobrescriben(self, session):
        crear_pensionado(session, "A_B", pagos=[
            pago("C", "1 abr. 2025 a 15 abr. 2025", datetime(2025, 4, 20), [detalle("470-Costas Procesales", 100)]),
        ])
        crear_pensionado(session, "A", pagos=[
            pago("B_C", "1 abr. 2025 a 15 abr. 2025", datetime(2025, 4, 20), [detalle("470-Costas Procesales", 200)]),
        ])

        analizar_sentencias(session)

        assert contar_indice(session) == 2

    def test_progreso_por_lotes(self, session):
        for i in range(5):
            crear_pensionado(session, f"P{i}")
        avances = []

        analizar_sentencias(session, progreso=lambda hechos, total: avances.append((hechos, total)), lote=2)

        assert avances == [(2, 5), (4, 5), (5, 5)]

    def test_indice_con_datos_del_pensionado(self, pensionados_con_sentencias):
        session = pensionados_con_sentencias
        analizar_sentencias(session)

        entrada = session.get(SentenciaIndex, id_indice("P1", "pg1", "470-Costas Procesales"))
        assert entrada.valor == 50000
        assert entrada.nombre == "Ana Pérez"
        assert entrada.periodo_pago == "1 abr. 2025 a 15 abr. 2025"

    def test_error_de_base_de_datos_se_propaga(self, session, engine):
        from consorcio.models import Base

        Base.metadata.drop_all(engine)
        with pytest.raises(OperationalError):
            analizar_sentencias(session)


class TestMarcaAnalizado:
    def test_marcar_y_desmarcar(self, pensionados_con_sentencias):
        session = pensionados_con_sentencias
        analizar_sentencias(session)

        marcar_analizado(session, "P1", fecha=datetime(2025, 5, 1))
        p1 = [r for r in cargar_resumenes(session) if r.pensionado_id == "P1"][0]
        assert p1.is_analyzed is True
        assert p1.fecha_analisis == datetime(2025, 5, 1)
        assert p1.total_general == 50000

        marcar_analizado(session, "P1", analizado=False)
        p1 = [r for r in cargar_resumenes(session) if r.pensionado_id == "P1"][0]
        assert p1.is_analyzed is False
        assert p1.fecha_analisis is None

    def test_pensionado_sin_consolidado(self, session):
        with pytest.raises(ValueError):
            marcar_analizado(session, "NO-EXISTE")

    def test_reanalizar_reinicia_la_marca_por_defecto(self, pensionados_con_sentencias):
        session = pensionados_con_sentencias
        analizar_sentencias(session)
        marcar_analizado(session, "P1")

        analizar_sentencias(session, preservar_analisis=False)

        session.expire_all()
        assert session.get(UsuarioSentencia, "P1").is_analyzed is False

    def test_reanalizar_preservando_la_marca(self, pensionados_con_sentencias):
        session = pensionados_con_sentencias
        analizar_sentencias(session)
        marcar_analizado(session, "P1", fecha=datetime(2025, 5, 1))

        analizar_sentencias(session, preservar_analisis=True)

        session.expire_all()
        p1 = session.get(UsuarioSentencia, "P1")
        assert p1.is_analyzed is True
        assert p1.fecha_analisis == datetime(2025, 5, 1)


class TestLectura:
    def test_resumenes_ordenados_por_total(self, pensionados_con_sentencias):
        session = pensionados_con_sentencias
        analizar_sentencias(session)

        resumenes = cargar_resumenes(session)

        assert [r.pensionado_id for r in resumenes] == ["P2", "P1"]
        assert resumenes[0].sentencias[0].fecha_pago is not None

    def test_pagos_referenciados(self, pensionados_con_sentencias):
        session = pensionados_con_sentencias
        analizar_sentencias(session)
        p2 = [r for r in cargar_resumenes(session) if r.pensionado_id == "P2"][0]

        pagos = cargar_pagos_referenciados(session, p2)

        assert [p.id for p in pagos] == ["pg2", "pg1"]
        assert all(p.pensionado_id == "P2" for p in pagos)
