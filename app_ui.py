import streamlit as st
from datetime import datetime
import logging

import pandas as pd

from consorcio import settings

logging.basicConfig(level=settings.LOG_LEVEL)

st.set_page_config(page_title="ConsorcioManager", page_icon="⚖️", layout="wide")

# --- Estilos institucionales ---
st.markdown("""
    <style>
    .main {background-color: #232a34; color: #e3e6ea;}
    .stButton > button {background-color: #1a2940; color: #fff; font-weight: bold; border-radius: 8px;}
    </style>
""", unsafe_allow_html=True)

# --- Menú lateral principal ---
st.sidebar.title("Menú")
menu = st.sidebar.radio(
    "Navegación",
    (
        "⚖️ Consulta de Sentencias",
        "🔎 Consulta de Pagos",
        "🧾 Detalle de Pagos",
    ),
    index=0,
    key="menu_principal",
)

# --- Caché explícita del pensionado consultado (se limpia al cambiar de módulo) ---
from consorcio.sesion import SesionPensionado

if 'sesion_pensionado' not in st.session_state:
    st.session_state.sesion_pensionado = SesionPensionado()
if st.session_state.get('menu_anterior') not in (None, menu) and menu == "⚖️ Consulta de Sentencias":
    st.session_state.sesion_pensionado.limpiar()
st.session_state.menu_anterior = menu


def _tabla_detalles(pago):
    from consorcio.parsers import formatear_moneda

    filas = [
        {
            "Código": d.get("codigo") or "N/A",
            "Concepto": d.get("nombre"),
            "Ingresos": formatear_moneda(d.get("ingresos"), False),
            "Egresos": formatear_moneda(d.get("egresos"), False),
        }
        for d in (pago.detalles or [])
    ]
    if filas:
        st.dataframe(pd.DataFrame(filas), use_container_width=True, hide_index=True)
    else:
        st.caption("No hay detalles disponibles para este pago.")


# --- Módulo Sentencias ---
if menu == "⚖️ Consulta de Sentencias":
    st.title("Consulta de Sentencias")
    st.caption("Pagos de costas procesales, retroactivos de mesada adicional y procesos judiciales por pensionado.")

    try:
        from consorcio.db import get_session
        from consorcio.consulta import FiltrosSentencias, consultar, opciones_filtro, fecha_corta
        from consorcio.indice import (
            analizar_sentencias, cargar_resumenes, marcar_analizado, cargar_pagos_referenciados,
        )
        from consorcio.parsers import formatear_moneda
        from consorcio.reportes import resumenes_a_dataframe, exportar_sentencias_excel
        from consorcio.sentencias import CATEGORIAS

        if 'resumenes_sentencias' not in st.session_state:
            session = get_session()
            try:
                st.session_state.resumenes_sentencias = cargar_resumenes(session)
            finally:
                session.close()

        col_btn, col_info = st.columns([1, 3])
        with col_btn:
            recalcular = st.button("🔄 Recalcular sentencias", key="btn_recalcular")
        with col_info:
            st.caption("Recorre todos los pagos de todos los pensionados. Puede tardar varios minutos.")

        if recalcular:
            barra = st.progress(0)
            estado = st.empty()

            def _avance(procesados, total):
                barra.progress(min(1.0, procesados / total) if total else 1.0)
                estado.text(f"{procesados}/{total} pensionados procesados")

            session = get_session()
            try:
                with st.spinner("⏳ Analizando pagos..."):
                    resultado = analizar_sentencias(session, progreso=_avance)
                st.session_state.resumenes_sentencias = cargar_resumenes(session)
                st.success(f"✅ Análisis completado: {resultado.resumenes} pensionados con sentencias, "
                           f"{resultado.coincidencias} pagos encontrados.")
            except Exception as e:
                st.error(f"❌ Error durante el análisis: {e}")
                st.info("Lo procesado hasta el error quedó guardado; puedes volver a intentarlo.")
            finally:
                session.close()

        resumenes = st.session_state.resumenes_sentencias
        opciones = opciones_filtro(resumenes)

        c1, c2, c3, c4, c5, c6 = st.columns(6)
        texto = c1.text_input("Nombre o documento", key="sent_texto")
        dependencia = c2.selectbox("Dependencia", ["Todas"] + opciones["dependencias"], key="sent_dep")
        categoria = c3.selectbox("Tipo", ["Todos"] + list(CATEGORIAS), key="sent_cat",
                                 format_func=lambda c: CATEGORIAS.get(c, c))
        anio = c4.selectbox("Año", ["Todos"] + opciones["anios"], key="sent_anio")
        estado_sel = c5.selectbox("Estado", ["Todos", "Analizados", "Pendientes"], key="sent_estado")
        orden = c6.selectbox("Ordenar por", ["total", "periodo", "fecha", "nombre"], key="sent_orden",
                             format_func=lambda o: {"total": "Total", "periodo": "Último periodo",
                                                    "fecha": "Último pago", "nombre": "Nombre"}[o])

        filtros = FiltrosSentencias(
            texto=texto or None,
            dependencia=None if dependencia == "Todas" else dependencia,
            categoria=None if categoria == "Todos" else categoria,
            anio=None if anio == "Todos" else anio,
            analizado={"Todos": None, "Analizados": True, "Pendientes": False}[estado_sel],
        )
        vista = consultar(resumenes, filtros, orden)

        m1, m2, m3 = st.columns(3)
        m1.metric("Pensionados", len(vista))
        m2.metric("Total general", formatear_moneda(sum(r.total_general for r in vista)))
        m3.metric("Pendientes de análisis", sum(1 for r in vista if not r.is_analyzed))

        if vista:
            df = resumenes_a_dataframe(vista)
            st.dataframe(df, use_container_width=True, height=420, hide_index=True)
            try:
                st.download_button(
                    label="⬇️ Descargar Excel",
                    data=exportar_sentencias_excel(vista),
                    file_name=f"sentencias_{datetime.now().strftime('%Y%m%d')}.xlsx",
                    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                    key="dl_xlsx_sentencias",
                )
            except Exception as e:
                st.warning(f"No fue posible generar el Excel: {e}")

            st.markdown("---")
            st.subheader("Detalle por pensionado")
            seleccion = st.selectbox(
                "Pensionado",
                vista,
                format_func=lambda r: f"{r.nombre} ({r.pensionado_id}) - {formatear_moneda(r.total_general)}",
                key="sent_sel",
            )
            if seleccion:
                cA, cB = st.columns(2)
                if seleccion.is_analyzed:
                    cA.success(f"Analizado el {fecha_corta(seleccion.fecha_analisis)}")
                    accion = cB.button("↩️ Marcar como pendiente", key="btn_desmarcar")
                else:
                    cA.info("Pendiente de análisis")
                    accion = cB.button("✅ Marcar como analizado", key="btn_marcar")
                if accion:
                    session = get_session()
                    actualizado = False
                    try:
                        marcar_analizado(session, seleccion.pensionado_id, analizado=not seleccion.is_analyzed)
                        st.session_state.resumenes_sentencias = cargar_resumenes(session)
                        actualizado = True
                    except Exception as e:
                        st.error(f"No se pudo actualizar el estado: {e}")
                    finally:
                        session.close()
                    if actualizado:
                        st.rerun()

                st.dataframe(pd.DataFrame([
                    {
                        "Concepto": d.concepto,
                        "Periodo": d.periodo_pago or "N/A",
                        "Fecha pago": fecha_corta(d.fecha_pago),
                        "Valor": formatear_moneda(d.valor),
                    }
                    for d in seleccion.sentencias
                ]), use_container_width=True, hide_index=True)

                with st.expander("Ver pagos de origen"):
                    session = get_session()
                    try:
                        for pago in cargar_pagos_referenciados(session, seleccion):
                            st.markdown(f"**{pago.periodo_pago or 'N/A'}** · Neto: {formatear_moneda(pago.valor_neto)} · ID: `{pago.id}`")
                            _tabla_detalles(pago)
                    except Exception as e:
                        st.error(f"No se pudieron cargar los pagos: {e}")
                    finally:
                        session.close()
        else:
            st.info("No hay pensionados con sentencias que coincidan con los filtros. "
                    "Si es la primera vez, usa 'Recalcular sentencias'.")

    except Exception as e:
        st.error(f"Error al conectar con la base de datos: {e}")
        st.info("Verifica la conexión a la base de datos y vuelve a intentarlo.")

# --- Módulo Consulta de Pagos ---
elif menu == "🔎 Consulta de Pagos":
    st.title("Consulta de Pagos de Pensionados")
    st.caption("Busque un pensionado por su número de documento. Opcionalmente, filtre por Centro de Costo y Dependencia para verificar.")

    try:
        from consorcio.db import get_session
        from consorcio.pagos import opciones_filtro_pensionados, buscar_pensionado, buscar_por_nombre, listar_pagos
        from consorcio.parsers import formatear_moneda, limpiar_dependencia

        session = get_session()
        try:
            opciones = opciones_filtro_pensionados(session)

            nombre = st.text_input("🔍 Buscar por nombre (opcional)", key="cp_nombre")
            if nombre:
                sugerencias = buscar_por_nombre(session, nombre)
                if sugerencias:
                    st.caption(" · ".join(f"{n} ({d})" for d, n in sugerencias))
                else:
                    st.caption("Sin coincidencias.")

            c1, c2, c3 = st.columns(3)
            documento = c1.text_input("Número de Documento", key="cp_documento")
            centro = c2.selectbox("Centro de Costo (Opcional)", ["Todos los Centros"] + opciones["centros_costo"], key="cp_centro")
            dependencia = c3.selectbox("Dependencia (Opcional)", ["Todas las Dependencias"] + opciones["dependencias"], key="cp_dep")

            if st.button("Buscar", key="cp_buscar"):
                try:
                    pensionado = buscar_pensionado(
                        session, documento,
                        centro_costo=None if centro == "Todos los Centros" else centro,
                        dependencia=None if dependencia == "Todas las Dependencias" else dependencia,
                    )
                    pagos = listar_pagos(session, pensionado["id"])
                    st.session_state.sesion_pensionado.guardar(pensionado["id"], pensionado, pagos)
                except ValueError as e:
                    st.error(str(e))

            cargado = st.session_state.sesion_pensionado.obtener()
            if cargado:
                pensionado, pagos = cargado
                st.subheader("Información del Pensionado")
                i1, i2, i3 = st.columns(3)
                i1.write(f"**Nombre:** {pensionado.get('empleado') or 'N/A'}")
                i1.write(f"**Documento:** {pensionado['id']}")
                i1.write(f"**Cargo:** {pensionado.get('cargo') or 'N/A'}")
                i2.write(f"**Empresa:** {pensionado.get('empresa') or 'N/A'}")
                i2.write(f"**C. Costo:** {pensionado.get('pnl_centro_costo') or 'N/A'}")
                i2.write(f"**Dependencia:** {limpiar_dependencia(pensionado.get('pnl_dependencia')) or 'N/A'}")
                i3.write(f"**Esquema:** {pensionado.get('esquema') or 'N/A'}")
                i3.write(f"**Año Jubilación:** {pensionado.get('ano_jubilacion') or 'N/A'}")
                i3.write(f"**Fondo Salud:** {pensionado.get('fondo_salud') or 'N/A'}")

                if pagos:
                    st.subheader(f"Historial de Pagos ({len(pagos)})")
                    for pago in pagos:
                        with st.expander(f"Periodo: {pago.periodo_pago or 'N/A'} · Año: {pago.anio or 'N/A'} · Neto: {formatear_moneda(pago.valor_neto)}"):
                            st.write(f"**Básico:** {formatear_moneda(pago.basico)} · **V. Liquidado:** {formatear_moneda(pago.valor_liquidado)} · "
                                     f"**Procesado:** {'Sí' if pago.procesado else 'No'}")
                            _tabla_detalles(pago)
                else:
                    st.info("Pensionado encontrado, pero no tiene pagos registrados.")
        finally:
            session.close()
    except Exception as e:
        st.error(f"Error al conectar con la base de datos: {e}")
        st.info("Verifica la conexión a la base de datos y vuelve a intentarlo.")

# --- Módulo Detalle de Pagos ---
elif menu == "🧾 Detalle de Pagos":
    st.title("Detalle de Pagos")

    try:
        from consorcio.db import get_session
        from consorcio.pagos import anios_disponibles, meses_disponibles, seleccionar_pago, totales_pago
        from consorcio.parsers import formatear_moneda, limpiar_dependencia

        sesion = st.session_state.sesion_pensionado
        documento = st.text_input("Número de Documento", value=sesion.activo or "", key="dp_documento")
        if st.button("Buscar Pensionado", key="dp_buscar") and documento:
            session = get_session()
            try:
                sesion.cargar(session, documento)
            except ValueError as e:
                st.error(str(e))
            finally:
                session.close()

        cargado = sesion.obtener()
        if cargado:
            pensionado, pagos = cargado
            if not pagos:
                st.info("El pensionado seleccionado no tiene historial de pagos en el sistema.")
            else:
                anios = anios_disponibles(pagos)
                f1, f2 = st.columns(2)
                anio = f1.selectbox("Año", anios, key="dp_anio") if anios else None
                meses = meses_disponibles(pagos, anio) if anio else []
                mes = f2.selectbox("Mes", meses, format_func=lambda m: m[1], key="dp_mes") if meses else None
                pago = seleccionar_pago(pagos, anio, mes[0] if mes else None)

                if pago is None:
                    st.warning("No hay pago para el periodo seleccionado.")
                else:
                    st.subheader("Comprobante de Pago")
                    st.caption(f"{pensionado.get('empleado') or 'N/A'} (C.C. {pensionado['id']})")
                    h1, h2, h3 = st.columns(3)
                    h1.write(f"**Básico Pensionado:** {formatear_moneda(pensionado.get('basico'))}")
                    h1.write(f"**Cargo:** {pensionado.get('cargo') or 'N/A'}")
                    h2.write(f"**Centro Costo:** {pensionado.get('pnl_centro_costo') or 'N/A'}")
                    h2.write(f"**Dependencia:** {limpiar_dependencia(pensionado.get('pnl_dependencia')) or 'N/A'}")
                    h3.write(f"**Periodo del Pago:** {pago.periodo_pago or 'N/A'}")
                    h3.write(f"**Fecha Procesado:** {pago.fecha_procesado.strftime('%d/%m/%Y %H:%M') if pago.fecha_procesado else 'N/A'}")
                    _tabla_detalles(pago)

                    totales = totales_pago(pago)
                    t1, t2, t3 = st.columns(3)
                    t1.metric("Total Ingresos", formatear_moneda(totales["ingresos"]))
                    t2.metric("Total Egresos", formatear_moneda(totales["egresos"]))
                    t3.metric("Neto a Pagar", formatear_moneda(totales["neto"]))
                    if pensionado.get('pnl_mensaje') and pensionado.get('pnl_mensaje') != "MIGRA":
                        st.info(f"Mensaje Adicional: {pensionado['pnl_mensaje']}")
                    st.caption(f"Comprobante generado por el sistema ConsorcioManager. ID del Pago: {pago.id}")
    except Exception as e:
        st.error(f"Error al conectar con la base de datos: {e}")
        st.info("Verifica la conexión a la base de datos y vuelve a intentarlo.")
