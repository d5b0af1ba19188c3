"""
Exportación a Excel de la consulta de sentencias.
"""
import io

import pandas as pd
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter

from .sentencias import resolver_anio_ultimo_periodo

COLUMNAS = [
    "Documento",
    "Nombre",
    "Dependencia",
    "Centro de Costo",
    "Costas Procesales",
    "Retro Mesada",
    "Procesos y Sentencias",
    "Total General",
    "Último Pago",
    "Año Último Periodo",
    "Analizado",
]
COLUMNAS_MONEDA = ("Costas Procesales", "Retro Mesada", "Procesos y Sentencias", "Total General")


def resumenes_a_dataframe(resumenes) -> pd.DataFrame:
    filas = [
        {
            "Documento": r.pensionado_id,
            "Nombre": r.nombre,
            "Dependencia": r.dependencia,
            "Centro de Costo": r.centro_costo,
            "Costas Procesales": r.total_costas_proc,
            "Retro Mesada": r.total_retro_mesada,
            "Procesos y Sentencias": r.total_procesos,
            "Total General": r.total_general,
            "Último Pago": r.ultima_fecha_pago,
            "Año Último Periodo": resolver_anio_ultimo_periodo(r.sentencias),
            "Analizado": "Sí" if r.is_analyzed else "No",
        }
        for r in resumenes
    ]
    return pd.DataFrame(filas, columns=COLUMNAS)


def exportar_sentencias_excel(resumenes) -> bytes:
    """
    Genera el .xlsx de la vista actual con encabezado y fila de totales.
    """
    df = resumenes_a_dataframe(resumenes)

    font_header = Font(name='Arial', size=10, bold=True)
    font_normal = Font(name='Arial', size=9)
    border_thin = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )
    fill_header = PatternFill(start_color="D9E1F2", end_color="D9E1F2", fill_type="solid")
    fill_total = PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid")

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Sentencias")
        ws = writer.sheets["Sentencias"]

        for col, nombre in enumerate(COLUMNAS, 1):
            cell = ws.cell(row=1, column=col)
            cell.font = font_header
            cell.fill = fill_header
            cell.border = border_thin
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            ws.column_dimensions[get_column_letter(col)].width = max(14, len(nombre) + 4)

        for row in ws.iter_rows(min_row=2, max_row=len(df) + 1):
            for cell in row:
                cell.font = font_normal
                cell.border = border_thin
                if COLUMNAS[cell.column - 1] in COLUMNAS_MONEDA:
                    cell.number_format = '#,##0.00'
                elif COLUMNAS[cell.column - 1] == "Último Pago":
                    cell.number_format = 'DD/MM/YYYY'

        fila_total = len(df) + 2
        ws.cell(row=fila_total, column=1, value="TOTALES").font = font_header
        for nombre in COLUMNAS_MONEDA:
            col = COLUMNAS.index(nombre) + 1
            cell = ws.cell(row=fila_total, column=col, value=float(df[nombre].sum()) if not df.empty else 0.0)
            cell.number_format = '#,##0.00'
            cell.font = font_header
        for col in range(1, len(COLUMNAS) + 1):
            ws.cell(row=fila_total, column=col).fill = fill_total
            ws.cell(row=fila_total, column=col).border = border_thin

    return buffer.getvalue()
