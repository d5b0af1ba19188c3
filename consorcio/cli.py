# CLI con argparse para analizar sentencias, consultarlas y revisar pagos

# Comandos:
# - crear-tablas
# - analizar-sentencias [--lote 100] [--preservar-analisis]
# - listar-sentencias [--texto --dependencia --categoria --anio --analizado/--pendiente --orden]
# - marcar-analizado DOCUMENTO [--desmarcar]
# - pagos DOCUMENTO [--desde 2024-01 --hasta 2025-06]
# - exportar-sentencias --out out/sentencias.xlsx
import argparse
import logging
import os
import sys
from datetime import datetime

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import SQLAlchemyError

from consorcio import settings
from consorcio.db import get_session, crear_tablas
from consorcio.consulta import FiltrosSentencias, ORDENES, consultar, fecha_corta
from consorcio.indice import analizar_sentencias, cargar_resumenes, marcar_analizado
from consorcio.pagos import buscar_pensionado, listar_pagos, totales_pago
from consorcio.parsers import formatear_moneda
from consorcio.reportes import exportar_sentencias_excel
from consorcio.sentencias import CATEGORIAS


def _mes(texto: str):
    return datetime.strptime(texto + "-01", "%Y-%m-%d").date()


def _imprimir_progreso(procesados, total):
    print(f"  {procesados}/{total} pensionados procesados")


def _cmd_analizar(session, args):
    resultado = analizar_sentencias(
        session,
        progreso=_imprimir_progreso,
        lote=args.lote,
        preservar_analisis=True if args.preservar_analisis else None,
    )
    print(f"Análisis completado: {resultado.pensionados} pensionados, {resultado.pagos} pagos, "
          f"{resultado.coincidencias} coincidencias, {resultado.resumenes} consolidados.")


def _cmd_listar(session, args):
    analizado = None
    if args.analizado:
        analizado = True
    elif args.pendiente:
        analizado = False
    filtros = FiltrosSentencias(
        texto=args.texto,
        dependencia=args.dependencia,
        categoria=args.categoria,
        analizado=analizado,
        anio=args.anio,
    )
    resumenes = consultar(cargar_resumenes(session), filtros, args.orden)
    if not resumenes:
        print("No hay consolidados que coincidan con los filtros.")
        return
    for r in resumenes:
        marca = "✔" if r.is_analyzed else " "
        print(f"[{marca}] {r.pensionado_id:<14} {r.nombre[:40]:<40} {r.dependencia[:25]:<25} "
              f"{formatear_moneda(r.total_general):>18}  {fecha_corta(r.ultima_fecha_pago)}")
    print(f"{len(resumenes)} pensionado(s). Total: {formatear_moneda(sum(r.total_general for r in resumenes))}")


def _cmd_pagos(session, args):
    pensionado = buscar_pensionado(session, args.documento)
    desde = _mes(args.desde) if args.desde else None
    # fin de mes de 'hasta'
    hasta = (_mes(args.hasta) + relativedelta(months=1, days=-1)) if args.hasta else None
    pagos = listar_pagos(session, pensionado["id"], desde, hasta)
    print(f"{pensionado.get('empleado') or 'N/A'} (C.C. {pensionado['id']})")
    if not pagos:
        print("El pensionado no tiene pagos registrados en el rango indicado.")
        return
    for pago in pagos:
        totales = totales_pago(pago)
        print(f"  {pago.periodo_pago or 'N/A':<30} Ingresos={formatear_moneda(totales['ingresos'])} "
              f"Egresos={formatear_moneda(totales['egresos'])} Neto={formatear_moneda(totales['neto'])}")


def _cmd_exportar(session, args):
    datos = exportar_sentencias_excel(cargar_resumenes(session))
    carpeta = os.path.dirname(args.out)
    if carpeta:
        os.makedirs(carpeta, exist_ok=True)
    with open(args.out, "wb") as f:
        f.write(datos)
    print(f"Archivo generado: {args.out}")


def main(argv=None):
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    parser = argparse.ArgumentParser("consorcio", description="ConsorcioManager: pagos y sentencias")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("crear-tablas")

    p_an = sub.add_parser("analizar-sentencias")
    p_an.add_argument("--lote", type=int, default=settings.LOTE_PROGRESO)
    p_an.add_argument("--preservar-analisis", action="store_true")

    p_ls = sub.add_parser("listar-sentencias")
    p_ls.add_argument("--texto")
    p_ls.add_argument("--dependencia")
    p_ls.add_argument("--categoria", choices=list(CATEGORIAS))
    p_ls.add_argument("--anio", type=int)
    grupo = p_ls.add_mutually_exclusive_group()
    grupo.add_argument("--analizado", action="store_true")
    grupo.add_argument("--pendiente", action="store_true")
    p_ls.add_argument("--orden", choices=ORDENES, default="total")

    p_mk = sub.add_parser("marcar-analizado")
    p_mk.add_argument("documento")
    p_mk.add_argument("--desmarcar", action="store_true")

    p_pg = sub.add_parser("pagos")
    p_pg.add_argument("documento")
    p_pg.add_argument("--desde")        # YYYY-MM
    p_pg.add_argument("--hasta")        # YYYY-MM

    p_ex = sub.add_parser("exportar-sentencias")
    p_ex.add_argument("--out", required=True)

    args = parser.parse_args(argv)
    if not args.cmd:
        parser.print_help()
        return 1

    if args.cmd == "crear-tablas":
        crear_tablas()
        print("Tablas creadas (si no existían)")
        return 0

    session = get_session()
    try:
        if args.cmd == "analizar-sentencias":
            _cmd_analizar(session, args)
        elif args.cmd == "listar-sentencias":
            _cmd_listar(session, args)
        elif args.cmd == "marcar-analizado":
            marcar_analizado(session, args.documento, analizado=not args.desmarcar)
            print(f"Pensionado {args.documento} {'desmarcado' if args.desmarcar else 'marcado como analizado'}.")
        elif args.cmd == "pagos":
            _cmd_pagos(session, args)
        elif args.cmd == "exportar-sentencias":
            _cmd_exportar(session, args)
        return 0
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    except SQLAlchemyError as e:
        print(f"Error de base de datos: {e}")
        print("Verifica la conexión a la base de datos y vuelve a intentarlo.")
        return 1
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
