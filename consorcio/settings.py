from dotenv import load_dotenv
import os

load_dotenv()
DB_HOST = os.getenv("DB_HOST", "127.0.0.1")
DB_PORT = int(os.getenv("DB_PORT", "3306"))
DB_NAME = os.getenv("DB_NAME", "consorcio")
DB_USER = os.getenv("DB_USER", "consorcio_user")
DB_PASS = os.getenv("DB_PASS", "consorcio_pass")

# Si se define, reemplaza la conexión MySQL (ej. sqlite:///consorcio.db)
DATABASE_URL = os.getenv("DATABASE_URL", "")

# Cada cuántos pensionados se notifica el avance del análisis de sentencias
LOTE_PROGRESO = int(os.getenv("LOTE_PROGRESO", "100"))

# Conservar la marca de "analizado" al recalcular sentencias (ver DESIGN.md)
PRESERVAR_ANALISIS = os.getenv("PRESERVAR_ANALISIS", "false").strip().lower() in ("1", "true", "si", "sí", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
