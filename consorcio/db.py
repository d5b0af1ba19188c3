# Engine y sessionmaker SQLAlchemy (MySQL por defecto, DATABASE_URL para otros motores)
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from . import settings


def _dsn():
    if settings.DATABASE_URL:
        return settings.DATABASE_URL
    return f"mysql+pymysql://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}?charset=utf8mb4"


engine = create_engine(_dsn(), pool_pre_ping=True, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_session():
    """
    Retorna una nueva sesión SQLAlchemy.
    """
    return SessionLocal()


def crear_tablas(bind=None):
    """Crea las tablas del modelo si no existen."""
    from .models import Base

    Base.metadata.create_all(bind or engine)
