# Modelos SQLAlchemy equivalentes a las colecciones de pensionados, pagos y sentencias
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy import Column, VARCHAR, DATETIME, DATE, Integer, Float, Boolean, JSON, ForeignKey

Base = declarative_base()


class Pensionado(Base):
    __tablename__ = "pensionado"
    # El id es el número de documento
    id = Column(VARCHAR(30), primary_key=True)
    empleado = Column(VARCHAR(200))
    documento = Column(VARCHAR(30))
    cargo = Column(VARCHAR(200))
    empresa = Column(VARCHAR(200))
    nit_empresa = Column(VARCHAR(30))
    esquema = Column(VARCHAR(100))
    grado = Column(VARCHAR(50))
    basico = Column(VARCHAR(30))
    neto = Column(VARCHAR(30))
    ano_jubilacion = Column(VARCHAR(10))
    fondo_salud = Column(VARCHAR(100))
    pnl_centro_costo = Column(VARCHAR(200))
    pnl_dependencia = Column(VARCHAR(200))
    pnl_nivel_contratacion = Column(VARCHAR(100))
    pnl_mensaje = Column(VARCHAR(255))

    pagos = relationship("Pago", back_populates="pensionado", order_by="Pago.fecha_procesado.desc()")

    def a_dict(self) -> dict:
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}


class Pariss1(Base):
    """Registro secundario con los datos legales de la pensión (mismo id que el pensionado)."""
    __tablename__ = "pariss1"
    id = Column(VARCHAR(30), primary_key=True)
    cedula = Column(VARCHAR(30))
    afilia = Column(VARCHAR(30))
    ciudad_iss = Column(VARCHAR(100))
    dir_iss = Column(VARCHAR(200))
    telefono_iss = Column(VARCHAR(30))
    comparte = Column(DATE)
    fe_adquiere = Column(DATE)
    fe_causa = Column(DATE)
    fe_ingreso = Column(DATE)
    fe_nacido = Column(DATE)
    fe_vinculado = Column(DATE)
    identifica = Column(Integer)
    mesada = Column(Float)
    pension_ini = Column(Float)
    regimen = Column(Integer)
    res_ano = Column(Integer)
    res_nro = Column(VARCHAR(50))
    riesgo = Column(VARCHAR(50))
    seguro = Column(Integer)
    semanas = Column(Integer)
    sexo = Column(Integer)
    tranci = Column(Boolean)

    def a_dict(self) -> dict:
        return {c.name: getattr(self, c.name) for c in self.__table__.columns if c.name != "id"}


class Pago(Base):
    __tablename__ = "pago"
    # Los ids de pago son únicos solo dentro de cada pensionado
    pensionado_id = Column(VARCHAR(30), ForeignKey("pensionado.id"), primary_key=True)
    id = Column(VARCHAR(64), primary_key=True)
    anio = Column(VARCHAR(10))
    periodo_pago = Column(VARCHAR(100))
    fecha_procesado = Column(DATETIME)
    fecha_liquidacion = Column(VARCHAR(50))
    procesado = Column(Boolean, default=False)
    basico = Column(VARCHAR(30))
    grado = Column(VARCHAR(50))
    valor_liquidado = Column(VARCHAR(30))
    valor_neto = Column(VARCHAR(30))
    # Lista de {"codigo", "nombre", "ingresos", "egresos"}
    detalles = Column(JSON, default=list)

    pensionado = relationship("Pensionado", back_populates="pagos")


class SentenciaIndex(Base):
    """Una fila por coincidencia (pensionado, pago, concepto)."""
    __tablename__ = "sentencia_index"
    id = Column(VARCHAR(255), primary_key=True)
    pensionado_id = Column(VARCHAR(30), nullable=False, index=True)
    pago_id = Column(VARCHAR(64), nullable=False)
    concepto = Column(VARCHAR(200), nullable=False)
    valor = Column(Float, nullable=False)
    fecha_pago = Column(DATETIME)
    periodo_pago = Column(VARCHAR(100))
    nombre = Column(VARCHAR(200))
    dependencia = Column(VARCHAR(200))
    centro_costo = Column(VARCHAR(200))
    fecha_indexado = Column(DATETIME)


class UsuarioSentencia(Base):
    """Consolidado por pensionado de los pagos de sentencias encontrados."""
    __tablename__ = "usuario_sentencia"
    id = Column(VARCHAR(30), primary_key=True)
    nombre = Column(VARCHAR(200))
    dependencia = Column(VARCHAR(200))
    centro_costo = Column(VARCHAR(200))
    # Lista serializada de SentenciaDetalle
    sentencias = Column(JSON, default=list)
    total_costas_proc = Column(Float, default=0.0)
    total_retro_mesada = Column(Float, default=0.0)
    total_procesos = Column(Float, default=0.0)
    total_general = Column(Float, default=0.0, index=True)
    ultima_fecha_pago = Column(DATETIME)
    is_analyzed = Column(Boolean, default=False)
    fecha_analisis = Column(DATETIME)
    fecha_actualizacion = Column(DATETIME)
