# Caché explícita del pensionado consultado y sus pagos, compartida entre vistas

import logging

from .pagos import buscar_pensionado, listar_pagos

logger = logging.getLogger(__name__)


class SesionPensionado:
    """
    Guarda (pensionado, pagos) por documento mientras el usuario navega
    entre la consulta y el detalle. Se limpia de forma explícita.
    """

    def __init__(self):
        self._datos = {}
        self.activo = None

    def guardar(self, documento: str, pensionado: dict, pagos: list) -> None:
        logger.debug(f"Sesión: guardando pensionado {documento} con {len(pagos)} pagos")
        self._datos[documento] = (pensionado, pagos)
        self.activo = documento

    def obtener(self, documento: str = None):
        """(pensionado, pagos) del documento (o del activo); None si no está cargado."""
        documento = documento or self.activo
        if documento is None:
            return None
        return self._datos.get(documento)

    def cargar(self, session, documento: str):
        documento = (documento or "").strip()
        cacheado = self.obtener(documento) if documento else None
        if cacheado is not None:
            self.activo = documento
            return cacheado
        pensionado = buscar_pensionado(session, documento)
        pagos = listar_pagos(session, documento)
        self.guardar(documento, pensionado, pagos)
        return pensionado, pagos

    def limpiar(self, documento: str = None) -> None:
        if documento is None:
            logger.debug("Sesión: limpiando todos los pensionados")
            self._datos.clear()
            self.activo = None
            return
        self._datos.pop(documento, None)
        if self.activo == documento:
            self.activo = None

    def __contains__(self, documento):
        return documento in self._datos

    def __len__(self):
        return len(self._datos)
