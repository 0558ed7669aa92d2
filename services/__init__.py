"""
Capa de servicio para la lógica de negocio.
Este paquete contiene clases de servicio que implementan la lógica de negocio
y orquestan las operaciones entre repositorios.
"""

from .base_service import BaseService
from .bitacora_service import BitacoraService
from .folio_service import FolioService, formatear_folio
from .folio_admin_service import FolioAdminService

__all__ = [
    "BaseService",
    "BitacoraService",
    "FolioService",
    "FolioAdminService",
    "formatear_folio",
]
