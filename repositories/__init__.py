"""
Capa de repositorio para el acceso a datos.
Este paquete contiene clases de repositorio que gestionan todas las operaciones de la base de datos.
Los repositorios proporcionan una abstracción sobre el ORM y no deben contener
lógica de negocio.

"""

from .base_repository import BaseRepository
from .bitacora_repository import BitacoraRepository
from .folio_repository import FolioControlRepository
from .usuario_repository import UsuarioRepository
from .sesion_repository import SesionRepository
from .localidad_repository import LocalidadRepository
from .inventario_repository import (
    InventarioArticuloRepository,
    InventarioColorRepository,
    InventarioMarcaRepository,
)

__all__ = [
    "BaseRepository",
    "BitacoraRepository",
    "FolioControlRepository",
    "UsuarioRepository",
    "SesionRepository",
    "LocalidadRepository",
    "InventarioArticuloRepository",
    "InventarioColorRepository",
    "InventarioMarcaRepository",
]
