"""
Dependency injection for services and repositories.

This module provides FastAPI dependencies for injecting services
and repositories into route handlers. Todos los servicios de una misma
petición comparten la sesión de `get_db`, así que folio, entidad y
bitácora se confirman juntos.
"""

from sqlalchemy.orm import Session
from fastapi import Depends

from database.db import get_db
from core.bitacora import RegistroBitacora
from repositories.bitacora_repository import BitacoraRepository
from repositories.folio_repository import FolioControlRepository
from repositories.usuario_repository import UsuarioRepository
from repositories.sesion_repository import SesionRepository
from repositories.localidad_repository import LocalidadRepository
from repositories.inventario_repository import (
    InventarioArticuloRepository,
    InventarioColorRepository,
    InventarioMarcaRepository,
)
from services.bitacora_service import BitacoraService
from services.folio_service import FolioService
from services.folio_admin_service import FolioAdminService
from services.auth_service import AuthService
from services.usuario_service import UsuarioService
from services.localidad_service import LocalidadService
from services.inventario_service import ArticuloService, ColorService, MarcaService


# ==================== Registro de bitácora ====================

def construir_registro_bitacora() -> RegistroBitacora:
    """
    Tablas de entidad y su configuración de bitácora.

    Una tabla ausente o registrada con habilitado=False no genera entradas.
    """
    registro = RegistroBitacora()
    registro.registrar("ct_usuario", nombre_bitacora="USUARIO")
    registro.registrar("ct_localidad", nombre_bitacora="LOCALIDAD")
    registro.registrar("ct_inventario_marca", nombre_bitacora="INVENTARIO_MARCA")
    registro.registrar("ct_inventario_color", habilitado=False)
    registro.registrar("dt_inventario_articulo", nombre_bitacora="INVENTARIO_ARTICULO")
    return registro


registro_bitacora = construir_registro_bitacora()


def get_registro_bitacora() -> RegistroBitacora:
    return registro_bitacora


# ==================== Service Dependencies ====================

def get_bitacora_service(
    db: Session = Depends(get_db),
    registro: RegistroBitacora = Depends(get_registro_bitacora),
) -> BitacoraService:
    """
    Get BitacoraService instance.

    Args:
        db: Database session (injected by FastAPI)
        registro: tablas auditables

    Returns:
        BitacoraService instance with injected repository
    """
    return BitacoraService(BitacoraRepository(db), registro)


def get_folio_service(db: Session = Depends(get_db)) -> FolioService:
    """Asignación de folios sobre la sesión de la petición."""
    return FolioService(FolioControlRepository(db))


def get_folio_admin_service(db: Session = Depends(get_db)) -> FolioAdminService:
    """Operaciones administrativas de folios (reinicio, estadísticas)."""
    return FolioAdminService(FolioControlRepository(db))


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(UsuarioRepository(db), SesionRepository(db))


def get_usuario_service(
    db: Session = Depends(get_db),
    bitacora: BitacoraService = Depends(get_bitacora_service),
) -> UsuarioService:
    """
    Get UsuarioService instance.

    Example:
        ```python
        @router.get("/usuarios")
        def get_usuarios(
            service: UsuarioService = Depends(get_usuario_service)
        ):
            return service.get_usuarios(...)
        ```
    """
    return UsuarioService(UsuarioRepository(db), bitacora)


def get_localidad_service(
    db: Session = Depends(get_db),
    bitacora: BitacoraService = Depends(get_bitacora_service),
) -> LocalidadService:
    return LocalidadService(LocalidadRepository(db), bitacora)


def get_marca_service(
    db: Session = Depends(get_db),
    bitacora: BitacoraService = Depends(get_bitacora_service),
) -> MarcaService:
    return MarcaService(InventarioMarcaRepository(db), bitacora)


def get_color_service(
    db: Session = Depends(get_db),
    bitacora: BitacoraService = Depends(get_bitacora_service),
) -> ColorService:
    return ColorService(InventarioColorRepository(db), bitacora)


def get_articulo_service(
    db: Session = Depends(get_db),
    bitacora: BitacoraService = Depends(get_bitacora_service),
    folio_service: FolioService = Depends(get_folio_service),
) -> ArticuloService:
    """
    Get ArticuloService instance.

    Returns:
        ArticuloService con folios, catálogos y bitácora sobre la misma sesión
    """
    return ArticuloService(
        InventarioArticuloRepository(db),
        bitacora,
        folio_service,
        InventarioMarcaRepository(db),
        InventarioColorRepository(db),
    )
