"""
Folio routes.

Sólo lectura para usuarios autenticados; la asignación ocurre dentro de
las altas de cada sistema y nunca se expone directamente. El reinicio y
las estadísticas son exclusivos de administradores.
"""

from fastapi import APIRouter, Query, Depends
from typing import List, Optional
import logging

from models.folios import (
    FolioEstadistica,
    FolioExiste,
    FolioPreview,
    FolioReinicio,
    FolioReinicioResponse,
    FolioUltimo,
)
from core.exceptions import AppException
from services.folio_service import FolioService, normalizar_sistema, resolver_anio
from services.folio_admin_service import FolioAdminService
from dependencies import get_folio_admin_service, get_folio_service
from auth import get_current_user_dep, require_roles
from routes.errors import handle_service_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/folios", tags=["folios"])


@router.get("/estadisticas", response_model=List[FolioEstadistica])
def obtener_estadisticas(
    _admin=Depends(require_roles("admin")),
    service: FolioAdminService = Depends(get_folio_admin_service),
):
    """Último y siguiente folio de cada control activo."""
    try:
        return service.obtener_estadisticas()
    except AppException as e:
        raise handle_service_exception(e)


@router.post("/reiniciar", response_model=FolioReinicioResponse)
def reiniciar_folios(
    datos: FolioReinicio,
    admin=Depends(require_roles("admin")),
    service: FolioAdminService = Depends(get_folio_admin_service),
):
    """
    Reinicia a 0 el consecutivo de un sistema y año.

    No crea el control si no existe (responde reiniciado = false).
    """
    try:
        reiniciado = service.reiniciar_folios(datos.sistema, datos.anio, admin.id_ct_usuario)
        return FolioReinicioResponse(
            sistema=normalizar_sistema(datos.sistema), anio=datos.anio, reiniciado=reiniciado
        )
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{sistema}/preview", response_model=FolioPreview)
def preview_siguiente_folio(
    sistema: str,
    anio: Optional[int] = Query(None, ge=1, le=9999, description="Año (por defecto el actual)"),
    current_user=Depends(get_current_user_dep),
    service: FolioService = Depends(get_folio_service),
):
    """Siguiente folio sin reservarlo; otra alta concurrente puede tomarlo."""
    try:
        anio_actual = resolver_anio(anio)
        return FolioPreview(
            sistema=normalizar_sistema(sistema),
            anio=anio_actual,
            siguiente_folio=service.preview_siguiente_folio(sistema, anio_actual),
        )
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{sistema}/ultimo", response_model=FolioUltimo)
def obtener_ultimo_folio(
    sistema: str,
    anio: Optional[int] = Query(None, ge=1, le=9999),
    current_user=Depends(get_current_user_dep),
    service: FolioService = Depends(get_folio_service),
):
    try:
        anio_actual = resolver_anio(anio)
        return FolioUltimo(
            sistema=normalizar_sistema(sistema),
            anio=anio_actual,
            ultimo_folio=service.obtener_ultimo_folio(sistema, anio_actual),
        )
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{sistema}/existe", response_model=FolioExiste)
def existe_control(
    sistema: str,
    anio: Optional[int] = Query(None, ge=1, le=9999),
    current_user=Depends(get_current_user_dep),
    service: FolioService = Depends(get_folio_service),
):
    try:
        anio_actual = resolver_anio(anio)
        return FolioExiste(
            sistema=normalizar_sistema(sistema),
            anio=anio_actual,
            existe=service.existe_control(sistema, anio_actual),
        )
    except AppException as e:
        raise handle_service_exception(e)
