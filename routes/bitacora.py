"""
Consulta de bitácora (sólo lectura, supervisores y administradores).
"""

from fastapi import APIRouter, Query, Depends
from typing import Optional
import logging

from core.bitacora import AccionBitacora
from core.pagination import create_paginated_response
from core.exceptions import AppException
from services.bitacora_service import BitacoraService
from dependencies import get_bitacora_service
from auth import require_roles
from routes.errors import handle_service_exception
from config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bitacora", tags=["bitacora"])


@router.get("/")
def obtener_bitacora(
    page: int = Query(0, ge=0, description="Número de página (0-indexed)"),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    tabla: Optional[str] = Query(None, min_length=1, description="Nombre de la tabla en bitácora"),
    accion: Optional[AccionBitacora] = Query(None, description="CREATE, UPDATE o DELETE"),
    id_registro: Optional[int] = Query(None, gt=0, description="ID del registro afectado"),
    id_usuario: Optional[int] = Query(None, gt=0, description="Usuario que hizo el cambio"),
    _rol=Depends(require_roles("supervisor", "admin")),
    service: BitacoraService = Depends(get_bitacora_service),
):
    """
    Entradas de bitácora, más recientes primero.

    Cada entrada trae sólo los campos que cambiaron en la operación.
    """
    try:
        items, total = service.listar(
            page=page,
            page_size=page_size,
            tabla=tabla,
            accion=accion,
            id_registro=id_registro,
            id_usuario=id_usuario,
        )
        return create_paginated_response(items, page, page_size, total)
    except AppException as e:
        raise handle_service_exception(e)
