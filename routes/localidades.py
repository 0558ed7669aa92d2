"""
Localidad routes (Controllers) - Layered Architecture.

This module handles HTTP requests/responses for localidad endpoints.
All business logic is delegated to the LocalidadService layer.
"""

from fastapi import APIRouter, HTTPException, Query, Depends, status
from typing import Optional
from datetime import datetime
import logging

from models.localidades import AmbitoLocalidad, Localidad, LocalidadCreate, LocalidadUpdate
from models.common import create_delete_response
from core.pagination import create_paginated_response
from core.exceptions import AppException
from core.security import ContextoActor
from services.localidad_service import LocalidadService
from dependencies import get_localidad_service
from auth import get_current_user_dep, get_contexto_actor
from routes.errors import handle_service_exception
from config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/localidades", tags=["localidades"])


@router.post("/", response_model=Localidad, status_code=status.HTTP_201_CREATED)
def crear_localidad(
    localidad: LocalidadCreate,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: LocalidadService = Depends(get_localidad_service),
):
    """
    Create a new localidad.

    La creación queda registrada en bitácora con la sesión del token.
    """
    try:
        return service.create_localidad(localidad, actor)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        logger.error(f"Error creating localidad: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al crear localidad"
        )


@router.get("/")
def obtener_localidades(
    page: int = Query(0, ge=0, description="Número de página (0-indexed)"),
    page_size: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Tamaño de página"
    ),
    nombre: Optional[str] = Query(None, min_length=1, description="Búsqueda parcial por nombre"),
    ambito: Optional[AmbitoLocalidad] = Query(None, description="Filtrar por ámbito"),
    include_inactive: bool = Query(False, description="Incluir localidades dadas de baja"),
    current_user=Depends(get_current_user_dep),
    service: LocalidadService = Depends(get_localidad_service),
):
    """
    Get list of localidades with pagination.

    Returns:
        Paginated list of localidades
    """
    try:
        items, total = service.get_localidades(
            page=page,
            page_size=page_size,
            nombre=nombre,
            ambito=ambito.value if ambito else None,
            include_inactive=include_inactive,
        )
        return create_paginated_response(items, page, page_size, total)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/{localidad_id}", response_model=Localidad)
def obtener_localidad(
    localidad_id: int,
    current_user=Depends(get_current_user_dep),
    service: LocalidadService = Depends(get_localidad_service),
):
    try:
        return service.get_localidad(localidad_id)
    except AppException as e:
        raise handle_service_exception(e)


@router.put("/{localidad_id}", response_model=Localidad)
def actualizar_localidad(
    localidad_id: int,
    localidad_update: LocalidadUpdate,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: LocalidadService = Depends(get_localidad_service),
):
    """
    Update an existing localidad.

    Sólo los campos modificados se registran en bitácora.
    """
    try:
        return service.update_localidad(localidad_id, localidad_update, actor)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        logger.error(f"Error updating localidad {localidad_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al actualizar localidad"
        )


@router.delete("/{localidad_id}")
def eliminar_localidad(
    localidad_id: int,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: LocalidadService = Depends(get_localidad_service),
):
    """
    Delete a localidad (soft delete).

    The localidad is marked with estado = False but not removed from the database.
    """
    try:
        service.delete_localidad(localidad_id, actor)
        return create_delete_response("Localidad eliminada correctamente", localidad_id)
    except AppException as e:
        raise handle_service_exception(e)


@router.post("/{localidad_id}/restore")
def restaurar_localidad(
    localidad_id: int,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: LocalidadService = Depends(get_localidad_service),
):
    """Restore a soft-deleted localidad."""
    try:
        service.restore_localidad(localidad_id, actor)
        return {
            "success": True,
            "message": "Localidad restaurada correctamente",
            "id_ct_localidad": localidad_id,
            "timestamp": datetime.utcnow()
        }
    except AppException as e:
        raise handle_service_exception(e)
