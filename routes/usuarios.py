"""
Usuario routes. Alta y administración de usuarios (sólo admin).
"""

from fastapi import APIRouter, HTTPException, Query, Depends, status
from typing import Optional
import logging

from models.usuarios import Role, Usuario, UsuarioCreate, UsuarioUpdate
from models.common import create_delete_response
from core.pagination import create_paginated_response
from core.exceptions import AppException
from core.security import ContextoActor
from services.usuario_service import UsuarioService
from dependencies import get_usuario_service
from auth import get_current_user_dep, get_contexto_actor, require_roles
from routes.errors import handle_service_exception
from config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/usuarios", tags=["usuarios"])


@router.get("/me", response_model=Usuario)
def obtener_usuario_actual(current_user=Depends(get_current_user_dep)):
    """Datos del usuario autenticado."""
    return Usuario.model_validate(current_user)


@router.post("/", response_model=Usuario, status_code=status.HTTP_201_CREATED)
def crear_usuario(
    usuario: UsuarioCreate,
    _admin=Depends(require_roles("admin")),
    actor: ContextoActor = Depends(get_contexto_actor),
    service: UsuarioService = Depends(get_usuario_service),
):
    try:
        return service.create_usuario(usuario, actor)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        logger.error(f"Error creating usuario: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al crear usuario"
        )


@router.get("/")
def obtener_usuarios(
    page: int = Query(0, ge=0, description="Número de página (0-indexed)"),
    page_size: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Tamaño de página"
    ),
    role: Optional[Role] = Query(None, description="Filtrar por rol"),
    include_inactive: bool = Query(False, description="Incluir usuarios desactivados"),
    _admin=Depends(require_roles("admin")),
    service: UsuarioService = Depends(get_usuario_service),
):
    try:
        items, total = service.get_usuarios(
            page=page,
            page_size=page_size,
            role=role.value if role else None,
            include_inactive=include_inactive,
        )
        return create_paginated_response(items, page, page_size, total)
    except AppException as e:
        raise handle_service_exception(e)


@router.put("/{usuario_id}", response_model=Usuario)
def actualizar_usuario(
    usuario_id: int,
    usuario_update: UsuarioUpdate,
    _admin=Depends(require_roles("admin")),
    actor: ContextoActor = Depends(get_contexto_actor),
    service: UsuarioService = Depends(get_usuario_service),
):
    try:
        return service.update_usuario(usuario_id, usuario_update, actor)
    except AppException as e:
        raise handle_service_exception(e)


@router.delete("/{usuario_id}")
def eliminar_usuario(
    usuario_id: int,
    _admin=Depends(require_roles("admin")),
    actor: ContextoActor = Depends(get_contexto_actor),
    service: UsuarioService = Depends(get_usuario_service),
):
    """Desactiva un usuario (estado = False)."""
    try:
        service.delete_usuario(usuario_id, actor)
        return create_delete_response("Usuario desactivado correctamente", usuario_id)
    except AppException as e:
        raise handle_service_exception(e)
