"""
Inventario routes: catálogos de marcas y colores, y artículos.

El folio de cada artículo lo asigna el servidor al darlo de alta.
"""

from fastapi import APIRouter, HTTPException, Query, Depends, status
from typing import List, Optional
import logging

from models.inventario import (
    Articulo,
    ArticuloBatchCreate,
    ArticuloCreate,
    ArticuloUpdate,
    Color,
    ColorCreate,
    ColorUpdate,
    Marca,
    MarcaCreate,
    MarcaUpdate,
)
from models.common import create_delete_response
from core.pagination import create_paginated_response
from core.exceptions import AppException
from core.security import ContextoActor
from services.inventario_service import ArticuloService, ColorService, MarcaService
from dependencies import get_articulo_service, get_color_service, get_marca_service
from auth import get_current_user_dep, get_contexto_actor, require_roles
from routes.errors import handle_service_exception
from config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventario", tags=["inventario"])


# ==================== Marcas ====================

@router.post("/marcas", response_model=Marca, status_code=status.HTTP_201_CREATED)
def crear_marca(
    marca: MarcaCreate,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: MarcaService = Depends(get_marca_service),
):
    try:
        return service.create_item(marca, actor)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/marcas")
def obtener_marcas(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    include_inactive: bool = Query(False),
    current_user=Depends(get_current_user_dep),
    service: MarcaService = Depends(get_marca_service),
):
    try:
        items, total = service.get_items(page, page_size, include_inactive)
        return create_paginated_response(items, page, page_size, total)
    except AppException as e:
        raise handle_service_exception(e)


@router.put("/marcas/{marca_id}", response_model=Marca)
def actualizar_marca(
    marca_id: int,
    marca_update: MarcaUpdate,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: MarcaService = Depends(get_marca_service),
):
    try:
        return service.update_item(marca_id, marca_update, actor)
    except AppException as e:
        raise handle_service_exception(e)


@router.delete("/marcas/{marca_id}")
def eliminar_marca(
    marca_id: int,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: MarcaService = Depends(get_marca_service),
):
    try:
        service.delete_item(marca_id, actor)
        return create_delete_response("Marca eliminada correctamente", marca_id)
    except AppException as e:
        raise handle_service_exception(e)


# ==================== Colores ====================

@router.post("/colores", response_model=Color, status_code=status.HTTP_201_CREATED)
def crear_color(
    color: ColorCreate,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: ColorService = Depends(get_color_service),
):
    try:
        return service.create_item(color, actor)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/colores")
def obtener_colores(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    include_inactive: bool = Query(False),
    current_user=Depends(get_current_user_dep),
    service: ColorService = Depends(get_color_service),
):
    try:
        items, total = service.get_items(page, page_size, include_inactive)
        return create_paginated_response(items, page, page_size, total)
    except AppException as e:
        raise handle_service_exception(e)


@router.put("/colores/{color_id}", response_model=Color)
def actualizar_color(
    color_id: int,
    color_update: ColorUpdate,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: ColorService = Depends(get_color_service),
):
    try:
        return service.update_item(color_id, color_update, actor)
    except AppException as e:
        raise handle_service_exception(e)


@router.delete("/colores/{color_id}")
def eliminar_color(
    color_id: int,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: ColorService = Depends(get_color_service),
):
    try:
        service.delete_item(color_id, actor)
        return create_delete_response("Color eliminado correctamente", color_id)
    except AppException as e:
        raise handle_service_exception(e)


# ==================== Artículos ====================

@router.post("/articulos", response_model=Articulo, status_code=status.HTTP_201_CREATED)
def crear_articulo(
    articulo: ArticuloCreate,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: ArticuloService = Depends(get_articulo_service),
):
    """
    Da de alta un artículo con el siguiente folio de inventario.

    Folio, artículo y bitácora se confirman en una sola transacción.
    """
    try:
        return service.create_articulo(articulo, actor)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        logger.error(f"Error creating articulo: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al crear artículo"
        )


@router.post(
    "/articulos/batch",
    response_model=List[Articulo],
    status_code=status.HTTP_201_CREATED,
)
def crear_articulos_batch(
    lote: ArticuloBatchCreate,
    _rol=Depends(require_roles("supervisor", "admin")),
    actor: ContextoActor = Depends(get_contexto_actor),
    service: ArticuloService = Depends(get_articulo_service),
):
    """Alta masiva con folios consecutivos (todo o nada)."""
    try:
        return service.create_articulos_batch(lote.articulos, actor)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        logger.error(f"Error creating articulos batch: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al crear artículos"
        )


@router.get("/articulos")
def obtener_articulos(
    page: int = Query(0, ge=0, description="Número de página (0-indexed)"),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    id_marca: Optional[int] = Query(None, gt=0, description="Filtrar por marca"),
    id_color: Optional[int] = Query(None, gt=0, description="Filtrar por color"),
    include_inactive: bool = Query(False, description="Incluir artículos dados de baja"),
    current_user=Depends(get_current_user_dep),
    service: ArticuloService = Depends(get_articulo_service),
):
    try:
        items, total = service.get_articulos(
            page=page,
            page_size=page_size,
            id_marca=id_marca,
            id_color=id_color,
            include_inactive=include_inactive,
        )
        return create_paginated_response(items, page, page_size, total)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/articulos/folio/{folio}", response_model=Articulo)
def obtener_articulo_por_folio(
    folio: str,
    current_user=Depends(get_current_user_dep),
    service: ArticuloService = Depends(get_articulo_service),
):
    try:
        return service.get_articulo_by_folio(folio)
    except AppException as e:
        raise handle_service_exception(e)


@router.get("/articulos/{articulo_id}", response_model=Articulo)
def obtener_articulo(
    articulo_id: int,
    current_user=Depends(get_current_user_dep),
    service: ArticuloService = Depends(get_articulo_service),
):
    try:
        return service.get_articulo(articulo_id)
    except AppException as e:
        raise handle_service_exception(e)


@router.put("/articulos/{articulo_id}", response_model=Articulo)
def actualizar_articulo(
    articulo_id: int,
    articulo_update: ArticuloUpdate,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: ArticuloService = Depends(get_articulo_service),
):
    try:
        return service.update_articulo(articulo_id, articulo_update, actor)
    except AppException as e:
        raise handle_service_exception(e)


@router.delete("/articulos/{articulo_id}")
def eliminar_articulo(
    articulo_id: int,
    actor: ContextoActor = Depends(get_contexto_actor),
    service: ArticuloService = Depends(get_articulo_service),
):
    """Baja lógica; el folio no se libera."""
    try:
        service.delete_articulo(articulo_id, actor)
        return create_delete_response("Artículo dado de baja correctamente", articulo_id)
    except AppException as e:
        raise handle_service_exception(e)
