"""
Paginación de los listados (localidades, catálogos, artículos, usuarios y bitácora).

Las páginas se numeran desde 0 y todas las rutas de listado responden con
el mismo sobre: {"success", "data", "pagination", "timestamp"}.
"""

from typing import Any, List

from pydantic import BaseModel, Field

from utils.datetime_utils import get_local_now


class PaginationMeta(BaseModel):
    """Posición de la página dentro del listado."""
    page: int = Field(..., ge=0, description="Página actual (desde 0)")
    page_size: int = Field(..., ge=1, description="Registros por página")
    total_items: int = Field(..., ge=0, description="Registros que cumplen el filtro")
    total_pages: int = Field(..., ge=0, description="Páginas disponibles")
    has_next: bool = Field(..., description="Hay una página posterior")
    has_previous: bool = Field(..., description="Hay una página anterior")


def calculate_pagination_meta(page: int, page_size: int, total_items: int) -> PaginationMeta:
    """Arma la metadata de la página a partir del total devuelto por el repositorio."""
    total_pages = -(-total_items // page_size) if page_size > 0 else 0
    return PaginationMeta(
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
        has_next=page + 1 < total_pages,
        has_previous=page > 0,
    )


def create_paginated_response(
    items: List[Any],
    page: int,
    page_size: int,
    total_items: int,
) -> dict:
    """
    Envuelve una página de resultados con su metadata.

    Args:
        items: esquemas de la página (Localidad, Articulo, Bitacora, ...)
        page: página solicitada (desde 0)
        page_size: registros por página
        total_items: total sin paginar, tal como lo cuenta el servicio

    Returns:
        dict listo para devolverse desde la ruta
    """
    return {
        "success": True,
        "data": items,
        "pagination": calculate_pagination_meta(page, page_size, total_items).model_dump(),
        "timestamp": get_local_now(),
    }


def calculate_skip(page: int, page_size: int) -> int:
    #offset para .offset() de SQLAlchemy
    return page * page_size
