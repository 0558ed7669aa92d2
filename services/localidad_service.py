"""
Service for Localidad business logic.
"""

from typing import List, Optional
import logging

from services.base_service import BaseService
from services.bitacora_service import BitacoraService
from repositories.localidad_repository import LocalidadRepository
from database.models import LocalidadORM
from models.localidades import Localidad, LocalidadCreate, LocalidadUpdate
from core.pagination import calculate_skip
from core.security import ContextoActor, validate_id

logger = logging.getLogger(__name__)


class LocalidadService(BaseService[LocalidadORM, LocalidadRepository]):
    """Service for managing localidades."""

    def __init__(self, repository: LocalidadRepository, bitacora: BitacoraService):
        super().__init__(repository, bitacora)

    def create_localidad(self, data: LocalidadCreate, actor: ContextoActor) -> Localidad:
        """
        Create a new localidad.

        Args:
            data: Localidad creation data
            actor: usuario y sesión actuales
        """
        localidad = LocalidadORM(**data.model_dump(mode="json"))
        created = self.crear(localidad, actor)
        logger.info(f"Localidad {created.id_ct_localidad} creada por usuario {actor.id_usuario}")
        return Localidad.model_validate(created)

    def get_localidad(self, localidad_id: int) -> Localidad:
        localidad_id = validate_id(localidad_id, "localidad_id")
        return Localidad.model_validate(self.get_by_id_or_fail(localidad_id))

    def get_localidades(
        self,
        page: int = 0,
        page_size: int = 50,
        nombre: Optional[str] = None,
        ambito: Optional[str] = None,
        include_inactive: bool = False
    ) -> tuple[List[Localidad], int]:
        """
        Get list of localidades with filters.

        Args:
            page: Page number (0-indexed)
            page_size: Items per page
            nombre: búsqueda parcial por nombre
            ambito: urbano / rural
            include_inactive: incluir localidades dadas de baja
        """
        if nombre:
            items = self.repository.search_by_nombre(
                nombre,
                skip=calculate_skip(page, page_size),
                limit=page_size,
                include_inactive=include_inactive,
            )
            total = self.repository.count_by_nombre(nombre, include_inactive=include_inactive)
        else:
            items, total = self.get_all(
                page=page,
                page_size=page_size,
                include_inactive=include_inactive,
                order_by="nombre",
                ambito=ambito,
            )
        return [Localidad.model_validate(item) for item in items], total

    def update_localidad(
        self, localidad_id: int, data: LocalidadUpdate, actor: ContextoActor
    ) -> Localidad:
        localidad_id = validate_id(localidad_id, "localidad_id")
        cambios = data.model_dump(exclude_unset=True, mode="json")
        updated = self.actualizar(localidad_id, cambios, actor)
        logger.info(f"Localidad {localidad_id} actualizada por usuario {actor.id_usuario}")
        return Localidad.model_validate(updated)

    def delete_localidad(self, localidad_id: int, actor: ContextoActor) -> None:
        localidad_id = validate_id(localidad_id, "localidad_id")
        self.eliminar(localidad_id, actor)
        logger.info(f"Localidad {localidad_id} eliminada por usuario {actor.id_usuario}")

    def restore_localidad(self, localidad_id: int, actor: ContextoActor) -> Localidad:
        localidad_id = validate_id(localidad_id, "localidad_id")
        return Localidad.model_validate(self.restaurar(localidad_id, actor))
