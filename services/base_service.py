"""
Servicio base con operaciones de lógica de negocio comunes.
Esta clase proporciona una base para las clases de servicio que implementan
la lógica de negocio y coordinan las operaciones del repositorio.

Toda alta, actualización, eliminación o restauración pasa por aquí para
que el registro en bitácora quede en la misma transacción que el cambio.
"""

from typing import Any, Dict, TypeVar, Generic, List, Optional
import logging

from core.bitacora import AccionBitacora, entity_snapshot
from core.exceptions import AppException, BusinessException, ValidationException
from core.pagination import calculate_skip
from core.security import ContextoActor
from services.bitacora_service import BitacoraService

logger = logging.getLogger(__name__)

# Type variables
T = TypeVar('T')  # ORM Model
R = TypeVar('R')  # Repository

#nunca se asignan desde un payload de actualización
CAMPOS_PROTEGIDOS = frozenset({
    "estado",
    "fecha_in",
    "fecha_up",
    "id_ct_usuario_in",
    "id_ct_usuario_up",
})


class BaseService(Generic[T, R]):
    """
    Servicio base que proporciona operaciones lógicas de negocio comunes.
    Esta clase debe ser heredada por servicios de entidades específicas.
    """

    def __init__(self, repository: R, bitacora: BitacoraService):
        """
        Inicializa el servicio.

        Args:
            repository: The repository instance for data access
            bitacora: servicio que registra las mutaciones auditables
        """
        self.repository = repository
        self.bitacora = bitacora

    def get_by_id(self, id: int) -> Optional[T]:
        """Obtiene una entidad por su ID."""
        return self.repository.get_by_id(id)

    def get_by_id_or_fail(self, id: int) -> T:
        """
        Obtiene una entidad por su ID o lanza una excepción si no se encuentra.

        Raises:
            NotFoundException: If entity is not found
        """
        return self.repository.get_by_id_or_fail(id)

    def get_all(
        self,
        page: int = 0,
        page_size: int = 50,
        include_inactive: bool = False,
        order_by: Optional[str] = None,
        order_desc: bool = False,
        **filters
    ) -> tuple[List[T], int]:
        """
        Obtiene todas las entidades con paginación.

        Args:
            page: Número de página (0-indexed)
            page_size: Items por página
            include_inactive: Si se incluyen los registros dados de baja
            order_by: Field name to order by
            order_desc: Si se debe ordenar en orden descendente
            **filters: filtros de igualdad

        Returns:
            Tuple of (list of entities, total count)
        """
        skip = calculate_skip(page, page_size)
        items = self.repository.get_all(
            skip=skip,
            limit=page_size,
            include_inactive=include_inactive,
            order_by=order_by,
            order_desc=order_desc,
            **filters
        )
        total_count = self.repository.count(include_inactive=include_inactive, **filters)
        return items, total_count

    def exists(self, id: int) -> bool:
        """Verifica si una entidad existe por su ID."""
        return self.repository.exists(id)

    def crear(self, entity: T, actor: ContextoActor, commit: bool = True) -> T:
        """
        Inserta la entidad y registra la creación en bitácora.

        Args:
            entity: instancia ORM nueva
            actor: usuario y sesión que crean el registro
            commit: False para dejar el cambio en la transacción del llamador
        """
        try:
            created = self.repository.create(entity, user_id=actor.id_usuario)
            self._auditar(AccionBitacora.create, created, actor, None, entity_snapshot(created))
            if commit:
                self.repository.commit()
        except AppException:
            self.repository.rollback()
            raise
        return created

    def actualizar(
        self,
        id: int,
        cambios: Dict[str, Any],
        actor: ContextoActor,
        commit: bool = True,
    ) -> T:
        """
        Aplica los cambios a la entidad y registra sólo los campos modificados.

        Raises:
            NotFoundException: si no existe
            BusinessException: si está dada de baja
            ValidationException: si un campo no existe o no es editable
        """
        entity = self.get_by_id_or_fail(id)
        self.validate_active(entity)
        for campo in cambios:
            if campo in CAMPOS_PROTEGIDOS or campo == self.repository.primary_key:
                raise ValidationException(f"El campo '{campo}' no es editable", field=campo)
            if not hasattr(entity, campo):
                raise ValidationException(f"Campo desconocido: '{campo}'", field=campo)

        antes = entity_snapshot(entity)
        try:
            for campo, valor in cambios.items():
                setattr(entity, campo, valor)
            updated = self.repository.update(entity, user_id=actor.id_usuario)
            self._auditar(AccionBitacora.update, updated, actor, antes, entity_snapshot(updated))
            if commit:
                self.repository.commit()
        except AppException:
            self.repository.rollback()
            raise
        return updated

    def eliminar(self, id: int, actor: ContextoActor) -> T:
        """
        Baja lógica (estado = False) registrada como eliminación.

        Raises:
            NotFoundException: si no existe
            BusinessException: si ya estaba dada de baja
        """
        entity = self.get_by_id_or_fail(id)
        if not entity.estado:
            raise BusinessException("El registro ya está eliminado")

        antes = entity_snapshot(entity)
        try:
            deleted = self.repository.delete(entity, user_id=actor.id_usuario)
            self._auditar(AccionBitacora.delete, deleted, actor, antes, entity_snapshot(deleted))
            self.repository.commit()
        except AppException:
            self.repository.rollback()
            raise
        return deleted

    def restaurar(self, id: int, actor: ContextoActor) -> T:
        """
        Reactiva una entidad dada de baja; se registra como actualización.

        Raises:
            BusinessException: si la entidad no está dada de baja
        """
        entity = self.get_by_id_or_fail(id)
        if entity.estado:
            raise BusinessException("El registro no está eliminado")

        antes = entity_snapshot(entity)
        try:
            restored = self.repository.restore(entity, user_id=actor.id_usuario)
            self._auditar(AccionBitacora.update, restored, actor, antes, entity_snapshot(restored))
            self.repository.commit()
        except AppException:
            self.repository.rollback()
            raise
        return restored

    def validate_active(self, entity: T) -> None:
        """
        Valida que una entidad no esté dada de baja.

        Raises:
            BusinessException: If entity is inactive
        """
        if hasattr(entity, 'estado') and not entity.estado:
            raise BusinessException("El registro está eliminado y no puede ser utilizado")

    def _auditar(
        self,
        accion: AccionBitacora,
        entity: T,
        actor: ContextoActor,
        antes: Optional[Dict[str, Any]],
        despues: Dict[str, Any],
    ) -> None:
        self.bitacora.auditar(
            tabla=self.repository.table_name,
            accion=accion,
            actor=actor,
            datos_anteriores=antes,
            datos_nuevos=despues,
            id_registro=getattr(entity, self.repository.primary_key),
        )
