"""
Repositorio base con operaciones CRUD comunes:
Este repositorio genérico proporciona operaciones de base de datos estándar
que se pueden reutilizar en todos los repositorios de entidades
"""

from typing import TypeVar, Generic, List, Optional, Type
from sqlalchemy.orm import Session
from sqlalchemy import desc, asc, inspect
import logging

from core.exceptions import NotFoundException, DatabaseException
from database.db import soft_delete, restore_deleted, set_audit_fields

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Repositorio genérico proporciona operaciones CRUD estándar

    Esta clase debe ser heredada por repositorios de entidades específicos.
    """

    def __init__(self, db: Session, model_class: Type[T]):
        """
        Inicializa el repositorio.

        Args:
            db: Sesión SQLAlchemy
            model_class: Clase del modelo ORM para este repositorio
        """
        self.db = db
        self.model_class = model_class

    @property
    def table_name(self) -> str:
        """Nombre de la tabla física del modelo."""
        return self.model_class.__tablename__

    @property
    def primary_key(self) -> str:
        """Nombre del atributo de llave primaria."""
        return inspect(self.model_class).primary_key[0].key

    def get_by_id(self, id: int) -> Optional[T]:
        """
        Obtiene una entidad por su ID.

        Args:
            id: ID de la entidad

        Returns:
            The entity or None if not found
        """
        try:
            return self.db.get(self.model_class, int(id))
        except Exception as e:
            logger.error(f"Error getting {self.model_class.__name__} by id {id}: {e}")
            raise DatabaseException(f"Error al obtener {self.model_class.__name__}")

    def get_by_id_or_fail(self, id: int) -> T:
        """
        Obtiene una entidad por su ID o lanza una excepción si no se encuentra.

        Raises:
            NotFoundException: If entity is not found
        """
        entity = self.get_by_id(id)
        if not entity:
            raise NotFoundException(
                resource=self.model_class.__name__,
                identifier=str(id)
            )
        return entity

    def _apply_filters(self, query, include_inactive: bool, filters: dict):
        if not include_inactive and hasattr(self.model_class, 'estado'):
            query = query.filter(self.model_class.estado == True)
        for field, value in filters.items():
            if hasattr(self.model_class, field) and value is not None:
                query = query.filter(getattr(self.model_class, field) == value)
        return query

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        include_inactive: bool = False,
        order_by: Optional[str] = None,
        order_desc: bool = False,
        **filters
    ) -> List[T]:
        """
        Obtiene todas las entidades con paginación.

        Args:
            skip: Número de registros a saltar
            limit: Número máximo de registros a devolver
            include_inactive: Si se incluyen los registros con estado = False
            order_by: Field name to order by
            order_desc: Whether to order descending
            **filters: Filtros de igualdad adicionales

        Returns:
            List of entities
        """
        try:
            query = self._apply_filters(
                self.db.query(self.model_class), include_inactive, filters
            )

            order_field = getattr(self.model_class, order_by or self.primary_key, None)
            if order_field is not None:
                query = query.order_by(desc(order_field) if order_desc else asc(order_field))

            return query.offset(skip).limit(limit).all()
        except Exception as e:
            logger.error(f"Error getting all {self.model_class.__name__}: {e}")
            raise DatabaseException(f"Error al listar {self.model_class.__name__}")

    def count(self, include_inactive: bool = False, **filters) -> int:
        """
        Cuenta las entidades que coinciden con los filtros.

        Args:
            include_inactive: Whether to include inactive records
            **filters: Additional filters as keyword arguments

        Returns:
            Count of matching entities
        """
        try:
            query = self._apply_filters(
                self.db.query(self.model_class), include_inactive, filters
            )
            return query.count()
        except Exception as e:
            logger.error(f"Error counting {self.model_class.__name__}: {e}")
            raise DatabaseException(f"Error al contar {self.model_class.__name__}")

    def create(self, entity: T, user_id: Optional[int] = None) -> T:
        """
        Crea una nueva entidad.

        Args:
            entity: La entidad a crear
            user_id: ID del usuario que crea la entidad (para auditoría)

        Returns:
            The created entity
        """
        try:
            if user_id:
                set_audit_fields(entity, user_id, creating=True)

            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
            return entity
        except Exception as e:
            logger.error(f"Error creating {self.model_class.__name__}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al crear {self.model_class.__name__}")

    def update(self, entity: T, user_id: Optional[int] = None) -> T:
        """
        Actualiza una entidad existente.

        Args:
            entity: La entidad a actualizar
            user_id: ID del usuario que actualiza la entidad (para auditoría)

        Returns:
            The updated entity
        """
        try:
            if user_id:
                set_audit_fields(entity, user_id, creating=False)

            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
            return entity
        except Exception as e:
            logger.error(f"Error updating {self.model_class.__name__}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al actualizar {self.model_class.__name__}")

    def delete(self, entity: T, user_id: Optional[int] = None) -> T:
        """
        Desactiva una entidad (soft delete sobre estado).

        Args:
            entity: La entidad a eliminar
            user_id: ID del usuario que elimina la entidad

        Returns:
            La entidad desactivada
        """
        try:
            soft_delete(entity, user_id)
            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
            return entity
        except Exception as e:
            logger.error(f"Error deleting {self.model_class.__name__}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al eliminar {self.model_class.__name__}")

    def restore(self, entity: T, user_id: Optional[int] = None) -> T:
        """
        Reactiva una entidad desactivada.

        Args:
            entity: La entidad a restaurar
            user_id: ID del usuario que restaura la entidad

        Returns:
            La entidad restaurada
        """
        try:
            restore_deleted(entity, user_id)
            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
            return entity
        except Exception as e:
            logger.error(f"Error restoring {self.model_class.__name__}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al restaurar {self.model_class.__name__}")

    def exists(self, id: int) -> bool:
        """Verifica si una entidad existe por su ID."""
        return self.get_by_id(id) is not None

    def commit(self) -> None:
        """Realiza el commit de la transacción actual."""
        try:
            self.db.commit()
        except Exception as e:
            logger.error(f"Error committing transaction: {e}")
            self.db.rollback()
            raise DatabaseException("Error al guardar cambios en la base de datos")

    def rollback(self) -> None:
        """Realiza el rollback de la transacción actual."""
        self.db.rollback()

    def refresh(self, entity: T) -> T:
        """Refresca una entidad desde la base de datos."""
        self.db.refresh(entity)
        return entity
