"""
Repositorio para la entidad Localidad.
"""

from typing import List
from sqlalchemy.orm import Session
import logging

from repositories.base_repository import BaseRepository
from database.models import LocalidadORM
from core.exceptions import DatabaseException

logger = logging.getLogger(__name__)


class LocalidadRepository(BaseRepository[LocalidadORM]):
    """Repositorio para localidades."""

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de localidades.

        Args:
            db: SQLAlchemy session
        """
        super().__init__(db, LocalidadORM)

    def search_by_nombre(
        self,
        nombre: str,
        skip: int = 0,
        limit: int = 100,
        include_inactive: bool = False
    ) -> List[LocalidadORM]:
        """
        Busca localidades por nombre (coincidencia parcial insensible a mayúsculas).

        Args:
            nombre: Texto a buscar
            skip: Número de registros a omitir
            limit: Número máximo de registros a devolver
            include_inactive: Si se incluyen localidades dadas de baja
        """
        try:
            query = self.db.query(LocalidadORM).filter(
                LocalidadORM.nombre.ilike(f"%{nombre}%")
            )
            if not include_inactive:
                query = query.filter(LocalidadORM.estado == True)
            return query.order_by(LocalidadORM.nombre).offset(skip).limit(limit).all()
        except Exception as e:
            logger.error(f"Error searching localidades by nombre {nombre}: {e}")
            raise DatabaseException("Error al buscar localidades por nombre")

    def count_by_nombre(self, nombre: str, include_inactive: bool = False) -> int:
        query = self.db.query(LocalidadORM).filter(LocalidadORM.nombre.ilike(f"%{nombre}%"))
        if not include_inactive:
            query = query.filter(LocalidadORM.estado == True)
        return query.count()
