"""
Repositorios de inventario: catálogos de marca y color, y artículos.
"""

from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

from repositories.base_repository import BaseRepository
from database.models import InventarioMarcaORM, InventarioColorORM, InventarioArticuloORM
from core.exceptions import DatabaseException

logger = logging.getLogger(__name__)


class _CatalogoPorNombre:
    """Búsqueda por nombre exacto (sin distinguir mayúsculas) para catálogos."""

    def find_by_nombre(self, nombre: str, exclude_id: Optional[int] = None):
        try:
            query = self.db.query(self.model_class).filter(
                func.lower(self.model_class.nombre) == nombre.strip().lower()
            )
            if exclude_id:
                query = query.filter(getattr(self.model_class, self.primary_key) != exclude_id)
            return query.first()
        except Exception as e:
            logger.error(f"Error finding {self.model_class.__name__} by nombre {nombre}: {e}")
            raise DatabaseException(f"Error al buscar {self.model_class.__name__}")


class InventarioMarcaRepository(_CatalogoPorNombre, BaseRepository[InventarioMarcaORM]):
    """Catálogo de marcas."""

    def __init__(self, db: Session):
        super().__init__(db, InventarioMarcaORM)


class InventarioColorRepository(_CatalogoPorNombre, BaseRepository[InventarioColorORM]):
    """Catálogo de colores."""

    def __init__(self, db: Session):
        super().__init__(db, InventarioColorORM)


class InventarioArticuloRepository(BaseRepository[InventarioArticuloORM]):
    """Repositorio de artículos de inventario."""

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de artículos.

        Args:
            db: SQLAlchemy session
        """
        super().__init__(db, InventarioArticuloORM)

    def find_by_folio(self, folio: str) -> Optional[InventarioArticuloORM]:
        """Busca un artículo por su folio."""
        try:
            return self.db.query(InventarioArticuloORM).filter(
                InventarioArticuloORM.folio == folio
            ).one_or_none()
        except Exception as e:
            logger.error(f"Error finding articulo by folio {folio}: {e}")
            raise DatabaseException("Error al buscar artículo por folio")
