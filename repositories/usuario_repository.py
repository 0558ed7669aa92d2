"""
Repositorio para la entidad Usuario.
Gestiona todas las operaciones de base de datos relacionadas con los usuarios.
"""

from typing import Optional
from sqlalchemy.orm import Session

from repositories.base_repository import BaseRepository
from database.models import UsuarioORM
from core.exceptions import DatabaseException
import logging

logger = logging.getLogger(__name__)


class UsuarioRepository(BaseRepository[UsuarioORM]):
    """Repositorio para la gestión de entidades de usuario."""

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de usuarios.

        Args:
            db: SQLAlchemy session
        """
        super().__init__(db, UsuarioORM)

    def find_by_usuario(self, usuario: str) -> Optional[UsuarioORM]:
        """
        Busca un usuario por su nombre de usuario.

        Returns:
            Usuario ORM instance or None si no se encuentra
        """
        try:
            return self.db.query(UsuarioORM).filter(
                UsuarioORM.usuario == usuario
            ).one_or_none()
        except Exception as e:
            logger.error(f"Error finding usuario {usuario}: {e}")
            raise DatabaseException("Error al buscar usuario")

    def exists_usuario(self, usuario: str, exclude_id: Optional[int] = None) -> bool:
        """
        Verifica si un nombre de usuario ya existe.

        Args:
            usuario: nombre de usuario a verificar
            exclude_id: ID a excluir de la verificación (para actualizaciones)
        """
        try:
            query = self.db.query(UsuarioORM).filter(UsuarioORM.usuario == usuario)
            if exclude_id:
                query = query.filter(UsuarioORM.id_ct_usuario != exclude_id)
            return query.first() is not None
        except Exception as e:
            logger.error(f"Error checking if usuario exists {usuario}: {e}")
            raise DatabaseException("Error al verificar usuario")
