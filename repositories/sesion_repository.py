"""
Repositorio para ct_sesion.
Cada inicio de sesión crea un registro; su ID viaja en el JWT.
"""

from typing import Optional
from datetime import datetime
import logging

from sqlalchemy.orm import Session

from repositories.base_repository import BaseRepository
from database.models import SesionORM
from core.exceptions import DatabaseException

logger = logging.getLogger(__name__)


class SesionRepository(BaseRepository[SesionORM]):
    """Repositorio de sesiones de usuario."""

    def __init__(self, db: Session):
        super().__init__(db, SesionORM)

    def abrir(
        self,
        id_usuario: int,
        jti: str,
        fecha_expiracion: datetime,
        ip_origen: Optional[str] = None,
    ) -> SesionORM:
        """Registra una sesión activa (sin commit)."""
        sesion = SesionORM(
            id_ct_usuario=id_usuario,
            jti=jti,
            ip_origen=ip_origen,
            activa=True,
            fecha_expiracion=fecha_expiracion,
        )
        try:
            self.db.add(sesion)
            self.db.flush()
            return sesion
        except Exception as e:
            logger.error(f"Error opening sesion for usuario {id_usuario}: {e}")
            self.db.rollback()
            raise DatabaseException("Error al registrar la sesión")

    def cerrar(self, sesion: SesionORM) -> SesionORM:
        """Marca la sesión como inactiva (sin commit)."""
        sesion.activa = False
        self.db.add(sesion)
        self.db.flush()
        return sesion
