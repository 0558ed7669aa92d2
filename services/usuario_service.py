"""
Service for Usuario business logic.

Las altas y cambios de usuarios se auditan; las contraseñas nunca
llegan a la bitácora.
"""

from typing import List, Optional
import logging

from services.base_service import BaseService
from services.bitacora_service import BitacoraService
from repositories.usuario_repository import UsuarioRepository
from database.models import UsuarioORM
from database.db import hash_password
from models.usuarios import Usuario, UsuarioCreate, UsuarioUpdate
from core.exceptions import BusinessException, DuplicateException
from core.security import ContextoActor, validate_id

logger = logging.getLogger(__name__)


class UsuarioService(BaseService[UsuarioORM, UsuarioRepository]):
    """Service for managing usuario business logic."""

    def __init__(self, repository: UsuarioRepository, bitacora: BitacoraService):
        """
        Initialize usuario service.

        Args:
            repository: UsuarioRepository instance
            bitacora: BitacoraService instance
        """
        super().__init__(repository, bitacora)

    def create_usuario(self, usuario_data: UsuarioCreate, actor: ContextoActor) -> Usuario:
        """
        Create a new usuario.

        Raises:
            DuplicateException: If usuario already exists
        """
        if self.repository.exists_usuario(usuario_data.usuario):
            raise DuplicateException(
                resource="Usuario",
                field="usuario",
                value=usuario_data.usuario
            )

        salt_hex, hash_hex = hash_password(usuario_data.password)
        usuario_orm = UsuarioORM(
            usuario=usuario_data.usuario,
            nombre=usuario_data.nombre,
            email=usuario_data.email,
            role=usuario_data.role.value,
            password_salt=salt_hex,
            password_hash=hash_hex,
        )
        created = self.crear(usuario_orm, actor)

        logger.info(f"Usuario {created.id_ct_usuario} ({created.usuario}) creado")
        return Usuario.model_validate(created)

    def get_usuario(self, usuario_id: int) -> Usuario:
        usuario_id = validate_id(usuario_id, "usuario_id")
        return Usuario.model_validate(self.get_by_id_or_fail(usuario_id))

    def get_usuarios(
        self,
        page: int = 0,
        page_size: int = 50,
        role: Optional[str] = None,
        include_inactive: bool = False
    ) -> tuple[List[Usuario], int]:
        """
        Get list of usuarios with filters.

        Returns:
            Tuple of (list of usuarios, total count)
        """
        usuarios, total_count = self.get_all(
            page=page,
            page_size=page_size,
            include_inactive=include_inactive,
            order_by="usuario",
            role=role,
        )
        return [Usuario.model_validate(u) for u in usuarios], total_count

    def update_usuario(
        self,
        usuario_id: int,
        usuario_update: UsuarioUpdate,
        actor: ContextoActor
    ) -> Usuario:
        usuario_id = validate_id(usuario_id, "usuario_id")
        cambios = usuario_update.model_dump(exclude_unset=True, mode="json")
        updated = self.actualizar(usuario_id, cambios, actor)
        logger.info(f"Usuario {usuario_id} actualizado por usuario {actor.id_usuario}")
        return Usuario.model_validate(updated)

    def delete_usuario(self, usuario_id: int, actor: ContextoActor) -> None:
        """
        Delete a usuario (soft delete).

        Raises:
            BusinessException: si el usuario intenta desactivarse a sí mismo
        """
        usuario_id = validate_id(usuario_id, "usuario_id")
        if usuario_id == actor.id_usuario:
            raise BusinessException("No puedes desactivar tu propio usuario")
        self.eliminar(usuario_id, actor)
        logger.info(f"Usuario {usuario_id} desactivado por usuario {actor.id_usuario}")
