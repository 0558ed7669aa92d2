"""
Inicio y cierre de sesión.

Cada login registra una sesión en ct_sesion; el JWT lleva su ID para
que la bitácora atribuya cada cambio a la sesión que lo hizo.
"""

from datetime import timedelta
from typing import Optional
from uuid import uuid4
import logging

from repositories.usuario_repository import UsuarioRepository
from repositories.sesion_repository import SesionRepository
from database.models import get_current_time
from database.db import verify_password
from models.usuarios import TokenResponse, Usuario
from core.exceptions import BusinessException, ForbiddenException
from core.security import ContextoActor
from auth import create_access_token
from config import settings

logger = logging.getLogger(__name__)


class AuthService:
    """Autenticación de usuarios y manejo de sesiones."""

    def __init__(self, usuario_repository: UsuarioRepository, sesion_repository: SesionRepository):
        self.usuario_repo = usuario_repository
        self.sesion_repo = sesion_repository

    def iniciar_sesion(
        self, usuario: str, password: str, ip_origen: Optional[str] = None
    ) -> TokenResponse:
        """
        Valida credenciales, abre una sesión y emite el token.

        Raises:
            BusinessException: credenciales incorrectas
            ForbiddenException: usuario desactivado
        """
        user = self.usuario_repo.find_by_usuario(usuario)
        if not user or not verify_password(user.password_salt, user.password_hash, password):
            logger.info(f"Intento de login fallido para '{usuario}'")
            raise BusinessException("Usuario o contraseña incorrectos")
        if not user.estado:
            raise ForbiddenException(
                "Esta cuenta ha sido desactivada. Contacte al administrador para restaurarla."
            )

        vigencia = timedelta(minutes=settings.jwt_access_minutes)
        jti = uuid4().hex
        sesion = self.sesion_repo.abrir(
            id_usuario=user.id_ct_usuario,
            jti=jti,
            fecha_expiracion=get_current_time() + vigencia,
            ip_origen=ip_origen,
        )
        self.sesion_repo.commit()

        token = create_access_token(
            {
                "sub": user.id_ct_usuario,
                "usuario": user.usuario,
                "role": user.role,
                "id_sesion": sesion.id_ct_sesion,
                "jti": jti,
            },
            expires_delta=vigencia,
        )
        logger.info(f"Sesión {sesion.id_ct_sesion} abierta para '{user.usuario}'")
        return TokenResponse(
            access_token=token,
            expires_in=int(vigencia.total_seconds()),
            id_sesion=sesion.id_ct_sesion,
            usuario=Usuario.model_validate(user),
        )

    def cerrar_sesion(self, actor: ContextoActor) -> None:
        """Desactiva la sesión del actor; el token deja de servir para mutaciones."""
        sesion = self.sesion_repo.get_by_id_or_fail(actor.id_sesion)
        self.sesion_repo.cerrar(sesion)
        self.sesion_repo.commit()
        logger.info(f"Sesión {actor.id_sesion} cerrada por usuario {actor.id_usuario}")
