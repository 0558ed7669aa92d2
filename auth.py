import logging
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError
from fastapi.security import OAuth2PasswordBearer
from fastapi import Depends, HTTPException, status

from database import UsuarioORM, SesionORM
from database.db import get_db
from sqlalchemy.orm import Session
from config import settings
from core.security import ContextoActor

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token including standard claims (sub, iat, exp, iss, aud).

    `data` should include the user id under "sub" and the session id under
    "id_sesion"; every mutation is attributed to that session.
    """
    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_minutes))
    # Ensure standard claims
    if "sub" not in to_encode:
        raise ValueError("`data` must include `sub` (subject / user id)")
    to_encode["sub"] = str(to_encode["sub"])
    to_encode.update({
        "exp": expire,
        "iat": now,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience
    })
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token.

    Validates signature, expiration, issuer and audience. Raises HTTPException(401)
    for any invalid token state.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )
        return payload
    except ExpiredSignatureError:
        logger.info("Token expirado")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expirado")
    except JWTError as e:
        logger.info(f"Token inválido o claim mismatch: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido o expirado")


def _claim_entero(payload: dict, claim: str) -> int:
    try:
        return int(payload[claim])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Token inválido: {claim} faltante"
        )


def get_current_user_dep(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    payload = decode_token(token)
    user_id = _claim_entero(payload, "sub")
    user = db.get(UsuarioORM, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Usuario no encontrado")
    if not user.estado:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Usuario desactivado")
    return user


def get_contexto_actor(
    token: str = Depends(oauth2_scheme),
    current_user: UsuarioORM = Depends(get_current_user_dep),
    db: Session = Depends(get_db),
) -> ContextoActor:
    """Usuario y sesión del token; la sesión debe seguir activa."""
    payload = decode_token(token)
    id_sesion = _claim_entero(payload, "id_sesion")
    sesion = db.get(SesionORM, id_sesion)
    if not sesion or sesion.id_ct_usuario != current_user.id_ct_usuario:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sesión inválida")
    if not sesion.activa:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sesión cerrada")
    return ContextoActor(id_usuario=current_user.id_ct_usuario, id_sesion=id_sesion)


def require_roles(*allowed_roles):
    """Dependency factory that ensures the current user has one of the allowed roles.

    Usage in route: current_user = Depends(require_roles('supervisor', 'admin'))
    """

    def _dependency(current_user=Depends(get_current_user_dep)):
        if not current_user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Autenticación requerida")
        if current_user.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permisos insuficientes")
        return current_user

    return _dependency
