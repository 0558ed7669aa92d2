from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm

from models.usuarios import LoginRequest, TokenResponse
from core.exceptions import AppException
from core.security import ContextoActor
from services.auth_service import AuthService
from dependencies import get_auth_service
from auth import get_contexto_actor
from routes.errors import handle_service_exception

router = APIRouter(prefix="/auth", tags=["auth"])


def _ip_origen(request: Request):
    return request.client.host if request.client else None


@router.post("/login", response_model=TokenResponse)
def login_with_json(
    login_data: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """
    Login endpoint that accepts JSON and returns user data.

    Abre una sesión nueva; su ID viaja en el token como `id_sesion`.
    """
    try:
        return service.iniciar_sesion(login_data.usuario, login_data.password, _ip_origen(request))
    except AppException as e:
        raise handle_service_exception(e)


@router.post("/token")
def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AuthService = Depends(get_auth_service),
):
    """
    OAuth2 compatible token endpoint (form-data).
    Used by Swagger UI and OAuth2 clients.
    """
    try:
        respuesta = service.iniciar_sesion(form_data.username, form_data.password, _ip_origen(request))
    except AppException as e:
        raise handle_service_exception(e)
    return {"access_token": respuesta.access_token, "token_type": "bearer"}


@router.post("/logout")
def logout(
    actor: ContextoActor = Depends(get_contexto_actor),
    service: AuthService = Depends(get_auth_service),
):
    """Cierra la sesión actual."""
    try:
        service.cerrar_sesion(actor)
    except AppException as e:
        raise handle_service_exception(e)
    return {"success": True, "message": "Sesión cerrada", "id_sesion": actor.id_sesion}
