from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    capturista = "capturista"
    supervisor = "supervisor"
    admin = "admin"


class UsuarioCreate(BaseModel):
    """Modelo para alta de usuarios (sólo administradores)."""
    usuario: str = Field(..., min_length=1, max_length=100)
    nombre: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=150)
    password: str = Field(..., min_length=6)
    role: Role = Field(Role.capturista, description="Rol del usuario")


class UsuarioUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=150)
    role: Optional[Role] = None


class Usuario(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_ct_usuario: int
    usuario: str
    nombre: str
    email: Optional[str] = None
    role: Role
    estado: bool = True
    fecha_in: Optional[datetime] = None


class LoginRequest(BaseModel):
    usuario: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Token de acceso; `id_sesion` identifica la sesión registrada en ct_sesion."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Segundos de vigencia")
    id_sesion: int
    usuario: Usuario
