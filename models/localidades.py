from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class AmbitoLocalidad(str, Enum):
    urbano = "urbano"
    rural = "rural"


class LocalidadBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=150)
    ambito: Optional[AmbitoLocalidad] = None


class LocalidadCreate(LocalidadBase):
    pass


class LocalidadUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=150)
    ambito: Optional[AmbitoLocalidad] = None


class Localidad(LocalidadBase):
    model_config = ConfigDict(from_attributes=True)

    id_ct_localidad: int
    estado: bool = True
    fecha_in: Optional[datetime] = None
    fecha_up: Optional[datetime] = None
