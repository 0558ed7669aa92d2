"""Modelos de catálogos y artículos de inventario."""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class MarcaCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    descripcion: Optional[str] = Field(None, max_length=255)


class MarcaUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    descripcion: Optional[str] = Field(None, max_length=255)


class Marca(MarcaCreate):
    model_config = ConfigDict(from_attributes=True)

    id_ct_inventario_marca: int
    estado: bool = True


class ColorCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=50)


class ColorUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=50)


class Color(ColorCreate):
    model_config = ConfigDict(from_attributes=True)

    id_ct_inventario_color: int
    estado: bool = True


class ArticuloBase(BaseModel):
    descripcion: str = Field(..., min_length=1, max_length=255)
    no_serie: Optional[str] = Field(None, max_length=100)
    modelo: Optional[str] = Field(None, max_length=100)
    costo: Optional[float] = Field(None, ge=0)
    observaciones: Optional[str] = None
    id_ct_inventario_marca: Optional[int] = Field(None, gt=0)
    id_ct_inventario_color: Optional[int] = Field(None, gt=0)


class ArticuloCreate(ArticuloBase):
    """El folio lo asigna el servidor al dar de alta."""
    pass


class ArticuloBatchCreate(BaseModel):
    """Alta de varios artículos con folios consecutivos."""
    articulos: List[ArticuloCreate] = Field(..., min_length=1)


class ArticuloUpdate(BaseModel):
    descripcion: Optional[str] = Field(None, min_length=1, max_length=255)
    no_serie: Optional[str] = Field(None, max_length=100)
    modelo: Optional[str] = Field(None, max_length=100)
    costo: Optional[float] = Field(None, ge=0)
    observaciones: Optional[str] = None
    id_ct_inventario_marca: Optional[int] = Field(None, gt=0)
    id_ct_inventario_color: Optional[int] = Field(None, gt=0)


class Articulo(ArticuloBase):
    model_config = ConfigDict(from_attributes=True)

    id_dt_inventario_articulo: int
    folio: str
    estado: bool = True
    fecha_in: Optional[datetime] = None
    fecha_up: Optional[datetime] = None
