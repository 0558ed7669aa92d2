from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class FolioPreview(BaseModel):
    sistema: str
    anio: int
    siguiente_folio: str = Field(..., description="Siguiente folio (no reservado)")


class FolioUltimo(BaseModel):
    sistema: str
    anio: int
    ultimo_folio: Optional[str] = None


class FolioExiste(BaseModel):
    sistema: str
    anio: int
    existe: bool


class FolioReinicio(BaseModel):
    sistema: str = Field(..., min_length=1, max_length=10)
    anio: int = Field(..., ge=1, le=9999)


class FolioReinicioResponse(BaseModel):
    sistema: str
    anio: int
    reiniciado: bool


class FolioEstadistica(BaseModel):
    id: int
    sistema: str
    anio: int
    ultimo_folio: int
    ultimo_folio_formateado: Optional[str] = None
    siguiente_folio: str
    fecha_actualizacion: Optional[datetime] = None
