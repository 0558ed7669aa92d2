from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime


class Bitacora(BaseModel):
    """Entrada de bitácora con los fragmentos de campos modificados."""
    id_dt_bitacora: int
    accion: str = Field(..., description="Nombre de la acción en el catálogo")
    tabla: str = Field(..., description="Nombre de la tabla en el catálogo")
    id_registro_afectado: Optional[int] = None
    id_ct_sesion: int
    id_ct_usuario_in: int
    datos_anteriores: Dict[str, Any] = Field(default_factory=dict)
    datos_nuevos: Dict[str, Any] = Field(default_factory=dict)
    fecha_in: Optional[datetime] = None
