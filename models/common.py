"""
Modelos comunes de respuesta para la API.

Estos modelos proporcionan respuestas consistentes y estandarizadas
para todos los endpoints de la API
"""
from pydantic import BaseModel, Field
from datetime import datetime


class DeleteResponse(BaseModel):
    """Respuesta estándar para bajas lógicas (estado = False)."""
    success: bool = Field(True, description="Indica si la eliminación fue exitosa")
    message: str = Field(..., description="Mensaje descriptivo")
    deleted_id: int = Field(..., description="ID del registro dado de baja")
    soft_delete: bool = Field(True, description="Siempre baja lógica")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class HealthCheckResponse(BaseModel):
    """Respuesta del health check."""
    status: str = Field(..., description="Estado general (healthy/unhealthy)")
    service: str = Field(..., description="Nombre del servicio")
    version: str = Field(..., description="Versión de la API")
    database: str = Field(..., description="Estado de la base de datos")
    environment: str = Field(..., description="Entorno (production/development)")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


def create_delete_response(message: str, deleted_id: int) -> dict:
    """Helper para crear respuestas de eliminación."""
    return DeleteResponse(message=message, deleted_id=deleted_id).model_dump()
