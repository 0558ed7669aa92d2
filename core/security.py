"""
Utilidades de seguridad para validación, permisos y contexto del actor.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import ValidationException


class ContextoActor(BaseModel):
    """
    Usuario y sesión que ejecutan una operación.

    Ambos identificadores provienen del JWT y son obligatorios para
    cualquier operación que modifique datos (folios y bitácora).
    """
    model_config = ConfigDict(frozen=True)

    id_usuario: int = Field(..., gt=0)
    id_sesion: int = Field(..., gt=0)


def validate_id(value: Any, field_name: str = "id") -> int:
    """
    Valida que un valor sea un identificador entero positivo.

    Args:
        value: Valor a validar
        field_name: Nombre del campo para mensajes de error

    Returns:
        El identificador como entero

    Raises:
        ValidationException: Si el valor no es un entero positivo
    """
    try:
        if isinstance(value, bool):
            raise TypeError(field_name)
        id_value = int(value)
    except (ValueError, TypeError):
        raise ValidationException(
            message=f"{field_name} debe ser un entero válido",
            field=field_name,
            details={"value": str(value)}
        )
    if id_value <= 0:
        raise ValidationException(
            message=f"{field_name} debe ser mayor a 0",
            field=field_name,
            details={"value": str(value)}
        )
    return id_value
