""" Utilidades principales y componentes compartidos para la aplicación.

Este paquete contiene:

- Excepciones personalizadas
- Reglas de bitácora (registro de tablas y cálculo de cambios)
- Contexto del actor y validación de identificadores
- Funciones auxiliares de paginación
"""

from .exceptions import (
    AppException,
    BusinessException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
    DuplicateException,
    ForbiddenException,
    DatabaseException,
    FolioAllocationException,
    AuditWriteException,
)
from .bitacora import (
    AccionBitacora,
    RegistroBitacora,
    TablaAuditable,
    extraer_campos_afectados,
    entity_snapshot,
)
from .security import (
    ContextoActor,
    validate_id,
)
from .pagination import (
    PaginationMeta,
    calculate_pagination_meta,
    create_paginated_response,
    calculate_skip,
)

__all__ = [
    # Excepciones
    "AppException",
    "BusinessException",
    "NotFoundException",
    "UnauthorizedException",
    "ValidationException",
    "DuplicateException",
    "ForbiddenException",
    "DatabaseException",
    "FolioAllocationException",
    "AuditWriteException",
    # bitácora
    "AccionBitacora",
    "RegistroBitacora",
    "TablaAuditable",
    "extraer_campos_afectados",
    "entity_snapshot",
    # seguridad
    "ContextoActor",
    "validate_id",
    # paginacion
    "PaginationMeta",
    "calculate_pagination_meta",
    "create_paginated_response",
    "calculate_skip",
]
