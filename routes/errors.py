"""
Conversión de excepciones de la capa de servicio a respuestas HTTP.
"""

from fastapi import HTTPException, status
import logging

from core.exceptions import (
    AppException,
    AuditWriteException,
    FolioAllocationException,
    NotFoundException,
    ForbiddenException,
    UnauthorizedException,
    ValidationException,
    BusinessException,
)

logger = logging.getLogger(__name__)


def handle_service_exception(e: Exception) -> HTTPException:
    """Convert service layer exceptions to HTTP exceptions."""
    if isinstance(e, NotFoundException):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message
        )
    elif isinstance(e, UnauthorizedException):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message
        )
    elif isinstance(e, ForbiddenException):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=e.message
        )
    elif isinstance(e, ValidationException):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.message
        )
    elif isinstance(e, BusinessException):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )
    elif isinstance(e, FolioAllocationException):
        #la operación completa puede reintentarse
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
            headers={"Retry-After": "1"}
        )
    elif isinstance(e, AuditWriteException):
        logger.error(f"Cambio revertido por falla de bitácora: {e.message} {e.details}")
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )
    elif isinstance(e, AppException):
        return HTTPException(
            status_code=e.status_code,
            detail=e.message
        )
    else:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error interno del servidor"
        )
