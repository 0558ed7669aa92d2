"""
Utilidades para manejo de fechas y zonas horarias.

Los años de folio y las fechas de auditoría se calculan en la zona
horaria configurada de la aplicación, no en la del servidor.
"""
from datetime import datetime
from zoneinfo import ZoneInfo
from config import settings


def get_local_timezone() -> ZoneInfo:
    """
    Obtiene la zona horaria configurada.

    Returns:
        ZoneInfo: Zona horaria de la aplicación.
    """
    return ZoneInfo(settings.timezone)


def get_local_now() -> datetime:
    """
    Obtiene la fecha y hora actual en la zona horaria local configurada.

    Returns:
        datetime: Fecha y hora actual con zona horaria.
    """
    return datetime.now(get_local_timezone())
