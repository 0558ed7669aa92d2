"""
Operaciones administrativas sobre los controles de folios.

Vive aparte de FolioService para que el reinicio nunca quede al alcance
del flujo normal de asignación.
"""

from typing import Any, Dict, List
import logging

from sqlalchemy.exc import SQLAlchemyError

from repositories.folio_repository import FolioControlRepository
from services.folio_service import formatear_folio, normalizar_sistema, resolver_anio
from core.exceptions import DatabaseException
from core.security import validate_id

logger = logging.getLogger(__name__)


class FolioAdminService:
    """Reinicio y estadísticas de folios (uso administrativo)."""

    def __init__(self, repository: FolioControlRepository):
        self.repository = repository

    def reiniciar_folios(self, sistema: str, anio: int, id_usuario: int) -> bool:
        """
        Reinicia el consecutivo de un sistema y año a 0.

        No crea el control si no existe (operación sin efecto).

        Returns:
            True si se reinició un control existente
        """
        sistema_upper = normalizar_sistema(sistema)
        anio = resolver_anio(anio)
        id_usuario = validate_id(id_usuario, "id_usuario")

        try:
            reiniciado = self.repository.reiniciar(sistema_upper, anio, id_usuario)
            self.repository.db.commit()
        except SQLAlchemyError as e:
            self.repository.rollback()
            logger.error(f"Error al reiniciar folios {sistema_upper}-{anio}: {e}")
            raise DatabaseException("Error al reiniciar folios") from e

        if reiniciado:
            logger.warning(f"⚠️ Folios reiniciados para {sistema_upper}-{anio} por usuario {id_usuario}")
        else:
            logger.info(f"Sin control de folios para {sistema_upper}-{anio}; nada que reiniciar")
        return reiniciado

    def obtener_estadisticas(self) -> List[Dict[str, Any]]:
        """Estadísticas de cada control activo (último y siguiente folio)."""
        return [
            {
                "id": control.id_ct_folios_control,
                "sistema": control.sistema,
                "anio": control.anio,
                "ultimo_folio": control.ultimo_folio,
                "ultimo_folio_formateado": (
                    formatear_folio(control.sistema, control.anio, control.ultimo_folio)
                    if control.ultimo_folio
                    else None
                ),
                "siguiente_folio": formatear_folio(
                    control.sistema, control.anio, control.ultimo_folio + 1
                ),
                "fecha_actualizacion": control.fecha_up,
            }
            for control in self.repository.find_activos()
        ]
