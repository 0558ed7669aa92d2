"""
Servicio para control de folios consecutivos.

Genera folios únicos por sistema y año con formato SISTEMA-AÑO-00000000.
Lo usan internamente los flujos de alta (no se expone la generación al
frontend). Cada reserva es una sola transacción: un incremento abortado
no deja huecos ni folios repetidos.
"""

from typing import List, Optional
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from repositories.folio_repository import FolioControlRepository
from core.exceptions import FolioAllocationException, ValidationException
from core.security import validate_id
from config import settings
from utils.datetime_utils import get_local_now

logger = logging.getLogger(__name__)

MAX_FOLIOS_BATCH = 1000


def formatear_folio(sistema: str, anio: int, numero: int) -> str:
    """
    Formatea un número de folio con el formato estándar.

    Formato: SISTEMA-AÑO-00000000 (8 dígitos), ej: INV-2025-00000007
    """
    return f"{sistema}-{anio}-{numero:08d}"


def normalizar_sistema(sistema: str) -> str:
    """Código de sistema en mayúsculas y sin espacios."""
    if not isinstance(sistema, str) or not sistema.strip():
        raise ValidationException("El código de sistema es obligatorio", field="sistema")
    sistema_upper = sistema.strip().upper()
    if len(sistema_upper) > 10:
        raise ValidationException(
            "El código de sistema no puede exceder 10 caracteres",
            field="sistema",
            details={"value": sistema_upper},
        )
    return sistema_upper


def resolver_anio(anio: Optional[int] = None) -> int:
    """Año indicado o el año actual en la zona horaria configurada."""
    if anio is None:
        return get_local_now().year
    if isinstance(anio, bool) or not isinstance(anio, int) or not 1 <= anio <= 9999:
        raise ValidationException(
            "El año debe ser un entero entre 1 y 9999",
            field="anio",
            details={"value": str(anio)},
        )
    return anio


class FolioService:
    """Asignación de folios (lectura y reserva, sin operaciones administrativas)."""

    def __init__(
        self,
        repository: FolioControlRepository,
        max_batch: int = settings.folio_max_batch,
        max_intentos: int = settings.folio_reintentos,
    ):
        """
        Args:
            repository: FolioControlRepository instance
            max_batch: Máximo de folios por reserva (nunca mayor a 1000)
            max_intentos: Reintentos ante conflicto de llave única
        """
        self.repository = repository
        self.max_batch = min(max_batch, MAX_FOLIOS_BATCH)
        self.max_intentos = max_intentos

    def generar_folio(
        self,
        sistema: str,
        id_usuario: int,
        anio: Optional[int] = None,
        commit: bool = True,
    ) -> str:
        """
        Genera el siguiente folio para un sistema y año.

        Args:
            sistema: Código del sistema (INV, INFRA, etc.)
            id_usuario: ID del usuario que genera el folio
            anio: Año (opcional, por defecto año actual)
            commit: False para reservar dentro de la transacción del llamador

        Returns:
            Folio formateado (ej: INV-2025-00000007)

        Raises:
            ValidationException: si los argumentos son inválidos
            FolioAllocationException: si la transacción no pudo confirmarse
        """
        return self._reservar(sistema, 1, id_usuario, anio, commit)[0]

    def generar_folios_batch(
        self,
        sistema: str,
        cantidad: int,
        id_usuario: int,
        anio: Optional[int] = None,
        commit: bool = True,
    ) -> List[str]:
        """
        Reserva `cantidad` folios consecutivos con una sola actualización.

        La contigüidad sólo está garantizada dentro del lote devuelto.

        Raises:
            ValidationException: si cantidad <= 0 o mayor al máximo permitido
            FolioAllocationException: si la transacción no pudo confirmarse
        """
        if isinstance(cantidad, bool) or not isinstance(cantidad, int) or cantidad <= 0:
            raise ValidationException(
                "La cantidad de folios debe ser mayor a 0",
                field="cantidad",
                details={"value": str(cantidad)},
            )
        if cantidad > self.max_batch:
            raise ValidationException(
                f"No se pueden generar más de {self.max_batch} folios en una operación",
                field="cantidad",
                details={"value": str(cantidad)},
            )
        return self._reservar(sistema, cantidad, id_usuario, anio, commit)

    def _reservar(
        self,
        sistema: str,
        cantidad: int,
        id_usuario: int,
        anio: Optional[int],
        commit: bool,
    ) -> List[str]:
        sistema_upper = normalizar_sistema(sistema)
        anio_actual = resolver_anio(anio)
        id_usuario = validate_id(id_usuario, "id_usuario")

        intento = 0
        while True:
            intento += 1
            try:
                ultimo = self.repository.incrementar(sistema_upper, anio_actual, cantidad, id_usuario)
                if commit:
                    self.repository.db.commit()
                break
            except IntegrityError as e:
                self.repository.rollback()
                if not commit or intento >= self.max_intentos:
                    logger.error(f"❌ Conflicto al generar folio {sistema_upper}-{anio_actual}: {e}")
                    raise FolioAllocationException(
                        details={"sistema": sistema_upper, "anio": anio_actual}
                    ) from e
                logger.warning(
                    f"Conflicto al crear control {sistema_upper}-{anio_actual}, "
                    f"reintento {intento}/{self.max_intentos}"
                )
            except SQLAlchemyError as e:
                self.repository.rollback()
                logger.error(f"❌ Error al generar folio {sistema_upper}-{anio_actual}: {e}")
                raise FolioAllocationException(
                    details={"sistema": sistema_upper, "anio": anio_actual}
                ) from e

        inicial = ultimo - cantidad + 1
        folios = [
            formatear_folio(sistema_upper, anio_actual, numero)
            for numero in range(inicial, ultimo + 1)
        ]
        if cantidad == 1:
            logger.info(f"📋 Folio generado: {folios[0]} por usuario {id_usuario}")
        else:
            logger.info(
                f"📋 Generados {cantidad} folios desde {folios[0]} hasta {folios[-1]} "
                f"por usuario {id_usuario}"
            )
        return folios

    def obtener_ultimo_folio(self, sistema: str, anio: Optional[int] = None) -> Optional[str]:
        """
        Obtiene el último folio generado para un sistema y año.

        Returns:
            Folio formateado o None si no existe control o está en 0
        """
        sistema_upper = normalizar_sistema(sistema)
        anio_actual = resolver_anio(anio)
        control = self.repository.find_by_scope(sistema_upper, anio_actual)
        if control is None or control.ultimo_folio == 0:
            return None
        return formatear_folio(control.sistema, control.anio, control.ultimo_folio)

    def preview_siguiente_folio(self, sistema: str, anio: Optional[int] = None) -> str:
        """
        Obtiene el siguiente folio sin generarlo.

        No es una reserva: otra asignación concurrente puede tomarlo.
        """
        sistema_upper = normalizar_sistema(sistema)
        anio_actual = resolver_anio(anio)
        control = self.repository.find_by_scope(sistema_upper, anio_actual)
        siguiente = control.ultimo_folio + 1 if control else 1
        return formatear_folio(sistema_upper, anio_actual, siguiente)

    def existe_control(self, sistema: str, anio: Optional[int] = None) -> bool:
        """Verifica si existe un control de folios para un sistema y año."""
        sistema_upper = normalizar_sistema(sistema)
        anio_actual = resolver_anio(anio)
        return self.repository.find_by_scope(sistema_upper, anio_actual) is not None
