"""
Servicio de bitácora: registra cada mutación de una entidad auditable.

Las entradas se escriben en la misma transacción que el cambio de negocio
(sin commit propio). Si la escritura falla se lanza AuditWriteException y
el llamador debe hacer rollback del cambio completo.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple
import json
import logging

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError

from repositories.bitacora_repository import BitacoraRepository
from database.models import BitacoraORM, get_current_time
from models.bitacora import Bitacora
from core.bitacora import (
    ACCIONES_BITACORA,
    AccionBitacora,
    RegistroBitacora,
    extraer_campos_afectados,
)
from core.exceptions import (
    AuditWriteException,
    UnauthorizedException,
    ValidationException,
)
from core.security import ContextoActor, validate_id
from core.pagination import calculate_skip

logger = logging.getLogger(__name__)


def _serializar(fragmento: Dict[str, Any]) -> str:
    return json.dumps(jsonable_encoder(fragmento), ensure_ascii=False)


class BitacoraService:
    """Grabación y consulta de la bitácora."""

    def __init__(self, repository: BitacoraRepository, registro: RegistroBitacora):
        """
        Args:
            repository: BitacoraRepository instance
            registro: tablas registradas y su configuración de bitácora
        """
        self.repository = repository
        self.registro = registro

    def is_enabled(self, tabla: str) -> bool:
        """True si la tabla de entidad está registrada y habilitada."""
        return self.registro.is_enabled(tabla)

    def auditar(
        self,
        tabla: str,
        accion: AccionBitacora,
        actor: ContextoActor,
        datos_anteriores: Optional[Mapping[str, Any]],
        datos_nuevos: Optional[Mapping[str, Any]],
        id_registro: Optional[int] = None,
    ) -> Optional[BitacoraORM]:
        """
        Registra la mutación sólo si la tabla de entidad está habilitada.

        Args:
            tabla: nombre físico de la tabla de la entidad
            accion: CREATE, UPDATE o DELETE
            actor: usuario y sesión que ejecutan la operación
            datos_anteriores: fotografía previa (None en creación)
            datos_nuevos: fotografía posterior
            id_registro: llave primaria del registro afectado

        Returns:
            La entrada creada, o None si la tabla no se audita
        """
        if not self.registro.is_enabled(tabla):
            return None
        return self.registrar_mutacion(
            tabla=self.registro.nombre_para_bitacora(tabla),
            accion=accion,
            id_usuario=actor.id_usuario,
            id_sesion=actor.id_sesion,
            datos_anteriores=datos_anteriores,
            datos_nuevos=datos_nuevos,
            id_registro=id_registro,
        )

    def registrar_mutacion(
        self,
        tabla: str,
        accion: AccionBitacora,
        id_usuario: int,
        id_sesion: int,
        datos_anteriores: Optional[Mapping[str, Any]] = None,
        datos_nuevos: Optional[Mapping[str, Any]] = None,
        id_registro: Optional[int] = None,
    ) -> BitacoraORM:
        """
        Agrega una entrada de bitácora con sólo los campos que cambiaron.

        No hace commit: la entrada queda en la transacción del llamador.

        Raises:
            ValidationException: argumentos inválidos
            UnauthorizedException: sesión inexistente, ajena, cerrada o expirada
            AuditWriteException: no se pudo escribir la entrada
        """
        try:
            accion = AccionBitacora(accion)
        except ValueError:
            raise ValidationException(
                "Acción de bitácora inválida", field="accion", details={"value": str(accion)}
            )
        if not isinstance(tabla, str) or not tabla.strip():
            raise ValidationException("La tabla es obligatoria", field="tabla")
        id_usuario = validate_id(id_usuario, "id_usuario")
        id_sesion = validate_id(id_sesion, "id_sesion")
        if id_registro is not None:
            id_registro = validate_id(id_registro, "id_registro")
        if accion == AccionBitacora.create and datos_anteriores:
            raise ValidationException(
                "Una creación no puede tener datos anteriores", field="datos_anteriores"
            )

        campos_anteriores, campos_nuevos = extraer_campos_afectados(
            datos_anteriores, datos_nuevos
        )

        try:
            self._validar_sesion(id_sesion, id_usuario)
            accion_catalogo = self.repository.find_accion(ACCIONES_BITACORA[accion])
            if accion_catalogo is None:
                raise AuditWriteException(
                    f"Acción '{ACCIONES_BITACORA[accion]}' no encontrada en el catálogo de bitácora",
                    details={"accion": accion.value},
                )
            tabla_catalogo = self.repository.find_or_create_tabla(tabla.strip())

            entrada = BitacoraORM(
                id_ct_bitacora_accion=accion_catalogo.id_ct_bitacora_accion,
                id_ct_bitacora_tabla=tabla_catalogo.id_ct_bitacora_tabla,
                id_registro_afectado=id_registro,
                id_ct_sesion=id_sesion,
                datos_anteriores=_serializar(campos_anteriores),
                datos_nuevos=_serializar(campos_nuevos),
                estado=True,
                id_ct_usuario_in=id_usuario,
                fecha_in=get_current_time(),
            )
            self.repository.append(entrada)
        except SQLAlchemyError as e:
            logger.error(f"❌ Error al registrar bitácora {accion.value} en {tabla}: {e}")
            raise AuditWriteException(details={"tabla": tabla, "accion": accion.value}) from e

        logger.debug(
            f"Bitácora {accion.value} {tabla}#{id_registro} usuario={id_usuario} "
            f"campos={sorted(set(campos_anteriores) | set(campos_nuevos))}"
        )
        return entrada

    def _validar_sesion(self, id_sesion: int, id_usuario: int) -> None:
        sesion = self.repository.find_sesion(id_sesion)
        if sesion is None:
            raise UnauthorizedException(f"La sesión {id_sesion} no existe")
        if sesion.id_ct_usuario != id_usuario:
            raise UnauthorizedException("La sesión no pertenece al usuario")
        if not sesion.activa:
            raise UnauthorizedException("La sesión no está activa")
        if sesion.fecha_expiracion < get_current_time():
            raise UnauthorizedException("La sesión ha expirado")

    def listar(
        self,
        page: int = 0,
        page_size: int = 50,
        tabla: Optional[str] = None,
        accion: Optional[AccionBitacora] = None,
        id_registro: Optional[int] = None,
        id_usuario: Optional[int] = None,
    ) -> Tuple[List[Bitacora], int]:
        """
        Consulta la bitácora con filtros opcionales.

        Returns:
            Tupla (entradas, total)
        """
        nombre_accion = ACCIONES_BITACORA[AccionBitacora(accion)] if accion else None
        skip = calculate_skip(page, page_size)
        entradas = self.repository.buscar(
            tabla=tabla,
            accion=nombre_accion,
            id_registro=id_registro,
            id_usuario=id_usuario,
            skip=skip,
            limit=page_size,
        )
        total = self.repository.contar(
            tabla=tabla,
            accion=nombre_accion,
            id_registro=id_registro,
            id_usuario=id_usuario,
        )
        return [self._to_response(entrada) for entrada in entradas], total

    @staticmethod
    def _to_response(entrada: BitacoraORM) -> Bitacora:
        return Bitacora(
            id_dt_bitacora=entrada.id_dt_bitacora,
            accion=entrada.accion.nombre,
            tabla=entrada.tabla.nombre,
            id_registro_afectado=entrada.id_registro_afectado,
            id_ct_sesion=entrada.id_ct_sesion,
            id_ct_usuario_in=entrada.id_ct_usuario_in,
            datos_anteriores=json.loads(entrada.datos_anteriores or "{}"),
            datos_nuevos=json.loads(entrada.datos_nuevos or "{}"),
            fecha_in=entrada.fecha_in,
        )
