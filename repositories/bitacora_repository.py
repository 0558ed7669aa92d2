"""
Repositorio para la bitácora (dt_bitacora) y sus catálogos.
La bitácora sólo admite inserciones: este repositorio no expone
actualización ni eliminación de entradas.
"""

from typing import List, Optional
import logging

from sqlalchemy.orm import Session, joinedload

from repositories.base_repository import BaseRepository
from database.models import (
    BitacoraORM,
    BitacoraAccionORM,
    BitacoraTablaORM,
    SesionORM,
)

logger = logging.getLogger(__name__)


class BitacoraRepository(BaseRepository[BitacoraORM]):
    """Repositorio para las entradas de bitácora."""

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de bitácora.

        Args:
            db: SQLAlchemy session
        """
        super().__init__(db, BitacoraORM)

    def find_accion(self, nombre: str) -> Optional[BitacoraAccionORM]:
        """Busca una acción activa del catálogo por nombre."""
        return (
            self.db.query(BitacoraAccionORM)
            .filter(BitacoraAccionORM.nombre == nombre, BitacoraAccionORM.estado == True)
            .one_or_none()
        )

    def find_or_create_tabla(self, nombre: str) -> BitacoraTablaORM:
        """
        Busca la tabla en el catálogo y la crea si no existe.

        Args:
            nombre: Nombre de la tabla para bitácora

        Returns:
            Registro del catálogo ct_bitacora_tabla
        """
        tabla = (
            self.db.query(BitacoraTablaORM)
            .filter(BitacoraTablaORM.nombre == nombre)
            .one_or_none()
        )
        if tabla is None:
            tabla = BitacoraTablaORM(
                nombre=nombre,
                descripcion=f"Tabla {nombre}",
                auditar=True,
                estado=True,
            )
            self.db.add(tabla)
            self.db.flush()
            logger.info(f"Tabla '{nombre}' agregada al catálogo de bitácora")
        return tabla

    def find_sesion(self, id_sesion: int) -> Optional[SesionORM]:
        """Obtiene una sesión por su ID."""
        return self.db.get(SesionORM, id_sesion)

    def append(self, entrada: BitacoraORM) -> BitacoraORM:
        """Agrega una entrada dentro de la transacción actual (sin commit)."""
        self.db.add(entrada)
        self.db.flush()
        return entrada

    def _query_filtrada(
        self,
        tabla: Optional[str] = None,
        accion: Optional[str] = None,
        id_registro: Optional[int] = None,
        id_usuario: Optional[int] = None,
    ):
        query = self.db.query(BitacoraORM)
        if tabla:
            query = query.join(BitacoraORM.tabla).filter(BitacoraTablaORM.nombre == tabla)
        if accion:
            query = query.join(BitacoraORM.accion).filter(BitacoraAccionORM.nombre == accion)
        if id_registro is not None:
            query = query.filter(BitacoraORM.id_registro_afectado == id_registro)
        if id_usuario is not None:
            query = query.filter(BitacoraORM.id_ct_usuario_in == id_usuario)
        return query

    def buscar(
        self,
        tabla: Optional[str] = None,
        accion: Optional[str] = None,
        id_registro: Optional[int] = None,
        id_usuario: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[BitacoraORM]:
        """
        Busca entradas de bitácora, más recientes primero.

        Args:
            tabla: Nombre de la tabla en el catálogo
            accion: Nombre de la acción en el catálogo
            id_registro: ID del registro afectado
            id_usuario: ID del usuario que realizó la operación
            skip: Número de registros a saltar
            limit: Número máximo de registros a devolver
        """
        return (
            self._query_filtrada(tabla, accion, id_registro, id_usuario)
            .options(joinedload(BitacoraORM.accion), joinedload(BitacoraORM.tabla))
            .order_by(BitacoraORM.id_dt_bitacora.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def contar(
        self,
        tabla: Optional[str] = None,
        accion: Optional[str] = None,
        id_registro: Optional[int] = None,
        id_usuario: Optional[int] = None,
    ) -> int:
        """Cuenta las entradas que coinciden con los filtros."""
        return self._query_filtrada(tabla, accion, id_registro, id_usuario).count()
