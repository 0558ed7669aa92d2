"""
Repositorio para ct_folios_control.

El incremento del consecutivo siempre es una sola sentencia atómica de
lectura-modificación-escritura: nunca se lee el último folio para luego
escribirlo en una sentencia aparte.
"""

from typing import List, Optional
import logging

from sqlalchemy import insert, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from repositories.base_repository import BaseRepository
from database.models import FolioControlORM, get_current_time

logger = logging.getLogger(__name__)

#motores con INSERT ... ON CONFLICT DO UPDATE ... RETURNING
_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


class FolioControlRepository(BaseRepository[FolioControlORM]):
    """Repositorio para los contadores de folios por sistema y año."""

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de control de folios.

        Args:
            db: SQLAlchemy session
        """
        super().__init__(db, FolioControlORM)

    @property
    def _tabla(self):
        return FolioControlORM.__table__

    def find_by_scope(self, sistema: str, anio: int) -> Optional[FolioControlORM]:
        """
        Busca el control de folios de un sistema y año.

        Args:
            sistema: Código de sistema ya normalizado
            anio: Año del consecutivo

        Returns:
            FolioControlORM or None if not found
        """
        return (
            self.db.query(FolioControlORM)
            .filter(FolioControlORM.sistema == sistema, FolioControlORM.anio == anio)
            .execution_options(populate_existing=True)
            .one_or_none()
        )

    def find_activos(self) -> List[FolioControlORM]:
        """Lista los controles activos ordenados por sistema y año descendente."""
        return (
            self.db.query(FolioControlORM)
            .filter(FolioControlORM.estado == True)
            .order_by(FolioControlORM.sistema.asc(), FolioControlORM.anio.desc())
            .all()
        )

    def incrementar(self, sistema: str, anio: int, cantidad: int, user_id: int) -> int:
        """
        Reserva `cantidad` folios y devuelve el nuevo último folio.

        Si el control no existe se crea con ultimo_folio = cantidad y
        id_ct_usuario_in = user_id; si existe se incrementa y se registra
        id_ct_usuario_up = user_id.

        Raises:
            IntegrityError: si otro proceso creó el control al mismo tiempo
                (sólo en motores sin upsert nativo; el llamador reintenta)
        """
        backend = self.db.get_bind().dialect.name
        if backend in _UPSERT_INSERTS:
            return self._upsert_incremento(backend, sistema, anio, cantidad, user_id)
        return self._actualizar_o_crear(sistema, anio, cantidad, user_id)

    def _upsert_incremento(
        self, backend: str, sistema: str, anio: int, cantidad: int, user_id: int
    ) -> int:
        tabla = self._tabla
        now = get_current_time()
        stmt = _UPSERT_INSERTS[backend](tabla).values(
            sistema=sistema,
            anio=anio,
            ultimo_folio=cantidad,
            estado=True,
            id_ct_usuario_in=user_id,
            fecha_in=now,
            fecha_up=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[tabla.c.sistema, tabla.c.anio],
            set_={
                "ultimo_folio": tabla.c.ultimo_folio + cantidad,
                "id_ct_usuario_up": user_id,
                "fecha_up": now,
            },
        ).returning(tabla.c.ultimo_folio)
        return self.db.execute(stmt).scalar_one()

    def _actualizar_o_crear(self, sistema: str, anio: int, cantidad: int, user_id: int) -> int:
        tabla = self._tabla
        now = get_current_time()
        scope = (tabla.c.sistema == sistema, tabla.c.anio == anio)
        stmt = (
            update(tabla)
            .where(*scope)
            .values(
                ultimo_folio=tabla.c.ultimo_folio + cantidad,
                id_ct_usuario_up=user_id,
                fecha_up=now,
            )
        )

        if self.db.get_bind().dialect.update_returning:
            nuevo = self.db.execute(stmt.returning(tabla.c.ultimo_folio)).scalar_one_or_none()
            if nuevo is not None:
                return nuevo
        elif self.db.execute(stmt).rowcount:
            #la fila ya quedó bloqueada por el UPDATE dentro de esta transacción
            return self.db.execute(select(tabla.c.ultimo_folio).where(*scope)).scalar_one()

        self.db.execute(
            insert(tabla).values(
                sistema=sistema,
                anio=anio,
                ultimo_folio=cantidad,
                estado=True,
                id_ct_usuario_in=user_id,
                fecha_in=now,
                fecha_up=now,
            )
        )
        return cantidad

    def reiniciar(self, sistema: str, anio: int, user_id: int) -> bool:
        """
        Pone ultimo_folio = 0 sin crear el control si no existe.

        Returns:
            True si existía un control para el sistema y año
        """
        tabla = self._tabla
        result = self.db.execute(
            update(tabla)
            .where(tabla.c.sistema == sistema, tabla.c.anio == anio)
            .values(ultimo_folio=0, id_ct_usuario_up=user_id, fecha_up=get_current_time())
        )
        return result.rowcount > 0
