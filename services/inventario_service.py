"""
Servicios de inventario.

Los artículos reciben su folio (sistema INV) al darse de alta; folio,
artículo y bitácora se confirman en una sola transacción.
"""

from typing import List, Optional, Type
import logging

from pydantic import BaseModel

from services.base_service import BaseService
from services.bitacora_service import BitacoraService
from services.folio_service import FolioService
from repositories.inventario_repository import (
    InventarioArticuloRepository,
    InventarioColorRepository,
    InventarioMarcaRepository,
)
from database.models import InventarioArticuloORM
from models.inventario import (
    Articulo,
    ArticuloCreate,
    ArticuloUpdate,
    Color,
    Marca,
)
from core.exceptions import AppException, DuplicateException, NotFoundException
from core.security import ContextoActor, validate_id
from config import settings

logger = logging.getLogger(__name__)


class CatalogoService(BaseService):
    """Operaciones comunes de los catálogos con nombre único."""

    def __init__(
        self,
        repository,
        bitacora: BitacoraService,
        schema: Type[BaseModel],
        recurso: str,
    ):
        super().__init__(repository, bitacora)
        self.schema = schema
        self.recurso = recurso

    def _validar_nombre_unico(self, nombre: str, exclude_id: Optional[int] = None) -> None:
        if self.repository.find_by_nombre(nombre, exclude_id=exclude_id):
            raise DuplicateException(resource=self.recurso, field="nombre", value=nombre)

    def create_item(self, data: BaseModel, actor: ContextoActor):
        self._validar_nombre_unico(data.nombre)
        created = self.crear(self.repository.model_class(**data.model_dump()), actor)
        logger.info(f"{self.recurso} '{data.nombre}' creada por usuario {actor.id_usuario}")
        return self.schema.model_validate(created)

    def get_item(self, item_id: int):
        item_id = validate_id(item_id)
        return self.schema.model_validate(self.get_by_id_or_fail(item_id))

    def get_items(self, page: int = 0, page_size: int = 50, include_inactive: bool = False):
        items, total = self.get_all(
            page=page,
            page_size=page_size,
            include_inactive=include_inactive,
            order_by="nombre",
        )
        return [self.schema.model_validate(item) for item in items], total

    def update_item(self, item_id: int, data: BaseModel, actor: ContextoActor):
        item_id = validate_id(item_id)
        cambios = data.model_dump(exclude_unset=True)
        if cambios.get("nombre"):
            self._validar_nombre_unico(cambios["nombre"], exclude_id=item_id)
        return self.schema.model_validate(self.actualizar(item_id, cambios, actor))

    def delete_item(self, item_id: int, actor: ContextoActor) -> None:
        self.eliminar(validate_id(item_id), actor)


class MarcaService(CatalogoService):
    def __init__(self, repository: InventarioMarcaRepository, bitacora: BitacoraService):
        super().__init__(repository, bitacora, Marca, "Marca")


class ColorService(CatalogoService):
    def __init__(self, repository: InventarioColorRepository, bitacora: BitacoraService):
        super().__init__(repository, bitacora, Color, "Color")


class ArticuloService(BaseService[InventarioArticuloORM, InventarioArticuloRepository]):
    """Service for managing artículos de inventario."""

    def __init__(
        self,
        repository: InventarioArticuloRepository,
        bitacora: BitacoraService,
        folio_service: FolioService,
        marca_repository: InventarioMarcaRepository,
        color_repository: InventarioColorRepository,
    ):
        """
        Initialize articulo service.

        Args:
            repository: InventarioArticuloRepository instance
            bitacora: BitacoraService instance
            folio_service: asignación de folios (comparte la sesión de BD)
            marca_repository: catálogo de marcas
            color_repository: catálogo de colores
        """
        super().__init__(repository, bitacora)
        self.folio_service = folio_service
        self.marca_repo = marca_repository
        self.color_repo = color_repository
        self.sistema = settings.folio_sistema_inventario

    def _validar_catalogos(
        self,
        id_marca: Optional[int] = None,
        id_color: Optional[int] = None,
    ) -> None:
        if id_marca is not None:
            marca = self.marca_repo.get_by_id(id_marca)
            if not marca or not marca.estado:
                raise NotFoundException(resource="Marca", identifier=str(id_marca))
        if id_color is not None:
            color = self.color_repo.get_by_id(id_color)
            if not color or not color.estado:
                raise NotFoundException(resource="Color", identifier=str(id_color))

    def create_articulo(self, data: ArticuloCreate, actor: ContextoActor) -> Articulo:
        """
        Da de alta un artículo con el siguiente folio del sistema de inventario.

        Raises:
            NotFoundException: si la marca o el color no existen
            FolioAllocationException: si no se pudo reservar el folio
            AuditWriteException: si no se pudo registrar en bitácora
        """
        self._validar_catalogos(data.id_ct_inventario_marca, data.id_ct_inventario_color)

        folio = self.folio_service.generar_folio(self.sistema, actor.id_usuario, commit=False)
        created = self.crear(InventarioArticuloORM(folio=folio, **data.model_dump()), actor)

        logger.info(f"Artículo {created.folio} creado por usuario {actor.id_usuario}")
        return Articulo.model_validate(created)

    def create_articulos_batch(
        self, articulos: List[ArticuloCreate], actor: ContextoActor
    ) -> List[Articulo]:
        """
        Alta de varios artículos con folios consecutivos.

        Todo el lote se confirma o se revierte en conjunto.

        Raises:
            ValidationException: si la cantidad excede el máximo por operación
        """
        for data in articulos:
            self._validar_catalogos(data.id_ct_inventario_marca, data.id_ct_inventario_color)

        try:
            folios = self.folio_service.generar_folios_batch(
                self.sistema, len(articulos), actor.id_usuario, commit=False
            )
            creados = [
                self.crear(InventarioArticuloORM(folio=folio, **data.model_dump()), actor, commit=False)
                for folio, data in zip(folios, articulos)
            ]
            self.repository.commit()
        except AppException:
            self.repository.rollback()
            raise

        logger.info(
            f"{len(creados)} artículos creados ({folios[0]} a {folios[-1]}) "
            f"por usuario {actor.id_usuario}"
        )
        return [Articulo.model_validate(articulo) for articulo in creados]

    def get_articulo(self, articulo_id: int) -> Articulo:
        articulo_id = validate_id(articulo_id, "articulo_id")
        return Articulo.model_validate(self.get_by_id_or_fail(articulo_id))

    def get_articulo_by_folio(self, folio: str) -> Articulo:
        articulo = self.repository.find_by_folio(folio.strip().upper())
        if not articulo:
            raise NotFoundException(resource="Artículo", identifier=folio)
        return Articulo.model_validate(articulo)

    def get_articulos(
        self,
        page: int = 0,
        page_size: int = 50,
        id_marca: Optional[int] = None,
        id_color: Optional[int] = None,
        include_inactive: bool = False,
    ) -> tuple[List[Articulo], int]:
        items, total = self.get_all(
            page=page,
            page_size=page_size,
            include_inactive=include_inactive,
            order_by="folio",
            id_ct_inventario_marca=id_marca,
            id_ct_inventario_color=id_color,
        )
        return [Articulo.model_validate(item) for item in items], total

    def update_articulo(
        self, articulo_id: int, data: ArticuloUpdate, actor: ContextoActor
    ) -> Articulo:
        articulo_id = validate_id(articulo_id, "articulo_id")
        cambios = data.model_dump(exclude_unset=True)
        self._validar_catalogos(
            cambios.get("id_ct_inventario_marca"), cambios.get("id_ct_inventario_color")
        )
        updated = self.actualizar(articulo_id, cambios, actor)
        logger.info(f"Artículo {updated.folio} actualizado por usuario {actor.id_usuario}")
        return Articulo.model_validate(updated)

    def delete_articulo(self, articulo_id: int, actor: ContextoActor) -> None:
        articulo_id = validate_id(articulo_id, "articulo_id")
        deleted = self.eliminar(articulo_id, actor)
        logger.info(f"Artículo {deleted.folio} dado de baja por usuario {actor.id_usuario}")
