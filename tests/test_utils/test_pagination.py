"""
Tests for pagination of the listings.

Tests cover:
- Metadata de páginas de bitácora y localidades
- Sobre de respuesta con esquemas reales
- Offset calculado por los servicios de listado
"""

import pytest
from sqlalchemy.orm import Session

from core.bitacora import AccionBitacora
from core.pagination import (
    calculate_pagination_meta,
    calculate_skip,
    create_paginated_response,
)
from core.security import ContextoActor
from models.bitacora import Bitacora
from models.localidades import Localidad, LocalidadCreate
from services.bitacora_service import BitacoraService
from services.localidad_service import LocalidadService


@pytest.fixture
def localidades(localidad_service: LocalidadService, actor: ContextoActor):
    nombres = ["Ahuacatlán", "Barranca", "Centro", "Delicias", "Estación"]
    return [
        localidad_service.create_localidad(LocalidadCreate(nombre=nombre, ambito="urbano"), actor)
        for nombre in nombres
    ]


class TestMetadataPagina:

    @pytest.mark.parametrize("page,total_pages,has_next,has_previous", [
        (0, 2, True, False),
        (1, 2, False, True),
    ])
    def test_bitacora_con_cuatro_entradas(self, page, total_pages, has_next, has_previous):
        meta = calculate_pagination_meta(page=page, page_size=3, total_items=4)

        assert meta.total_pages == total_pages
        assert meta.has_next is has_next
        assert meta.has_previous is has_previous

    def test_listado_vacio(self):
        meta = calculate_pagination_meta(page=0, page_size=50, total_items=0)

        assert meta.total_pages == 0
        assert meta.has_next is False
        assert meta.has_previous is False

    def test_total_multiplo_exacto_no_agrega_pagina(self):
        meta = calculate_pagination_meta(page=1, page_size=1000, total_items=2000)

        assert meta.total_pages == 2
        assert meta.has_next is False

    def test_pagina_fuera_de_rango(self):
        meta = calculate_pagination_meta(page=7, page_size=10, total_items=15)

        assert meta.total_pages == 2
        assert meta.has_next is False
        assert meta.has_previous is True


class TestRespuestaPaginada:

    def test_pagina_de_bitacora(
        self,
        db_session: Session,
        bitacora_service: BitacoraService,
        actor: ContextoActor,
    ):
        for id_registro in (1, 2, 3):
            bitacora_service.registrar_mutacion(
                tabla="LOCALIDAD",
                accion=AccionBitacora.create,
                id_usuario=actor.id_usuario,
                id_sesion=actor.id_sesion,
                datos_nuevos={"nombre": f"Localidad {id_registro}"},
                id_registro=id_registro,
            )
        db_session.commit()

        items, total = bitacora_service.listar(page=0, page_size=2)
        response = create_paginated_response(items, 0, 2, total)

        assert response["success"] is True
        assert all(isinstance(item, Bitacora) for item in response["data"])
        assert [item.id_registro_afectado for item in response["data"]] == [3, 2]
        assert response["pagination"] == {
            "page": 0,
            "page_size": 2,
            "total_items": 3,
            "total_pages": 2,
            "has_next": True,
            "has_previous": False,
        }

    def test_pagina_de_localidades(self, localidad_service: LocalidadService, localidades):
        items, total = localidad_service.get_localidades(page=2, page_size=2)
        response = create_paginated_response(items, 2, 2, total)

        assert [l.nombre for l in response["data"]] == ["Estación"]
        assert isinstance(response["data"][0], Localidad)
        assert response["pagination"]["total_items"] == 5
        assert response["pagination"]["has_next"] is False
        assert response["pagination"]["has_previous"] is True

    def test_timestamp_con_zona_horaria(self):
        response = create_paginated_response([], 0, 50, 0)

        assert response["data"] == []
        assert response["timestamp"].tzinfo is not None


class TestOffsetListados:

    @pytest.mark.parametrize("page,page_size,skip", [
        (0, 50, 0),
        (1, 50, 50),
        (3, 25, 75),
        (0, 1000, 0),
    ])
    def test_calculate_skip(self, page, page_size, skip):
        assert calculate_skip(page, page_size) == skip

    def test_listar_bitacora_usa_offset_de_la_pagina(self, bitacora_service: BitacoraService, monkeypatch):
        llamadas = []

        def buscar(**kwargs):
            llamadas.append((kwargs["skip"], kwargs["limit"]))
            return []

        monkeypatch.setattr(bitacora_service.repository, "buscar", buscar)

        bitacora_service.listar(page=3, page_size=20)

        assert llamadas == [(60, 20)]

    def test_paginas_de_localidades_no_se_traslapan(self, localidad_service: LocalidadService, localidades):
        vistos = []
        for page in range(3):
            items, _ = localidad_service.get_localidades(page=page, page_size=2)
            vistos.extend(l.id_ct_localidad for l in items)

        assert sorted(vistos) == sorted(l.id_ct_localidad for l in localidades)
        assert len(set(vistos)) == 5
