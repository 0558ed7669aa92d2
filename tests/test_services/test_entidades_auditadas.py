"""
Tests for entity services and their bitácora entries.

Tests cover:
- Alta, cambio, baja y restauración de localidades con registro en bitácora
- Reversión del cambio de negocio cuando la bitácora falla
- Catálogos de inventario (marca auditada, color no auditado)
- Artículos con folio asignado en la misma transacción
- Usuarios sin contraseñas en la bitácora
"""

import json
import pytest
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError

from database.models import (
    FolioControlORM,
    InventarioArticuloORM,
    InventarioMarcaORM,
    LocalidadORM,
    SesionORM,
    UsuarioORM,
)
from repositories.inventario_repository import (
    InventarioArticuloRepository,
    InventarioColorRepository,
    InventarioMarcaRepository,
)
from repositories.usuario_repository import UsuarioRepository
from services.bitacora_service import BitacoraService
from services.folio_service import FolioService
from services.localidad_service import LocalidadService
from services.inventario_service import ArticuloService, ColorService, MarcaService
from services.usuario_service import UsuarioService
from models.localidades import LocalidadCreate, LocalidadUpdate
from models.inventario import ArticuloCreate, ArticuloUpdate, ColorCreate, MarcaCreate, MarcaUpdate
from models.usuarios import UsuarioCreate, UsuarioUpdate
from core.security import ContextoActor
from core.exceptions import (
    AuditWriteException,
    BusinessException,
    DuplicateException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from utils.datetime_utils import get_local_now


@pytest.fixture
def articulo_service(
    db_session: Session,
    bitacora_service: BitacoraService,
    folio_service: FolioService,
) -> ArticuloService:
    return ArticuloService(
        InventarioArticuloRepository(db_session),
        bitacora_service,
        folio_service,
        InventarioMarcaRepository(db_session),
        InventarioColorRepository(db_session),
    )


@pytest.fixture
def sesion_cerrada(db_session: Session, capturista_sesion: SesionORM) -> SesionORM:
    capturista_sesion.activa = False
    db_session.commit()
    return capturista_sesion


def _fragmentos(entrada):
    return json.loads(entrada.datos_anteriores), json.loads(entrada.datos_nuevos)


class TestLocalidadBitacora:
    """Localidad mutations and their bitácora entries."""

    def test_crear_localidad_registra_creacion(
        self,
        localidad_service: LocalidadService,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        localidad = localidad_service.create_localidad(
            LocalidadCreate(nombre="Centro", ambito="urbano"), actor
        )

        entradas = entradas_bitacora("LOCALIDAD")
        assert len(entradas) == 1
        assert entradas[0].accion.nombre == "Creación"
        assert entradas[0].id_registro_afectado == localidad.id_ct_localidad
        anteriores, nuevos = _fragmentos(entradas[0])
        assert anteriores == {}
        assert nuevos == {
            "id_ct_localidad": localidad.id_ct_localidad,
            "nombre": "Centro",
            "ambito": "urbano",
            "estado": True,
        }

    def test_actualizar_localidad_solo_campos_modificados(
        self,
        localidad_service: LocalidadService,
        localidad_instance: LocalidadORM,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        localidad_service.update_localidad(
            localidad_instance.id_ct_localidad,
            LocalidadUpdate(nombre="Centro Histórico", ambito="urbano"),
            actor,
        )

        entradas = entradas_bitacora("LOCALIDAD")
        assert len(entradas) == 1
        assert entradas[0].accion.nombre == "Actualización"
        assert _fragmentos(entradas[0]) == ({"nombre": "Centro"}, {"nombre": "Centro Histórico"})

    def test_actualizar_sin_cambios_registra_fragmentos_vacios(
        self,
        localidad_service: LocalidadService,
        localidad_instance: LocalidadORM,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        localidad_service.update_localidad(
            localidad_instance.id_ct_localidad, LocalidadUpdate(nombre="Centro"), actor
        )

        entradas = entradas_bitacora("LOCALIDAD")
        assert len(entradas) == 1
        assert _fragmentos(entradas[0]) == ({}, {})

    def test_eliminar_localidad_registra_estado(
        self,
        db_session: Session,
        localidad_service: LocalidadService,
        localidad_instance: LocalidadORM,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        localidad_service.delete_localidad(localidad_instance.id_ct_localidad, actor)

        db_session.refresh(localidad_instance)
        assert localidad_instance.estado is False
        assert localidad_instance.id_ct_usuario_up == actor.id_usuario
        entradas = entradas_bitacora("LOCALIDAD")
        assert entradas[0].accion.nombre == "Eliminación"
        assert _fragmentos(entradas[0]) == ({"estado": True}, {"estado": False})

    def test_eliminar_localidad_ya_eliminada(
        self,
        localidad_service: LocalidadService,
        localidad_instance: LocalidadORM,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        localidad_service.delete_localidad(localidad_instance.id_ct_localidad, actor)

        with pytest.raises(BusinessException):
            localidad_service.delete_localidad(localidad_instance.id_ct_localidad, actor)
        assert len(entradas_bitacora("LOCALIDAD")) == 1

    def test_restaurar_localidad_registra_actualizacion(
        self,
        localidad_service: LocalidadService,
        localidad_instance: LocalidadORM,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        localidad_service.delete_localidad(localidad_instance.id_ct_localidad, actor)
        restaurada = localidad_service.restore_localidad(localidad_instance.id_ct_localidad, actor)

        assert restaurada.estado is True
        entradas = entradas_bitacora("LOCALIDAD")
        assert [e.accion.nombre for e in entradas] == ["Eliminación", "Actualización"]
        assert _fragmentos(entradas[1]) == ({"estado": False}, {"estado": True})

    def test_actualizar_localidad_eliminada(
        self,
        localidad_service: LocalidadService,
        localidad_instance: LocalidadORM,
        actor: ContextoActor,
    ):
        localidad_service.delete_localidad(localidad_instance.id_ct_localidad, actor)

        with pytest.raises(BusinessException):
            localidad_service.update_localidad(
                localidad_instance.id_ct_localidad, LocalidadUpdate(nombre="Otro"), actor
            )

    @pytest.mark.parametrize("campo,valor", [
        ("estado", False),
        ("fecha_in", None),
        ("id_ct_usuario_in", 99),
        ("id_ct_localidad", 50),
        ("inexistente", "x"),
    ])
    def test_actualizar_campos_no_editables(
        self,
        localidad_service: LocalidadService,
        localidad_instance: LocalidadORM,
        actor: ContextoActor,
        entradas_bitacora,
        campo,
        valor,
    ):
        with pytest.raises(ValidationException):
            localidad_service.actualizar(localidad_instance.id_ct_localidad, {campo: valor}, actor)
        assert entradas_bitacora() == []

    def test_localidad_inexistente(self, localidad_service: LocalidadService, actor: ContextoActor):
        with pytest.raises(NotFoundException):
            localidad_service.update_localidad(999, LocalidadUpdate(nombre="X"), actor)

    def test_listar_localidades_por_nombre_y_ambito(
        self,
        localidad_service: LocalidadService,
        actor: ContextoActor,
    ):
        for nombre, ambito in (("Centro", "urbano"), ("Centro Norte", "urbano"), ("El Salto", "rural")):
            localidad_service.create_localidad(LocalidadCreate(nombre=nombre, ambito=ambito), actor)

        por_nombre, total_nombre = localidad_service.get_localidades(nombre="centro")
        rurales, total_rurales = localidad_service.get_localidades(ambito="rural")

        assert total_nombre == 2
        assert {l.nombre for l in por_nombre} == {"Centro", "Centro Norte"}
        assert total_rurales == 1
        assert rurales[0].nombre == "El Salto"


class TestReversionPorBitacora:
    """A failed bitácora write rolls back the business change."""

    def test_creacion_revertida_con_sesion_cerrada(
        self,
        db_session: Session,
        localidad_service: LocalidadService,
        actor: ContextoActor,
        sesion_cerrada: SesionORM,
        entradas_bitacora,
    ):
        with pytest.raises(UnauthorizedException):
            localidad_service.create_localidad(LocalidadCreate(nombre="Centro"), actor)

        assert db_session.query(LocalidadORM).count() == 0
        assert entradas_bitacora() == []

    def test_actualizacion_revertida_por_error_de_escritura(
        self,
        db_session: Session,
        localidad_service: LocalidadService,
        localidad_instance: LocalidadORM,
        actor: ContextoActor,
        monkeypatch,
    ):
        def fallar(entrada):
            raise OperationalError("INSERT INTO dt_bitacora", {}, Exception("disk I/O error"))

        monkeypatch.setattr(localidad_service.bitacora.repository, "append", fallar)

        with pytest.raises(AuditWriteException):
            localidad_service.update_localidad(
                localidad_instance.id_ct_localidad, LocalidadUpdate(nombre="Otro"), actor
            )

        db_session.expire_all()
        assert db_session.get(LocalidadORM, localidad_instance.id_ct_localidad).nombre == "Centro"

    def test_baja_revertida_con_sesion_cerrada(
        self,
        db_session: Session,
        localidad_service: LocalidadService,
        localidad_instance: LocalidadORM,
        actor: ContextoActor,
        sesion_cerrada: SesionORM,
    ):
        with pytest.raises(UnauthorizedException):
            localidad_service.delete_localidad(localidad_instance.id_ct_localidad, actor)

        db_session.expire_all()
        assert db_session.get(LocalidadORM, localidad_instance.id_ct_localidad).estado is True


class TestCatalogosInventario:
    """Marca is audited; color is registered but opted out."""

    def test_crear_marca_registra_bitacora(
        self,
        db_session: Session,
        bitacora_service: BitacoraService,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        service = MarcaService(InventarioMarcaRepository(db_session), bitacora_service)

        marca = service.create_item(MarcaCreate(nombre="Lenovo"), actor)

        entradas = entradas_bitacora("INVENTARIO_MARCA")
        assert len(entradas) == 1
        assert entradas[0].id_registro_afectado == marca.id_ct_inventario_marca

    def test_marca_duplicada(
        self,
        db_session: Session,
        bitacora_service: BitacoraService,
        marca_instance: InventarioMarcaORM,
        actor: ContextoActor,
    ):
        service = MarcaService(InventarioMarcaRepository(db_session), bitacora_service)

        with pytest.raises(DuplicateException):
            service.create_item(MarcaCreate(nombre="dell"), actor)

    def test_renombrar_marca_a_nombre_existente(
        self,
        db_session: Session,
        bitacora_service: BitacoraService,
        marca_instance: InventarioMarcaORM,
        actor: ContextoActor,
    ):
        service = MarcaService(InventarioMarcaRepository(db_session), bitacora_service)
        otra = service.create_item(MarcaCreate(nombre="HP"), actor)

        with pytest.raises(DuplicateException):
            service.update_item(otra.id_ct_inventario_marca, MarcaUpdate(nombre="Dell"), actor)

    def test_color_no_genera_bitacora(
        self,
        db_session: Session,
        bitacora_service: BitacoraService,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        service = ColorService(InventarioColorRepository(db_session), bitacora_service)

        color = service.create_item(ColorCreate(nombre="Gris"), actor)
        service.delete_item(color.id_ct_inventario_color, actor)

        assert entradas_bitacora() == []
        assert service.get_item(color.id_ct_inventario_color).estado is False


class TestArticuloFolios:
    """Artículos receive their folio inside the same transaction."""

    def test_crear_articulo_asigna_folio(
        self,
        articulo_service: ArticuloService,
        articulo_data,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        anio = get_local_now().year

        articulo = articulo_service.create_articulo(ArticuloCreate(**articulo_data), actor)

        assert articulo.folio == f"INV-{anio}-00000001"
        entradas = entradas_bitacora("INVENTARIO_ARTICULO")
        assert len(entradas) == 1
        assert json.loads(entradas[0].datos_nuevos)["folio"] == articulo.folio

    def test_articulos_consecutivos(
        self,
        articulo_service: ArticuloService,
        articulo_data,
        actor: ContextoActor,
    ):
        primero = articulo_service.create_articulo(ArticuloCreate(**articulo_data), actor)
        segundo = articulo_service.create_articulo(ArticuloCreate(**articulo_data), actor)

        assert int(segundo.folio[-8:]) == int(primero.folio[-8:]) + 1

    def test_lote_de_articulos(
        self,
        articulo_service: ArticuloService,
        articulo_data,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        anio = get_local_now().year

        articulos = articulo_service.create_articulos_batch(
            [ArticuloCreate(**articulo_data) for _ in range(3)], actor
        )

        assert [a.folio for a in articulos] == [f"INV-{anio}-{n:08d}" for n in (1, 2, 3)]
        assert len(entradas_bitacora("INVENTARIO_ARTICULO")) == 3

    def test_marca_inexistente_no_consume_folio(
        self,
        db_session: Session,
        articulo_service: ArticuloService,
        articulo_data,
        actor: ContextoActor,
    ):
        articulo_data["id_ct_inventario_marca"] = 999

        with pytest.raises(NotFoundException):
            articulo_service.create_articulo(ArticuloCreate(**articulo_data), actor)

        assert db_session.query(FolioControlORM).count() == 0

    def test_falla_de_bitacora_revierte_folio_y_articulo(
        self,
        db_session: Session,
        articulo_service: ArticuloService,
        folio_service: FolioService,
        articulo_data,
        actor: ContextoActor,
    ):
        articulo_service.create_articulo(ArticuloCreate(**articulo_data), actor)
        anio = get_local_now().year
        ultimo = folio_service.obtener_ultimo_folio("INV", anio)

        db_session.get(SesionORM, actor.id_sesion).activa = False
        db_session.commit()

        with pytest.raises(UnauthorizedException):
            articulo_service.create_articulos_batch(
                [ArticuloCreate(**articulo_data) for _ in range(4)], actor
            )

        assert folio_service.obtener_ultimo_folio("INV", anio) == ultimo
        assert db_session.query(InventarioArticuloORM).count() == 1

    def test_buscar_por_folio(
        self,
        articulo_service: ArticuloService,
        articulo_data,
        actor: ContextoActor,
    ):
        creado = articulo_service.create_articulo(ArticuloCreate(**articulo_data), actor)

        encontrado = articulo_service.get_articulo_by_folio(creado.folio.lower())

        assert encontrado.id_dt_inventario_articulo == creado.id_dt_inventario_articulo

    def test_folio_no_es_editable(
        self,
        articulo_service: ArticuloService,
        articulo_data,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        creado = articulo_service.create_articulo(ArticuloCreate(**articulo_data), actor)

        actualizado = articulo_service.update_articulo(
            creado.id_dt_inventario_articulo, ArticuloUpdate(costo=17000.0), actor
        )

        assert actualizado.folio == creado.folio
        entrada = entradas_bitacora("INVENTARIO_ARTICULO")[-1]
        assert _fragmentos(entrada) == ({"costo": 18500.0}, {"costo": 17000.0})


class TestUsuarioBitacora:
    """Usuario changes are audited without credentials."""

    def test_crear_usuario_sin_password_en_bitacora(
        self,
        db_session: Session,
        bitacora_service: BitacoraService,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        service = UsuarioService(UsuarioRepository(db_session), bitacora_service)

        nuevo = service.create_usuario(
            UsuarioCreate(usuario="jperez", nombre="Juan Pérez", password="secreto123"), actor
        )

        entrada = entradas_bitacora("USUARIO")[0]
        _, nuevos = _fragmentos(entrada)
        assert nuevos["usuario"] == "jperez"
        assert "password_hash" not in nuevos
        assert "password_salt" not in nuevos
        assert entrada.id_registro_afectado == nuevo.id_ct_usuario

    def test_actualizar_rol(
        self,
        db_session: Session,
        bitacora_service: BitacoraService,
        supervisor_usuario: UsuarioORM,
        actor: ContextoActor,
        entradas_bitacora,
    ):
        service = UsuarioService(UsuarioRepository(db_session), bitacora_service)

        service.update_usuario(supervisor_usuario.id_ct_usuario, UsuarioUpdate(role="admin"), actor)

        entrada = entradas_bitacora("USUARIO")[0]
        assert _fragmentos(entrada) == ({"role": "supervisor"}, {"role": "admin"})

    def test_no_puede_desactivarse_a_si_mismo(
        self,
        db_session: Session,
        bitacora_service: BitacoraService,
        actor: ContextoActor,
    ):
        service = UsuarioService(UsuarioRepository(db_session), bitacora_service)

        with pytest.raises(BusinessException):
            service.delete_usuario(actor.id_usuario, actor)
