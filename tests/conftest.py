"""
Configuración de fixtures para pytest.

Este módulo contiene fixtures reutilizables para todos los tests.
"""

import pytest
import os
from typing import Generator, Dict, Any, List, Optional
from datetime import timedelta
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Configurar para usar base de datos en memoria para tests
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from main import app
from database.db import (
    get_db,
    Base,
    hash_password,
    sembrar_catalogo_bitacora,
    sembrar_tablas_bitacora,
)
from database.models import (
    UsuarioORM,
    SesionORM,
    BitacoraORM,
    BitacoraTablaORM,
    InventarioMarcaORM,
    InventarioColorORM,
    LocalidadORM,
    get_current_time,
)
from auth import create_access_token
from core.bitacora import RegistroBitacora
from core.security import ContextoActor
from dependencies import construir_registro_bitacora
from repositories.bitacora_repository import BitacoraRepository
from repositories.folio_repository import FolioControlRepository
from repositories.localidad_repository import LocalidadRepository
from services.bitacora_service import BitacoraService
from services.folio_service import FolioService
from services.localidad_service import LocalidadService


# ==================== Database Fixtures ====================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a new database session with the bitácora catalogs seeded as on startup."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=db_engine
    )
    session = TestingSessionLocal()
    sembrar_catalogo_bitacora(session)
    sembrar_tablas_bitacora(session, construir_registro_bitacora())
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database session override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


# ==================== User Fixtures ====================

def _crear_usuario(db_session: Session, usuario: str, role: str, password: str) -> UsuarioORM:
    salt_hex, hash_hex = hash_password(password)
    nuevo = UsuarioORM(
        usuario=usuario,
        nombre=f"{usuario.capitalize()} Test",
        email=f"{usuario}@example.com",
        role=role,
        password_salt=salt_hex,
        password_hash=hash_hex,
    )
    db_session.add(nuevo)
    db_session.commit()
    db_session.refresh(nuevo)
    return nuevo


def _abrir_sesion(db_session: Session, usuario: UsuarioORM, jti: str) -> SesionORM:
    sesion = SesionORM(
        id_ct_usuario=usuario.id_ct_usuario,
        jti=jti,
        activa=True,
        fecha_expiracion=get_current_time() + timedelta(hours=1),
    )
    db_session.add(sesion)
    db_session.commit()
    db_session.refresh(sesion)
    return sesion


@pytest.fixture
def password() -> str:
    return "password123"


@pytest.fixture
def capturista_usuario(db_session: Session, password: str) -> UsuarioORM:
    """Create a capturista user in the database."""
    return _crear_usuario(db_session, "capturista", "capturista", password)


@pytest.fixture
def supervisor_usuario(db_session: Session, password: str) -> UsuarioORM:
    """Create a supervisor user in the database."""
    return _crear_usuario(db_session, "supervisor", "supervisor", password)


@pytest.fixture
def admin_usuario(db_session: Session, password: str) -> UsuarioORM:
    """Create an admin user in the database."""
    return _crear_usuario(db_session, "admin", "admin", password)


@pytest.fixture
def capturista_sesion(db_session: Session, capturista_usuario: UsuarioORM) -> SesionORM:
    return _abrir_sesion(db_session, capturista_usuario, "jti-capturista")


@pytest.fixture
def supervisor_sesion(db_session: Session, supervisor_usuario: UsuarioORM) -> SesionORM:
    return _abrir_sesion(db_session, supervisor_usuario, "jti-supervisor")


@pytest.fixture
def admin_sesion(db_session: Session, admin_usuario: UsuarioORM) -> SesionORM:
    return _abrir_sesion(db_session, admin_usuario, "jti-admin")


@pytest.fixture
def actor(capturista_usuario: UsuarioORM, capturista_sesion: SesionORM) -> ContextoActor:
    """Usuario y sesión del capturista para llamadas directas a servicios."""
    return ContextoActor(
        id_usuario=capturista_usuario.id_ct_usuario,
        id_sesion=capturista_sesion.id_ct_sesion,
    )


# ==================== Auth Token Fixtures ====================

def _token(usuario: UsuarioORM, sesion: SesionORM) -> str:
    return create_access_token(data={
        "sub": usuario.id_ct_usuario,
        "role": usuario.role,
        "id_sesion": sesion.id_ct_sesion,
        "jti": sesion.jti,
    })


@pytest.fixture
def auth_headers_capturista(capturista_usuario: UsuarioORM, capturista_sesion: SesionORM) -> Dict[str, str]:
    """Generate authentication headers for capturista."""
    return {"Authorization": f"Bearer {_token(capturista_usuario, capturista_sesion)}"}


@pytest.fixture
def auth_headers_supervisor(supervisor_usuario: UsuarioORM, supervisor_sesion: SesionORM) -> Dict[str, str]:
    """Generate authentication headers for supervisor."""
    return {"Authorization": f"Bearer {_token(supervisor_usuario, supervisor_sesion)}"}


@pytest.fixture
def auth_headers_admin(admin_usuario: UsuarioORM, admin_sesion: SesionORM) -> Dict[str, str]:
    """Generate authentication headers for admin."""
    return {"Authorization": f"Bearer {_token(admin_usuario, admin_sesion)}"}


# ==================== Service Fixtures ====================

@pytest.fixture
def registro() -> RegistroBitacora:
    return construir_registro_bitacora()


@pytest.fixture
def bitacora_service(db_session: Session, registro: RegistroBitacora) -> BitacoraService:
    return BitacoraService(BitacoraRepository(db_session), registro)


@pytest.fixture
def folio_service(db_session: Session) -> FolioService:
    return FolioService(FolioControlRepository(db_session))


@pytest.fixture
def localidad_service(db_session: Session, bitacora_service: BitacoraService) -> LocalidadService:
    return LocalidadService(LocalidadRepository(db_session), bitacora_service)


# ==================== Catalog Fixtures ====================

@pytest.fixture
def marca_instance(db_session: Session) -> InventarioMarcaORM:
    marca = InventarioMarcaORM(nombre="Dell", descripcion="Equipo de cómputo")
    db_session.add(marca)
    db_session.commit()
    db_session.refresh(marca)
    return marca


@pytest.fixture
def color_instance(db_session: Session) -> InventarioColorORM:
    color = InventarioColorORM(nombre="Negro")
    db_session.add(color)
    db_session.commit()
    db_session.refresh(color)
    return color


@pytest.fixture
def localidad_instance(db_session: Session) -> LocalidadORM:
    localidad = LocalidadORM(nombre="Centro", ambito="urbano")
    db_session.add(localidad)
    db_session.commit()
    db_session.refresh(localidad)
    return localidad


@pytest.fixture
def articulo_data(marca_instance: InventarioMarcaORM, color_instance: InventarioColorORM) -> Dict[str, Any]:
    """Sample artículo data for testing."""
    return {
        "descripcion": "Laptop Latitude",
        "no_serie": "SN-0001",
        "modelo": "5420",
        "costo": 18500.0,
        "id_ct_inventario_marca": marca_instance.id_ct_inventario_marca,
        "id_ct_inventario_color": color_instance.id_ct_inventario_color,
    }


# ==================== Utility Fixtures ====================

@pytest.fixture
def entradas_bitacora(db_session: Session):
    """Devuelve una función que lista las entradas de bitácora en orden de inserción."""
    def _entradas(tabla: Optional[str] = None) -> List[BitacoraORM]:
        query = db_session.query(BitacoraORM)
        if tabla:
            query = query.join(BitacoraORM.tabla).filter(BitacoraTablaORM.nombre == tabla)
        return query.order_by(BitacoraORM.id_dt_bitacora).all()
    return _entradas
