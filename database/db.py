"""módulo de base de datos con manejo de errores y configuración centralizada."""
from typing import Optional, Generator
import hashlib
import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

# import ORM classes and Base from models.py
from .models import (
    Base,
    UsuarioORM,
    BitacoraAccionORM,
    BitacoraTablaORM,
    get_current_time,
)

#import configuration
from config import settings
from core.bitacora import ACCIONES_BITACORA, RegistroBitacora

logger = logging.getLogger(__name__)


def build_connect_args(database_url: str) -> dict:
    """argumentos de conexión según el driver de la URL."""
    backend = make_url(database_url).get_backend_name()
    if backend == "sqlite":
        #varios hilos (threadpool de FastAPI) comparten el archivo; espera locks de escritura
        return {"check_same_thread": False, "timeout": 30}
    if backend == "mssql":
        return {"timeout": 30}
    return {"connect_timeout": 30}


#engine / session con configuración centralizada
engine = create_engine(
    settings.database_url,
    echo=settings.debug_mode,
    future=True,
    pool_pre_ping=True,  #verifica conexiones antes de usarlas
    pool_recycle=3600,   #recicla conexiones cada hora
    connect_args=build_connect_args(settings.database_url),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    """dependencia de FastAPI que provee una sesión con manejo robusto de errores.

    Yields:
        Session: Sesión de SQLAlchemy

    Nota:
        - Hace rollback automático si hay excepciones SQLAlchemy
        - Cierra la sesión de forma segura
        - No captura HTTPException (son errores esperados de negocio)
    """
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Error de base de datos en sesión: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def sembrar_catalogo_bitacora(db: Session) -> int:
    """Inserta las acciones estándar de bitácora que aún no existan.

    Returns:
        int: número de acciones creadas
    """
    existentes = {
        nombre for (nombre,) in db.query(BitacoraAccionORM.nombre).all()
    }
    creadas = 0
    for nombre in ACCIONES_BITACORA.values():
        if nombre in existentes:
            continue
        db.add(BitacoraAccionORM(nombre=nombre, descripcion=f"Acción de {nombre.lower()}"))
        creadas += 1
    if creadas:
        db.commit()
    return creadas


def sembrar_tablas_bitacora(db: Session, registro: RegistroBitacora) -> int:
    """Da de alta en ct_bitacora_tabla cada tabla habilitada del registro.

    Con las filas ya presentes, dos primeras mutaciones concurrentes sobre
    la misma entidad no compiten por insertar el mismo nombre.

    Returns:
        int: número de tablas creadas
    """
    existentes = {
        nombre for (nombre,) in db.query(BitacoraTablaORM.nombre).all()
    }
    creadas = 0
    for entrada in registro.tablas():
        if not entrada.habilitado or entrada.nombre_bitacora in existentes:
            continue
        db.add(BitacoraTablaORM(
            nombre=entrada.nombre_bitacora,
            descripcion=f"Tabla {entrada.tabla}",
            auditar=True,
            estado=True,
        ))
        existentes.add(entrada.nombre_bitacora)
        creadas += 1
    if creadas:
        db.commit()
    return creadas


def sembrar_usuario_admin(db: Session) -> bool:
    """Crea el administrador inicial si está configurado y no hay usuarios.

    Returns:
        bool: True si se creó el usuario
    """
    if not settings.admin_password_inicial:
        return False
    if db.query(UsuarioORM.id_ct_usuario).first() is not None:
        return False
    salt_hex, hash_hex = hash_password(settings.admin_password_inicial)
    db.add(UsuarioORM(
        usuario=settings.admin_usuario_inicial,
        nombre="Administrador",
        role="admin",
        password_salt=salt_hex,
        password_hash=hash_hex,
    ))
    db.commit()
    logger.warning(f"⚠️ Usuario administrador inicial '{settings.admin_usuario_inicial}' creado")
    return True


def create_tables(registro: Optional[RegistroBitacora] = None) -> None:
    """Crear tablas ORM en la base de datos y poblar los catálogos de bitácora.

    Args:
        registro: tablas auditables cuyo nombre se da de alta en ct_bitacora_tabla

    Raises:
        SQLAlchemyError: Si hay error al crear las tablas
    """
    try:
        Base.metadata.create_all(bind=engine)
        with SessionLocal() as db:
            creadas = sembrar_catalogo_bitacora(db)
            tablas = sembrar_tablas_bitacora(db, registro) if registro else 0
            sembrar_usuario_admin(db)
        logger.info(
            f"Tablas de base de datos creadas/verificadas exitosamente "
            f"({creadas} acciones y {tablas} tablas de bitácora nuevas)"
        )
    except SQLAlchemyError as e:
        logger.error(f"Error al crear tablas: {e}", exc_info=True)
        raise


def hash_password(password: str) -> tuple[str, str]:
    """Genera salt y hash (ambos hex) usando PBKDF2-HMAC-SHA256."""
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)
    return salt.hex(), dk.hex()


def verify_password(salt_hex: str, hash_hex: str, password: str) -> bool:
    """Verifica que password coincida con salt+hash almacenados."""
    salt = bytes.fromhex(salt_hex)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)
    return dk.hex() == hash_hex


def set_audit_fields(obj, user_id: Optional[int], creating: bool = True) -> None:
    """helper para setear campos de auditoría en una instancia ORM

    Args:
        obj: instancia ORM a modificar
        user_id: ID del usuario responsable
        creating: Si True setea campos de creación, si False solo actualización
    """
    now = get_current_time()
    if creating:
        if hasattr(obj, "id_ct_usuario_in"):
            obj.id_ct_usuario_in = user_id
        if hasattr(obj, "fecha_in") and getattr(obj, "fecha_in", None) is None:
            obj.fecha_in = now
        return
    if hasattr(obj, "id_ct_usuario_up"):
        obj.id_ct_usuario_up = user_id
    if hasattr(obj, "fecha_up"):
        obj.fecha_up = now


def soft_delete(obj, user_id: Optional[int]) -> None:
    """
    marca un objeto como inactivo (soft delete sobre el campo estado)

    Args:
        obj: instancia ORM a desactivar
        user_id: ID del usuario que realiza la eliminación
    """
    obj.estado = False
    set_audit_fields(obj, user_id, creating=False)


def restore_deleted(obj, user_id: Optional[int]) -> None:
    """reactiva un objeto previamente desactivado

    Args:
        obj: instancia ORM a restaurar
        user_id: ID del usuario que realiza la restauración
    """
    obj.estado = True
    set_audit_fields(obj, user_id, creating=False)


