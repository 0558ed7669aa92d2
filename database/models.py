from datetime import datetime

from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    Float,
    Text,
    ForeignKey,
    Boolean,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from utils.datetime_utils import get_local_now

Base = declarative_base()


def get_current_time() -> datetime:
    """Obtiene la hora actual (naive) en la zona horaria local configurada."""
    return get_local_now().replace(tzinfo=None)


#ORM: Usuarios
class UsuarioORM(Base):
    __tablename__ = "ct_usuario"
    id_ct_usuario = Column(Integer, primary_key=True, autoincrement=True)
    usuario = Column(String(100), nullable=False, unique=True)
    nombre = Column(String(200), nullable=False)
    email = Column(String(150), nullable=True)
    role = Column(String(20), nullable=False, default="capturista")
    password_salt = Column(String(64), nullable=False)
    password_hash = Column(String(128), nullable=False)
    estado = Column(Boolean, default=True, nullable=False)
    #auditoría
    id_ct_usuario_in = Column(Integer, nullable=True)
    id_ct_usuario_up = Column(Integer, nullable=True)
    fecha_in = Column(DateTime, default=get_current_time)
    fecha_up = Column(DateTime, default=get_current_time, onupdate=get_current_time)


#ORM: Sesiones (una por login, su id viaja en el JWT)
class SesionORM(Base):
    __tablename__ = "ct_sesion"
    id_ct_sesion = Column(Integer, primary_key=True, autoincrement=True)
    id_ct_usuario = Column(Integer, ForeignKey("ct_usuario.id_ct_usuario"), nullable=False, index=True)
    jti = Column(String(64), nullable=False, unique=True)
    ip_origen = Column(String(45), nullable=True)
    activa = Column(Boolean, default=True, nullable=False)
    fecha_expiracion = Column(DateTime, nullable=False)
    fecha_in = Column(DateTime, default=get_current_time)

    usuario = relationship("UsuarioORM")


#ORM: Control de folios consecutivos por sistema y año
class FolioControlORM(Base):
    __tablename__ = "ct_folios_control"
    __table_args__ = (
        UniqueConstraint("sistema", "anio", name="uq_folios_control_sistema_anio"),
    )
    id_ct_folios_control = Column(Integer, primary_key=True, autoincrement=True)
    sistema = Column(String(10), nullable=False)
    anio = Column(Integer, nullable=False)
    ultimo_folio = Column(Integer, nullable=False, default=0)
    estado = Column(Boolean, default=True, nullable=False)
    #auditoría
    id_ct_usuario_in = Column(Integer, nullable=False)
    id_ct_usuario_up = Column(Integer, nullable=True)
    fecha_in = Column(DateTime, default=get_current_time)
    fecha_up = Column(DateTime, default=get_current_time, onupdate=get_current_time)


#ORM: Catálogo de acciones de bitácora
class BitacoraAccionORM(Base):
    __tablename__ = "ct_bitacora_accion"
    id_ct_bitacora_accion = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(50), nullable=False, unique=True)
    descripcion = Column(String(200), nullable=True)
    estado = Column(Boolean, default=True, nullable=False)
    id_ct_usuario_in = Column(Integer, nullable=False, default=1)
    fecha_in = Column(DateTime, default=get_current_time)


#ORM: Catálogo de tablas auditadas
class BitacoraTablaORM(Base):
    __tablename__ = "ct_bitacora_tabla"
    id_ct_bitacora_tabla = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(100), nullable=False, unique=True)
    descripcion = Column(String(200), nullable=True)
    auditar = Column(Boolean, default=True, nullable=False)
    estado = Column(Boolean, default=True, nullable=False)
    id_ct_usuario_in = Column(Integer, nullable=False, default=1)
    fecha_in = Column(DateTime, default=get_current_time)


#ORM: Bitácora (solo inserciones)
class BitacoraORM(Base):
    __tablename__ = "dt_bitacora"
    id_dt_bitacora = Column(Integer, primary_key=True, autoincrement=True)
    id_ct_bitacora_accion = Column(
        Integer, ForeignKey("ct_bitacora_accion.id_ct_bitacora_accion"), nullable=False
    )
    id_ct_bitacora_tabla = Column(
        Integer, ForeignKey("ct_bitacora_tabla.id_ct_bitacora_tabla"), nullable=False, index=True
    )
    id_registro_afectado = Column(Integer, nullable=True, index=True)
    id_ct_sesion = Column(Integer, nullable=False)
    datos_anteriores = Column(Text, nullable=False, default="{}")
    datos_nuevos = Column(Text, nullable=False, default="{}")
    estado = Column(Boolean, default=True, nullable=False)
    id_ct_usuario_in = Column(Integer, nullable=False)
    fecha_in = Column(DateTime, default=get_current_time)

    accion = relationship("BitacoraAccionORM")
    tabla = relationship("BitacoraTablaORM")


#ORM: Localidades
class LocalidadORM(Base):
    __tablename__ = "ct_localidad"
    id_ct_localidad = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(150), nullable=False)
    ambito = Column(String(20), nullable=True)
    estado = Column(Boolean, default=True, nullable=False)
    #auditoría
    id_ct_usuario_in = Column(Integer, nullable=True)
    id_ct_usuario_up = Column(Integer, nullable=True)
    fecha_in = Column(DateTime, default=get_current_time)
    fecha_up = Column(DateTime, default=get_current_time, onupdate=get_current_time)


#ORM: Marcas de inventario
class InventarioMarcaORM(Base):
    __tablename__ = "ct_inventario_marca"
    id_ct_inventario_marca = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(100), nullable=False, unique=True)
    descripcion = Column(String(255), nullable=True)
    estado = Column(Boolean, default=True, nullable=False)
    #auditoría
    id_ct_usuario_in = Column(Integer, nullable=True)
    id_ct_usuario_up = Column(Integer, nullable=True)
    fecha_in = Column(DateTime, default=get_current_time)
    fecha_up = Column(DateTime, default=get_current_time, onupdate=get_current_time)


#ORM: Colores de inventario
class InventarioColorORM(Base):
    __tablename__ = "ct_inventario_color"
    id_ct_inventario_color = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(50), nullable=False, unique=True)
    estado = Column(Boolean, default=True, nullable=False)
    #auditoría
    id_ct_usuario_in = Column(Integer, nullable=True)
    id_ct_usuario_up = Column(Integer, nullable=True)
    fecha_in = Column(DateTime, default=get_current_time)
    fecha_up = Column(DateTime, default=get_current_time, onupdate=get_current_time)


#ORM: Artículos de inventario
class InventarioArticuloORM(Base):
    __tablename__ = "dt_inventario_articulo"
    id_dt_inventario_articulo = Column(Integer, primary_key=True, autoincrement=True)
    folio = Column(String(30), nullable=False, unique=True)
    descripcion = Column(String(255), nullable=False)
    no_serie = Column(String(100), nullable=True)
    modelo = Column(String(100), nullable=True)
    costo = Column(Float, nullable=True)
    observaciones = Column(Text, nullable=True)
    id_ct_inventario_marca = Column(
        Integer, ForeignKey("ct_inventario_marca.id_ct_inventario_marca"), nullable=True
    )
    id_ct_inventario_color = Column(
        Integer, ForeignKey("ct_inventario_color.id_ct_inventario_color"), nullable=True
    )
    estado = Column(Boolean, default=True, nullable=False)
    #auditoría
    id_ct_usuario_in = Column(Integer, nullable=True)
    id_ct_usuario_up = Column(Integer, nullable=True)
    fecha_in = Column(DateTime, default=get_current_time)
    fecha_up = Column(DateTime, default=get_current_time, onupdate=get_current_time)

    marca = relationship("InventarioMarcaORM")
    color = relationship("InventarioColorORM")
