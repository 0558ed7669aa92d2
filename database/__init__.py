from .db import (
    SessionLocal,
    create_tables,
    engine,
    get_db,
    sembrar_catalogo_bitacora,
    sembrar_usuario_admin,
    hash_password,
    verify_password,
)
from .models import (
    Base,
    UsuarioORM,
    SesionORM,
    FolioControlORM,
    BitacoraAccionORM,
    BitacoraTablaORM,
    BitacoraORM,
    LocalidadORM,
    InventarioMarcaORM,
    InventarioColorORM,
    InventarioArticuloORM,
)

__all__ = [
    "SessionLocal",
    "create_tables",
    "engine",
    "get_db",
    "sembrar_catalogo_bitacora",
    "sembrar_usuario_admin",
    "hash_password",
    "verify_password",
    "Base",
    "UsuarioORM",
    "SesionORM",
    "FolioControlORM",
    "BitacoraAccionORM",
    "BitacoraTablaORM",
    "BitacoraORM",
    "LocalidadORM",
    "InventarioMarcaORM",
    "InventarioColorORM",
    "InventarioArticuloORM",
]
