from .auth import router as auth_router
from .usuarios import router as usuarios_router
from .localidades import router as localidades_router
from .inventario import router as inventario_router
from .folios import router as folios_router
from .bitacora import router as bitacora_router

__all__ = [
    "auth_router",
    "usuarios_router",
    "localidades_router",
    "inventario_router",
    "folios_router",
    "bitacora_router",
]
