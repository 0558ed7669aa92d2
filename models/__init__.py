from .usuarios import (
    Role,
    Usuario,
    UsuarioCreate,
    UsuarioUpdate,
    LoginRequest,
    TokenResponse,
)
from .localidades import AmbitoLocalidad, Localidad, LocalidadCreate, LocalidadUpdate
from .inventario import (
    Marca, MarcaCreate, MarcaUpdate,
    Color, ColorCreate, ColorUpdate,
    Articulo, ArticuloCreate, ArticuloUpdate, ArticuloBatchCreate,
)
from .bitacora import Bitacora
from .folios import (
    FolioPreview,
    FolioUltimo,
    FolioExiste,
    FolioReinicio,
    FolioReinicioResponse,
    FolioEstadistica,
)
from .common import (
    DeleteResponse,
    HealthCheckResponse,
    create_delete_response,
)

__all__ = [
    # Usuarios
    "Role", "Usuario", "UsuarioCreate", "UsuarioUpdate", "LoginRequest", "TokenResponse",
    # Localidades
    "AmbitoLocalidad", "Localidad", "LocalidadCreate", "LocalidadUpdate",
    # Inventario
    "Marca", "MarcaCreate", "MarcaUpdate",
    "Color", "ColorCreate", "ColorUpdate",
    "Articulo", "ArticuloCreate", "ArticuloUpdate", "ArticuloBatchCreate",
    # Bitácora y folios
    "Bitacora",
    "FolioPreview", "FolioUltimo", "FolioExiste", "FolioReinicio",
    "FolioReinicioResponse", "FolioEstadistica",
    # Common responses
    "DeleteResponse", "HealthCheckResponse", "create_delete_response",
]
