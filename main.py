from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import uvicorn
import logging

from config import settings, configure_logging

from routes import (
    auth_router,
    usuarios_router,
    localidades_router,
    inventario_router,
    folios_router,
    bitacora_router,
)
from database.db import create_tables, engine
from dependencies import get_registro_bitacora
from models.common import HealthCheckResponse

logger = logging.getLogger(__name__)

# Configurar logging una sola vez al inicio
configure_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Maneja el ciclo de vida de la aplicación."""
    # Startup: sin catálogos de acciones y tablas la bitácora no puede escribir
    create_tables(get_registro_bitacora())
    yield
    # Shutdown
    engine.dispose()

app = FastAPI(
    title=settings.app_name,
    description=(
        "Gestión de infraestructura e inventario institucional. Cada cambio queda "
        "registrado en bitácora y los artículos reciben folios consecutivos por año."
    ),
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    debug=settings.debug_mode
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

@app.get("/")
async def root():
    """Endpoint raíz con información de la API."""
    return {
        "message": settings.app_name,
        "version": settings.app_version,
        "status": "active",
        "environment": "production" if settings.is_production else "development",
        "docs": "/docs",
        "redoc": "/redoc"
    }

app.include_router(auth_router)
app.include_router(usuarios_router)
app.include_router(localidades_router)
app.include_router(inventario_router)
app.include_router(folios_router)
app.include_router(bitacora_router)

@app.get("/health", response_model=HealthCheckResponse)
def health_check():
    """Health check endpoint con verificación de base de datos."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        logger.error(f"Health check: Error de conexión a BD: {e}")
        db_status = "disconnected"

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "unhealthy",
        service=settings.app_name,
        version=settings.app_version,
        database=db_status,
        environment="production" if settings.is_production else "development",
    )

if __name__ == "__main__":
    uvicorn.run(
        app, 
        host="0.0.0.0", 
        port=8000,
        log_level="info"
    )
