import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from .db import init_db
from .api.routers import (
    health, inventario, transacciones, traslados, auditorias, recepciones, proveedores,
    activos, ubicaciones, categorias, usuarios, operaciones, low_stock,
)
from .infrastructure.logging_config import setup_logging
from .config import settings as app_settings

# Configurar logging al iniciar la aplicación
setup_logging()
logger = logging.getLogger(__name__)

# Inicializar BD (no fallar si la conexión no está configurada - primer arranque)
try:
    init_db()
except Exception as e:
    logger.warning("No se pudo inicializar la base de datos: %s. Puede requerir configuración inicial.", e)

app = FastAPI(
    title="Inventario - Auditorías y Conciliación",
    version="0.1.0",
    description="Inventario por ubicación, transacciones, traslados y auditorías físicas",
    docs_url="/docs" if app_settings.environment != "production" else None,
    redoc_url="/redoc" if app_settings.environment != "production" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With", "X-User-Name", "X-User-Role"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    if app_settings.environment == "production":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    return response

app.include_router(health.router)
app.include_router(inventario.router)
app.include_router(transacciones.router)
app.include_router(traslados.router)
app.include_router(auditorias.router)
app.include_router(recepciones.router)
app.include_router(proveedores.router)
app.include_router(activos.router)
app.include_router(ubicaciones.router)
app.include_router(categorias.router)
app.include_router(usuarios.router)
app.include_router(operaciones.router)
app.include_router(low_stock.router)
