"""
Configuración de logging para la aplicación
Crea archivos de log por día en la carpeta logs/
"""
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime

from ..config import settings


def setup_logging():
    """Configura el sistema de logging con archivos diarios"""

    # Crear carpeta logs si no existe
    log_dir = settings.log_path
    log_dir.mkdir(parents=True, exist_ok=True)

    # Nombre del archivo de log con fecha actual (YYYY-MM-DD)
    today = datetime.now().strftime("%Y-%m-%d")
    log_file = log_dir / f"inventario_{today}.log"

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    # Eliminar handlers existentes para evitar duplicados
    root_logger.handlers.clear()

    # maxBytes=10MB, backupCount=5
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(log_format, date_format))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(log_format, date_format))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    app_logger = logging.getLogger("inventario")
    app_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    api_logger = logging.getLogger("inventario.api")
    api_logger.setLevel(logging.INFO)

    # Auditorías y operaciones multi-paso: DEBUG para poder reconciliar a mano
    for name in ("inventario.application.services_auditoria", "inventario.application.services_operaciones"):
        logging.getLogger(name).setLevel(logging.DEBUG)

    # Solo warnings y errores de SQL
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)

    logging.info(f"Sistema de logging configurado. Archivo: {log_file}")

    return root_logger
