import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings

if settings.database_url.startswith("sqlite:///./"):
    os.makedirs("./data", exist_ok=True)

# postgres:// -> postgresql:// (SQLAlchemy no acepta el alias)
DATABASE_URL = settings.database_url
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}


def habilitar_foreign_keys_sqlite(target_engine):
    """SQLite no aplica ON DELETE sin este PRAGMA."""
    if target_engine.dialect.name != "sqlite":
        return

    @event.listens_for(target_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(DATABASE_URL, echo=False, future=True, connect_args=connect_args)
habilitar_foreign_keys_sqlite(engine)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def _import_all_models():
    """Importa todos los modelos para que Base.metadata los registre."""
    from .domain import models  # noqa: F401 - Location, Category, Supplier, User
    from .domain import models_inventario  # noqa: F401 - InventoryItem, InventoryTransaction, PartReceipt, AssetAssignment
    from .domain import models_auditoria  # noqa: F401 - Audit, AuditItem
    from .domain import models_operaciones  # noqa: F401 - OperationLog


def init_db(bind=None):
    """Crear tablas si no existen (arranque normal)."""
    _import_all_models()
    Base.metadata.create_all(bind=bind or engine)


def recreate_schema_from_models(bind=None):
    """Elimina todas las tablas y las recrea desde los modelos."""
    _import_all_models()
    Base.metadata.drop_all(bind=bind or engine)
    Base.metadata.create_all(bind=bind or engine)
