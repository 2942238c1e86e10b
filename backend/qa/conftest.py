"""
Configuración global de pytest para los tests del inventario.

Cada test usa su propia base SQLite en archivo (tmp_path); nunca se
comparte estado entre tests.
"""
import os
import sys
import tempfile
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest

# Variables de entorno antes de importar inventario (settings y engine se crean al importar)
_tmp_dir = Path(tempfile.mkdtemp(prefix="inventario_qa_"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_tmp_dir / 'app.db'}")
os.environ.setdefault("LOG_DIR", str(_tmp_dir / "logs"))
os.environ.setdefault("ALERTS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

# Agregar el directorio raíz al path para imports
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))
sys.path.insert(0, str(Path(__file__).parent))

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from inventario.db import habilitar_foreign_keys_sqlite, init_db
from inventario.application.services_ledger import LedgerService
from inventario.application.services_low_stock import EvaluadorStockBajo
from inventario.application.services_operaciones import OperationTracker
from inventario.domain.models import User
from inventario.infrastructure.unit_of_work import UnitOfWork

from fakes import RecordingSink


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'inventario_test.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    habilitar_foreign_keys_sqlite(eng)
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def uow(session_factory):
    u = UnitOfWork(session_factory())
    yield u
    u.close()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def evaluador(uow, sink):
    return EvaluadorStockBajo(uow, sink)


@pytest.fixture
def crear_articulo(uow):
    """Crea y confirma un registro del ledger."""

    def _crear(name, location, quantity, category="General", min_stock=0, cost=Decimal("10.00"), asset_type="Insumo"):
        item = LedgerService(uow).create_record(name, category, location, quantity, min_stock, cost, asset_type)
        uow.commit()
        return item

    return _crear


@pytest.fixture
def admin_cdmx(uow):
    user = uow.users.add(User(
        name="Ana Admin", email="ana@example.com", location="CDMX", role="admin", receive_alerts=True,
    ))
    uow.commit()
    return user


@pytest.fixture
def escritura_al_iniciar_operacion(engine):
    """
    Otro usuario fija la cantidad de un artículo justo después de que la
    operación registra su bitácora, es decir, entre la lectura y el primer paso.
    """

    def _escribir(item_id, quantity):
        original = OperationTracker.__init__

        def init(self, *args, **kwargs):
            original(self, *args, **kwargs)
            with engine.begin() as conn:
                conn.execute(
                    text("UPDATE inventory SET quantity = :q, version = version + 1 WHERE id = :id"),
                    {"q": quantity, "id": item_id},
                )

        return patch.object(OperationTracker, "__init__", init)

    return _escribir
