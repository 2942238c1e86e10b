"""
Fixtures para tests de integración API.
Usa TestClient de FastAPI contra la app real; la sesión, el sink de
alertas y el remitente de correo se reemplazan con dependency_overrides.
"""
import pytest
from fastapi.testclient import TestClient

from inventario.dependencies import get_db, get_email_sender, get_sink
from inventario.main import app

from fakes import FakeEmailSender


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def client(session_factory, sink, email_sender):
    """Cliente HTTP contra la base del test."""

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_sink] = lambda: sink
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def articulo(client):
    """Crea un artículo vía API y devuelve el JSON."""

    def _crear(**campos):
        payload = {"name": "Tóner", "category": "Papelería", "location": "CDMX", "quantity": 10, "min_stock": 5}
        payload.update(campos)
        r = client.post("/inventario", json=payload)
        assert r.status_code == 200, r.text
        return r.json()

    return _crear
