"""
Tests de API - Inventario, transacciones y traslados
"""
from inventario.security.auth import create_access_token


class TestInventarioAPI:

    def test_crear_y_listar_con_estado(self, client, articulo):
        creado = articulo(quantity=2, min_stock=10, cost="12.50")
        assert creado["version"] == 1

        r = client.get("/inventario", params={"location": "CDMX"})
        assert r.status_code == 200
        (item,) = r.json()
        assert item["id"] == creado["id"]
        assert item["status"] == "Crítico"
        assert float(item["total_value"]) == 25.0

    def test_duplicado_409(self, client, articulo):
        articulo()
        r = client.post("/inventario", json={"name": "Tóner", "category": "Papelería", "location": "CDMX"})
        assert r.status_code == 409

    def test_cantidad_negativa_422(self, client):
        r = client.post("/inventario", json={"name": "X", "category": "Y", "location": "CDMX", "quantity": -1})
        assert r.status_code == 422

    def test_inexistente_404(self, client):
        assert client.get("/inventario/999").status_code == 404
        assert client.delete("/inventario/999").status_code == 404

    def test_actualizar_a_la_baja_alerta(self, client, sink, articulo):
        creado = articulo(quantity=20, min_stock=10)
        r = client.put(f"/inventario/{creado['id']}", json={"quantity": 3})
        assert r.status_code == 200
        assert r.json()["quantity"] == 3
        assert sink.locations() == ["CDMX"]


class TestTransaccionesAPI:

    def test_salida_y_listado(self, client, articulo):
        articulo(quantity=10)
        r = client.post("/transacciones", json={
            "type": "OUT", "item": "Tóner", "category": "Papelería", "location": "CDMX", "quantity": 4,
        }, headers={"X-User-Name": "Pedro"})
        assert r.status_code == 200, r.text
        assert r.json()["user_name"] == "Pedro"

        listado = client.get("/transacciones", params={"type": "OUT"}).json()
        assert [t["quantity"] for t in listado] == [4]

    def test_salida_mayor_al_stock_400(self, client, articulo):
        creado = articulo(quantity=10)
        r = client.post("/transacciones", json={
            "type": "OUT", "item": "Tóner", "category": "Papelería", "location": "CDMX", "quantity": 12,
        })
        assert r.status_code == 400
        assert client.get(f"/inventario/{creado['id']}").json()["quantity"] == 10
        assert client.get("/transacciones").json() == []

    def test_usuario_desde_token(self, client, articulo):
        articulo(quantity=10)
        token = create_access_token({"sub": "u-7", "name": "Lucía", "role": "admin"})
        r = client.post("/transacciones", json={
            "type": "IN", "item": "Tóner", "category": "Papelería", "location": "CDMX", "quantity": 1,
            "date": "2026-03-02",
        }, headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200, r.text
        body = r.json()
        assert body["user_name"] == "Lucía"
        assert body["user_id"] == "u-7"
        assert body["date"] == "2026-03-02"

    def test_eliminar_salida(self, client, articulo):
        creado = articulo(quantity=10)
        t = client.post("/transacciones", json={
            "type": "OUT", "item": "Tóner", "category": "Papelería", "location": "CDMX", "quantity": 4,
        }).json()
        assert client.delete(f"/transacciones/{t['id']}").status_code == 200
        assert client.get(f"/inventario/{creado['id']}").json()["quantity"] == 10


class TestTrasladosAPI:

    def test_trasladar(self, client, articulo):
        creado = articulo(quantity=10)
        r = client.post("/traslados", json={"item_id": creado["id"], "quantity": 10, "destination": "Monterrey"})
        assert r.status_code == 200, r.text
        body = r.json()
        assert body["source_deleted"] is True
        assert body["destination_quantity"] == 10
        assert client.get(f"/inventario/{creado['id']}").status_code == 404

    def test_traslado_no_se_elimina(self, client, articulo):
        creado = articulo(quantity=10)
        body = client.post("/traslados", json={"item_id": creado["id"], "quantity": 2, "destination": "Puebla"}).json()
        assert client.delete(f"/transacciones/{body['transaction_id']}").status_code == 400

    def test_misma_ubicacion_400(self, client, articulo):
        creado = articulo(quantity=10)
        r = client.post("/traslados", json={"item_id": creado["id"], "quantity": 1, "destination": "CDMX"})
        assert r.status_code == 400
