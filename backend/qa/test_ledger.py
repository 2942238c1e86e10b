"""
Tests del ledger de inventario y de la gestión de artículos
"""
from decimal import Decimal

import pytest
from sqlalchemy import text

from inventario.application.errors import (
    ActualizacionConcurrenteError, CantidadInvalidaError, RegistroDuplicadoError,
    RegistroNoEncontradoError, ValidacionError,
)
from inventario.application.services_ledger import LedgerService
from inventario.domain.enums import StockStatus


class TestLedger:

    def test_clave_duplicada_rechazada(self, uow, crear_articulo):
        crear_articulo("Tóner", "CDMX", 5, category="Papelería")
        with pytest.raises(RegistroDuplicadoError):
            LedgerService(uow).create_record("Tóner", "Papelería", "CDMX", 3)

    def test_misma_clave_en_otra_ubicacion_es_otro_registro(self, uow, crear_articulo):
        a = crear_articulo("Tóner", "CDMX", 5)
        b = crear_articulo("Tóner", "Monterrey", 2)
        assert a.id != b.id

    def test_set_quantity_negativo_rechazado(self, uow, crear_articulo):
        item = crear_articulo("Tóner", "CDMX", 5)
        with pytest.raises(CantidadInvalidaError):
            LedgerService(uow).set_quantity(item, -1)
        uow.rollback()
        assert uow.inventory.get(item.id).quantity == 5

    def test_increment_or_create(self, uow, crear_articulo):
        ledger = LedgerService(uow)
        existente = crear_articulo("Tóner", "CDMX", 5)

        item, creado = ledger.increment_or_create(existente.name, existente.category, "CDMX", 3)
        assert not creado
        assert item.quantity == 8

        nuevo, creado = ledger.increment_or_create("Tóner", "General", "Puebla", 4)
        assert creado
        assert nuevo.quantity == 4

    def test_adjust_quantity_atomico(self, uow, crear_articulo):
        item = crear_articulo("Tóner", "CDMX", 5)
        assert uow.inventory.adjust_quantity(item.id, -3)
        assert not uow.inventory.adjust_quantity(item.id, -10)
        assert uow.inventory.adjust_quantity(item.id, -10, clamp_at_zero=True)
        uow.commit()
        assert uow.inventory.get(item.id).quantity == 0

    def test_escritura_obsoleta_detectada(self, uow, engine, crear_articulo):
        """Otro usuario escribe entre la lectura y la escritura: no se pierde su cambio"""
        item = crear_articulo("Tóner", "CDMX", 10)
        item_id = item.id
        assert item.quantity == 10  # lectura

        with engine.begin() as conn:
            conn.execute(
                text("UPDATE inventory SET quantity = 7, version = version + 1 WHERE id = :id"),
                {"id": item_id},
            )

        with pytest.raises(ActualizacionConcurrenteError):
            LedgerService(uow).set_quantity(item, 3)
        uow.rollback()
        assert uow.inventory.get(item_id).quantity == 7


class TestGestionArticulos:

    def test_validacion_del_formulario(self, uow):
        with pytest.raises(ValidacionError) as exc:
            LedgerService(uow).crear_articulo({"name": "", "category": "", "location": "CDMX", "quantity": -1})
        errores = exc.value.errores
        assert "El nombre del artículo es requerido" in errores
        assert "La categoría es requerida" in errores
        assert "La cantidad no puede ser negativa" in errores

    def test_costo_negativo_rechazado(self, uow):
        with pytest.raises(ValidacionError):
            LedgerService(uow).crear_articulo({
                "name": "Tóner", "category": "Papelería", "location": "CDMX", "quantity": 1, "cost": -5,
            })

    def test_listado_con_estado_y_valor(self, uow, crear_articulo):
        crear_articulo("A", "CDMX", 2, min_stock=10, cost=Decimal("12.50"))
        crear_articulo("B", "CDMX", 40, min_stock=10, cost=Decimal("1.00"))
        crear_articulo("C", "Monterrey", 0, min_stock=10)

        articulos = {a.item.name: a for a in LedgerService(uow).listar_articulos()}

        assert articulos["A"].status == StockStatus.CRITICO
        assert articulos["A"].total_value == Decimal("25.00")
        assert articulos["B"].status == StockStatus.EXCESO
        assert articulos["C"].status == StockStatus.AGOTADO

    def test_filtro_por_estado(self, uow, crear_articulo):
        crear_articulo("A", "CDMX", 2, min_stock=10)
        crear_articulo("B", "CDMX", 12, min_stock=10)
        bajos = LedgerService(uow).listar_articulos(status="Crítico")
        assert [a.item.name for a in bajos] == ["A"]

    def test_minimo_nulo_usa_el_de_settings(self, uow, crear_articulo):
        item = crear_articulo("A", "CDMX", 3)
        item.min_stock = None
        uow.commit()
        (articulo,) = LedgerService(uow).listar_articulos()
        assert articulo.min_stock == 5
        assert articulo.status == StockStatus.BAJO

    def test_actualizar_con_clave_de_otro_registro(self, uow, crear_articulo):
        crear_articulo("A", "CDMX", 1)
        b = crear_articulo("B", "CDMX", 1)
        with pytest.raises(RegistroDuplicadoError):
            LedgerService(uow).actualizar_articulo(b.id, {"name": "A"})

    def test_actualizar_cantidad_a_la_baja_alerta(self, uow, evaluador, sink, crear_articulo):
        item = crear_articulo("A", "CDMX", 20, min_stock=10)
        LedgerService(uow, evaluador).actualizar_articulo(item.id, {"quantity": 2})
        assert sink.locations() == ["CDMX"]

    def test_eliminar_inexistente(self, uow):
        with pytest.raises(RegistroNoEncontradoError):
            LedgerService(uow).eliminar_articulo(999)
