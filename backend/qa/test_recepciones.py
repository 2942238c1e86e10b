"""
Tests de recepción de refacciones y proveedores
"""
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from inventario.application.errors import (
    CantidadInvalidaError, EscrituraParcialError, OperacionNoReversibleError, RegistroNoEncontradoError,
    ValidacionError,
)
from inventario.application.services_ledger import LedgerService
from inventario.application.services_operaciones import OP_ELIMINAR_RECEPCION, OP_REGISTRAR_RECEPCION
from inventario.application.services_recepciones import ProveedorService, RecepcionService
from inventario.application.services_transacciones import TransaccionService
from inventario.domain.enums import OperationStatus
from inventario.infrastructure.repositories import TransactionRepository


@pytest.fixture
def proveedor(uow):
    p = ProveedorService(uow).crear({"name": "Refacciones del Norte", "email": "ventas@norte.mx"})
    uow.commit()
    return p


class TestRecepcion:

    def test_suma_al_ledger_y_registra_entrada(self, uow, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 2, category="Refacciones")

        recepcion = RecepcionService(uow).registrar_recepcion(
            item.id, proveedor.id, " F-1001 ", 8, cost=Decimal("150.00"), user_name="Almacén",
        )

        assert recepcion.invoice_number == "F-1001"
        assert uow.inventory.get(item.id).quantity == 10
        (t,) = uow.transactions.list()
        assert t.type == "IN"
        assert t.quantity == 8
        assert t.voucher_number == "F-1001"
        assert t.notes == "Factura: F-1001 - Proveedor: Refacciones del Norte"

        op = uow.operations.list(operation=OP_REGISTRAR_RECEPCION)[0]
        assert op.status == OperationStatus.COMPLETADA.value
        assert op.entity_id == recepcion.id

    @pytest.mark.parametrize("cantidad", [0, -4])
    def test_cantidad_no_positiva(self, uow, proveedor, crear_articulo, cantidad):
        item = crear_articulo("Banda", "Monterrey", 2)
        with pytest.raises(CantidadInvalidaError):
            RecepcionService(uow).registrar_recepcion(item.id, proveedor.id, "F-1", cantidad)

    def test_factura_requerida(self, uow, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 2)
        with pytest.raises(ValidacionError):
            RecepcionService(uow).registrar_recepcion(item.id, proveedor.id, "  ", 1)

    def test_proveedor_inexistente(self, uow, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 2)
        with pytest.raises(RegistroNoEncontradoError):
            RecepcionService(uow).registrar_recepcion(item.id, 999, "F-1", 1)
        assert uow.receipts.list() == []

    def test_fallo_al_registrar_la_entrada(self, uow, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 2)
        with patch.object(TransactionRepository, "add", side_effect=SQLAlchemyError("sin conexión")):
            with pytest.raises(EscrituraParcialError) as exc:
                RecepcionService(uow).registrar_recepcion(item.id, proveedor.id, "F-9", 3)

        assert exc.value.pasos_completados == ["insertar_recepcion", "incrementar_ledger"]
        assert exc.value.paso_fallido == "registrar_transaccion"
        assert uow.inventory.get(item.id).quantity == 5
        assert uow.transactions.list() == []

    def test_entrada_ligada_a_la_recepcion(self, uow, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 2)
        recepcion = RecepcionService(uow).registrar_recepcion(item.id, proveedor.id, "F-7", 3)
        (t,) = uow.transactions.by_receipt(recepcion.id)
        assert t.quantity == 3
        op = uow.operations.list(operation=OP_REGISTRAR_RECEPCION)[0]
        assert op.context["transaction_id"] == t.id

    def test_suma_sobre_un_cambio_concurrente(self, uow, proveedor, crear_articulo, escritura_al_iniciar_operacion):
        """Otra sesión deja el artículo en 7 antes de sumar: la recepción suma sobre 7"""
        item = crear_articulo("Banda", "Monterrey", 2)
        with escritura_al_iniciar_operacion(item.id, 7):
            RecepcionService(uow).registrar_recepcion(item.id, proveedor.id, "F-8", 6)
        assert uow.inventory.get(item.id).quantity == 13


class TestEliminarRecepcion:

    def test_resta_con_recorte(self, uow, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 0)
        service = RecepcionService(uow)
        recepcion = service.registrar_recepcion(item.id, proveedor.id, "F-2", 6)
        LedgerService(uow).set_quantity(uow.inventory.get(item.id), 4)
        uow.commit()

        service.eliminar_recepcion(recepcion.id)

        assert uow.inventory.get(item.id).quantity == 0
        assert uow.receipts.get(recepcion.id) is None

    def test_articulo_borrado_no_toca_el_ledger(self, uow, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 0)
        service = RecepcionService(uow)
        recepcion = service.registrar_recepcion(item.id, proveedor.id, "F-3", 2)
        LedgerService(uow).eliminar_articulo(item.id)
        uow.commit()

        assert uow.receipts.get(recepcion.id).item_id is None
        service.eliminar_recepcion(recepcion.id)
        assert uow.receipts.list() == []

    def test_inexistente(self, uow):
        with pytest.raises(RegistroNoEncontradoError):
            RecepcionService(uow).eliminar_recepcion(42)

    def test_borra_la_entrada_que_genero(self, uow, proveedor, crear_articulo):
        """Tras eliminar la recepción no queda una entrada que se pueda restar otra vez"""
        item = crear_articulo("Banda", "Monterrey", 10)
        service = RecepcionService(uow)
        recepcion = service.registrar_recepcion(item.id, proveedor.id, "F-5", 6)
        assert uow.inventory.get(item.id).quantity == 16

        service.eliminar_recepcion(recepcion.id)

        assert uow.inventory.get(item.id).quantity == 10
        assert uow.transactions.list() == []
        op = uow.operations.list(operation=OP_ELIMINAR_RECEPCION)[0]
        assert op.status == OperationStatus.COMPLETADA.value
        assert op.last_step == "eliminar_recepcion"

    def test_entrada_de_recepcion_no_se_elimina_directo(self, uow, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 10)
        RecepcionService(uow).registrar_recepcion(item.id, proveedor.id, "F-6", 6)
        (t,) = uow.transactions.list()

        with pytest.raises(OperacionNoReversibleError):
            TransaccionService(uow).eliminar(t.id)

        assert uow.inventory.get(item.id).quantity == 16
        assert uow.transactions.get(t.id) is not None

    def test_disminucion_evalua_stock_bajo(self, uow, sink, evaluador, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 8, min_stock=10)
        service = RecepcionService(uow, evaluador)
        recepcion = service.registrar_recepcion(item.id, proveedor.id, "F-10", 6)
        assert sink.calls == []

        service.eliminar_recepcion(recepcion.id)

        assert sink.locations() == ["Monterrey"]
        assert sink.calls[0]["items"][0]["name"] == "Banda"

    def test_fallo_al_borrar_la_entrada(self, uow, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 1)
        service = RecepcionService(uow)
        recepcion = service.registrar_recepcion(item.id, proveedor.id, "F-11", 4)

        with patch.object(TransactionRepository, "delete", side_effect=SQLAlchemyError("bloqueo")):
            with pytest.raises(EscrituraParcialError) as exc:
                service.eliminar_recepcion(recepcion.id)

        assert exc.value.pasos_completados == ["restar_ledger"]
        assert exc.value.paso_fallido == "eliminar_transaccion"
        assert uow.inventory.get(item.id).quantity == 1
        assert uow.receipts.get(recepcion.id) is not None


class TestProveedores:

    def test_nombre_requerido(self, uow):
        with pytest.raises(ValidacionError):
            ProveedorService(uow).crear({"name": " "})

    def test_email_invalido(self, uow):
        with pytest.raises(ValidacionError):
            ProveedorService(uow).crear({"name": "X", "email": "sin-arroba"})

    def test_no_se_elimina_con_recepciones(self, uow, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 0)
        RecepcionService(uow).registrar_recepcion(item.id, proveedor.id, "F-4", 1)
        with pytest.raises(ValidacionError):
            ProveedorService(uow).eliminar(proveedor.id)

    def test_buscar_por_factura(self, uow, proveedor, crear_articulo):
        item = crear_articulo("Banda", "Monterrey", 0)
        service = RecepcionService(uow)
        service.registrar_recepcion(item.id, proveedor.id, "F-100", 1)
        service.registrar_recepcion(item.id, proveedor.id, "G-200", 1)
        assert [r.invoice_number for r in service.listar(search="G-")] == ["G-200"]
