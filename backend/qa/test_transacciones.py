"""
Tests del registro de transacciones

Cubre:
- Salida válida y salida mayor al stock (sin escrituras)
- Entrada que crea el registro
- Eliminación: IN resta con recorte en 0, OUT devuelve, Traslado no se revierte
- Fallos a mitad de la eliminación (EscrituraParcialError)
"""
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from inventario.application.errors import (
    ActualizacionConcurrenteError, CantidadInvalidaError, EscrituraParcialError, MovimientoInvalidoError,
    OperacionNoReversibleError, RegistroNoEncontradoError, StockInsuficienteError,
)
from inventario.application.services_ledger import LedgerService
from inventario.application.services_operaciones import OP_ELIMINAR_TRANSACCION
from inventario.application.services_transacciones import MetaTransaccion, TransaccionService
from inventario.application.services_traslados import TrasladoService
from inventario.domain.enums import OperationStatus
from inventario.infrastructure.repositories import TransactionRepository


class TestRegistrar:

    def test_salida_valida(self, uow, crear_articulo):
        item = crear_articulo("Tóner", "CDMX", 10)
        t = TransaccionService(uow).registrar("OUT", "Tóner", "General", "CDMX", 4, MetaTransaccion(user_name="Pedro"))

        assert uow.inventory.get(item.id).quantity == 6
        assert t.type == "OUT"
        assert t.quantity == 4
        assert t.user_name == "Pedro"

    def test_salida_mayor_al_stock_no_escribe(self, uow, crear_articulo):
        """OUT 12 contra 10: StockInsuficienteError y la cantidad sigue en 10"""
        item = crear_articulo("Tóner", "CDMX", 10)
        with pytest.raises(StockInsuficienteError) as exc:
            TransaccionService(uow).registrar("OUT", "Tóner", "General", "CDMX", 12)
        uow.rollback()

        assert exc.value.disponible == 10
        assert exc.value.solicitado == 12
        assert uow.inventory.get(item.id).quantity == 10
        assert uow.transactions.list() == []

    def test_salida_exacta_deja_cero(self, uow, crear_articulo):
        item = crear_articulo("Tóner", "CDMX", 10)
        TransaccionService(uow).registrar("OUT", "Tóner", "General", "CDMX", 10)
        assert uow.inventory.get(item.id).quantity == 0

    def test_salida_sin_registro(self, uow):
        with pytest.raises(RegistroNoEncontradoError):
            TransaccionService(uow).registrar("OUT", "Nada", "General", "CDMX", 1)

    def test_entrada_crea_el_registro(self, uow):
        TransaccionService(uow).registrar("IN", "Cloro", "Limpieza", "Puebla", 7)
        item = LedgerService(uow).by_key("Cloro", "Limpieza", "Puebla")
        assert item.quantity == 7
        assert item.min_stock == 5

    def test_entrada_suma_al_registro(self, uow, crear_articulo):
        item = crear_articulo("Cloro", "CDMX", 3)
        TransaccionService(uow).registrar("IN", "Cloro", "General", "CDMX", 7)
        assert uow.inventory.get(item.id).quantity == 10

    @pytest.mark.parametrize("cantidad", [0, -3])
    def test_cantidad_no_positiva(self, uow, crear_articulo, cantidad):
        crear_articulo("Cloro", "CDMX", 3)
        with pytest.raises(CantidadInvalidaError):
            TransaccionService(uow).registrar("IN", "Cloro", "General", "CDMX", cantidad)

    def test_traslado_no_se_registra_como_transaccion(self, uow, crear_articulo):
        crear_articulo("Cloro", "CDMX", 3)
        with pytest.raises(MovimientoInvalidoError):
            TransaccionService(uow).registrar("Traslado", "Cloro", "General", "CDMX", 1)

    def test_salida_que_deja_stock_bajo_alerta(self, uow, sink, evaluador, crear_articulo):
        crear_articulo("Tóner", "CDMX", 10, min_stock=5)
        TransaccionService(uow, evaluador).registrar("OUT", "Tóner", "General", "CDMX", 8)
        assert sink.locations() == ["CDMX"]
        assert sink.calls[0]["items"][0]["status"] == "Crítico"

    def test_salida_a_cero_usa_politica_de_transaccion(self, uow, sink, evaluador, crear_articulo):
        crear_articulo("Tóner", "CDMX", 3, min_stock=5)
        TransaccionService(uow, evaluador).registrar("OUT", "Tóner", "General", "CDMX", 3)
        assert sink.calls[0]["items"][0]["status"] == "Crítico"

    def test_entrada_no_alerta(self, uow, sink, evaluador, crear_articulo):
        crear_articulo("Tóner", "CDMX", 1, min_stock=5)
        TransaccionService(uow, evaluador).registrar("IN", "Tóner", "General", "CDMX", 1)
        assert sink.calls == []


class TestEliminar:

    def test_eliminar_entrada_resta_con_recorte(self, uow, crear_articulo):
        item = crear_articulo("Cloro", "CDMX", 2)
        service = TransaccionService(uow)
        t = service.registrar("IN", "Cloro", "General", "CDMX", 5)
        service.registrar("OUT", "Cloro", "General", "CDMX", 6)  # queda 1

        service.eliminar(t.id)

        assert uow.inventory.get(item.id).quantity == 0
        assert uow.transactions.get(t.id) is None

    def test_eliminar_salida_devuelve(self, uow, crear_articulo):
        item = crear_articulo("Cloro", "CDMX", 10)
        service = TransaccionService(uow)
        t = service.registrar("OUT", "Cloro", "General", "CDMX", 4)

        service.eliminar(t.id)

        assert uow.inventory.get(item.id).quantity == 10
        op = uow.operations.list(operation=OP_ELIMINAR_TRANSACCION)[0]
        assert op.status == OperationStatus.COMPLETADA.value
        assert op.last_step == "eliminar_transaccion"

    def test_eliminar_traslado_rechazado(self, uow, crear_articulo):
        item = crear_articulo("Cloro", "CDMX", 10)
        resultado = TrasladoService(uow).trasladar(item.id, 3, "Monterrey")
        with pytest.raises(OperacionNoReversibleError):
            TransaccionService(uow).eliminar(resultado.transaction_id)
        assert uow.transactions.get(resultado.transaction_id) is not None

    def test_eliminar_sin_registro_conserva_la_fila(self, uow, crear_articulo):
        item = crear_articulo("Cloro", "CDMX", 10)
        service = TransaccionService(uow)
        t = service.registrar("OUT", "Cloro", "General", "CDMX", 4)
        LedgerService(uow).eliminar_articulo(item.id)
        uow.commit()

        with pytest.raises(RegistroNoEncontradoError):
            service.eliminar(t.id)
        assert uow.transactions.get(t.id) is not None

    def test_fallo_del_ledger_conserva_la_fila(self, uow, crear_articulo):
        item = crear_articulo("Cloro", "CDMX", 10)
        service = TransaccionService(uow)
        t = service.registrar("OUT", "Cloro", "General", "CDMX", 4)

        with patch.object(LedgerService, "set_quantity", side_effect=ActualizacionConcurrenteError("Artículo", item.id)):
            with pytest.raises(ActualizacionConcurrenteError):
                service.eliminar(t.id)

        assert uow.transactions.get(t.id) is not None
        assert uow.inventory.get(item.id).quantity == 6
        op = uow.operations.list(operation=OP_ELIMINAR_TRANSACCION)[0]
        assert op.status == OperationStatus.FALLIDA.value
        assert op.failed_step == "ajustar_ledger"
        assert op.last_step is None

    def test_fallo_al_borrar_la_fila_es_escritura_parcial(self, uow, crear_articulo):
        item = crear_articulo("Cloro", "CDMX", 10)
        service = TransaccionService(uow)
        t = service.registrar("OUT", "Cloro", "General", "CDMX", 4)

        with patch.object(TransactionRepository, "delete", side_effect=SQLAlchemyError("disco lleno")):
            with pytest.raises(EscrituraParcialError) as exc:
                service.eliminar(t.id)

        assert exc.value.pasos_completados == ["ajustar_ledger"]
        assert exc.value.paso_fallido == "eliminar_transaccion"
        # El ajuste quedó confirmado; la fila sigue ahí
        assert uow.inventory.get(item.id).quantity == 10
        assert uow.transactions.get(t.id) is not None
        op = uow.operations.get(exc.value.operation_id)
        assert op.last_step == "ajustar_ledger"
        assert op.status == OperationStatus.FALLIDA.value

    def test_registro_modificado_durante_la_eliminacion(self, uow, crear_articulo, escritura_al_iniciar_operacion):
        """Otra sesión deja el artículo en 2: devolver la salida no debe recalcular sobre 7"""
        item = crear_articulo("Cloro", "CDMX", 10)
        service = TransaccionService(uow)
        t = service.registrar("OUT", "Cloro", "General", "CDMX", 3)

        with escritura_al_iniciar_operacion(item.id, 2):
            with pytest.raises(ActualizacionConcurrenteError):
                service.eliminar(t.id)

        assert uow.inventory.get(item.id).quantity == 2
        assert uow.transactions.get(t.id) is not None
        op = uow.operations.list(operation=OP_ELIMINAR_TRANSACCION)[0]
        assert op.failed_step == "ajustar_ledger"
