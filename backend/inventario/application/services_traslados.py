"""
Traslados entre ubicaciones.

Secuencia: sumar en destino, restar en origen (o borrar el origen si
queda en 0), registrar la transacción Traslado. Cada paso se confirma por
separado a través de OperationTracker.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional
import logging

from ..config import settings
from ..domain.enums import TransactionType
from ..domain.models_inventario import InventoryTransaction
from ..infrastructure.unit_of_work import UnitOfWork
from .errors import MovimientoInvalidoError
from .services_ledger import LedgerService
from .services_low_stock import EvaluadorStockBajo, politica_transaccion
from .services_operaciones import OP_TRASLADO, OperationTracker

logger = logging.getLogger(__name__)


@dataclass
class ResultadoTraslado:
    operation_id: int
    transaction_id: int
    source_id: int
    destination_id: int
    source_quantity: int
    destination_quantity: int
    source_deleted: bool


class TrasladoService:

    def __init__(self, uow: UnitOfWork, evaluador: Optional[EvaluadorStockBajo] = None):
        self.uow = uow
        self.ledger = LedgerService(uow)
        self.evaluador = evaluador

    def trasladar(
        self,
        item_id: int,
        quantity: int,
        destination: str,
        user_id: str = "system",
        user_name: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ResultadoTraslado:
        user_name = user_name or settings.default_user_name
        origen = self.ledger.get(item_id)
        destination = (destination or "").strip()

        if not destination:
            raise MovimientoInvalidoError("Debe indicar la ubicación de destino")
        if destination == origen.location:
            raise MovimientoInvalidoError(f"{origen.name} ya está en {destination}")
        if quantity is None or quantity <= 0:
            raise MovimientoInvalidoError(f"La cantidad a trasladar de {origen.name} debe ser mayor que cero")
        if quantity > origen.quantity:
            raise MovimientoInvalidoError(
                f"No se pueden trasladar {quantity} de {origen.name}: solo hay {origen.quantity} en {origen.location}"
            )

        name, category, ubicacion_origen = origen.name, origen.category, origen.location
        antes_origen = origen.quantity
        version_origen = origen.version
        restante = antes_origen - quantity

        tracker = OperationTracker(
            self.uow, OP_TRASLADO, "InventoryItem", item_id, user_name=user_name,
            contexto={
                "articulo": name,
                "categoria": category,
                "origen": ubicacion_origen,
                "destino": destination,
                "cantidad": quantity,
                "cantidad_origen_antes": antes_origen,
            },
        )

        with tracker.paso("incrementar_destino"):
            # restante se calculó con esta versión del origen
            self.ledger.verificar_version(origen, version_origen)
            destino, creado = self.ledger.increment_or_create(
                name, category, destination, quantity,
                min_stock=origen.min_stock,
                cost=origen.cost,
                asset_type=origen.asset_type,
            )
            tracker.actualizar_contexto(destino_id=destino.id, destino_creado=creado)
        destination_id = destino.id

        source_deleted = restante == 0
        if source_deleted:
            # El stock se reubicó completo: el registro vacío de origen sobra
            with tracker.paso("eliminar_origen"):
                self.ledger.delete_record(origen, version_leida=version_origen)
        else:
            with tracker.paso("decrementar_origen"):
                self.ledger.set_quantity(origen, restante, version_leida=version_origen)

        with tracker.paso("registrar_transaccion"):
            transaccion = self.uow.transactions.add(InventoryTransaction(
                item=name,
                category=category,
                location=ubicacion_origen,
                type=TransactionType.TRASLADO.value,
                quantity=quantity,
                date=date.today(),
                user_id=user_id,
                user_name=user_name,
                notes=f"Traslado de {ubicacion_origen} a {destination}" + (f" - {notes}" if notes else ""),
            ))
        tracker.completar()

        resultado = ResultadoTraslado(
            operation_id=tracker.operation_id,
            transaction_id=transaccion.id,
            source_id=item_id,
            destination_id=destination_id,
            source_quantity=restante,
            destination_quantity=self.ledger.get(destination_id).quantity,
            source_deleted=source_deleted,
        )
        logger.info("Traslado de %s x%s: %s -> %s (origen queda en %s)",
                    name, quantity, ubicacion_origen, destination, restante)

        if not source_deleted and self.evaluador:
            self.evaluador.verificar_despues_de_disminucion(origen, politica_transaccion())
        return resultado
