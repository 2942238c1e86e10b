"""
Registro de Transacciones
=========================

Entradas (IN) y salidas (OUT) de inventario. Cada transacción aplica su
delta al ledger y deja una fila histórica en `transactions`.

Los traslados NO pasan por aquí: los maneja TrasladoService.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional
import logging

from ..config import settings
from ..domain.enums import TransactionType
from ..domain.models_inventario import InventoryTransaction
from ..infrastructure.unit_of_work import UnitOfWork
from .errors import (
    CantidadInvalidaError, MovimientoInvalidoError, OperacionNoReversibleError,
    RegistroNoEncontradoError, StockInsuficienteError,
)
from .services_ledger import LedgerService
from .services_low_stock import EvaluadorStockBajo, politica_transaccion
from .services_operaciones import OP_ELIMINAR_TRANSACCION, OperationTracker

logger = logging.getLogger(__name__)


@dataclass
class MetaTransaccion:
    """Datos opcionales de una transacción"""
    user_id: str = "system"
    user_name: str = field(default_factory=lambda: settings.default_user_name)
    date: Optional[date] = None
    notes: Optional[str] = None
    has_proof: bool = False
    proof_url: Optional[str] = None
    voucher_number: Optional[str] = None
    # Solo para IN sobre un artículo que aún no existe en la ubicación
    min_stock: Optional[int] = None
    cost: Optional[Decimal] = None
    asset_type: Optional[str] = None


class TransaccionService:

    def __init__(self, uow: UnitOfWork, evaluador: Optional[EvaluadorStockBajo] = None):
        self.uow = uow
        self.ledger = LedgerService(uow)
        self.evaluador = evaluador

    def registrar(
        self,
        type: str,
        item: str,
        category: str,
        location: str,
        quantity: int,
        meta: Optional[MetaTransaccion] = None,
    ) -> InventoryTransaction:
        meta = meta or MetaTransaccion()

        if type == TransactionType.TRASLADO.value:
            raise MovimientoInvalidoError("Los traslados se registran desde /traslados, no como transacción")
        if type not in (TransactionType.IN.value, TransactionType.OUT.value):
            raise MovimientoInvalidoError(f"Tipo de transacción inválido: {type}")
        if quantity is None or quantity <= 0:
            raise CantidadInvalidaError(f"La cantidad de {item} debe ser mayor que cero")

        registro = self.ledger.by_key(item, category, location)

        if type == TransactionType.OUT.value:
            if not registro:
                raise RegistroNoEncontradoError("Artículo", f"{item} ({category}) en {location}")
            if quantity > registro.quantity:
                raise StockInsuficienteError(item, location, registro.quantity, quantity)
            self.ledger.set_quantity(registro, max(0, registro.quantity - quantity))
        else:
            registro, creado = self.ledger.increment_or_create(
                item, category, location, quantity,
                min_stock=meta.min_stock if meta.min_stock is not None else settings.default_min_stock,
                cost=meta.cost,
                asset_type=meta.asset_type,
            )
            if creado:
                logger.info("Entrada de %s creó el registro en %s", item, location)

        transaccion = self.uow.transactions.add(InventoryTransaction(
            item=registro.name,
            category=registro.category,
            location=registro.location,
            type=type,
            quantity=quantity,
            date=meta.date or date.today(),
            user_id=meta.user_id,
            user_name=meta.user_name,
            notes=meta.notes,
            has_proof=meta.has_proof,
            proof_url=meta.proof_url,
            voucher_number=meta.voucher_number,
        ))
        # La alerta sale con el movimiento ya confirmado
        self.uow.commit()
        logger.info("Transacción %s #%s: %s x%s en %s", type, transaccion.id, item, quantity, location)

        if type == TransactionType.OUT.value and self.evaluador:
            self.evaluador.verificar_despues_de_disminucion(registro, politica_transaccion())
        return transaccion

    def eliminar(self, transaction_id: int, user_name: Optional[str] = None) -> None:
        """
        Revierte el efecto de la transacción en el ledger y luego borra la fila.

        Si el ajuste del ledger falla la fila se conserva. Si el ajuste se
        confirmó pero el borrado falla se lanza EscrituraParcialError.
        """
        transaccion = self.uow.transactions.get(transaction_id)
        if not transaccion:
            raise RegistroNoEncontradoError("Transacción", transaction_id)
        if transaccion.type == TransactionType.TRASLADO.value:
            raise OperacionNoReversibleError(
                f"La transacción #{transaction_id} es un traslado; su destino solo consta en las notas "
                "y no se puede revertir automáticamente"
            )
        if transaccion.receipt_id is not None:
            raise OperacionNoReversibleError(
                f"La transacción #{transaction_id} proviene de la recepción #{transaccion.receipt_id}; "
                "elimine la recepción para revertirla"
            )

        registro = self.ledger.by_key(transaccion.item, transaccion.category, transaccion.location)
        if not registro:
            raise RegistroNoEncontradoError(
                "Artículo", f"{transaccion.item} ({transaccion.category}) en {transaccion.location}"
            )

        anterior = registro.quantity
        version_leida = registro.version
        if transaccion.type == TransactionType.IN.value:
            nueva = max(0, anterior - transaccion.quantity)
        else:
            nueva = anterior + transaccion.quantity

        tracker = OperationTracker(
            self.uow, OP_ELIMINAR_TRANSACCION, "InventoryTransaction", transaction_id,
            user_name=user_name,
            contexto={
                "item_id": registro.id,
                "tipo": transaccion.type,
                "cantidad": transaccion.quantity,
                "cantidad_anterior": anterior,
                "cantidad_nueva": nueva,
            },
        )
        with tracker.paso("ajustar_ledger"):
            self.ledger.set_quantity(registro, nueva, version_leida=version_leida)
        with tracker.paso("eliminar_transaccion"):
            self.uow.transactions.delete(transaccion)
        tracker.completar()
        logger.info("Transacción #%s eliminada: %s en %s pasa de %s a %s",
                    transaction_id, registro.name, registro.location, anterior, nueva)

        if nueva < anterior and self.evaluador:
            self.evaluador.verificar_despues_de_disminucion(registro, politica_transaccion())

    def listar(
        self,
        type: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 200,
        offset: int = 0,
    ) -> List[InventoryTransaction]:
        return self.uow.transactions.list(
            type=type, location=location, search=search,
            date_from=date_from, date_to=date_to, limit=limit, offset=offset,
        )
