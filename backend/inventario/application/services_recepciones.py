"""
Recepción de refacciones y catálogo de proveedores.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from ..config import settings
from ..domain.enums import TransactionType
from ..domain.models import Supplier
from ..domain.models_inventario import InventoryTransaction, PartReceipt
from ..infrastructure.unit_of_work import UnitOfWork
from .errors import CantidadInvalidaError, RegistroNoEncontradoError, ValidacionError
from .services_ledger import LedgerService
from .services_low_stock import EvaluadorStockBajo, politica_transaccion
from .services_operaciones import OP_ELIMINAR_RECEPCION, OP_REGISTRAR_RECEPCION, OperationTracker

logger = logging.getLogger(__name__)


class RecepcionService:

    def __init__(self, uow: UnitOfWork, evaluador: Optional[EvaluadorStockBajo] = None):
        self.uow = uow
        self.ledger = LedgerService(uow)
        self.evaluador = evaluador

    def _ajustar_ledger(self, item_id: int, delta: int, clamp_at_zero: bool = False) -> None:
        # Ajuste atómico en la base: un cambio concurrente no se pisa
        if not self.uow.inventory.adjust_quantity(item_id, delta, clamp_at_zero=clamp_at_zero):
            raise RegistroNoEncontradoError("Artículo", item_id)

    def registrar_recepcion(
        self,
        item_id: int,
        supplier_id: int,
        invoice_number: str,
        quantity: int,
        receipt_date: Optional[date] = None,
        cost: Optional[Decimal] = None,
        notes: Optional[str] = None,
        user_name: Optional[str] = None,
    ) -> PartReceipt:
        """
        Factura recibida: recepción -> suma en ledger -> transacción IN.
        La transacción queda ligada a la recepción por receipt_id.
        """
        if quantity is None or quantity <= 0:
            raise CantidadInvalidaError("La cantidad recibida debe ser mayor que cero")
        if not (invoice_number or "").strip():
            raise ValidacionError(["El número de factura es requerido"])
        if cost is not None and Decimal(str(cost)) < 0:
            raise ValidacionError(["El costo no puede ser negativo"])

        item = self.ledger.get(item_id)
        name, category, location = item.name, item.category, item.location
        proveedor = self.uow.suppliers.get(supplier_id)
        if not proveedor:
            raise RegistroNoEncontradoError("Proveedor", supplier_id)

        user_name = user_name or settings.default_user_name
        receipt_date = receipt_date or date.today()
        proveedor_nombre = proveedor.name
        tracker = OperationTracker(
            self.uow, OP_REGISTRAR_RECEPCION, "PartReceipt", user_name=user_name,
            contexto={"item_id": item_id, "proveedor": proveedor_nombre, "factura": invoice_number, "cantidad": quantity},
        )

        with tracker.paso("insertar_recepcion"):
            recepcion = self.uow.receipts.add(PartReceipt(
                item_id=item_id,
                supplier_id=supplier_id,
                invoice_number=invoice_number.strip(),
                receipt_date=receipt_date,
                quantity=quantity,
                cost=Decimal(str(cost)) if cost is not None else None,
                notes=notes,
            ))
            tracker.actualizar_contexto(receipt_id=recepcion.id)
        receipt_id = recepcion.id

        with tracker.paso("incrementar_ledger"):
            self._ajustar_ledger(item_id, quantity)

        with tracker.paso("registrar_transaccion"):
            transaccion = self.uow.transactions.add(InventoryTransaction(
                item=name,
                category=category,
                location=location,
                type=TransactionType.IN.value,
                quantity=quantity,
                date=receipt_date,
                user_name=user_name,
                notes=f"Factura: {invoice_number.strip()} - Proveedor: {proveedor_nombre}",
                voucher_number=invoice_number.strip(),
                receipt_id=receipt_id,
            ))
            tracker.actualizar_contexto(transaction_id=transaccion.id)
        tracker.completar(entity_id=receipt_id)
        logger.info("Recepción #%s: %s x%s de %s (factura %s)",
                    receipt_id, name, quantity, proveedor_nombre, invoice_number)
        return self.uow.receipts.get(receipt_id)

    def eliminar_recepcion(self, receipt_id: int, user_name: Optional[str] = None) -> None:
        """
        Revierte la recepción: resta en ledger (recortando en 0), borra la
        transacción IN que generó y luego la recepción.
        """
        recepcion = self.uow.receipts.get(receipt_id)
        if not recepcion:
            raise RegistroNoEncontradoError("Recepción", receipt_id)
        item_id, quantity = recepcion.item_id, recepcion.quantity

        tracker = OperationTracker(
            self.uow, OP_ELIMINAR_RECEPCION, "PartReceipt", receipt_id, user_name=user_name,
            contexto={"item_id": item_id, "cantidad": quantity},
        )
        if item_id is not None:
            with tracker.paso("restar_ledger"):
                self._ajustar_ledger(item_id, -quantity, clamp_at_zero=True)
        else:
            logger.warning("Recepción #%s sin artículo asociado: no se ajusta el ledger", receipt_id)

        with tracker.paso("eliminar_transaccion"):
            for transaccion in self.uow.transactions.by_receipt(receipt_id):
                self.uow.transactions.delete(transaccion)

        with tracker.paso("eliminar_recepcion"):
            self.uow.receipts.delete(self.uow.receipts.get(receipt_id))
        tracker.completar()
        logger.info("Recepción #%s eliminada", receipt_id)

        if item_id is not None and self.evaluador:
            item = self.uow.inventory.get(item_id)
            if item is not None:
                self.evaluador.verificar_despues_de_disminucion(item, politica_transaccion())

    def listar(self, supplier_id: Optional[int] = None, search: Optional[str] = None) -> List[PartReceipt]:
        return self.uow.receipts.list(supplier_id=supplier_id, search=search)


class ProveedorService:

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _validar(self, data: Dict[str, Any]) -> None:
        errores = []
        if not str(data.get("name") or "").strip():
            errores.append("El nombre del proveedor es requerido")
        email = data.get("email")
        if email and "@" not in email:
            errores.append("El email del proveedor no es válido")
        if errores:
            raise ValidacionError(errores)

    def get(self, supplier_id: int) -> Supplier:
        proveedor = self.uow.suppliers.get(supplier_id)
        if not proveedor:
            raise RegistroNoEncontradoError("Proveedor", supplier_id)
        return proveedor

    def crear(self, data: Dict[str, Any]) -> Supplier:
        self._validar(data)
        return self.uow.suppliers.add(Supplier(**{**data, "name": data["name"].strip()}))

    def actualizar(self, supplier_id: int, cambios: Dict[str, Any]) -> Supplier:
        proveedor = self.get(supplier_id)
        self._validar({"name": proveedor.name, **cambios})
        for campo, valor in cambios.items():
            setattr(proveedor, campo, valor)
        self.uow.db.flush()
        return proveedor

    def eliminar(self, supplier_id: int) -> None:
        proveedor = self.get(supplier_id)
        if proveedor.receipts:
            raise ValidacionError([f"El proveedor {proveedor.name} tiene recepciones registradas"])
        self.uow.suppliers.delete(proveedor)

    def listar(self) -> List[Supplier]:
        return self.uow.suppliers.list()
