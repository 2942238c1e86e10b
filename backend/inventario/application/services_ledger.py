"""
Ledger de Inventario
====================

Fuente única de la cantidad actual por (nombre, categoría, ubicación).
Todos los demás servicios escriben aquí: transacciones, traslados,
recepciones y la reversión de auditorías.

- La cantidad nunca se escribe negativa; quien resta debe recortar en 0.
- Cada escritura verifica la versión leída (version_id_col). Si otro
  usuario escribió antes se lanza ActualizacionConcurrenteError en lugar
  de perder su cambio.
- (name, category, location) es clave única. Crear desde el formulario
  rechaza duplicados; los movimientos usan increment_or_create.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import ObjectDeletedError, StaleDataError

from ..config import settings
from ..domain.enums import AssetType, StockStatus
from ..domain.models_inventario import InventoryItem
from ..infrastructure.unit_of_work import UnitOfWork
from .errors import (
    ActualizacionConcurrenteError, CantidadInvalidaError, RegistroDuplicadoError,
    RegistroNoEncontradoError, ValidacionError,
)
from .services_low_stock import EvaluadorStockBajo, clasificar, politica_evaluador
from .validations_inventario import validar_articulo

logger = logging.getLogger(__name__)


@dataclass
class ArticuloConEstado:
    item: InventoryItem
    min_stock: int
    status: StockStatus
    total_value: Decimal


class LedgerService:

    def __init__(self, uow: UnitOfWork, evaluador: Optional[EvaluadorStockBajo] = None):
        self.uow = uow
        self.evaluador = evaluador

    # ===== LECTURA =====

    def get(self, item_id: int) -> InventoryItem:
        item = self.uow.inventory.get(item_id)
        if not item:
            raise RegistroNoEncontradoError("Artículo", item_id)
        return item

    def by_location(self, location: str) -> List[InventoryItem]:
        return self.uow.inventory.by_location(location)

    def by_key(self, name: str, category: str, location: str) -> Optional[InventoryItem]:
        return self.uow.inventory.by_key(name, category, location)

    # ===== ESCRITURA =====

    def verificar_version(self, item: InventoryItem, version_leida: int) -> None:
        """
        Falla si el registro cambió desde que se leyó `version_leida`.

        Entre pasos de OperationTracker la sesión confirma y el objeto se
        recarga con la versión vigente, así que version_id_col ya no basta.
        """
        try:
            actual = item.version
        except ObjectDeletedError as e:
            raise RegistroNoEncontradoError("Artículo", inspect(item).identity[0]) from e
        if actual != version_leida:
            logger.warning("Artículo %s cambió durante la operación (versión %s, leída %s)",
                           item.id, actual, version_leida)
            raise ActualizacionConcurrenteError("Artículo", item.id)

    def set_quantity(
        self, item: InventoryItem, new_quantity: int, version_leida: Optional[int] = None,
    ) -> InventoryItem:
        if version_leida is not None:
            self.verificar_version(item, version_leida)
        if new_quantity is None or new_quantity < 0:
            raise CantidadInvalidaError(
                f"La cantidad de {item.name} en {item.location} no puede quedar en {new_quantity}"
            )
        item.quantity = int(new_quantity)
        try:
            self.uow.db.flush()
        except StaleDataError as e:
            raise ActualizacionConcurrenteError("Artículo", item.id) from e
        return item

    def create_record(
        self,
        name: str,
        category: str,
        location: str,
        quantity: int,
        min_stock: Optional[int] = None,
        cost: Optional[Decimal] = None,
        asset_type: str = AssetType.INSUMO.value,
        description: Optional[str] = None,
        lead_time: Optional[int] = None,
    ) -> InventoryItem:
        if quantity < 0:
            raise CantidadInvalidaError(f"La cantidad inicial de {name} no puede ser negativa")
        if self.uow.inventory.by_key(name, category, location):
            raise RegistroDuplicadoError(f"Ya existe {name} ({category}) en {location}")

        item = InventoryItem(
            name=name,
            category=category,
            location=location,
            quantity=int(quantity),
            min_stock=min_stock if min_stock is not None else 0,
            cost=Decimal(str(cost)) if cost is not None else Decimal("0"),
            asset_type=asset_type or AssetType.INSUMO.value,
            description=description,
            lead_time=lead_time,
        )
        # SAVEPOINT: si otro usuario creó la misma clave la sesión sigue usable
        savepoint = self.uow.db.begin_nested()
        try:
            self.uow.db.add(item)
            self.uow.db.flush()
        except IntegrityError as e:
            savepoint.rollback()
            raise RegistroDuplicadoError(f"Ya existe {name} ({category}) en {location}") from e
        savepoint.commit()
        logger.info("Artículo creado: %s (%s) en %s, cantidad %s", name, category, location, quantity)
        return item

    def delete_record(self, item: InventoryItem, version_leida: Optional[int] = None) -> None:
        if version_leida is not None:
            self.verificar_version(item, version_leida)
        try:
            self.uow.inventory.delete(item)
        except StaleDataError as e:
            raise ActualizacionConcurrenteError("Artículo", item.id) from e

    def increment_or_create(
        self,
        name: str,
        category: str,
        location: str,
        quantity: int,
        min_stock: Optional[int] = None,
        cost: Optional[Decimal] = None,
        asset_type: str = AssetType.INSUMO.value,
    ) -> Tuple[InventoryItem, bool]:
        """
        Suma `quantity` al registro de la clave o lo crea con esa cantidad.

        Returns:
            (item, creado)
        """
        if quantity <= 0:
            raise CantidadInvalidaError(f"La cantidad a ingresar de {name} debe ser mayor que cero")

        existente = self.uow.inventory.by_key(name, category, location)
        if existente:
            return self.set_quantity(existente, existente.quantity + quantity), False

        try:
            item = self.create_record(name, category, location, quantity, min_stock, cost, asset_type)
            return item, True
        except RegistroDuplicadoError:
            # Otro usuario lo creó entre la lectura y la inserción
            existente = self.uow.inventory.by_key(name, category, location)
            if not existente:
                raise
            logger.info("Conflicto al crear %s en %s: se incrementa el registro existente", name, location)
            return self.set_quantity(existente, existente.quantity + quantity), False

    # ===== GESTIÓN DE ARTÍCULOS =====

    def crear_articulo(self, data: Dict[str, Any]) -> InventoryItem:
        es_valido, errores = validar_articulo(data)
        if not es_valido:
            raise ValidacionError(errores)
        return self.create_record(
            name=data["name"].strip(),
            category=data["category"].strip(),
            location=data["location"].strip(),
            quantity=int(data.get("quantity") or 0),
            min_stock=data.get("min_stock"),
            cost=data.get("cost"),
            asset_type=data.get("asset_type") or AssetType.INSUMO.value,
            description=data.get("description"),
            lead_time=data.get("lead_time"),
        )

    def actualizar_articulo(self, item_id: int, cambios: Dict[str, Any]) -> InventoryItem:
        es_valido, errores = validar_articulo(cambios, parcial=True)
        if not es_valido:
            raise ValidacionError(errores)

        item = self.get(item_id)
        cantidad_anterior = item.quantity

        nueva_clave = (
            cambios.get("name", item.name),
            cambios.get("category", item.category),
            cambios.get("location", item.location),
        )
        if nueva_clave != item.key:
            otro = self.uow.inventory.by_key(*nueva_clave)
            if otro and otro.id != item.id:
                raise RegistroDuplicadoError(f"Ya existe {nueva_clave[0]} ({nueva_clave[1]}) en {nueva_clave[2]}")

        for campo, valor in cambios.items():
            if campo == "quantity":
                continue
            if campo == "cost" and valor is not None:
                valor = Decimal(str(valor))
            setattr(item, campo, valor)

        if "quantity" in cambios:
            self.set_quantity(item, int(cambios["quantity"]))
        else:
            try:
                self.uow.db.flush()
            except IntegrityError as e:
                raise RegistroDuplicadoError(f"Ya existe {item.name} ({item.category}) en {item.location}") from e
            except StaleDataError as e:
                raise ActualizacionConcurrenteError("Artículo", item.id) from e

        if self.evaluador and item.quantity < cantidad_anterior:
            # La alerta sale con el cambio ya confirmado
            self.uow.commit()
            self.evaluador.verificar_despues_de_disminucion(item, politica_evaluador())
        return item

    def eliminar_articulo(self, item_id: int) -> None:
        item = self.get(item_id)
        logger.info("Eliminando artículo %s (%s) de %s con cantidad %s", item.name, item.category, item.location, item.quantity)
        self.delete_record(item)

    def listar_articulos(
        self,
        location: Optional[str] = None,
        category: Optional[str] = None,
        asset_type: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[ArticuloConEstado]:
        politica = politica_evaluador()
        resultado = []
        for item in self.uow.inventory.list(location=location, category=category, asset_type=asset_type, search=search):
            min_stock = item.min_stock if item.min_stock is not None else settings.default_min_stock
            estado = clasificar(item.quantity, min_stock, politica)
            if status and estado.value != status:
                continue
            cost = item.cost if item.cost is not None else Decimal("0")
            resultado.append(ArticuloConEstado(
                item=item,
                min_stock=min_stock,
                status=estado,
                total_value=(cost * item.quantity).quantize(Decimal("0.01")),
            ))
        return resultado
