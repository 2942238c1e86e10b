"""
Evaluador de Stock Bajo
=======================

clasificar() es una función pura de (cantidad, stock mínimo). Hay dos
políticas con nombre porque el inventario general y la verificación por
transacción no coinciden en el estado de cantidad 0 (Agotado vs Crítico);
ambas se leen de settings.

EvaluadorStockBajo dispara UNA alerta por ubicación con todos los artículos
bajos de esa ubicación, no uno por artículo.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from ..config import settings
from ..domain.enums import StockStatus
from ..domain.models_inventario import InventoryItem
from ..infrastructure.alert_client import AlertResult, AlertSink
from ..infrastructure.unit_of_work import UnitOfWork
from .errors import CantidadInvalidaError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoliticaStock:
    nombre: str
    estado_cero: StockStatus
    factor_exceso: int = 3


def politica_evaluador() -> PoliticaStock:
    """Inventario, dashboard y barrido de alertas."""
    return PoliticaStock(
        nombre="evaluador",
        estado_cero=StockStatus(settings.low_stock_zero_status_evaluator),
        factor_exceso=settings.low_stock_excess_factor,
    )


def politica_transaccion() -> PoliticaStock:
    """Verificación posterior a una salida o traslado."""
    return PoliticaStock(
        nombre="transaccion",
        estado_cero=StockStatus(settings.low_stock_zero_status_transaction),
        factor_exceso=settings.low_stock_excess_factor,
    )


def clasificar(quantity: int, min_stock: Optional[int], politica: Optional[PoliticaStock] = None) -> StockStatus:
    """
    - 0                              -> politica.estado_cero
    - < min_stock y <= min_stock / 2 -> Crítico
    - < min_stock                    -> Bajo
    - >= min_stock * factor_exceso   -> Exceso (solo con min_stock > 0)
    - resto                          -> Normal
    """
    if quantity is None or quantity < 0:
        raise CantidadInvalidaError(f"Cantidad inválida para clasificar: {quantity}")
    politica = politica or politica_evaluador()
    minimo = min_stock or 0

    if quantity == 0:
        return politica.estado_cero
    if quantity < minimo:
        if quantity <= minimo / 2:
            return StockStatus.CRITICO
        return StockStatus.BAJO
    if minimo > 0 and quantity >= minimo * politica.factor_exceso:
        return StockStatus.EXCESO
    return StockStatus.NORMAL


def item_para_alerta(item: InventoryItem, estado: StockStatus) -> Dict[str, Any]:
    cost = item.cost if item.cost is not None else Decimal("0")
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "location": item.location,
        "quantity": item.quantity,
        "min_stock": item.min_stock,
        "cost": float(cost),
        "status": estado.value,
    }


class EvaluadorStockBajo:

    def __init__(self, uow: UnitOfWork, sink: AlertSink):
        self.uow = uow
        self.sink = sink

    def articulos_bajos(self, location: str, politica: Optional[PoliticaStock] = None) -> List[Dict[str, Any]]:
        """Artículos de la ubicación en estado Bajo, Crítico o Agotado."""
        politica = politica or politica_evaluador()
        resultado = []
        for item in self.uow.inventory.by_location(location):
            estado = clasificar(item.quantity, item.min_stock, politica)
            if estado.requiere_alerta:
                resultado.append(item_para_alerta(item, estado))
        return resultado

    def verificar_despues_de_disminucion(
        self,
        item: InventoryItem,
        politica: Optional[PoliticaStock] = None,
    ) -> Optional[AlertResult]:
        """
        Se llama tras una escritura que bajó la cantidad de `item`.
        Si el artículo quedó bajo se alerta a su ubicación completa.
        """
        politica = politica or politica_transaccion()
        estado = clasificar(item.quantity, item.min_stock, politica)
        if not estado.requiere_alerta:
            return None
        logger.info("%s en %s quedó en estado %s (%s/%s)", item.name, item.location, estado.value, item.quantity, item.min_stock)
        return self.alertar_ubicacion(item.location, politica)

    def alertar_ubicacion(self, location: str, politica: Optional[PoliticaStock] = None) -> Optional[AlertResult]:
        items = self.articulos_bajos(location, politica)
        if not items:
            logger.info("No hay artículos con stock bajo en %s", location)
            return None

        admin = self.uow.users.admin_for_location(location)
        admin_email = admin.email if admin else settings.alert_default_admin_email
        admin_name = admin.name if admin else settings.alert_default_admin_name

        try:
            result = self.sink.send_low_stock_alert(location, items, admin_email, admin_name)
        except Exception as e:
            # La alerta nunca revierte el movimiento que la disparó
            logger.error("Error al enviar alerta de stock bajo para %s: %s", location, e, exc_info=True)
            return AlertResult(success=False, error=str(e))

        if result.success:
            logger.info("Alerta de stock bajo enviada a %s para %s (%d artículos)", admin_email, location, len(items))
        else:
            logger.warning("No se pudo enviar la alerta para %s: %s", location, result.error)
        return result

    def verificar_todas_las_ubicaciones(self) -> Dict[str, Optional[AlertResult]]:
        """Barrido completo: una alerta por cada ubicación con artículos bajos."""
        politica = politica_evaluador()
        resultados = {}
        for location in self.uow.inventory.locations():
            resultados[location] = self.alertar_ubicacion(location, politica)
        return resultados
