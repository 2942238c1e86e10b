"""
Operaciones multi-paso
======================

El inventario se modela como un almacén sin transacciones que abarquen
varias sentencias: un traslado, guardar o eliminar una auditoría, o
eliminar una transacción son secuencias de escrituras independientes.

OperationTracker ejecuta cada paso y lo confirma por separado, dejando en
operation_log el último paso completado. Si un paso falla después de que
otro ya se confirmó se lanza EscrituraParcialError con todo el contexto
necesario para reconciliar a mano; no hay compensación automática.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from ..infrastructure.unit_of_work import UnitOfWork
from ..domain.models_operaciones import OperationLog
from ..domain.enums import OperationStatus
from .errors import EscrituraParcialError

logger = logging.getLogger(__name__)

# Operaciones estándar
OP_TRASLADO = "TRASLADO"
OP_GUARDAR_AUDITORIA = "GUARDAR_AUDITORIA"
OP_ELIMINAR_AUDITORIA = "ELIMINAR_AUDITORIA"
OP_ELIMINAR_TRANSACCION = "ELIMINAR_TRANSACCION"
OP_REGISTRAR_RECEPCION = "REGISTRAR_RECEPCION"
OP_ELIMINAR_RECEPCION = "ELIMINAR_RECEPCION"


class OperationTracker:
    """
    Uso:

        tracker = OperationTracker(uow, OP_TRASLADO, "InventoryItem", item.id)
        with tracker.paso("incrementar_destino"):
            ...
        with tracker.paso("decrementar_origen"):
            ...
        tracker.completar()
    """

    def __init__(
        self,
        uow: UnitOfWork,
        operacion: str,
        entity_type: str,
        entity_id: Optional[int] = None,
        user_name: Optional[str] = None,
        contexto: Optional[Dict[str, Any]] = None,
    ):
        self.uow = uow
        self.operacion = operacion
        self.completados: List[str] = []
        self.log = uow.operations.add(OperationLog(
            operation=operacion,
            entity_type=entity_type,
            entity_id=entity_id,
            status=OperationStatus.EN_CURSO.value,
            context=dict(contexto or {}),
            user_name=user_name,
        ))
        uow.commit()
        self.operation_id = self.log.id
        logger.debug("Operación %s #%s iniciada (%s %s)", operacion, self.operation_id, entity_type, entity_id)

    def actualizar_contexto(self, **valores: Any) -> None:
        """Agrega datos al contexto; se confirma junto con el siguiente paso."""
        self.log.context = {**(self.log.context or {}), **valores}

    @contextmanager
    def paso(self, nombre: str):
        try:
            yield
            self.log.last_step = nombre
            self.uow.commit()
        except Exception as e:
            self.uow.rollback()
            self._registrar_fallo(nombre, e)
            if self.completados:
                raise EscrituraParcialError(
                    operacion=self.operacion,
                    paso_fallido=nombre,
                    pasos_completados=self.completados,
                    operation_id=self.operation_id,
                    causa=e,
                ) from e
            raise
        self.completados.append(nombre)
        logger.debug("Operación %s #%s: paso '%s' completado", self.operacion, self.operation_id, nombre)

    def completar(self, entity_id: Optional[int] = None) -> None:
        if entity_id is not None:
            self.log.entity_id = entity_id
        self.log.status = OperationStatus.COMPLETADA.value
        self.log.finished_at = datetime.now()
        self.uow.commit()
        logger.debug("Operación %s #%s completada", self.operacion, self.operation_id)

    def _registrar_fallo(self, nombre: str, error: Exception) -> None:
        logger.error(
            "Operación %s #%s falló en el paso '%s'. Pasos completados: %s. Contexto: %s. Error: %s",
            self.operacion, self.operation_id, nombre, self.completados or "ninguno",
            self.log.context, error,
        )
        try:
            self.log.status = OperationStatus.FALLIDA.value
            self.log.failed_step = nombre
            self.log.error = str(error)[:2000]
            self.log.finished_at = datetime.now()
            self.uow.commit()
        except Exception:
            # El error original es el que se propaga
            self.uow.rollback()
            logger.exception("No se pudo registrar el fallo de la operación #%s", self.operation_id)
