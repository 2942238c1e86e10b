"""
Auditorías Físicas de Inventario
================================

Flujo de una auditoría:

    NO_INICIADA -> UBICACION_SELECCIONADA -> CONTEO -> GUARDADA -> REVERTIDA

1. Se elige una ubicación y se toma una foto del ledger (system_quantity).
2. Se registra el conteo físico de cada línea; difference = actual - sistema.
3. Al guardar se exige que todas las líneas estén contadas. Guardar NO
   modifica el ledger: la auditoría solo documenta la discrepancia.
4. Eliminar una auditoría la revierte: cada registro vuelve a
   actual_quantity - difference (la cantidad que tenía al auditar).

AuditoriaSession es el estado en memoria del paso 1 a 3; AuditoriaService
persiste, revierte y consulta.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError

from ..config import settings
from ..domain.enums import AuditState
from ..domain.models_auditoria import Audit, AuditItem
from ..domain.models_inventario import InventoryItem
from ..infrastructure.unit_of_work import UnitOfWork
from .errors import (
    AuditoriaIncompletaError, CantidadInvalidaError, InventarioError,
    RegistroNoEncontradoError, TransicionAuditoriaError,
)
from .services_ledger import LedgerService
from .services_low_stock import EvaluadorStockBajo, politica_evaluador
from .services_operaciones import OP_ELIMINAR_AUDITORIA, OP_GUARDAR_AUDITORIA, OperationTracker

logger = logging.getLogger(__name__)


@dataclass
class LineaConteo:
    item_id: int
    name: str
    category: str
    location: str
    system_quantity: int
    cost: Decimal = Decimal("0")
    actual_quantity: Optional[int] = None
    difference: Optional[int] = None

    @property
    def contada(self) -> bool:
        return self.actual_quantity is not None


@dataclass
class ResumenReversion:
    audit_id: int
    location: str
    operation_id: Optional[int] = None
    restaurados: List[Dict[str, Any]] = field(default_factory=list)
    omitidos: List[Dict[str, Any]] = field(default_factory=list)
    fallidos: List[Dict[str, Any]] = field(default_factory=list)


class AuditoriaSession:
    """
    Sesión de conteo de una auditoría. Vive solo en memoria hasta guardar().
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.estado = AuditState.NO_INICIADA
        self.location: Optional[str] = None
        self.lineas: Dict[int, LineaConteo] = {}
        self.audit_id: Optional[int] = None

    def _exigir(self, *permitidos: AuditState, accion: str) -> None:
        if self.estado not in permitidos:
            raise TransicionAuditoriaError(
                f"No se puede {accion} con la auditoría en estado {self.estado.value}"
            )

    def seleccionar_ubicacion(self, location: str) -> List[LineaConteo]:
        """Toma la foto del ledger. Volver a seleccionar descarta los conteos."""
        self._exigir(
            AuditState.NO_INICIADA, AuditState.UBICACION_SELECCIONADA, AuditState.CONTEO,
            accion="seleccionar ubicación",
        )
        location = (location or "").strip()
        if not location:
            raise TransicionAuditoriaError("Debe seleccionar una ubicación para auditar")

        self.location = location
        self.lineas = {
            item.id: LineaConteo(
                item_id=item.id,
                name=item.name,
                category=item.category,
                location=item.location,
                system_quantity=item.quantity,
                cost=item.cost if item.cost is not None else Decimal("0"),
            )
            for item in self.uow.inventory.by_location(location)
        }
        self.estado = AuditState.UBICACION_SELECCIONADA
        logger.debug("Auditoría de %s iniciada con %d artículos", location, len(self.lineas))
        return list(self.lineas.values())

    def registrar_conteo(
        self, item_id: int, actual_quantity: Optional[int], system_quantity: Optional[int] = None,
    ) -> LineaConteo:
        """
        None borra el conteo de la línea. system_quantity reemplaza la foto
        del ledger cuando el conteo se hizo sobre una hoja tomada antes.
        """
        self._exigir(AuditState.UBICACION_SELECCIONADA, AuditState.CONTEO, accion="registrar conteos")
        linea = self.lineas.get(item_id)
        if linea is None:
            raise RegistroNoEncontradoError("Artículo", f"{item_id} en la auditoría de {self.location}")
        if actual_quantity is not None and actual_quantity < 0:
            raise CantidadInvalidaError(f"El conteo de {linea.name} no puede ser negativo")
        if system_quantity is not None:
            if system_quantity < 0:
                raise CantidadInvalidaError(f"La cantidad de sistema de {linea.name} no puede ser negativa")
            linea.system_quantity = system_quantity

        linea.actual_quantity = actual_quantity
        linea.difference = None if actual_quantity is None else actual_quantity - linea.system_quantity
        self.estado = AuditState.CONTEO
        return linea

    def sin_contar(self) -> List[str]:
        return [l.name for l in self.lineas.values() if not l.contada]

    @property
    def discrepancias(self) -> int:
        return sum(1 for l in self.lineas.values() if l.difference)

    def guardar(self, user_name: Optional[str] = None) -> Audit:
        self._exigir(AuditState.UBICACION_SELECCIONADA, AuditState.CONTEO, accion="guardar")
        audit = AuditoriaService(self.uow).guardar(self.location, list(self.lineas.values()), user_name)
        self.audit_id = audit.id
        self.estado = AuditState.GUARDADA
        return audit

    def revertir(
        self, user_name: Optional[str] = None, evaluador: Optional[EvaluadorStockBajo] = None,
    ) -> "ResumenReversion":
        self._exigir(AuditState.GUARDADA, accion="revertir")
        resumen = AuditoriaService(self.uow, evaluador).eliminar(self.audit_id, user_name)
        self.estado = AuditState.REVERTIDA
        return resumen


class AuditoriaService:

    def __init__(self, uow: UnitOfWork, evaluador: Optional[EvaluadorStockBajo] = None):
        self.uow = uow
        self.ledger = LedgerService(uow)
        self.evaluador = evaluador

    def guardar(self, location: str, lineas: List[LineaConteo], user_name: Optional[str] = None) -> Audit:
        """
        Persiste cabecera y líneas. Con líneas sin contar no escribe nada.
        """
        sin_contar = [l.name for l in lineas if not l.contada]
        if sin_contar:
            raise AuditoriaIncompletaError(location, sin_contar)

        user_name = user_name or settings.default_user_name
        discrepancias = sum(1 for l in lineas if l.difference)

        tracker = OperationTracker(
            self.uow, OP_GUARDAR_AUDITORIA, "Audit", user_name=user_name,
            contexto={"ubicacion": location, "lineas": len(lineas), "discrepancias": discrepancias},
        )
        with tracker.paso("insertar_cabecera"):
            audit = self.uow.audits.add_header(Audit(
                location=location,
                date=date.today(),
                user_name=user_name,
                items_count=len(lineas),
                discrepancies=discrepancias,
            ))
            tracker.actualizar_contexto(audit_id=audit.id)
        audit_id = audit.id

        if lineas:
            with tracker.paso("insertar_lineas"):
                self.uow.audits.add_items(
                    AuditItem(
                        audit_id=audit_id,
                        name=l.name,
                        category=l.category,
                        location=l.location,
                        system_quantity=l.system_quantity,
                        actual_quantity=l.actual_quantity,
                        difference=l.difference,
                        cost=l.cost,
                    )
                    for l in lineas
                )
        tracker.completar(entity_id=audit_id)
        logger.info("Auditoría #%s guardada para %s: %d artículos, %d discrepancias",
                    audit_id, location, len(lineas), discrepancias)
        return self.uow.audits.get(audit_id)

    def _resolver_registro(self, linea: AuditItem) -> Optional[InventoryItem]:
        candidatos = self.uow.inventory.by_name_location(linea.name, linea.location)
        if not candidatos:
            return None
        for item in candidatos:
            if item.category == linea.category:
                return item
        return candidatos[0]

    def eliminar(self, audit_id: int, user_name: Optional[str] = None) -> ResumenReversion:
        """
        Revierte la auditoría línea por línea y luego la borra.

        Un registro que ya no existe se omite; una escritura que falla se
        registra y se sigue con la siguiente línea.
        """
        audit = self.uow.audits.get(audit_id)
        if not audit:
            raise RegistroNoEncontradoError("Auditoría", audit_id)

        location = audit.location
        lineas = self.uow.audits.items_for(audit_id)
        resumen = ResumenReversion(audit_id=audit_id, location=location)

        tracker = OperationTracker(
            self.uow, OP_ELIMINAR_AUDITORIA, "Audit", audit_id, user_name=user_name,
            contexto={"ubicacion": location, "lineas": len(lineas)},
        )
        resumen.operation_id = tracker.operation_id

        with tracker.paso("restaurar_cantidades"):
            for linea in lineas:
                detalle = {"name": linea.name, "category": linea.category, "location": linea.location}
                original = linea.actual_quantity - linea.difference
                registro = self._resolver_registro(linea)
                if registro is None:
                    logger.warning("Auditoría #%s: %s ya no existe en %s, se omite",
                                   audit_id, linea.name, linea.location)
                    resumen.omitidos.append(detalle)
                    continue

                savepoint = self.uow.db.begin_nested()
                try:
                    anterior = registro.quantity
                    self.ledger.set_quantity(registro, original)
                    savepoint.commit()
                except (InventarioError, SQLAlchemyError) as e:
                    savepoint.rollback()
                    logger.error("Auditoría #%s: no se pudo restaurar %s en %s a %s: %s",
                                 audit_id, linea.name, linea.location, original, e)
                    resumen.fallidos.append({**detalle, "error": str(e)})
                    continue
                resumen.restaurados.append({**detalle, "item_id": registro.id, "from": anterior, "to": original})
            tracker.actualizar_contexto(
                restaurados=len(resumen.restaurados),
                omitidos=len(resumen.omitidos),
                fallidos=len(resumen.fallidos),
            )

        with tracker.paso("eliminar_lineas"):
            self.uow.audits.delete_items(audit_id)
        with tracker.paso("eliminar_cabecera"):
            self.uow.audits.delete_header(self.uow.audits.get(audit_id))
        tracker.completar()

        logger.info("Auditoría #%s de %s revertida: %d restaurados, %d omitidos, %d fallidos",
                    audit_id, location, len(resumen.restaurados), len(resumen.omitidos), len(resumen.fallidos))

        if self.evaluador:
            self.evaluador.alertar_ubicacion(location, politica_evaluador())
        return resumen

    # ===== CONSULTAS =====

    def listar(self, location: Optional[str] = None) -> List[Audit]:
        return self.uow.audits.list(location)

    def detalle(self, audit_id: int) -> Dict[str, Any]:
        audit = self.uow.audits.get(audit_id)
        if not audit:
            raise RegistroNoEncontradoError("Auditoría", audit_id)
        lineas = self.uow.audits.items_for(audit_id)
        valor = sum(
            (Decimal(l.difference) * (l.cost if l.cost is not None else Decimal("0")) for l in lineas),
            Decimal("0"),
        )
        return {
            "audit": audit,
            "items": lineas,
            "total_value_discrepancy": valor.quantize(Decimal("0.01")),
        }

    def pendientes(self, hoy: Optional[date] = None) -> List[Dict[str, Any]]:
        """Ubicaciones sin auditoría en los últimos audit_pending_days días."""
        hoy = hoy or date.today()
        limite = hoy - timedelta(days=settings.audit_pending_days)
        ultimas = self.uow.audits.last_audit_dates()
        resultado = []
        for location in self.uow.locations.names():
            ultima = ultimas.get(location)
            if ultima is None or ultima < limite:
                resultado.append({
                    "location": location,
                    "last_audit_date": ultima,
                    "days_since": (hoy - ultima).days if ultima else None,
                })
        return resultado
