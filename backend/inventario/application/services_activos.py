"""
Asignación de activos a personas. Un activo tiene a lo sumo una
asignación activa; reasignar desactiva la anterior.
"""
from typing import List, Optional
import logging

from ..domain.enums import AssetType
from ..domain.models_inventario import AssetAssignment
from ..infrastructure.unit_of_work import UnitOfWork
from .errors import RegistroNoEncontradoError, ValidacionError

logger = logging.getLogger(__name__)


class AsignacionActivoService:

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _activo(self, inventory_id: int):
        item = self.uow.inventory.get(inventory_id)
        if not item:
            raise RegistroNoEncontradoError("Artículo", inventory_id)
        if item.asset_type != AssetType.ACTIVO.value:
            raise ValidacionError([f"{item.name} es un {item.asset_type}, solo se asignan activos"])
        return item

    def asignar(self, inventory_id: int, assigned_to: str, notes: Optional[str] = None) -> AssetAssignment:
        item = self._activo(inventory_id)
        assigned_to = (assigned_to or "").strip()
        if not assigned_to:
            raise ValidacionError(["Debe indicar a quién se asigna el activo"])

        anteriores = self.uow.assignments.deactivate_all(inventory_id)
        if anteriores:
            logger.info("Activo %s: %d asignación(es) anterior(es) desactivada(s)", item.name, anteriores)
        asignacion = self.uow.assignments.add(AssetAssignment(
            inventory_id=inventory_id,
            assigned_to=assigned_to,
            is_active=True,
            notes=notes,
        ))
        logger.info("Activo %s asignado a %s", item.name, assigned_to)
        return asignacion

    def liberar(self, inventory_id: int) -> int:
        self._activo(inventory_id)
        return self.uow.assignments.deactivate_all(inventory_id)

    def listar_activas(self, search: Optional[str] = None) -> List[AssetAssignment]:
        return self.uow.assignments.list_active(search)

    def historial(self, inventory_id: int) -> List[AssetAssignment]:
        if not self.uow.inventory.get(inventory_id):
            raise RegistroNoEncontradoError("Artículo", inventory_id)
        return self.uow.assignments.history(inventory_id)
