"""
Tests de asignación de activos
"""
import pytest

from inventario.application.errors import RegistroNoEncontradoError, ValidacionError
from inventario.application.services_activos import AsignacionActivoService
from inventario.application.services_ledger import LedgerService


def test_reasignar_desactiva_la_anterior(uow, crear_articulo):
    laptop = crear_articulo("Laptop", "CDMX", 1, category="Cómputo", asset_type="Activo")
    service = AsignacionActivoService(uow)

    service.asignar(laptop.id, "María")
    service.asignar(laptop.id, "Jorge", notes="Cambio de área")
    uow.commit()

    activas = uow.assignments.active_for(laptop.id)
    assert [a.assigned_to for a in activas] == ["Jorge"]
    assert [a.assigned_to for a in service.historial(laptop.id)] == ["Jorge", "María"]


def test_solo_se_asignan_activos(uow, crear_articulo):
    papel = crear_articulo("Papel", "CDMX", 10, asset_type="Insumo")
    with pytest.raises(ValidacionError):
        AsignacionActivoService(uow).asignar(papel.id, "María")


def test_responsable_requerido(uow, crear_articulo):
    laptop = crear_articulo("Laptop", "CDMX", 1, asset_type="Activo")
    with pytest.raises(ValidacionError):
        AsignacionActivoService(uow).asignar(laptop.id, "  ")


def test_liberar(uow, crear_articulo):
    laptop = crear_articulo("Laptop", "CDMX", 1, asset_type="Activo")
    service = AsignacionActivoService(uow)
    service.asignar(laptop.id, "María")
    assert service.liberar(laptop.id) == 1
    assert service.listar_activas() == []


def test_buscar_asignaciones(uow, crear_articulo):
    laptop = crear_articulo("Laptop", "CDMX", 1, asset_type="Activo")
    proyector = crear_articulo("Proyector", "CDMX", 1, asset_type="Activo")
    service = AsignacionActivoService(uow)
    service.asignar(laptop.id, "María")
    service.asignar(proyector.id, "Jorge")

    assert [a.assigned_to for a in service.listar_activas("proyec")] == ["Jorge"]


def test_borrar_el_activo_borra_sus_asignaciones(uow, crear_articulo):
    laptop = crear_articulo("Laptop", "CDMX", 1, asset_type="Activo")
    AsignacionActivoService(uow).asignar(laptop.id, "María")
    uow.commit()

    LedgerService(uow).eliminar_articulo(laptop.id)
    uow.commit()

    assert uow.assignments.history(laptop.id) == []
    with pytest.raises(RegistroNoEncontradoError):
        AsignacionActivoService(uow).historial(laptop.id)
