#!/usr/bin/env python3
"""
Script para cargar datos de prueba del inventario.

Uso:
  cd backend && python -m scripts.seed_test_data
  cd backend && python scripts/seed_test_data.py
  cd backend && python scripts/seed_test_data.py --reset   # borra y recrea las tablas

Crea (si no existen):
- 3 ubicaciones y 4 categorías
- Administrador de CDMX que recibe alertas
- 1 proveedor
- Artículos en CDMX, Monterrey y Guadalajara (algunos en stock bajo)
- Un activo asignado

Ideal para pruebas funcionales y E2E.
"""
import sys
from pathlib import Path
from decimal import Decimal

# Agregar backend al path
backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from inventario.db import SessionLocal, init_db, recreate_schema_from_models
from inventario.application.errors import RegistroDuplicadoError
from inventario.application.services_activos import AsignacionActivoService
from inventario.application.services_ledger import LedgerService
from inventario.domain.models import Category, Location, Supplier, User
from inventario.infrastructure.unit_of_work import UnitOfWork

UBICACIONES = ["CDMX", "Monterrey", "Guadalajara"]
CATEGORIAS = ["Papelería", "Limpieza", "Cómputo", "Refacciones"]

ARTICULOS = [
    # name, category, location, quantity, min_stock, cost, asset_type
    ("Hojas carta", "Papelería", "CDMX", 40, 10, Decimal("85.00"), "Insumo"),
    ("Tóner HP 85A", "Papelería", "CDMX", 2, 5, Decimal("1250.00"), "Insumo"),
    ("Cloro 1L", "Limpieza", "CDMX", 0, 6, Decimal("22.50"), "Insumo"),
    ("Laptop Dell 5420", "Cómputo", "CDMX", 3, 1, Decimal("18500.00"), "Activo"),
    ("Hojas carta", "Papelería", "Monterrey", 12, 10, Decimal("85.00"), "Insumo"),
    ("Filtro de aire", "Refacciones", "Monterrey", 7, 10, Decimal("310.00"), "Insumo"),
    ("Jabón líquido", "Limpieza", "Guadalajara", 35, 10, Decimal("48.00"), "Insumo"),
]


def seed_catalogos(uow: UnitOfWork) -> None:
    for nombre in UBICACIONES:
        if not uow.locations.by_name(nombre):
            uow.locations.add(Location(name=nombre))
    for nombre in CATEGORIAS:
        if not uow.categories.by_name(nombre):
            uow.categories.add(Category(name=nombre))
    if not uow.users.by_email("admin.cdmx@example.com"):
        uow.users.add(User(
            name="Admin CDMX", email="admin.cdmx@example.com", location="CDMX",
            role="admin", receive_alerts=True,
        ))
    if not uow.suppliers.list():
        uow.suppliers.add(Supplier(name="Refaccionaria del Norte", contact_name="Luis Garza", email="ventas@refnorte.example.com"))
    uow.commit()
    print("   ✓ Catálogos listos")


def seed_articulos(uow: UnitOfWork) -> int:
    ledger = LedgerService(uow)
    creados = 0
    for name, category, location, quantity, min_stock, cost, asset_type in ARTICULOS:
        try:
            ledger.create_record(name, category, location, quantity, min_stock, cost, asset_type)
            creados += 1
        except RegistroDuplicadoError:
            continue
    uow.commit()
    print(f"   ✓ {creados} artículos creados")

    laptop = ledger.by_key("Laptop Dell 5420", "Cómputo", "CDMX")
    if laptop and not uow.assignments.active_for(laptop.id):
        AsignacionActivoService(uow).asignar(laptop.id, "María López", "Equipo de contabilidad")
        uow.commit()
        print("   ✓ Activo asignado")
    return creados


def main():
    print("🌱 Inventario - Carga de datos de prueba")
    print("=" * 50)

    if "--reset" in sys.argv:
        print("⚠️  Recreando el esquema desde los modelos...")
        recreate_schema_from_models()
    else:
        init_db()
    uow = UnitOfWork(SessionLocal())
    try:
        print("\n1. Catálogos...")
        seed_catalogos(uow)
        print("\n2. Artículos...")
        seed_articulos(uow)
        print("\n✅ Datos de prueba listos.")
        return 0
    except Exception as e:
        print(f"\n❌ Error: {e}")
        import traceback
        traceback.print_exc()
        uow.rollback()
        return 1
    finally:
        uow.close()


if __name__ == "__main__":
    sys.exit(main())
