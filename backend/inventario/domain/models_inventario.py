"""
Modelos del Dominio de Inventario
==================================

- InventoryItem: cantidad actual por (nombre, categoría, ubicación). Es el ledger.
- InventoryTransaction: historial inmutable de movimientos (IN, OUT, Traslado).
- PartReceipt: entrada de refacciones de un proveedor.
- AssetAssignment: asignación de un activo a una persona.
"""
from datetime import datetime, date
from decimal import Decimal
from sqlalchemy import (
    Integer, String, Boolean, ForeignKey, Numeric, Date, DateTime, Text,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from ..db import Base
from .enums import AssetType


class InventoryItem(Base):
    """
    Registro de stock por artículo y ubicación.

    La clave de negocio es (name, category, location). `version` se usa
    como version_id_col: toda escritura verifica la versión leída, así
    dos escrituras concurrentes no se pisan en silencio.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        UniqueConstraint("name", "category", "location", name="uq_inventory_name_category_location"),
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), index=True)
    category: Mapped[str] = mapped_column(String(200), index=True)
    location: Mapped[str] = mapped_column(String(200), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    min_stock: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    cost: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    asset_type: Mapped[str] = mapped_column(String(20), default=AssetType.INSUMO.value)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    lead_time: Mapped[int | None] = mapped_column(Integer, nullable=True)  # días
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    __mapper_args__ = {"version_id_col": version}

    # La base resuelve las referencias al borrar (ondelete)
    assignments = relationship("AssetAssignment", back_populates="item", passive_deletes="all")
    receipts = relationship("PartReceipt", back_populates="item", passive_deletes="all")

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.name, self.category, self.location)

    def __repr__(self) -> str:
        return f"<InventoryItem {self.id} {self.name}/{self.category}@{self.location} qty={self.quantity}>"


class InventoryTransaction(Base):
    """Movimiento de inventario. Hecho histórico: nunca se actualiza."""
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    item: Mapped[str] = mapped_column(String(200), index=True)
    category: Mapped[str] = mapped_column(String(200))
    location: Mapped[str] = mapped_column(String(200), index=True)
    type: Mapped[str] = mapped_column(String(20), index=True)  # IN, OUT, Traslado
    quantity: Mapped[int] = mapped_column(Integer)
    # Sin anotación Mapped: el atributo sombrearía a datetime.date
    date = mapped_column(Date, nullable=False, default=date.today, index=True)
    user_id: Mapped[str] = mapped_column(String(100), default="system")
    user_name: Mapped[str] = mapped_column(String(200))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    has_proof: Mapped[bool] = mapped_column(Boolean, default=False)
    proof_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    voucher_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # Recepción que originó la entrada; se borra junto con ella
    receipt_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_transactions_quantity_positive"),
    )


class PartReceipt(Base):
    """Entrada de refacciones de un proveedor (factura)"""
    __tablename__ = "part_receipts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    item_id: Mapped[int | None] = mapped_column(ForeignKey("inventory.id", ondelete="SET NULL"), nullable=True, index=True)
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id"), index=True)
    invoice_number: Mapped[str] = mapped_column(String(100))
    receipt_date: Mapped[date] = mapped_column(Date, default=date.today)
    quantity: Mapped[int] = mapped_column(Integer)
    cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    item = relationship("InventoryItem", back_populates="receipts")
    supplier = relationship("Supplier", back_populates="receipts")


class AssetAssignment(Base):
    """
    Asignación de un activo. Solo una fila activa por inventory_id;
    el servicio desactiva la anterior antes de insertar.
    """
    __tablename__ = "asset_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    inventory_id: Mapped[int] = mapped_column(ForeignKey("inventory.id", ondelete="CASCADE"), index=True)
    assigned_to: Mapped[str] = mapped_column(String(200))
    assigned_date: Mapped[date] = mapped_column(Date, default=date.today)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    item = relationship("InventoryItem", back_populates="assignments")
