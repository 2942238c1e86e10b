"""
Auditorías físicas de inventario
================================
Un conteo físico por ubicación comparado contra el ledger.
Las líneas pertenecen a la cabecera; se borran siempre junto con ella
(primero líneas, luego cabecera) desde la aplicación.
"""
from datetime import datetime, date
from decimal import Decimal
from sqlalchemy import Integer, String, ForeignKey, Numeric, Date, DateTime
from sqlalchemy.orm import relationship, Mapped, mapped_column
from ..db import Base


class Audit(Base):
    __tablename__ = "audits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    location: Mapped[str] = mapped_column(String(200), index=True)
    date = mapped_column(Date, nullable=False, default=date.today)
    user_name: Mapped[str] = mapped_column(String(200))
    items_count: Mapped[int] = mapped_column(Integer, default=0)
    discrepancies: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)

    # Sin cascade: el borrado de líneas lo ordena AuditoriaService
    items = relationship("AuditItem", back_populates="audit", order_by="AuditItem.id", passive_deletes=True)


class AuditItem(Base):
    __tablename__ = "audit_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    audit_id: Mapped[int] = mapped_column(ForeignKey("audits.id"), index=True)
    name: Mapped[str] = mapped_column(String(200))
    category: Mapped[str] = mapped_column(String(200))
    location: Mapped[str] = mapped_column(String(200))
    system_quantity: Mapped[int] = mapped_column(Integer)
    actual_quantity: Mapped[int] = mapped_column(Integer)
    difference: Mapped[int] = mapped_column(Integer)  # actual_quantity - system_quantity
    cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    audit = relationship("Audit", back_populates="items")
