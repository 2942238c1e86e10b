from datetime import date, datetime
from typing import Iterable, List, Optional

from sqlalchemy import case, delete, func, or_, update
from sqlalchemy.orm import Session

from ..domain.models import Location, Category, Supplier, User
from ..domain.models_inventario import InventoryItem, InventoryTransaction, PartReceipt, AssetAssignment
from ..domain.models_auditoria import Audit, AuditItem
from ..domain.models_operaciones import OperationLog
from ..domain.enums import UserRole


class InventoryRepository:
    """Acceso al ledger (tabla inventory)."""

    def __init__(self, db: Session): self.db = db

    def add(self, item: InventoryItem): self.db.add(item); self.db.flush(); return item
    def get(self, id: int) -> Optional[InventoryItem]: return self.db.get(InventoryItem, id)

    def by_location(self, location: str) -> List[InventoryItem]:
        return (
            self.db.query(InventoryItem)
            .filter(InventoryItem.location == location)
            .order_by(InventoryItem.name, InventoryItem.category)
            .all()
        )

    def by_key(self, name: str, category: str, location: str) -> Optional[InventoryItem]:
        return self.db.query(InventoryItem).filter(
            InventoryItem.name == name,
            InventoryItem.category == category,
            InventoryItem.location == location,
        ).first()

    def by_name_location(self, name: str, location: str) -> List[InventoryItem]:
        return self.db.query(InventoryItem).filter(
            InventoryItem.name == name,
            InventoryItem.location == location,
        ).order_by(InventoryItem.id).all()

    def list(
        self,
        location: Optional[str] = None,
        category: Optional[str] = None,
        asset_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[InventoryItem]:
        q = self.db.query(InventoryItem)
        if location:
            q = q.filter(InventoryItem.location == location)
        if category:
            q = q.filter(InventoryItem.category == category)
        if asset_type:
            q = q.filter(InventoryItem.asset_type == asset_type)
        if search:
            like = f"%{search}%"
            q = q.filter(or_(InventoryItem.name.ilike(like), InventoryItem.category.ilike(like)))
        return q.order_by(InventoryItem.location, InventoryItem.name).all()

    def locations(self) -> List[str]:
        rows = self.db.query(InventoryItem.location).distinct().order_by(InventoryItem.location).all()
        return [r[0] for r in rows]

    def delete(self, item: InventoryItem):
        self.db.delete(item)
        self.db.flush()

    def adjust_quantity(self, item_id: int, delta: int, clamp_at_zero: bool = False) -> bool:
        """
        Ajuste atómico en la base: quantity = quantity + delta.
        Sin clamp la fila no se toca si el resultado sería negativo.
        Devuelve False si no se actualizó ninguna fila.
        """
        nueva = InventoryItem.quantity + delta
        stmt = update(InventoryItem).where(InventoryItem.id == item_id)
        if clamp_at_zero:
            stmt = stmt.values(quantity=case((nueva < 0, 0), else_=nueva))
        else:
            stmt = stmt.where(nueva >= 0).values(quantity=nueva)
        stmt = stmt.values(version=InventoryItem.version + 1, updated_at=datetime.now())
        result = self.db.execute(stmt.execution_options(synchronize_session=False))

        # El objeto en memoria quedó desactualizado
        cached = self.db.identity_map.get(self.db.identity_key(InventoryItem, item_id))
        if cached is not None:
            self.db.expire(cached)
        return result.rowcount > 0


class TransactionRepository:
    def __init__(self, db: Session): self.db = db

    def add(self, t: InventoryTransaction): self.db.add(t); self.db.flush(); return t
    def get(self, id: int) -> Optional[InventoryTransaction]: return self.db.get(InventoryTransaction, id)
    def delete(self, t: InventoryTransaction): self.db.delete(t); self.db.flush()
    def by_receipt(self, receipt_id: int) -> List[InventoryTransaction]:
        return self.db.query(InventoryTransaction).filter(InventoryTransaction.receipt_id == receipt_id).all()

    def list(
        self,
        type: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 200,
        offset: int = 0,
    ) -> List[InventoryTransaction]:
        q = self.db.query(InventoryTransaction)
        if type:
            q = q.filter(InventoryTransaction.type == type)
        if location:
            q = q.filter(InventoryTransaction.location == location)
        if search:
            like = f"%{search}%"
            q = q.filter(or_(InventoryTransaction.item.ilike(like), InventoryTransaction.notes.ilike(like)))
        if date_from:
            q = q.filter(InventoryTransaction.date >= date_from)
        if date_to:
            q = q.filter(InventoryTransaction.date <= date_to)
        return (
            q.order_by(InventoryTransaction.date.desc(), InventoryTransaction.id.desc())
            .offset(offset).limit(limit).all()
        )


class AuditRepository:
    def __init__(self, db: Session): self.db = db

    def add_header(self, a: Audit): self.db.add(a); self.db.flush(); return a
    def add_items(self, items: Iterable[AuditItem]):
        items = list(items)
        self.db.add_all(items)
        self.db.flush()
        return items
    def get(self, id: int) -> Optional[Audit]: return self.db.get(Audit, id)

    def items_for(self, audit_id: int) -> List[AuditItem]:
        return self.db.query(AuditItem).filter(AuditItem.audit_id == audit_id).order_by(AuditItem.id).all()

    def delete_items(self, audit_id: int) -> int:
        result = self.db.execute(
            delete(AuditItem).where(AuditItem.audit_id == audit_id).execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_header(self, audit: Audit):
        # Las líneas ya se borraron en bloque; la colección en memoria está obsoleta
        self.db.expire(audit, ["items"])
        self.db.delete(audit)
        self.db.flush()

    def list(self, location: Optional[str] = None) -> List[Audit]:
        q = self.db.query(Audit)
        if location:
            q = q.filter(Audit.location == location)
        return q.order_by(Audit.created_at.desc(), Audit.id.desc()).all()

    def last_audit_dates(self) -> dict:
        rows = self.db.query(Audit.location, func.max(Audit.date)).group_by(Audit.location).all()
        return {location: last for location, last in rows}


class AssetAssignmentRepository:
    def __init__(self, db: Session): self.db = db

    def add(self, a: AssetAssignment): self.db.add(a); self.db.flush(); return a

    def active_for(self, inventory_id: int) -> List[AssetAssignment]:
        return self.db.query(AssetAssignment).filter(
            AssetAssignment.inventory_id == inventory_id,
            AssetAssignment.is_active.is_(True),
        ).all()

    def deactivate_all(self, inventory_id: int) -> int:
        rows = self.active_for(inventory_id)
        for row in rows:
            row.is_active = False
        self.db.flush()
        return len(rows)

    def list_active(self, search: Optional[str] = None) -> List[AssetAssignment]:
        q = self.db.query(AssetAssignment).join(InventoryItem).filter(AssetAssignment.is_active.is_(True))
        if search:
            like = f"%{search}%"
            q = q.filter(or_(AssetAssignment.assigned_to.ilike(like), InventoryItem.name.ilike(like)))
        return q.order_by(AssetAssignment.assigned_date.desc(), AssetAssignment.id.desc()).all()

    def history(self, inventory_id: int) -> List[AssetAssignment]:
        return self.db.query(AssetAssignment).filter(
            AssetAssignment.inventory_id == inventory_id
        ).order_by(AssetAssignment.id.desc()).all()


class PartReceiptRepository:
    def __init__(self, db: Session): self.db = db

    def add(self, r: PartReceipt): self.db.add(r); self.db.flush(); return r
    def get(self, id: int) -> Optional[PartReceipt]: return self.db.get(PartReceipt, id)
    def delete(self, r: PartReceipt): self.db.delete(r); self.db.flush()

    def list(self, supplier_id: Optional[int] = None, search: Optional[str] = None) -> List[PartReceipt]:
        q = self.db.query(PartReceipt).outerjoin(InventoryItem)
        if supplier_id:
            q = q.filter(PartReceipt.supplier_id == supplier_id)
        if search:
            like = f"%{search}%"
            q = q.filter(or_(PartReceipt.invoice_number.ilike(like), InventoryItem.name.ilike(like)))
        return q.order_by(PartReceipt.receipt_date.desc(), PartReceipt.id.desc()).all()


class SupplierRepository:
    def __init__(self, db: Session): self.db = db

    def add(self, s: Supplier): self.db.add(s); self.db.flush(); return s
    def get(self, id: int) -> Optional[Supplier]: return self.db.get(Supplier, id)
    def delete(self, s: Supplier): self.db.delete(s); self.db.flush()
    def list(self) -> List[Supplier]: return self.db.query(Supplier).order_by(Supplier.name).all()


class LocationRepository:
    def __init__(self, db: Session): self.db = db

    def add(self, l: Location): self.db.add(l); self.db.flush(); return l
    def get(self, id: int) -> Optional[Location]: return self.db.get(Location, id)
    def by_name(self, name: str) -> Optional[Location]:
        return self.db.query(Location).filter(Location.name == name).first()
    def delete(self, l: Location): self.db.delete(l); self.db.flush()
    def list(self) -> List[Location]: return self.db.query(Location).order_by(Location.name).all()

    def names(self) -> List[str]:
        """Ubicaciones del catálogo más las que solo existen en el inventario."""
        catalogo = {l.name for l in self.list()}
        en_uso = {r[0] for r in self.db.query(InventoryItem.location).distinct().all()}
        return sorted(catalogo | en_uso)


class CategoryRepository:
    def __init__(self, db: Session): self.db = db

    def add(self, c: Category): self.db.add(c); self.db.flush(); return c
    def get(self, id: int) -> Optional[Category]: return self.db.get(Category, id)
    def by_name(self, name: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.name == name).first()
    def delete(self, c: Category): self.db.delete(c); self.db.flush()
    def list(self) -> List[Category]: return self.db.query(Category).order_by(Category.name).all()

    def in_use(self, name: str) -> bool:
        return self.db.query(InventoryItem.id).filter(InventoryItem.category == name).first() is not None


class UserRepository:
    def __init__(self, db: Session): self.db = db

    def add(self, u: User): self.db.add(u); self.db.flush(); return u
    def get(self, id: int) -> Optional[User]: return self.db.get(User, id)
    def by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()
    def delete(self, u: User): self.db.delete(u); self.db.flush()
    def list(self) -> List[User]: return self.db.query(User).order_by(User.name).all()

    def admin_for_location(self, location: str) -> Optional[User]:
        return self.db.query(User).filter(
            User.location == location,
            User.role == UserRole.ADMIN.value,
            User.receive_alerts.is_(True),
        ).order_by(User.id).first()


class OperationLogRepository:
    def __init__(self, db: Session): self.db = db

    def add(self, op: OperationLog): self.db.add(op); self.db.flush(); return op
    def get(self, id: int) -> Optional[OperationLog]: return self.db.get(OperationLog, id)

    def list(self, status: Optional[str] = None, operation: Optional[str] = None, limit: int = 100) -> List[OperationLog]:
        q = self.db.query(OperationLog)
        if status:
            q = q.filter(OperationLog.status == status)
        if operation:
            q = q.filter(OperationLog.operation == operation)
        return q.order_by(OperationLog.id.desc()).limit(limit).all()
