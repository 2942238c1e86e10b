from pydantic import BaseModel, Field, constr
from typing import List, Optional, Dict, Any
from datetime import date, datetime
from decimal import Decimal

# ===== INVENTARIO =====

class ItemIn(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    category: constr(strip_whitespace=True, min_length=1)
    location: constr(strip_whitespace=True, min_length=1)
    quantity: int = Field(0, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    asset_type: str = "Insumo"  # Insumo | Activo
    description: Optional[str] = None
    lead_time: Optional[int] = None  # días

class ItemUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    asset_type: Optional[str] = None
    description: Optional[str] = None
    lead_time: Optional[int] = None

class ItemOut(BaseModel):
    id: int
    name: str
    category: str
    location: str
    quantity: int
    min_stock: Optional[int] = None
    cost: Decimal
    asset_type: str
    description: Optional[str] = None
    lead_time: Optional[int] = None
    version: int

    class Config:
        from_attributes = True

class ItemWithStatusOut(ItemOut):
    status: str
    total_value: Decimal

# ===== TRANSACCIONES =====

class TransactionIn(BaseModel):
    type: str  # IN | OUT
    item: constr(strip_whitespace=True, min_length=1)
    category: constr(strip_whitespace=True, min_length=1)
    location: constr(strip_whitespace=True, min_length=1)
    quantity: int
    transaction_date: Optional[date] = Field(None, alias="date")
    notes: Optional[str] = None
    has_proof: bool = False
    proof_url: Optional[str] = None
    voucher_number: Optional[str] = None
    # Solo para una entrada que crea el artículo en la ubicación
    min_stock: Optional[int] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    asset_type: Optional[str] = None

    class Config:
        populate_by_name = True

class TransactionOut(BaseModel):
    id: int
    item: str
    category: str
    location: str
    type: str
    quantity: int
    date: date
    user_id: str
    user_name: str
    notes: Optional[str] = None
    has_proof: bool
    proof_url: Optional[str] = None
    voucher_number: Optional[str] = None
    receipt_id: Optional[int] = None

    class Config:
        from_attributes = True

# ===== TRASLADOS =====

class MoveIn(BaseModel):
    item_id: int
    quantity: int
    destination: str
    notes: Optional[str] = None

class MoveOut(BaseModel):
    operation_id: int
    transaction_id: int
    source_id: int
    destination_id: int
    source_quantity: int
    destination_quantity: int
    source_deleted: bool

# ===== AUDITORÍAS =====

class AuditLineOut(BaseModel):
    item_id: int
    name: str
    category: str
    location: str
    system_quantity: int
    cost: Decimal
    actual_quantity: Optional[int] = None
    difference: Optional[int] = None

class AuditCountIn(BaseModel):
    item_id: int
    # Cantidad de sistema que mostraba la hoja de conteo
    system_quantity: int = Field(..., ge=0)
    actual_quantity: Optional[int] = None

class AuditIn(BaseModel):
    location: constr(strip_whitespace=True, min_length=1)
    counts: List[AuditCountIn] = []

class AuditOut(BaseModel):
    id: int
    location: str
    date: date
    user_name: str
    items_count: int
    discrepancies: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AuditItemOut(BaseModel):
    id: int
    name: str
    category: str
    location: str
    system_quantity: int
    actual_quantity: int
    difference: int
    cost: Optional[Decimal] = None

    class Config:
        from_attributes = True

class AuditDetailOut(BaseModel):
    audit: AuditOut
    items: List[AuditItemOut]
    total_value_discrepancy: Decimal

class AuditRevertOut(BaseModel):
    audit_id: int
    location: str
    operation_id: Optional[int] = None
    restaurados: List[Dict[str, Any]]
    omitidos: List[Dict[str, Any]]
    fallidos: List[Dict[str, Any]]

class PendingAuditOut(BaseModel):
    location: str
    last_audit_date: Optional[date] = None
    days_since: Optional[int] = None

# ===== RECEPCIONES Y PROVEEDORES =====

class ReceiptIn(BaseModel):
    item_id: int
    supplier_id: int
    invoice_number: str
    quantity: int
    receipt_date: Optional[date] = None
    cost: Optional[Decimal] = None
    notes: Optional[str] = None

class ReceiptOut(BaseModel):
    id: int
    item_id: Optional[int] = None
    supplier_id: int
    invoice_number: str
    receipt_date: date
    quantity: int
    cost: Optional[Decimal] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True

class SupplierIn(BaseModel):
    name: str
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

class SupplierOut(SupplierIn):
    id: int

    class Config:
        from_attributes = True

# ===== ACTIVOS =====

class AssignmentIn(BaseModel):
    inventory_id: int
    assigned_to: str
    notes: Optional[str] = None

class AssignmentOut(BaseModel):
    id: int
    inventory_id: int
    assigned_to: str
    assigned_date: date
    is_active: bool
    notes: Optional[str] = None

    class Config:
        from_attributes = True

# ===== CATÁLOGOS =====

class LocationIn(BaseModel):
    name: str
    address: Optional[str] = None
    manager: Optional[str] = None

class LocationOut(LocationIn):
    id: int

    class Config:
        from_attributes = True

class CategoryIn(BaseModel):
    name: str

class CategoryOut(CategoryIn):
    id: int

    class Config:
        from_attributes = True

class UserIn(BaseModel):
    name: str
    email: str
    location: str
    role: str = "colaborador"  # admin | colaborador | auditor
    receive_alerts: bool = False

class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    location: Optional[str] = None
    role: Optional[str] = None
    receive_alerts: Optional[bool] = None

class UserOut(UserIn):
    id: int

    class Config:
        from_attributes = True

# ===== OPERACIONES =====

class OperationLogOut(BaseModel):
    id: int
    operation: str
    entity_type: str
    entity_id: Optional[int] = None
    status: str
    last_step: Optional[str] = None
    failed_step: Optional[str] = None
    context: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    user_name: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# ===== STOCK BAJO =====

class LowStockItem(BaseModel):
    id: Optional[int] = None
    name: str
    category: str
    location: Optional[str] = None
    quantity: int
    min_stock: Optional[int] = None
    cost: Optional[float] = None
    status: str

class SendAlertIn(BaseModel):
    items: List[LowStockItem] = []
    location: str = ""
    adminEmail: Optional[str] = None
    adminName: Optional[str] = None
    baseUrl: Optional[str] = None

class AlertResultOut(BaseModel):
    location: str
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
