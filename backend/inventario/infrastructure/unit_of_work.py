from sqlalchemy.orm import Session
from ..db import SessionLocal
from .repositories import (
    InventoryRepository, TransactionRepository, AuditRepository, AssetAssignmentRepository,
    PartReceiptRepository, SupplierRepository, LocationRepository, CategoryRepository,
    UserRepository, OperationLogRepository,
)


class UnitOfWork:
    def __init__(self, db: Session = None):
        self.db: Session = db if db is not None else SessionLocal()
        self.inventory = InventoryRepository(self.db)
        self.transactions = TransactionRepository(self.db)
        self.audits = AuditRepository(self.db)
        self.assignments = AssetAssignmentRepository(self.db)
        self.receipts = PartReceiptRepository(self.db)
        self.suppliers = SupplierRepository(self.db)
        self.locations = LocationRepository(self.db)
        self.categories = CategoryRepository(self.db)
        self.users = UserRepository(self.db)
        self.operations = OperationLogRepository(self.db)

    def commit(self): self.db.commit()
    def rollback(self): self.db.rollback()
    def close(self): self.db.close()
