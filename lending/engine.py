from typing import Optional

from lending.sa.database import Database
from lending.services.audit import AuditRecorder
from lending.services.cascade import CascadeCoordinator
from lending.services.catalog import CatalogService
from lending.services.inventory import InventoryGuard
from lending.services.ledger import BorrowingLedger


class LendingEngine:
    """Wires the services around one Database and one audit log."""

    def __init__(self, database: Optional[Database] = None):
        self.database = database or Database()
        self.audit = AuditRecorder(self.database)
        self.inventory = InventoryGuard(self.database, self.audit)
        self.ledger = BorrowingLedger(self.database, self.inventory, self.audit)
        self.catalog = CatalogService(self.database, self.inventory, self.audit)
        self.cascade = CascadeCoordinator(self.database, self.inventory, self.audit)
