"""Database models."""
from quoting.models.user import User
from quoting.models.quotation import Quotation, NumberingLock
from quoting.models.client import Client
from quoting.models.job import Job, WorkerAssignment
from quoting.models.costs import RealLaborRecord, RealMaterialRecord, PettyExpense, TransportCost
from quoting.models.liquidation import Liquidation
from quoting.models.history import ModificationHistory
from quoting.models.audit import AuditLog
from quoting.models.settings import Setting

__all__ = [
    'User',
    'Quotation',
    'NumberingLock',
    'Client',
    'Job',
    'WorkerAssignment',
    'RealLaborRecord',
    'RealMaterialRecord',
    'PettyExpense',
    'TransportCost',
    'Liquidation',
    'ModificationHistory',
    'AuditLog',
    'Setting',
]
