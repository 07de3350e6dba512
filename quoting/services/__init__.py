"""Business logic services."""
from quoting.services.quotation_service import QuotationService
from quoting.services.numbering_service import NumberingService
from quoting.services.client_service import ClientService
from quoting.services.job_service import JobService
from quoting.services.assignment_service import AssignmentService
from quoting.services.history_service import HistoryService
from quoting.services.cost_service import CostService
from quoting.services.reconciliation_service import ReconciliationService
from quoting.services.liquidation_service import LiquidationService
from quoting.services.audit_service import AuditService

__all__ = [
    'QuotationService',
    'NumberingService',
    'ClientService',
    'JobService',
    'AssignmentService',
    'HistoryService',
    'CostService',
    'ReconciliationService',
    'LiquidationService',
    'AuditService',
]
