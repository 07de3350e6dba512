"""Flask-WTF forms for the JSON API."""
from quoting.forms.base import submitted_fields
from quoting.forms.quotation import QuotationForm, QuotationEditForm, StatusForm, PaymentForm
from quoting.forms.cost import LaborCostForm, MaterialCostForm, PettyExpenseForm, TransportCostForm
from quoting.forms.job import JobForm, AssignmentForm, AssignmentUpdateForm
from quoting.forms.liquidation import LiquidationForm
from quoting.forms.settings import PricingSettingsForm

COST_FORMS = {
    'labor': LaborCostForm,
    'materials': MaterialCostForm,
    'petty': PettyExpenseForm,
    'transport': TransportCostForm,
}

__all__ = [
    'submitted_fields',
    'QuotationForm',
    'QuotationEditForm',
    'StatusForm',
    'PaymentForm',
    'LaborCostForm',
    'MaterialCostForm',
    'PettyExpenseForm',
    'TransportCostForm',
    'COST_FORMS',
    'JobForm',
    'AssignmentForm',
    'AssignmentUpdateForm',
    'LiquidationForm',
    'PricingSettingsForm',
]
