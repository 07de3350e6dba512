"""Real cost records and budget vs real reconciliation."""
from decimal import Decimal

import pytest

from quoting.errors import ValidationError, NotFoundError
from quoting.models import Quotation, RealLaborRecord, PettyExpense
from quoting.services import CostService, ReconciliationService, QuotationService


@pytest.fixture
def batch(make_quotation, items):
    """Fifteen identical wardrobes."""
    return make_quotation(item_list=[items.manual(quantity=15)])


def _labor(quotation, scope='per_unit', applied_units=None, **fields):
    data = {'calculation_type': 'amount', 'manual_amount': '100', 'scope': scope}
    if applied_units is not None:
        data['applied_units'] = applied_units
    data.update(fields)
    return CostService.record_cost(quotation.id, 'labor', data)


def _actual_labor(quotation):
    return ReconciliationService.actual(quotation)['labor']


def test_per_unit_scales_by_unit_quantity(batch):
    _labor(batch, 'per_unit')
    assert _actual_labor(batch) == Decimal('1500')


def test_total_counts_once(batch):
    _labor(batch, 'total')
    assert _actual_labor(batch) == Decimal('100')


def test_partial_rate_based_scales_by_applied_units(batch):
    _labor(batch, 'partial', 5, calculation_type='hours', hours_worked='2', hourly_rate='50')
    assert _actual_labor(batch) == Decimal('500')


def test_partial_lump_sum_counts_once(batch):
    _labor(batch, 'partial', 5)
    assert _actual_labor(batch) == Decimal('100')


@pytest.mark.parametrize('scope,units,expected', [
    ('per_unit', None, 7),
    ('total', None, 1),
    ('partial', 3, 3),
])
def test_scope_multiplier_for_rate_based_records(scope, units, expected):
    record = RealLaborRecord(calculation_type='hours', scope=scope, applied_units=units)
    assert ReconciliationService.scope_multiplier(record, 7) == expected


def test_scope_multiplier_for_lump_sums():
    record = PettyExpense(scope='partial', applied_units=3)
    assert ReconciliationService.scope_multiplier(record, 7) == 1


@pytest.mark.parametrize('units', [0, 16, None])
def test_partial_applied_units_validation(batch, units):
    with pytest.raises(ValidationError):
        _labor(batch, 'partial', units)


def test_unknown_scope(batch):
    with pytest.raises(ValidationError):
        _labor(batch, 'half')


def test_unit_quantity_rule(make_quotation, items):
    quo = make_quotation(item_list=[
        items.catalog(item_id='a', quantity=1),
        items.catalog(item_id='b', quantity=3),
        items.catalog(item_id='c', quantity=5),
    ])
    assert quo.unit_quantity == 3
    assert Quotation(items=[]).unit_quantity == 1
    assert make_quotation(item_list=[items.catalog(quantity=1)]).unit_quantity == 1


def test_budget_from_items(batch):
    budget = ReconciliationService.budget(batch)
    assert budget['labor'] == Decimal('300000')
    assert budget['materials'] == Decimal('900000')


def test_budget_for_legacy_quotation(staff):
    quo = QuotationService.create_quotation(
        company='kubica',
        client_name='Legacy Client',
        materials_data=[{'quantity': '1', 'unit_price': '1000000'}],
        services_data=[{'hours': '100', 'hourly_rate': '5000'}],
    )
    budget = ReconciliationService.budget(quo)
    assert budget == {'labor': Decimal('500000.00'), 'materials': Decimal('1000000.00')}
    assert quo.unit_quantity == 1


def test_compare(batch):
    _labor(batch, 'per_unit', manual_amount='25000')
    CostService.record_cost(batch.id, 'materials', {
        'material_name': 'Melamine board',
        'budgeted_quantity': '2', 'budgeted_unit_price': '30000',
        'real_quantity': '2', 'real_unit_price': '33000',
    })
    CostService.record_cost(batch.id, 'petty', {'description': 'Screws', 'amount': '5000', 'scope': 'total'})
    CostService.record_cost(batch.id, 'transport', {'description': 'Truck', 'cost': '40000', 'scope': 'total'})

    result = ReconciliationService.compare(batch.id)
    assert result['unit_quantity'] == 15
    assert result['budget']['labor'] == '300000.00'
    assert result['actual']['labor'] == '375000.00'
    assert result['variance']['labor'] == {'amount': '75000.00', 'percent': '25.00'}
    assert result['actual']['materials'] == '990000.00'
    assert result['variance']['materials'] == {'amount': '90000.00', 'percent': '10.00'}
    assert result['unbudgeted'] == {'petty': '5000.00', 'transport': '40000.00'}
    assert result['actual']['total'] == '1410000.00'
    # 15 x 104000 = 1,560,000 + 19% IVA
    assert result['total'] == '1856400.00'
    assert result['budgeted_profit'] == '360000.00'
    assert result['real_profit'] == '446400.00'
    assert result['variance']['base'] == {'amount': '165000.00', 'percent': '13.75'}
    assert result['profit_difference'] == '86400.00'
    assert result['records']['labor'][0]['multiplier'] == 15


def test_compare_with_no_records(batch):
    result = ReconciliationService.compare(batch.id)
    assert result['actual']['total'] == '0.00'
    assert result['variance']['labor']['percent'] == '-100.00'


def test_zero_budget_variance_percent_is_zero(make_quotation, items):
    quo = make_quotation(item_list=[items.catalog(unit_price='1000')])
    _labor(quo, 'total')
    result = ReconciliationService.compare(quo.id)
    assert result['variance']['labor'] == {'amount': '100.00', 'percent': '0.00'}


def test_compare_unknown_quotation(staff):
    with pytest.raises(NotFoundError):
        ReconciliationService.compare('missing')


def test_profitability_stats(staff, make_quotation, items):
    good = make_quotation(item_list=[items.catalog(unit_price='10000')])
    bad = make_quotation(item_list=[items.catalog(unit_price='1000')])
    make_quotation()
    for quo in (good, bad):
        QuotationService.change_status(quo.id, 'accepted')
    _labor(good, 'total', manual_amount='2000')
    _labor(bad, 'total', manual_amount='5000')

    stats = ReconciliationService.profitability_stats()
    assert stats['projects_count'] == 2
    assert stats['projects_with_costs'] == 2
    assert stats['profitable'] == 1
    assert stats['loss_making'] == 1
    assert [p['quotation_id'] for p in stats['projects']] == [good.id, bad.id]
    assert stats['projects'][0]['profit'] == Decimal('9900.00')
    assert stats['projects'][1]['profit'] == Decimal('-3810.00')
    assert stats['total_profit'] == Decimal('6090.00')
    assert stats['average_profit'] == Decimal('3045.00')


# --- Record management -------------------------------------------------

def test_labor_hours_total_paid(batch, staff):
    record = CostService.record_cost(batch.id, 'labor', {
        'worker_id': staff.worker.id, 'calculation_type': 'hours',
        'hours_worked': '8', 'hourly_rate': '4500',
    })
    assert record.total_paid == Decimal('36000.00')
    assert record.scope == 'per_unit'


def test_labor_amount_requires_manual_amount(batch):
    with pytest.raises(ValidationError):
        CostService.record_cost(batch.id, 'labor', {'calculation_type': 'amount'})


def test_update_keeps_unsent_fields(batch):
    record = CostService.record_cost(batch.id, 'petty', {'description': 'Glue', 'amount': '3000'})
    record = CostService.update_cost('petty', record.id, {'amount': '3500'})
    assert record.description == 'Glue'
    assert record.amount == Decimal('3500')


def test_update_rejects_invalid_scope_without_changes(batch):
    record = CostService.record_cost(batch.id, 'transport', {'description': 'Van', 'cost': '20000'})
    with pytest.raises(ValidationError):
        CostService.update_cost('transport', record.id, {'scope': 'partial', 'cost': '1'})
    assert CostService.list_costs(batch.id, 'transport')[0].cost == Decimal('20000')


def test_petty_requires_description(batch):
    with pytest.raises(ValidationError):
        CostService.record_cost(batch.id, 'petty', {'amount': '10'})


def test_delete_cost(batch):
    record = CostService.record_cost(batch.id, 'petty', {'description': 'Sandpaper', 'amount': '900'})
    CostService.delete_cost('petty', record.id)
    assert CostService.list_costs(batch.id, 'petty') == []


def test_unknown_kind(batch):
    with pytest.raises(ValidationError):
        CostService.list_costs(batch.id, 'rent')


def test_non_finite_amount_is_rejected(batch):
    with pytest.raises(ValidationError):
        CostService.record_cost(batch.id, 'petty', {'description': 'Glue', 'amount': 'NaN'})
    assert PettyExpense.query.count() == 0
