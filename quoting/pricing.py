"""Quotation pricing math.

Pure functions over ``Decimal``. Nothing here touches the database or the
Flask app, so the services and the draft object share one implementation.

Two ways of pricing exist and only one is authoritative for a quotation:

* items path: every item carries its own ``line_total`` (margin, extras and
  discount already baked in). The quotation subtotal is the sum of those line
  totals; the quotation-level margin is *not* applied again.
* raw path: legacy quotations with no items are priced from flat
  ``materials``/``services`` lists, with the quotation margin applied to the
  pre-tax subtotal.

:func:`quotation_totals` picks the items path whenever items exist.
"""
from collections import namedtuple
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

DEFAULT_IVA_PERCENT = Decimal('19')
DEFAULT_MARGIN_PERCENT = Decimal('30')

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0')
HUNDRED = Decimal('100')

QuotationTotals = namedtuple('QuotationTotals', [
    'subtotal_materials',
    'subtotal_services',
    'subtotal',
    'discount',
    'iva',
    'margin_percent',
    'total',
    'source',
])


def to_decimal(value):
    """Decimal for a money or percentage input. NaN and infinities are invalid."""
    if value is None or value == '':
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if not value.is_finite():
        raise InvalidOperation(f'Not a finite number: {value}')
    return value


def round2(value):
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def subtotal_materials(materials):
    """Sum of quantity x unit price."""
    return sum((to_decimal(m.quantity) * to_decimal(m.unit_price) for m in materials), ZERO)


def subtotal_services(services):
    """Sum of hours x hourly rate."""
    return sum((to_decimal(s.hours) * to_decimal(s.hourly_rate) for s in services), ZERO)


def calculate_iva(subtotal, iva_percent=DEFAULT_IVA_PERCENT):
    return to_decimal(subtotal) * (to_decimal(iva_percent) / HUNDRED)


def calculate_total(subtotal, iva, margin_percent=DEFAULT_MARGIN_PERCENT):
    """Margin on the pre-tax subtotal, then tax. Rounded once, here."""
    with_margin = to_decimal(subtotal) * (1 + to_decimal(margin_percent) / HUNDRED)
    return round2(with_margin + to_decimal(iva))


def calculate_quotation(materials, services, margin_percent=DEFAULT_MARGIN_PERCENT,
                        iva_percent=DEFAULT_IVA_PERCENT):
    """Raw path: price flat materials/services lists."""
    sub_materials = subtotal_materials(materials)
    sub_services = subtotal_services(services)
    subtotal = sub_materials + sub_services
    iva = calculate_iva(subtotal, iva_percent)
    total = calculate_total(subtotal, iva, margin_percent)
    return QuotationTotals(
        subtotal_materials=sub_materials,
        subtotal_services=sub_services,
        subtotal=subtotal,
        discount=ZERO,
        iva=iva,
        margin_percent=to_decimal(margin_percent),
        total=total,
        source='raw',
    )


def manual_unit_price(materials, services, extra_charges=(),
                      margin_percent=DEFAULT_MARGIN_PERCENT, discount_percent=ZERO):
    """Unit price of a manual item: cost plus extras, marked up, then discounted."""
    cost = (
        subtotal_materials(materials)
        + subtotal_services(services)
        + sum((to_decimal(e.amount) for e in extra_charges), ZERO)
    )
    price = cost * (1 + to_decimal(margin_percent) / HUNDRED)
    discount_percent = to_decimal(discount_percent)
    if discount_percent > 0:
        price = price * (1 - discount_percent / HUNDRED)
    return round2(price)


def calculate_from_items(items, discount_percent=ZERO, iva_percent=DEFAULT_IVA_PERCENT,
                         margin_percent=ZERO):
    """Items path: the quotation subtotal is the sum of item line totals.

    ``margin_percent`` is only echoed back; margin already lives in the items.
    Material/service subtotals are the per-unit costs scaled by each item's
    quantity and are informational.
    """
    subtotal = sum((to_decimal(item.line_total) for item in items), ZERO)
    sub_materials = sum(
        (subtotal_materials(item.materials) * item.quantity for item in items), ZERO)
    sub_services = sum(
        (subtotal_services(item.services) * item.quantity for item in items), ZERO)
    discount = subtotal * (to_decimal(discount_percent) / HUNDRED)
    taxable = subtotal - discount
    iva = calculate_iva(taxable, iva_percent)
    return QuotationTotals(
        subtotal_materials=sub_materials,
        subtotal_services=sub_services,
        subtotal=subtotal,
        discount=discount,
        iva=iva,
        margin_percent=to_decimal(margin_percent),
        total=round2(taxable + iva),
        source='items',
    )


def quotation_totals(items, materials=(), services=(), margin_percent=DEFAULT_MARGIN_PERCENT,
                     iva_percent=DEFAULT_IVA_PERCENT, discount_percent=ZERO):
    """The single authoritative pricing entry point."""
    if items:
        return calculate_from_items(items, discount_percent, iva_percent, margin_percent)
    return calculate_quotation(materials, services, margin_percent, iva_percent)


def derive_payment_status(amount_paid, total):
    amount_paid = to_decimal(amount_paid)
    if amount_paid >= to_decimal(total):
        return 'paid'
    if amount_paid > 0:
        return 'partially_paid'
    return 'unpaid'
