"""Quotation item payloads.

Items are stored as a JSON array on the quotation. Each entry is either a
catalog product or a free-form manual entry, distinguished by ``type``.
Materials and services on an item are per unit of that item.
"""
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic import ValidationError as PydanticValidationError

from quoting import pricing
from quoting.errors import ValidationError

TOLERANCE = Decimal('0.01')


class MaterialLine(BaseModel):
    model_config = ConfigDict(extra='ignore')

    material_id: Optional[str] = None
    name: Optional[str] = None
    unit: Optional[str] = None
    quantity: Decimal = Field(ge=0)
    unit_price: Decimal = Field(ge=0)


class ServiceLine(BaseModel):
    model_config = ConfigDict(extra='ignore')

    service_id: Optional[str] = None
    name: Optional[str] = None
    hours: Decimal = Field(ge=0)
    hourly_rate: Decimal = Field(ge=0)


class ExtraCharge(BaseModel):
    concept: str
    amount: Decimal = Field(ge=0)


class _ItemBase(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: Optional[str] = None
    quantity: int = Field(gt=0)
    materials: List[MaterialLine] = Field(default_factory=list)
    services: List[ServiceLine] = Field(default_factory=list)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    line_total: Optional[Decimal] = Field(default=None, ge=0)

    def materials_cost(self):
        """Material cost for the whole line (all units)."""
        return pricing.subtotal_materials(self.materials) * self.quantity

    def services_cost(self):
        """Labor cost for the whole line (all units)."""
        return pricing.subtotal_services(self.services) * self.quantity

    def _check_line_total(self):
        expected = pricing.round2(self.unit_price * self.quantity)
        if self.line_total is None:
            self.line_total = expected
        elif abs(self.line_total - expected) > TOLERANCE:
            raise ValueError(
                f'line_total {self.line_total} does not match unit_price x quantity ({expected})')


class CatalogItem(_ItemBase):
    type: Literal['catalog']
    catalog_ref_id: str
    name: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)
    unit_price: Decimal = Field(ge=0)

    @model_validator(mode='after')
    def _reconcile(self):
        self._check_line_total()
        return self


class ManualItem(_ItemBase):
    type: Literal['manual']
    name: str = Field(min_length=1)
    description: Optional[str] = None
    extra_charges: List[ExtraCharge] = Field(default_factory=list)
    margin_percent: Decimal = Field(default=pricing.DEFAULT_MARGIN_PERCENT, ge=0)
    discount_percent: Decimal = Field(default=Decimal('0'), ge=0, le=100)

    @model_validator(mode='after')
    def _reconcile(self):
        computed = pricing.manual_unit_price(
            self.materials, self.services, self.extra_charges,
            self.margin_percent, self.discount_percent,
        )
        if self.unit_price is None:
            self.unit_price = computed
        elif abs(self.unit_price - computed) > TOLERANCE:
            raise ValueError(
                f'unit_price {self.unit_price} does not match materials, services, '
                f'extras and margin ({computed})')
        self._check_line_total()
        return self


Item = Annotated[Union[CatalogItem, ManualItem], Field(discriminator='type')]

_items_adapter = TypeAdapter(List[Item])
_materials_adapter = TypeAdapter(List[MaterialLine])
_services_adapter = TypeAdapter(List[ServiceLine])


def error_details(exc):
    """Flatten a pydantic error into JSON-friendly {loc, message} dicts."""
    return [
        {'loc': [str(part) for part in err['loc']], 'message': err['msg']}
        for err in exc.errors()
    ]


def _validate(adapter, raw, label):
    try:
        return adapter.validate_python(raw or [])
    except PydanticValidationError as e:
        raise ValidationError(f'Invalid {label}.', errors=error_details(e)) from e


def parse_items(raw):
    """Validate a JSON item array into CatalogItem/ManualItem objects."""
    return _validate(_items_adapter, raw, 'items')


def parse_materials(raw):
    return _validate(_materials_adapter, raw, 'materials')


def parse_services(raw):
    return _validate(_services_adapter, raw, 'services')


def dump_items(items):
    return [item.model_dump(mode='json', exclude_none=True) for item in items]
