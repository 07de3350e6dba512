"""In-progress quotation ("cart") as an explicit value object.

A draft is built up by the client between requests and handed to
``QuotationService.create_from_draft``. It serializes to JSON so callers can
keep it wherever they keep session data; nothing here is global.
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from quoting import pricing
from quoting.errors import ValidationError
from quoting.schemas.items import Item, parse_items, error_details


class ClientSnapshot(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class QuotationDraft(BaseModel):
    company: str
    client: Optional[ClientSnapshot] = None
    items: List[Item] = Field(default_factory=list)
    discount_percent: Decimal = Field(default=Decimal('0'), ge=0, le=100)
    notes: Optional[str] = None

    def add_item(self, payload):
        """Return a new draft with one more item (payload is a JSON dict)."""
        item = parse_items([payload])[0]
        return self.model_copy(update={'items': [*self.items, item]})

    def remove_item(self, item_id):
        return self.model_copy(update={'items': [i for i in self.items if i.id != item_id]})

    def update_quantity(self, item_id, quantity):
        """Change an item's quantity; zero or less removes it."""
        if quantity <= 0:
            return self.remove_item(item_id)
        items = []
        for item in self.items:
            if item.id == item_id:
                data = item.model_dump(mode='json', exclude={'line_total'})
                data['quantity'] = quantity
                item = parse_items([data])[0]
            items.append(item)
        return self.model_copy(update={'items': items})

    def totals(self, iva_percent=pricing.DEFAULT_IVA_PERCENT):
        return pricing.calculate_from_items(self.items, self.discount_percent, iva_percent)

    def to_json(self):
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data):
        try:
            return cls.model_validate_json(data)
        except PydanticValidationError as e:
            raise ValidationError('Invalid draft.', errors=error_details(e)) from e

    @classmethod
    def from_payload(cls, data):
        try:
            return cls.model_validate(data or {})
        except PydanticValidationError as e:
            raise ValidationError('Invalid draft.', errors=error_details(e)) from e
