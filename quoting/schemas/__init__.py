"""Payload schemas."""
from quoting.schemas.items import (
    MaterialLine,
    ServiceLine,
    ExtraCharge,
    CatalogItem,
    ManualItem,
    parse_items,
    parse_materials,
    parse_services,
    dump_items,
)

__all__ = [
    'MaterialLine',
    'ServiceLine',
    'ExtraCharge',
    'CatalogItem',
    'ManualItem',
    'parse_items',
    'parse_materials',
    'parse_services',
    'dump_items',
]
