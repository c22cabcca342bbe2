"""Data models for the catalog sync service."""

from .documents import (
    Attribute,
    AttributeSet,
    ImageDocument,
    PriceEntry,
    PriceListDocument,
    PriceListHeader,
    ProductAttribute,
    ProductColor,
    ProductDefault,
    ProductDocument,
    ProductGroupGrouping,
    ProductGroupLink,
    ProductInfo,
    ProductSubBrand,
    ProductTax,
)
from .grouped import PriceListEntry, PriceListGroup, ProductGroup
from .rows import ImageRow, PriceListRow, ProductRow

__all__ = [
    # Rows
    'ProductRow',
    'PriceListRow',
    'ImageRow',
    # Grouped records
    'ProductGroup',
    'PriceListGroup',
    'PriceListEntry',
    # Documents
    'ProductDocument',
    'ProductInfo',
    'ProductColor',
    'ProductAttribute',
    'Attribute',
    'AttributeSet',
    'ProductTax',
    'ProductSubBrand',
    'ProductDefault',
    'ProductGroupLink',
    'ProductGroupGrouping',
    'PriceListDocument',
    'PriceListHeader',
    'PriceEntry',
    'ImageDocument',
]
