"""
Grouped records: the intermediate shape between flat rows and documents.

Child collections are dicts keyed by their dedup key. Dicts keep insertion
order, so iteration follows the order in which each key was first observed.
"""

from dataclasses import dataclass, field

from .documents import PriceEntry, ProductAttribute, ProductColor, ProductTax
from .rows import PriceListRow, ProductRow


@dataclass
class ProductGroup:
    """All rows of one product code folded together."""

    key: str
    snapshot: ProductRow
    colors: dict[str, ProductColor] = field(default_factory=dict)
    attributes: dict[tuple[str, str], ProductAttribute] = field(default_factory=dict)
    taxes: dict[str, ProductTax] = field(default_factory=dict)
    sub_brand_code: str | None = None


@dataclass
class PriceListEntry:
    """One price list of a product: header snapshot plus price tiers by category."""

    price_list_id: int | str
    header: PriceListRow
    prices: dict[str, PriceEntry] = field(default_factory=dict)


@dataclass
class PriceListGroup:
    """All price lists of one product code."""

    key: str
    price_lists: dict[int | str, PriceListEntry] = field(default_factory=dict)
