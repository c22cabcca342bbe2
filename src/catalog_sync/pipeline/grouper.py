"""
Row grouping for the catalog sync pipeline.

Folds an ordered sequence of flat rows into an ordered mapping of grouped
records:
- Products: keyed by product code, with deduplicated colors, attributes
  and tax rules
- Price lists: keyed by product code, then by price list ID, with price
  tiers deduplicated by business-partner category

Processing is strictly sequential: the first row seen for a key provides
the identity snapshot and dedup decisions depend on input order.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ..models.documents import (
    Attribute,
    AttributeSet,
    PriceEntry,
    ProductAttribute,
    ProductColor,
    ProductTax,
)
from ..models.grouped import PriceListEntry, PriceListGroup, ProductGroup
from ..models.rows import PriceListRow, ProductRow

TAX_BELOW_THRESHOLD = 'Price < 2500'
TAX_AT_OR_ABOVE_THRESHOLD = 'Price >= 2500'

# Business rule: a 12% rate is always recorded as 18%
TAX_REMAP: dict[str, str] = {
    '12.00': '18.00',
}

DEFAULT_MIN_QTY = 1
DEFAULT_MAX_QTY = 100000

_TWO_PLACES = Decimal('0.01')


def format_tax(value: float | Decimal | None) -> str | None:
    """
    Format a tax rate as text with two decimals, applying TAX_REMAP.

    Returns None for a missing rate so that no tax entry is produced.
    """
    if value is None:
        return None
    # Rounds the decimal text, so 1.005 gives "1.01" where binary-float
    # rounding would give "1.00"
    formatted = str(Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))
    return TAX_REMAP.get(formatted, formatted)


# =============================================================================
# Products
# =============================================================================


def group_products(rows: Iterable[ProductRow]) -> dict[str, ProductGroup]:
    """
    Group product rows by product code.

    Args:
        rows: Flat product rows in source order

    Returns:
        Mapping of product code to ProductGroup, in first-seen order
    """
    groups: dict[str, ProductGroup] = {}

    for row in rows:
        group = groups.get(row.product_code)
        if group is None:
            group = ProductGroup(key=row.product_code, snapshot=row)
            groups[row.product_code] = group

        _add_color(group, row)
        _add_attribute(group, row)
        _add_tax(group, TAX_BELOW_THRESHOLD, row.tax_below_2500)
        _add_tax(group, TAX_AT_OR_ABOVE_THRESHOLD, row.tax_above_2500)

        if row.sub_brand_code and group.sub_brand_code is None:
            group.sub_brand_code = row.sub_brand_code

    return groups


def _add_color(group: ProductGroup, row: ProductRow) -> None:
    if not row.color_code or row.color_code in group.colors:
        return
    group.colors[row.color_code] = ProductColor(
        color_code=row.color_code,
        color_name=row.color_name,
        color=row.color,
        is_active=1,
        shade=row.shade,
        # zero quantities count as unset
        min_qty=row.min_qty or DEFAULT_MIN_QTY,
        max_qty=row.max_qty or DEFAULT_MAX_QTY,
        is_core_color=row.is_core_color,
    )


def _add_attribute(group: ProductGroup, row: ProductRow) -> None:
    if not row.attribute_name or not row.attr_val:
        return
    key = (row.attribute_name, row.attr_val)
    if key in group.attributes:
        return
    group.attributes[key] = ProductAttribute(
        attr_val=row.attr_val,
        is_active=1,
        attribute=Attribute(
            attribute_name=row.attribute_name,
            is_main_attribute=_default_one(row.is_main_attribute),
            is_filter_applicable=_default_one(row.is_filter_applicable),
            attribute_val_type=_default_one(row.attribute_val_type),
            sorting_val=_default_one(row.attr_sorting_val),
            is_active=1,
        ),
        attribute_set=AttributeSet(
            attribute_set_name=row.attribute_set_name,
            is_active=1,
        ),
    )


def _add_tax(group: ProductGroup, label: str, value: float | None) -> None:
    tax_per = format_tax(value)
    if tax_per is None or label in group.taxes:
        return
    group.taxes[label] = ProductTax(tax_per=tax_per, eval_expression=label)


def _default_one(value: int | None) -> int:
    return 1 if value is None else value


# =============================================================================
# Price lists
# =============================================================================


def group_price_lists(rows: Iterable[PriceListRow]) -> dict[str, PriceListGroup]:
    """
    Group price rows by product code, then by price list ID.

    Each price list keeps the first row seen for it as its header, and one
    price tier per business-partner category.

    Args:
        rows: Flat price rows in source order

    Returns:
        Mapping of product code to PriceListGroup, in first-seen order
    """
    groups: dict[str, PriceListGroup] = {}

    for row in rows:
        group = groups.get(row.product_code)
        if group is None:
            group = PriceListGroup(key=row.product_code)
            groups[row.product_code] = group

        entry = group.price_lists.get(row.price_list_id)
        if entry is None:
            entry = PriceListEntry(price_list_id=row.price_list_id, header=row)
            group.price_lists[row.price_list_id] = entry

        if row.bp_category and row.bp_category not in entry.prices:
            entry.prices[row.bp_category] = PriceEntry(
                bp_category=row.bp_category,
                price=row.price,
                mrp=row.mrp,
                is_active=row.price_is_active,
            )

    return groups
