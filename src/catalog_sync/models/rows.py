"""
Flat row models produced by the SQL source.

Field aliases match the column names selected by the source queries, so a
row mapping from SQLAlchemy validates directly:

    ProductRow.model_validate(dict(row_mapping))

Unknown columns are ignored; every field except the grouping key is optional.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _Row(BaseModel):
    # Numeric codes (e.g. HSN codes) arrive as numbers from some drivers
    model_config = ConfigDict(
        populate_by_name=True,
        extra='ignore',
        frozen=True,
        coerce_numbers_to_str=True,
    )


class ProductRow(_Row):
    """One denormalized product row: identity fields plus repeating groups."""

    # Identity / descriptive fields (identical for every row of a product)
    product_code: str = Field(..., alias='ProductCode')
    product_name: str | None = Field(default=None, alias='ProductName')
    product_is_active: int | None = Field(default=None, alias='ProductIsActive')
    product_group_code: str | None = Field(default=None, alias='ProductGroupCode')
    short_desc: str | None = Field(default=None, alias='ShortDesc')
    detailed_desc: str | None = Field(default=None, alias='DetailedDesc')
    category_name: str | None = Field(default=None, alias='CategoryName')
    style_code: str | None = Field(default=None, alias='StyleCode')
    size_code: str | None = Field(default=None, alias='SizeCode')
    division_code: str | None = Field(default=None, alias='DivisionCode')
    uom: str | None = Field(default=None, alias='UOM')
    attribute_set_name: str | None = Field(default=None, alias='AttributeSetName')
    size_group: str | None = Field(default=None, alias='SizeGroup')
    hsn_code: str | None = Field(default=None, alias='HSNCode')
    brand: str | None = Field(default=None, alias='Brand')
    sal_pack_un: float | None = Field(default=None, alias='SalPackUn')
    default_warehouse: str | None = Field(default=None, alias='DfltWH')

    # Color repeating group
    color_code: str | None = Field(default=None, alias='ColorCode')
    color_name: str | None = Field(default=None, alias='ColorName')
    color: str | None = Field(default=None, alias='Color')
    shade: str | None = Field(default=None, alias='Shade')
    min_qty: int | float | None = Field(default=None, alias='Min_Qty')
    max_qty: int | float | None = Field(default=None, alias='Max_Qty')
    is_core_color: int | None = Field(default=None, alias='IsCoreColor')

    # Attribute repeating group
    attribute_name: str | None = Field(default=None, alias='AttributeName')
    attr_val: str | None = Field(default=None, alias='AttrVal')
    is_main_attribute: int | None = Field(default=None, alias='IsMainAttribute')
    is_filter_applicable: int | None = Field(default=None, alias='IsFilterApplicable')
    attribute_val_type: int | None = Field(default=None, alias='AttributeValType')
    attr_sorting_val: int | None = Field(default=None, alias='AttrSortingVal')

    # Tax tiers
    tax_below_2500: float | None = Field(default=None, alias='TaxBelow2500')
    tax_above_2500: float | None = Field(default=None, alias='TaxAbove2500')

    sub_brand_code: str | None = Field(default=None, alias='SubBrandCode')


class PriceListRow(_Row):
    """One price entry inside one price list for one product."""

    product_code: str = Field(..., alias='ProductCode')

    # Price list header
    price_list_id: int | str = Field(..., alias='PriceListID')
    sub_brand_code: str | None = Field(default=None, alias='SubBrandCode')
    bp_product_name: str | None = Field(default=None, alias='BPProductName')
    price_list_code: str | None = Field(default=None, alias='PriceListCode')
    effective_from: datetime | None = Field(default=None, alias='EffectiveFrom')
    effective_to: datetime | None = Field(default=None, alias='EffectiveTo')
    price_list_is_active: int | None = Field(default=None, alias='PriceListIsActive')

    # Price tier
    bp_category: str | None = Field(default=None, alias='BPCategory')
    price: float | None = Field(default=None, alias='Price')
    mrp: float | None = Field(default=None, alias='MRP')
    price_is_active: int | None = Field(default=None, alias='PriceIsActive')


class ImageRow(_Row):
    """One image entry for a SKU/color."""

    sku_code: str = Field(..., alias='skuCode')
    color_code: str | None = Field(default=None, alias='ColorCode')
    file_name: str | None = Field(default=None, alias='fileName')
    description: str | None = Field(default=None, alias='Description')
    base64_data: str | None = Field(default=None, alias='base64Data')
