"""
CRM upsert document models.

Python attribute names are snake_case; the aliases are the CRM's field names,
so documents are serialized for the wire with:

    document.model_dump(by_alias=True, mode='json')
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize with CRM field names, JSON-safe values."""
        return self.model_dump(by_alias=True, mode='json')


# =============================================================================
# Product documents
# =============================================================================


class ProductInfo(_Document):
    """Primary object of a product document."""

    product_code: str = Field(..., alias='ProductCode')
    product_name: str | None = Field(default=None, alias='ProductName')
    is_active: int | None = Field(default=None, alias='IsActive')
    group_code: str | None = Field(default=None, alias='GroupCode')
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
    sku: str = Field(..., alias='Sku')
    popularity: int = Field(..., alias='Popularity')
    hide_item: int = Field(..., alias='HideItem')
    sort_by: int = Field(..., alias='SortBy')
    pre_booking: int = Field(..., alias='PreBooking')
    tag: str | None = Field(default=None, alias='Tag')


class ProductColor(_Document):
    color_code: str = Field(..., alias='ColorCode')
    color_name: str | None = Field(default=None, alias='ColorName')
    color: str | None = Field(default=None, alias='Color')
    is_active: int = Field(default=1, alias='IsActive')
    shade: str | None = Field(default=None, alias='Shade')
    min_qty: int | float = Field(..., alias='Min_Qty')
    max_qty: int | float = Field(..., alias='Max_Qty')
    is_core_color: int | None = Field(default=None, alias='IsCoreColor')


class Attribute(_Document):
    attribute_name: str = Field(..., alias='AttributeName')
    is_main_attribute: int = Field(default=1, alias='IsMainAttribute')
    is_filter_applicable: int = Field(default=1, alias='IsFilterApplicable')
    attribute_val_type: int = Field(default=1, alias='AttributeValType')
    sorting_val: int = Field(default=1, alias='SortingVal')
    is_active: int = Field(default=1, alias='IsActive')


class AttributeSet(_Document):
    attribute_set_name: str | None = Field(default=None, alias='AttributeSetName')
    is_active: int = Field(default=1, alias='IsActive')


class ProductAttribute(_Document):
    attr_val: str = Field(..., alias='AttrVal')
    is_active: int = Field(default=1, alias='IsActive')
    attribute: Attribute = Field(..., alias='Attribute')
    attribute_set: AttributeSet = Field(..., alias='AttributeSet')


class ProductTax(_Document):
    tax_per: str = Field(..., alias='TaxPer')
    eval_expression: str = Field(..., alias='EvalExpression')


class ProductSubBrand(_Document):
    sub_brand_code: str = Field(..., alias='SubBrandCode')
    bp_product_name: str | None = Field(default=None, alias='BPProductName')
    display_name: str | None = Field(default=None, alias='DisplayName')
    is_active: int = Field(default=1, alias='IsActive')
    sku: str | None = Field(default=None, alias='SKU')
    alt_sku: str | None = Field(default=None, alias='AltSKU')


class ProductDefault(_Document):
    group_code: str | None = Field(default=None, alias='GroupCode')
    style_code: str | None = Field(default=None, alias='StyleCode')
    size_code: str | None = Field(default=None, alias='SizeCode')
    color_code: str | None = Field(default=None, alias='ColorCode')
    is_active: int = Field(default=1, alias='IsActive')
    division_code: str | None = Field(default=None, alias='DivisionCode')


class ProductGroupLink(_Document):
    group_code: str | None = Field(default=None, alias='GroupCode')
    is_active: int = Field(default=1, alias='IsActive')
    sorting_val: int = Field(default=1, alias='SortingVal')


class ProductGroupGrouping(_Document):
    grouping_name: str | None = Field(default=None, alias='GroupingName')
    group_code: str | None = Field(default=None, alias='GroupCode')
    is_active: int = Field(default=1, alias='IsActive')


class ProductDocument(_Document):
    """
    Product upsert payload: one per product code.

    ProductTaxes is a list holding a single list of tax rules; the CRM
    expects the extra nesting level.
    """

    product: ProductInfo = Field(..., alias='Product')
    colors: list[ProductColor] = Field(default_factory=list, alias='ProductColors')
    attributes: list[ProductAttribute] = Field(default_factory=list, alias='ProductAttributes')
    taxes: list[list[ProductTax]] = Field(default_factory=lambda: [[]], alias='ProductTaxes')
    sub_brands: list[ProductSubBrand] = Field(default_factory=list, alias='ProductSubBrands')
    defaults: list[ProductDefault] = Field(default_factory=list, alias='ProductDefaults')
    product_groups: list[ProductGroupLink] = Field(
        default_factory=list, alias='PROD_PRODUCTGROUP'
    )
    groupings: list[ProductGroupGrouping] = Field(
        default_factory=list, alias='ProductGroupGroupping'
    )

    @property
    def code(self) -> str:
        return self.product.product_code


# =============================================================================
# Price list documents
# =============================================================================


class PriceEntry(_Document):
    bp_category: str = Field(..., alias='BPCategory')
    price: float | None = Field(default=None, alias='Price')
    mrp: float | None = Field(default=None, alias='MRP')
    is_active: int | None = Field(default=None, alias='IsActive')


class PriceListHeader(_Document):
    price_list_id: int | str = Field(..., alias='PriceListID')
    sub_brand_code: str | None = Field(default=None, alias='SubBrandCode')
    bp_product_name: str | None = Field(default=None, alias='BPProductName')
    # "PriceLisCode" is the CRM's spelling
    price_list_code: str | None = Field(default=None, alias='PriceLisCode')
    effective_from: datetime | None = Field(default=None, alias='EffectiveFrom')
    effective_to: datetime | None = Field(default=None, alias='EffectiveTo')
    is_active: int | None = Field(default=None, alias='IsActive')
    prices: list[PriceEntry] = Field(default_factory=list, alias='Prices')


class PriceListDocument(_Document):
    """Price list upsert payload: every price list of one product."""

    product_code: str = Field(..., alias='ProductCode')
    price_lists: list[PriceListHeader] = Field(default_factory=list, alias='PriceLists')

    @property
    def code(self) -> str:
        return self.product_code


# =============================================================================
# Image documents
# =============================================================================


class ImageDocument(_Document):
    sku_code: str = Field(..., alias='skuCode')
    color_code: str | None = Field(default=None, alias='ColorCode')
    file_name: str | None = Field(default=None, alias='fileName')
    description: str | None = Field(default=None, alias='Description')
    base64_data: str | None = Field(default=None, alias='base64Data')

    @property
    def code(self) -> str:
        return self.sku_code
