"""
Document building for the catalog sync pipeline.

Turns grouped records into CRM upsert documents. The product primary object
is driven by a declarative field-mapping table (PRODUCT_FIELDS), so every
source field, derived field and constant default is listed in one place.
"""

from dataclasses import dataclass
from typing import Any, Iterable

from ..models.documents import (
    Attribute,
    AttributeSet,
    ImageDocument,
    PriceListDocument,
    PriceListHeader,
    ProductAttribute,
    ProductDefault,
    ProductDocument,
    ProductGroupGrouping,
    ProductGroupLink,
    ProductInfo,
    ProductSubBrand,
)
from ..models.grouped import PriceListGroup, ProductGroup
from ..models.rows import ImageRow, ProductRow

PLACEHOLDER_ATTRIBUTE_NAME = 'General'
PLACEHOLDER_ATTRIBUTE_VALUE = 'Default'

_UNSET = object()


@dataclass(frozen=True)
class FieldMapping:
    """
    Maps one snapshot attribute onto one field of the product primary object.

    - target: ProductInfo field name
    - source: ProductRow attribute to read (ignored when constant is set)
    - constant: fixed value that row data never overrides
    - default: value used when the source attribute is None
    """

    target: str
    source: str | None = None
    constant: Any = _UNSET
    default: Any = None

    def resolve(self, row: ProductRow) -> Any:
        if self.constant is not _UNSET:
            return self.constant
        value = getattr(row, self.source or self.target)
        return self.default if value is None else value


PRODUCT_FIELDS: tuple[FieldMapping, ...] = (
    FieldMapping('product_code'),
    FieldMapping('product_name'),
    FieldMapping('is_active', source='product_is_active'),
    FieldMapping('group_code', source='product_group_code'),
    FieldMapping('short_desc'),
    FieldMapping('detailed_desc'),
    FieldMapping('category_name'),
    FieldMapping('style_code'),
    FieldMapping('size_code'),
    FieldMapping('division_code'),
    FieldMapping('uom'),
    FieldMapping('attribute_set_name'),
    FieldMapping('size_group'),
    FieldMapping('hsn_code'),
    FieldMapping('brand'),
    FieldMapping('sal_pack_un'),
    # The CRM assigns warehouses itself
    FieldMapping('default_warehouse', constant=None),
    FieldMapping('sku', source='product_code'),
    FieldMapping('popularity', constant=0),
    FieldMapping('hide_item', constant=0),
    FieldMapping('sort_by', constant=0),
    FieldMapping('pre_booking', constant=1),
    FieldMapping('tag', source='product_name'),
)


def build_product_info(row: ProductRow) -> ProductInfo:
    """Apply PRODUCT_FIELDS to an identity snapshot."""
    return ProductInfo(**{m.target: m.resolve(row) for m in PRODUCT_FIELDS})


# =============================================================================
# Products
# =============================================================================


def build_product_document(group: ProductGroup) -> ProductDocument:
    """
    Build the product document for one grouped record.

    The attribute array is left as grouped; ensure_placeholder_attribute()
    fills it in once all documents of a batch are built.
    """
    snapshot = group.snapshot
    colors = list(group.colors.values())

    sub_brands = []
    if group.sub_brand_code:
        sub_brands.append(
            ProductSubBrand(
                sub_brand_code=group.sub_brand_code,
                bp_product_name=snapshot.product_name,
                display_name=snapshot.product_name,
                is_active=1,
                sku=None,
                alt_sku=None,
            )
        )

    return ProductDocument(
        product=build_product_info(snapshot),
        colors=colors,
        attributes=list(group.attributes.values()),
        taxes=[list(group.taxes.values())],
        sub_brands=sub_brands,
        defaults=[
            ProductDefault(
                group_code=snapshot.product_group_code,
                style_code=snapshot.style_code,
                size_code=snapshot.size_code,
                color_code=colors[0].color_code if colors else None,
                is_active=1,
                division_code=snapshot.division_code,
            )
        ],
        product_groups=[
            ProductGroupLink(
                group_code=snapshot.product_group_code,
                is_active=1,
                sorting_val=1,
            )
        ],
        groupings=[
            ProductGroupGrouping(
                grouping_name=snapshot.category_name,
                group_code=snapshot.product_group_code,
                is_active=1,
            )
        ],
    )


def placeholder_attribute(attribute_set_name: str | None) -> ProductAttribute:
    """The generic attribute given to products that have none."""
    return ProductAttribute(
        attr_val=PLACEHOLDER_ATTRIBUTE_VALUE,
        is_active=1,
        attribute=Attribute(
            attribute_name=PLACEHOLDER_ATTRIBUTE_NAME,
            is_main_attribute=1,
            is_filter_applicable=0,
            attribute_val_type=1,
            sorting_val=1,
            is_active=1,
        ),
        attribute_set=AttributeSet(
            attribute_set_name=attribute_set_name,
            is_active=1,
        ),
    )


def ensure_placeholder_attribute(documents: Iterable[ProductDocument]) -> None:
    """
    Give every document without attributes exactly one placeholder attribute.

    The CRM rejects products with an empty attribute array. Must run after
    grouping is complete so it sees the final deduplicated attributes.
    """
    for document in documents:
        if not document.attributes:
            document.attributes.append(
                placeholder_attribute(document.product.attribute_set_name)
            )


def build_product_documents(groups: dict[str, ProductGroup]) -> list[ProductDocument]:
    """Build product documents in group order, placeholder rule applied."""
    documents = [build_product_document(group) for group in groups.values()]
    ensure_placeholder_attribute(documents)
    return documents


# =============================================================================
# Price lists
# =============================================================================


def build_price_list_document(group: PriceListGroup) -> PriceListDocument:
    """Flatten one product's price lists into header objects with nested prices."""
    headers = []
    for entry in group.price_lists.values():
        header = entry.header
        headers.append(
            PriceListHeader(
                price_list_id=entry.price_list_id,
                sub_brand_code=header.sub_brand_code,
                bp_product_name=header.bp_product_name,
                price_list_code=header.price_list_code,
                effective_from=header.effective_from,
                effective_to=header.effective_to,
                is_active=header.price_list_is_active,
                prices=list(entry.prices.values()),
            )
        )
    return PriceListDocument(product_code=group.key, price_lists=headers)


def build_price_list_documents(groups: dict[str, PriceListGroup]) -> list[PriceListDocument]:
    return [build_price_list_document(group) for group in groups.values()]


# =============================================================================
# Images
# =============================================================================


def build_image_documents(rows: Iterable[ImageRow]) -> list[ImageDocument]:
    """One document per row; rows are expected to be unique already."""
    return [
        ImageDocument(
            sku_code=row.sku_code,
            color_code=row.color_code,
            file_name=row.file_name,
            description=row.description,
            base64_data=row.base64_data,
        )
        for row in rows
    ]
