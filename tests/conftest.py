"""
Pytest configuration and shared fixtures.

Key fixtures:
- product_rows: Two products; one with repeating color/attribute rows
- price_list_rows: One product with two price lists and duplicate tiers
- image_rows: Two image entries
- options: SyncOptions with no back-off delay

No database or CRM is required: every collaborator is mocked.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

# Load environment variables
from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)

from catalog_sync.config import SyncOptions
from catalog_sync.models import ImageRow, PriceListRow, ProductRow


def make_product_row(product_code: str = 'A', **overrides) -> ProductRow:
    """ProductRow with representative identity fields."""
    values = {
        'product_code': product_code,
        'product_name': f'Product {product_code}',
        'product_is_active': 1,
        'product_group_code': 'ALPHA',
        'category_name': 'Shirts',
        'style_code': 'ST01',
        'size_code': 'M',
        'division_code': 'DIV1',
        'attribute_set_name': 'Apparel',
        'hsn_code': '6205',
        'brand': 'Acme',
    }
    values.update(overrides)
    return ProductRow(**values)


@pytest.fixture
def product_rows() -> list[ProductRow]:
    """Rows for products A (three rows, two colors) and B (one row)."""
    return [
        make_product_row(
            'A',
            color_code='RED',
            color_name='Red',
            attribute_name='Fabric',
            attr_val='Cotton',
            tax_below_2500=12,
            tax_above_2500=18,
            sub_brand_code='SB1',
        ),
        make_product_row(
            'A',
            color_code='RED',
            color_name='Red',
            attribute_name='Fabric',
            attr_val='Cotton',
            tax_below_2500=12,
            tax_above_2500=18,
        ),
        make_product_row(
            'A',
            color_code='BLUE',
            color_name='Blue',
            attribute_name='Fit',
            attr_val='Slim',
            tax_below_2500=12,
            tax_above_2500=18,
        ),
        make_product_row('B', color_code='BLACK', color_name='Black'),
    ]


@pytest.fixture
def price_list_rows() -> list[PriceListRow]:
    """Product P1 with price lists 10 (two tiers plus a duplicate) and 20."""
    common = {
        'product_code': 'P1',
        'sub_brand_code': 'SB1',
        'bp_product_name': 'Product P1',
        'effective_from': datetime(2024, 4, 1),
        'effective_to': datetime(2025, 3, 31),
        'price_list_is_active': 1,
        'price_is_active': 1,
    }
    return [
        PriceListRow(price_list_id=10, price_list_code='PL10', bp_category='RETAIL', price=100.0, mrp=120.0, **common),
        PriceListRow(price_list_id=10, price_list_code='PL10', bp_category='DEALER', price=90.0, mrp=120.0, **common),
        PriceListRow(price_list_id=10, price_list_code='PL10', bp_category='RETAIL', price=99.0, mrp=120.0, **common),
        PriceListRow(price_list_id=20, price_list_code='PL20', bp_category='RETAIL', price=110.0, mrp=130.0, **common),
    ]


@pytest.fixture
def image_rows() -> list[ImageRow]:
    return [
        ImageRow(sku_code='SKU1', color_code='RED', file_name='sku1_red.jpg', base64_data=''),
        ImageRow(sku_code='SKU2', color_code='BLUE', file_name='sku2_blue.jpg', base64_data=''),
    ]


@pytest.fixture
def options() -> SyncOptions:
    """Default tuning without back-off delay."""
    return SyncOptions(retry_base_delay=0)
