"""
Sync pipeline for catalog data.

Components:
- group_products / group_price_lists: Fold flat rows into grouped records
- build_*_documents: Turn grouped records into CRM documents
- partition: Split documents into delivery batches
- SyncPipeline: Orchestrates fetch -> group -> build -> deliver per domain
"""

from .builder import (
    PRODUCT_FIELDS,
    FieldMapping,
    build_image_documents,
    build_price_list_document,
    build_price_list_documents,
    build_product_document,
    build_product_documents,
    ensure_placeholder_attribute,
)
from .grouper import TAX_REMAP, format_tax, group_price_lists, group_products
from .partitioner import partition
from .pipeline import SyncPipeline, SyncResult

__all__ = [
    # Grouping
    'group_products',
    'group_price_lists',
    'format_tax',
    'TAX_REMAP',
    # Building
    'FieldMapping',
    'PRODUCT_FIELDS',
    'build_product_document',
    'build_product_documents',
    'ensure_placeholder_attribute',
    'build_price_list_document',
    'build_price_list_documents',
    'build_image_documents',
    # Batching
    'partition',
    # Orchestration
    'SyncPipeline',
    'SyncResult',
]
