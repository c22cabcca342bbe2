#!/usr/bin/env python3
"""
Run one catalog sync from the command line, without the HTTP service.

Reads the same environment as the service (see catalog_sync.api.config) and
prints each SyncResult as JSON. Suitable for cron.

The product watermark lives in memory only, so a product sweep started here
always begins at INITIAL_WATERMARK unless --since is given.

Usage:
    python scripts/run_sync.py products
    python scripts/run_sync.py all --since 2025-06-01
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent / '.env')

import httpx

from catalog_sync.api.config import get_settings
from catalog_sync.api.main import build_pipeline
from catalog_sync.clients.sql_source import SqlRowSource
from catalog_sync.errors import CatalogSyncError
from catalog_sync.state import SyncState

DOMAINS = ('products', 'pricelists', 'images')


async def run(domains: list[str], since: datetime | None) -> int:
    settings = get_settings()
    source = SqlRowSource(
        database_url=settings.SOURCE_DATABASE_URL,
        product_group=settings.SOURCE_PRODUCT_GROUP,
        image_group=settings.SOURCE_IMAGE_GROUP,
    )
    await source.connect()

    exit_code = 0
    try:
        async with httpx.AsyncClient(timeout=settings.to_sync_options().request_timeout) as http:
            state = SyncState(product_watermark=since or settings.INITIAL_WATERMARK)
            pipeline = build_pipeline(settings, source, http, state=state)
            runs = {
                'products': pipeline.sync_products,
                'pricelists': pipeline.sync_price_lists,
                'images': pipeline.sync_images,
            }

            for domain in domains:
                try:
                    result = await runs[domain]()
                except CatalogSyncError as e:
                    print(json.dumps({'domain': domain, 'error': str(e)}, indent=2))
                    exit_code = 1
                    continue
                print(json.dumps(result.to_dict(), indent=2, default=str))
                if not result.success:
                    exit_code = 1
    finally:
        await source.close()

    return exit_code


def main():
    parser = argparse.ArgumentParser(description='Run a catalog sync once.')
    parser.add_argument('domain', choices=[*DOMAINS, 'all'])
    parser.add_argument(
        '--since',
        type=datetime.fromisoformat,
        default=None,
        help='Product watermark (ISO date/time); defaults to INITIAL_WATERMARK',
    )
    args = parser.parse_args()

    domains = list(DOMAINS) if args.domain == 'all' else [args.domain]
    sys.exit(asyncio.run(run(domains, args.since)))


if __name__ == '__main__':
    main()
