"""
Configuration management for the catalog sync service.

Loads process-wide settings from environment variables with sensible defaults,
and defines the tuning options consumed by the sync and delivery pipelines.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / '.env'
if _env_file.exists():
    load_dotenv(_env_file)


class Config:
    """Configuration settings loaded from environment."""

    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
    LOG_JSON: bool = os.getenv('LOG_JSON', 'false').lower() in ('1', 'true', 'yes')


@dataclass(frozen=True)
class SyncOptions:
    """
    Tuning knobs for a sync run.

    Attributes:
        page_size: Rows fetched per product page
        concurrency: Delivery units in flight at once
        batch_size: Documents per call on bulk endpoints
        max_attempts: Delivery attempts per unit, including the first
        retry_base_delay: Seconds; attempt n waits base * n before retrying
        request_timeout: Seconds allowed for a single HTTP call
        raise_on_total_failure: Treat a run where every unit failed as an error
    """

    page_size: int = 500
    concurrency: int = 5
    batch_size: int = 200
    max_attempts: int = 3
    retry_base_delay: float = 1.0
    request_timeout: float = 30.0
    raise_on_total_failure: bool = True

    def __post_init__(self) -> None:
        for name in ('page_size', 'concurrency', 'batch_size', 'max_attempts'):
            if getattr(self, name) < 1:
                raise ValueError(f'{name} must be a positive integer')
        if self.retry_base_delay < 0:
            raise ValueError('retry_base_delay must not be negative')
        if self.request_timeout <= 0:
            raise ValueError('request_timeout must be positive')


# Singleton config instance
config = Config()
