"""
In-process sync state.

The product watermark is the lower bound on item update time for the next
product sweep. It lives only in memory: a restart falls back to the initial
value and the next sweep re-sends everything since then. One SyncState is
created at startup and shared by every request; overlapping runs are not
guarded against.

Watermarks are naive datetimes because the source's UpdateDate column is.
"""

from dataclasses import dataclass
from datetime import datetime

DEFAULT_INITIAL_WATERMARK = datetime(2024, 1, 1)


@dataclass
class SyncState:
    """Mutable state carried between sync runs of one process."""

    product_watermark: datetime = DEFAULT_INITIAL_WATERMARK

    def advance_product_watermark(self, to: datetime) -> None:
        """Record the end of a product sweep that finished without failures."""
        self.product_watermark = to
