"""Batch partitioning for bulk delivery endpoints."""

from typing import Sequence, TypeVar

T = TypeVar('T')


def partition(documents: Sequence[T], batch_size: int) -> list[list[T]]:
    """
    Split documents into contiguous batches of at most batch_size.

    Concatenating the batches in order reproduces the input; only the last
    batch may be short, and no batch is empty. Per-record endpoints use
    batch_size=1.

    Raises:
        ValueError: If batch_size is not a positive integer
    """
    if batch_size < 1:
        raise ValueError('batch_size must be a positive integer')
    return [
        list(documents[start:start + batch_size])
        for start in range(0, len(documents), batch_size)
    ]
