from __future__ import annotations

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")

# Zendesk's create_many endpoint accepts at most 100 tickets per request.
BATCH_SIZE = 100

def make_batches(items: Sequence[T], size: int = BATCH_SIZE) -> Iterator[List[T]]:
    """Split items into consecutive lists of at most `size`, keeping their order."""
    if size < 1:
        raise ValueError("batch size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
