# utils/batching_utils.py

"""
Batching utility for processing sequences in chunks.

Embedding servers cap the number of inputs per request, so the vector index
sends chunk texts in fixed-size batches.
"""

from typing import Sequence, Any, Iterable


def batched(seq: Sequence[Any], batch_size: int) -> Iterable[Sequence[Any]]:
    """
    Split a sequence into fixed-size batches.

    Args:
        seq: Input sequence (list, tuple, etc.)
        batch_size: Maximum size of each batch

    Yields:
        Consecutive slices of the input sequence
        The last batch may be smaller than batch_size

    Example:
        >>> for batch in batched(list(range(7)), batch_size=3):
        ...     print(batch)
        [0, 1, 2]
        [3, 4, 5]
        [6]
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    for i in range(0, len(seq), batch_size):
        yield seq[i : i + batch_size]
