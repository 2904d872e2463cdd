"""Split token sets into provider-sized chunks."""
from collections.abc import Sequence

from engagement.core.constants import MAX_BATCH_SIZE


def chunk_tokens(tokens: Sequence[str], size: int = MAX_BATCH_SIZE) -> list[list[str]]:
    """
    Partition tokens into consecutive chunks of at most `size`.
    Every token lands in exactly one chunk; the last chunk may be short; [] -> [].
    """
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    return [list(tokens[i:i + size]) for i in range(0, len(tokens), size)]


def cap_recipients(tokens: Sequence[str], limit: int) -> list[str]:
    """Safety ceiling for manual broadcasts: keep only the first `limit` tokens."""
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    return list(tokens[:limit])
