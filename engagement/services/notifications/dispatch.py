"""
Dispatch client: one multicast per chunk, chunks sent on a small bounded pool.

Chunks are independent: a chunk that raises is logged and counted, the rest still go
out, and nothing is retried in the same cycle (the next scheduled run re-selects
anyone whose flag was not set).
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from engagement.core.constants import MAX_BATCH_SIZE
from engagement.services.notifications.batching import chunk_tokens
from engagement.services.push.base import PushProvider
from engagement.services.push.types import MulticastResult, Notification

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    chunks: int = 0
    failed_chunks: int = 0
    success_count: int = 0
    failure_count: int = 0
    # Tokens the provider reported as sent
    delivered_tokens: set[str] = field(default_factory=set)

    @property
    def tokens_attempted(self) -> int:
        return self.success_count + self.failure_count


def _send_chunk(provider: PushProvider, chunk: list[str], notification: Notification) -> MulticastResult:
    return provider.send_multicast(chunk, notification)


def dispatch_notification(
    tokens: list[str],
    notification: Notification,
    provider: PushProvider,
    max_workers: int = 4,
    batch_size: int = MAX_BATCH_SIZE,
) -> DispatchReport:
    """Send `notification` to every token, one multicast per chunk. Never raises for a chunk failure."""
    report = DispatchReport()
    chunks = chunk_tokens(tokens, batch_size)
    report.chunks = len(chunks)
    if not chunks:
        return report

    workers = max(1, min(max_workers, len(chunks)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="push_dispatch") as executor:
        future_to_chunk = {
            executor.submit(_send_chunk, provider, chunk, notification): (idx, chunk)
            for idx, chunk in enumerate(chunks)
        }
        for future in as_completed(future_to_chunk):
            idx, chunk = future_to_chunk[future]
            try:
                result = future.result()
            except Exception as e:
                report.failed_chunks += 1
                report.failure_count += len(chunk)
                logger.error(
                    "Push chunk %s/%s (%s tokens) via %s failed: %s",
                    idx + 1, len(chunks), len(chunk), provider.provider_id, e,
                    exc_info=True,
                )
                continue
            report.success_count += result.success_count
            report.failure_count += result.failure_count
            report.delivered_tokens.update(r.token for r in result.responses if r.success)
            if result.failure_count:
                logger.info(
                    "Push chunk %s/%s: %s sent, %s failed",
                    idx + 1, len(chunks), result.success_count, result.failure_count,
                )
    return report
