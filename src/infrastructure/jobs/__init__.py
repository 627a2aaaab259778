"""Background jobs running inside the service process.

Exports:
    UsageDispatcher: Bounded queue feeding UsageTracker.process().
    BlockCleanupJob: Periodic sweep of expired auto-blocks.
"""

from src.infrastructure.jobs.block_cleanup import BlockCleanupJob
from src.infrastructure.jobs.usage_dispatcher import UsageDispatcher

__all__ = [
    "BlockCleanupJob",
    "UsageDispatcher",
]
