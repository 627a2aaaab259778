"""Admission-control container (composition root).

Builds every collaborator of the admission layer from Settings and owns
their lifecycle. Nothing here is a module-level singleton: the FastAPI
lifespan (or any other host) creates one container at startup and closes
it at shutdown.

Lifecycle:
    container = AdmissionContainer.create(get_settings())
    await container.start()    # dispatcher worker + block cleanup loop
    ...
    await container.aclose()   # drain tracking, close Redis, dispose engine
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from redis.asyncio import ConnectionPool, Redis

from src.application.services.admission_policy import AdmissionPolicy
from src.application.services.admission_service import AdmissionService
from src.application.services.usage_tracker import UsageTracker
from src.domain.value_objects.auto_block_thresholds import AutoBlockThresholds
from src.infrastructure.cache import LookupCache, RedisCacheAdapter
from src.infrastructure.jobs import BlockCleanupJob, UsageDispatcher
from src.infrastructure.logging import ConsoleAdapter
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.repositories import (
    IPAbuseRepository,
    UsageEventRepository,
)
from src.infrastructure.rate_limit import (
    TIER_POLICIES,
    RedisStorage,
    SlidingWindowAdapter,
)
from src.infrastructure.rate_limit.config import (
    API_KEY_WINDOW_SECONDS,
    DEFAULT_API_KEY_RATE_LIMIT,
)

if TYPE_CHECKING:
    from src.core.config import Settings
    from src.domain.protocols.logger_protocol import LoggerProtocol


def create_redis_client(settings: Settings) -> Redis:
    """Build a pooled async Redis client from settings.

    Args:
        settings: Application settings.

    Returns:
        Redis: Client sharing one connection pool.
    """
    pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        decode_responses=False,
        socket_connect_timeout=settings.redis_socket_timeout,
        socket_timeout=settings.redis_socket_timeout,
        retry_on_timeout=True,
        socket_keepalive=True,
    )
    return Redis(connection_pool=pool)


def create_logger(settings: Settings) -> LoggerProtocol:
    """Build the structured logger.

    Human-readable output in development, JSON everywhere else.
    """
    return ConsoleAdapter(
        use_json=not settings.is_development,
        level=settings.log_level,
    )


def thresholds_from_settings(settings: Settings) -> AutoBlockThresholds:
    """Build auto-block thresholds from settings."""
    return AutoBlockThresholds(
        rate_limit_violations=settings.auto_block_rate_limit_violations,
        invalid_inputs=settings.auto_block_invalid_inputs,
        repeat_offender_violations=settings.auto_block_repeat_offender_violations,
        base_block_seconds=settings.auto_block_base_seconds,
    )


@dataclass(kw_only=True)
class AdmissionContainer:
    """Owns the clients and services of the admission layer.

    Attributes:
        redis: Shared async Redis client.
        database: Database owning the engine and session factory.
        logger: Structured logger.
        rate_limiter: Sliding-window limiter.
        cache: Lookup cache for expensive upstream fetches.
        usage_tracker: Usage log and auto-block policy.
        admission: Admission control flow.
        dispatcher: Background queue feeding the usage tracker.
        cleanup_job: Periodic expired-block sweep.
    """

    redis: Redis
    database: Database
    logger: LoggerProtocol
    rate_limiter: SlidingWindowAdapter
    cache: LookupCache
    usage_tracker: UsageTracker
    admission: AdmissionService
    dispatcher: UsageDispatcher
    cleanup_job: BlockCleanupJob

    @classmethod
    def create(
        cls,
        settings: Settings,
        *,
        redis: Redis | None = None,
        database: Database | None = None,
        logger: LoggerProtocol | None = None,
    ) -> AdmissionContainer:
        """Wire the admission layer.

        Args:
            settings: Application settings.
            redis: Existing client to use instead of building a pool.
            database: Existing Database to use instead of building one.
            logger: Existing logger to use instead of building one.

        Returns:
            AdmissionContainer: Wired, not yet started.
        """
        redis = redis if redis is not None else create_redis_client(settings)
        database = (
            database
            if database is not None
            else Database(database_url=settings.database_url, echo=settings.db_echo)
        )
        logger = logger if logger is not None else create_logger(settings)

        rate_limiter = SlidingWindowAdapter(
            storage=RedisStorage(redis_client=redis),
            logger=logger,
        )
        cache = LookupCache(cache=RedisCacheAdapter(redis_client=redis), logger=logger)

        dispatcher = UsageDispatcher(
            max_size=settings.usage_tracking_queue_size,
            logger=logger,
        )
        usage_tracker = UsageTracker(
            abuse_repository=IPAbuseRepository(database),
            usage_repository=UsageEventRepository(database),
            thresholds=thresholds_from_settings(settings),
            sink=dispatcher,
            logger=logger,
        )
        admission = AdmissionService(
            policy=AdmissionPolicy(
                policies=TIER_POLICIES,
                api_key_window_seconds=API_KEY_WINDOW_SECONDS,
                default_api_key_rate_limit=DEFAULT_API_KEY_RATE_LIMIT,
            ),
            rate_limiter=rate_limiter,
            usage_tracker=usage_tracker,
            logger=logger,
        )
        cleanup_job = BlockCleanupJob(
            usage_tracker=usage_tracker,
            interval_seconds=settings.block_cleanup_interval_seconds,
            logger=logger,
        )

        return cls(
            redis=redis,
            database=database,
            logger=logger,
            rate_limiter=rate_limiter,
            cache=cache,
            usage_tracker=usage_tracker,
            admission=admission,
            dispatcher=dispatcher,
            cleanup_job=cleanup_job,
        )

    async def start(self) -> None:
        """Start background work (needs a running event loop)."""
        self.dispatcher.start(handler=self.usage_tracker.process)
        self.cleanup_job.start()

    async def aclose(self) -> None:
        """Stop background work, then release Redis and the database."""
        await self.cleanup_job.stop()
        await self.dispatcher.stop(drain=True)
        await self.redis.aclose()
        await self.database.close()
        self.logger.info("Admission container closed")
