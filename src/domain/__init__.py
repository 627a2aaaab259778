"""Domain layer - Pure business logic.

Entities, value objects, enums, errors and protocols (ports) of the
admission-control layer. The domain layer has NO dependencies on any
framework or infrastructure.

Structure:
- entities/: Mutable records with identity (IPAbuseRecord)
- value_objects/: Immutable values (RateLimitRule, TierPolicy, UsageRecord)
- enums/: Tier, CallerType, CacheNamespace
- errors/: RateLimitError, UsageTrackingError, AdmissionError
- protocols/: Ports implemented by infrastructure adapters
"""
