"""Infrastructure layer - Adapters and external integrations.

This layer contains implementations of domain protocols (ports):
- Redis sliding window storage and lookup cache
- Database repositories for usage events and IP abuse records
- Background jobs (usage dispatcher, block cleanup)

The infrastructure layer depends on the domain layer (implements protocols)
but the domain layer does NOT depend on infrastructure.
"""
