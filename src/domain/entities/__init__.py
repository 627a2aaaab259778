"""Domain entities for business logic.

Pure business logic entities with no framework dependencies.
"""

from src.domain.entities.ip_abuse_record import IPAbuseRecord

__all__ = ["IPAbuseRecord"]
