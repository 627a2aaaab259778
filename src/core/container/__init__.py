"""Container module - Composition root of the admission layer.

Usage:
    from src.core.container import AdmissionContainer

    container = AdmissionContainer.create(get_settings())
"""

from src.core.container.admission import (
    AdmissionContainer,
    create_logger,
    create_redis_client,
    thresholds_from_settings,
)

__all__ = [
    "AdmissionContainer",
    "create_logger",
    "create_redis_client",
    "thresholds_from_settings",
]
