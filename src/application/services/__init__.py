"""Application services.

Exports:
    AdmissionPolicy, AdmissionPlan: Tier resolution.
    AdmissionService, AdmissionDecision: Admission control flow.
    UsageTracker: Usage log and auto-block policy.
"""

from src.application.services.admission_policy import AdmissionPlan, AdmissionPolicy
from src.application.services.admission_service import (
    AdmissionDecision,
    AdmissionService,
)
from src.application.services.usage_tracker import UsageTracker

__all__ = [
    "AdmissionDecision",
    "AdmissionPlan",
    "AdmissionPolicy",
    "AdmissionService",
    "UsageTracker",
]
