"""Application layer - Admission control use cases.

Services orchestrate domain logic through protocols; they contain no
storage code:
- services/admission_policy.py: caller identity -> tier parameters
- services/admission_service.py: block, burst and daily quota checks
- services/usage_tracker.py: usage log, abuse counters, auto-block
"""
