"""Presentation layer - HTTP seam of the admission layer.

Thin FastAPI routers and dependencies: they translate requests into
service calls and results into HTTP responses, with no business logic.

Structure:
- routers/api/middleware/: require_admission() dependency
- routers/: system, usage and admin routers
"""
