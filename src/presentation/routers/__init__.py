"""HTTP routers of the admission layer.

- system: root and health
- usage: caller's daily quota status
- admin: abuse records, manual unblock, cleanup sweep, analytics
"""

from src.presentation.routers.admin import admin_router
from src.presentation.routers.system import system_router
from src.presentation.routers.usage import usage_router

__all__ = ["admin_router", "system_router", "usage_router"]
