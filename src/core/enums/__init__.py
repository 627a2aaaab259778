"""Core enums shared by every layer.

Usage:
    from src.core.enums import Environment, ErrorCode
"""

from src.core.enums.environment import Environment
from src.core.enums.error_code import ErrorCode

__all__ = ["Environment", "ErrorCode"]
