"""Structured logging adapters.

Exports:
    ConsoleAdapter: structlog stdout adapter implementing LoggerProtocol.
"""

from src.infrastructure.logging.console_adapter import ConsoleAdapter

__all__ = ["ConsoleAdapter"]
