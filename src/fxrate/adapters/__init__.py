"""
Adapters Layer - External Interfaces

This package contains all adapters for external systems:
- Providers (upstream rate API)
- Telegram (bot interface)
- Persistence (cache storage)
- Formatting (output)
"""

__all__ = []
