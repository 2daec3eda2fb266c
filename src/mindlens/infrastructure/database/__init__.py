"""
Database infrastructure components.
"""

from mindlens.infrastructure.database.connection import Base, DatabaseManager

__all__ = [
    "Base",
    "DatabaseManager",
]
