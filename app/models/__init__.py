"""
Database models package
"""

from .tenant import Tenant
from .guest import Guest

__all__ = ["Tenant", "Guest"]
