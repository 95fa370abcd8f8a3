"""
API Routers
Separate router modules for each domain.
"""

from app.routers import rjs

__all__ = ["rjs"]
