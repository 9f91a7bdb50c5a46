# api/routes/__init__.py
"""
API routers
"""
from . import prescription

__all__ = ["prescription"]
