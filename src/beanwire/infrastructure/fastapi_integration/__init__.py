"""
FastAPI integration module.

Provides helpers for resolving and managing beanwire instances from FastAPI endpoints.
"""

from .integration import create_fastapi_dependency, create_managed_dependency, provide

__all__ = [
    "create_fastapi_dependency",
    "create_managed_dependency",
    "provide",
]
