"""
Application layer - Lifecycle orchestration and reference collaborators.

This layer contains the injection target, the context factory and the
metadata and resolution implementations they are wired to.
It depends only on the Domain layer.
"""

from .container import BeanContainer
from .element_manager import ElementManager
from .injection_context import (
    ConstructorInjectionContext,
    FieldInjectionContext,
    InjectionContextFactory,
    LifecycleHookContext,
    MethodInjectionContext,
)
from .injection_point_registry import InjectionPointRegistry
from .injection_target import InjectionTarget, create_injection_target, run_pre_destroy_hooks
from .lifetime_manager import LifetimeManager

__all__ = [
    "BeanContainer",
    "ElementManager",
    "InjectionContextFactory",
    "ConstructorInjectionContext",
    "FieldInjectionContext",
    "MethodInjectionContext",
    "LifecycleHookContext",
    "InjectionPointRegistry",
    "InjectionTarget",
    "create_injection_target",
    "run_pre_destroy_hooks",
    "LifetimeManager",
]
