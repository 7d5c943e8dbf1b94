"""
Domain layer - Descriptors, markers and contracts of the lifecycle engine.

This layer contains the metadata model, the error taxonomy and the interfaces
the application layer implements. It has no dependencies on other layers.
"""

from .enums import Lifetime, MemberKind, MemberRole, TeardownPolicy
from .exceptions import (
    BeanwireException,
    LifetimeError,
    MetadataUnavailableError,
    PreDestroyError,
    TargetInvocationError,
    UnresolvedDependencyError,
)
from .interfaces import (
    IContainer,
    IDependencyResolver,
    IElementManager,
    IInjectionContext,
    IInjectionContextFactory,
    IInjectionTarget,
    ILifetimeManager,
)
from .markers import Inject, Value, disposes, inject, post_construct, pre_destroy, produces
from .models import (
    DependencyMetadata,
    HookOutcome,
    InitializationContext,
    InjectionPoint,
    MetaClass,
    MetaConstructor,
    MetaField,
    MetaMember,
    MetaMethod,
    MetaParameter,
    Registration,
)

# Rebuild Pydantic models to resolve forward references
Registration.model_rebuild()
InitializationContext.model_rebuild()

__all__ = [
    # Enums
    "Lifetime",
    "MemberKind",
    "MemberRole",
    "TeardownPolicy",
    # Exceptions
    "BeanwireException",
    "MetadataUnavailableError",
    "UnresolvedDependencyError",
    "TargetInvocationError",
    "PreDestroyError",
    "LifetimeError",
    # Interfaces
    "IContainer",
    "IDependencyResolver",
    "IElementManager",
    "IInjectionContext",
    "IInjectionContextFactory",
    "IInjectionTarget",
    "ILifetimeManager",
    # Markers
    "Inject",
    "Value",
    "inject",
    "post_construct",
    "pre_destroy",
    "produces",
    "disposes",
    # Models
    "MetaClass",
    "MetaConstructor",
    "MetaField",
    "MetaMember",
    "MetaMethod",
    "MetaParameter",
    "InjectionPoint",
    "InitializationContext",
    "HookOutcome",
    "Registration",
    "DependencyMetadata",
]
