"""
beanwire: Metadata-driven object lifecycle engine with constructor, field and method injection.

Public API exports for the beanwire package.
"""

# Application exports
from beanwire.application import (
    BeanContainer,
    ElementManager,
    InjectionContextFactory,
    InjectionPointRegistry,
    InjectionTarget,
    create_injection_target,
)
from beanwire.config import EngineSettings

# Domain exports
from beanwire.domain import (
    BeanwireException,
    HookOutcome,
    IDependencyResolver,
    InitializationContext,
    Inject,
    InjectionPoint,
    Lifetime,
    LifetimeError,
    MemberKind,
    MemberRole,
    MetadataUnavailableError,
    PreDestroyError,
    TargetInvocationError,
    TeardownPolicy,
    UnresolvedDependencyError,
    Value,
    disposes,
    inject,
    post_construct,
    pre_destroy,
    produces,
)

__version__ = "0.1.0"

__all__ = [
    # Container
    "BeanContainer",
    # Engine
    "ElementManager",
    "InjectionContextFactory",
    "InjectionPointRegistry",
    "InjectionTarget",
    "create_injection_target",
    "IDependencyResolver",
    "InitializationContext",
    "InjectionPoint",
    "HookOutcome",
    # Configuration
    "EngineSettings",
    # Markers
    "Inject",
    "Value",
    "inject",
    "post_construct",
    "pre_destroy",
    "produces",
    "disposes",
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
]
