from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from beanwire.domain.models import (
    DependencyMetadata,
    HookOutcome,
    InitializationContext,
    InjectionPoint,
    MetaClass,
    MetaConstructor,
    MetaField,
    MetaMethod,
)

T = TypeVar("T")


class IElementManager(ABC):
    """Abstract interface for the metadata model of managed types."""

    @abstractmethod
    def get_meta_class(self, cls: Type[T]) -> MetaClass:
        """Return the structural descriptor of a class.

        Repeated calls for the same class return equal descriptors.

        Args:
            cls: The class to describe.

        Raises:
            MetadataUnavailableError: If the class cannot be introspected.
        """

    @abstractmethod
    def get_methods(self, cls: Type) -> Tuple[MetaMethod, ...]:
        """Return the method descriptors of a class, base class methods first.

        Constructor and fields are not described, so any subclass of a
        managed type can be inspected.

        Raises:
            MetadataUnavailableError: If the methods cannot be introspected.
        """

    @abstractmethod
    def is_assignable(self, declaring_class: Type, runtime_type: Type) -> bool:
        """Tell whether members of ``declaring_class`` exist on ``runtime_type`` instances.

        Args:
            declaring_class: The class declaring a member.
            runtime_type: The actual type of an instance.
        """


class IDependencyResolver(ABC):
    """Abstract interface for the engine deciding which value satisfies an injection point."""

    @abstractmethod
    def resolve_injection_point(self, point: InjectionPoint, context: InitializationContext) -> Any:
        """Return the value for an injection point.

        Args:
            point: The injection point to satisfy.
            context: The initialization context of the instance being built.

        Raises:
            UnresolvedDependencyError: If no value satisfies the point.
        """


class IInjectionContext(ABC):
    """A bound, single-use construct/assign/call operation."""

    @abstractmethod
    def invoke(self, context: Optional[InitializationContext] = None) -> Any:
        """Resolve the bound injection points and perform the operation.

        Args:
            context: Correlation token forwarded to the resolver.

        Raises:
            UnresolvedDependencyError: If an injection point cannot be satisfied.
            TargetInvocationError: If the underlying operation fails.
        """


class IInjectionContextFactory(ABC):
    """Abstract interface building bound injection contexts."""

    @abstractmethod
    def for_constructor(self, constructor: MetaConstructor, points: Iterable[InjectionPoint]) -> IInjectionContext:
        """Build a context that constructs a new instance."""

    @abstractmethod
    def for_field(self, field: MetaField, point: InjectionPoint, instance: Any) -> IInjectionContext:
        """Build a context that assigns one field of ``instance``."""

    @abstractmethod
    def for_method(self, method: MetaMethod, points: Iterable[InjectionPoint], instance: Any) -> IInjectionContext:
        """Build a context that calls a method of ``instance`` with resolved arguments."""

    @abstractmethod
    def for_hook(self, method: MetaMethod, instance: Any) -> IInjectionContext:
        """Build a context that calls a no-argument lifecycle method of ``instance``."""


class IInjectionTarget(ABC, Generic[T]):
    """Abstract interface managing the lifecycle of one managed type's instances."""

    @abstractmethod
    def produce(self, context: InitializationContext) -> T:
        """Construct a new instance through its constructor."""

    @abstractmethod
    def inject(self, instance: T, context: InitializationContext) -> None:
        """Populate the fields and injectable methods of an instance."""

    @abstractmethod
    def post_construct(self, instance: T) -> None:
        """Run the post-construct hooks of an instance."""

    @abstractmethod
    def pre_destroy(self, instance: T) -> List[HookOutcome]:
        """Run the pre-destroy hooks of an instance."""

    @abstractmethod
    def get_injection_points(self) -> Tuple[InjectionPoint, ...]:
        """Return every injection point of the managed type."""


class IContainer(ABC):
    """Abstract interface for dependency injection container operations."""

    @abstractmethod
    def register_singletons(self, dependencies: Dict[Type, Callable[["IContainer"], Any]]) -> None:
        """Register multiple singleton dependencies at once.

        Args:
            dependencies: A dictionary mapping types to their builder functions.
        """

    @abstractmethod
    def register_transients(self, dependencies: Dict[Type, Callable[["IContainer"], Any]]) -> None:
        """Register multiple transient dependencies at once.

        Args:
            dependencies: A dictionary mapping types to their builder functions.
        """

    @abstractmethod
    def register_values(self, values: Mapping[str, Any]) -> None:
        """Register named placeholder values.

        Args:
            values: A mapping of placeholder names to values.
        """

    @abstractmethod
    def resolve(self, dependency_type: Type[T]) -> T:
        """Resolve and return an instance of the requested class type.

        Args:
            dependency_type: The type to resolve.
        """

    @abstractmethod
    def create(self, managed_type: Type[T]) -> T:
        """Build a fully initialized instance of a managed type."""

    @abstractmethod
    def destroy(self, instance: Any) -> List[HookOutcome]:
        """Run the pre-destroy hooks of a managed instance."""

    @abstractmethod
    def clear(self) -> None:
        """Clear all registrations and instances from the container."""

    @abstractmethod
    def get_registry_copy(self) -> Dict[Type, DependencyMetadata]:
        """Get a copy of the current registry of dependencies."""


class ILifetimeManager(ABC):
    """Abstract interface for managing dependency lifetimes."""

    @abstractmethod
    def get_or_create(
        self,
        metadata: DependencyMetadata,
        factory: Callable[[], Any],
    ) -> Any:
        """Get existing instance or create a new one based on lifetime.

        Args:
            metadata: The dependency metadata containing registration info.
            factory: A callable to create a new instance if needed.
        """

    @abstractmethod
    def clear_cache(self) -> None:
        """Clear any cached instances managed by this lifetime manager."""
