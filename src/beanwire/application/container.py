import builtins
import inspect
import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar

from beanwire.application.element_manager import ElementManager
from beanwire.application.injection_context import InjectionContextFactory
from beanwire.application.injection_target import InjectionTarget, create_injection_target, run_pre_destroy_hooks
from beanwire.application.lifetime_manager import LifetimeManager
from beanwire.config import EngineSettings
from beanwire.domain import (
    DependencyMetadata,
    HookOutcome,
    IContainer,
    IDependencyResolver,
    IElementManager,
    ILifetimeManager,
    InitializationContext,
    InjectionPoint,
    Lifetime,
    LifetimeError,
    MemberRole,
    Registration,
    UnresolvedDependencyError,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BeanContainer(IContainer, IDependencyResolver):
    """Dependency injection container driving managed instance lifecycles.

    Acts as the resolution engine of the injection targets it creates:
    registered builders and named values satisfy injection points, and
    unregistered classes are auto-wired through their own injection target.

    Attributes:
        _settings: Engine settings shared by every target.
        _registry: Dictionary mapping dependency types to their metadata.
        _values: Named placeholder values.
        _element_manager: Metadata model describing managed classes.
        _context_factory: Context factory resolving through this container.
        _lifetime_manager: Component managing instance lifetimes.
        _targets: Injection targets already built, keyed by managed type.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        element_manager: Optional[IElementManager] = None,
    ) -> None:
        """Initialize the container with empty registries.

        Args:
            settings: Engine settings; read from the environment when omitted.
            element_manager: Metadata model to use; a new ElementManager when omitted.
        """
        self._settings = settings if settings is not None else EngineSettings()
        self._registry: Dict[Type, DependencyMetadata] = {}
        self._values: Dict[str, Any] = {}
        self._element_manager: IElementManager = element_manager if element_manager is not None else ElementManager()
        self._context_factory = InjectionContextFactory(self)
        self._lifetime_manager: ILifetimeManager = LifetimeManager()
        self._targets: Dict[Type, InjectionTarget] = {}
        self._targets_lock = threading.Lock()

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def _register(
        self,
        dependency_type: Type,
        builder: Callable[[IContainer], Any],
        lifetime: Lifetime,
    ) -> None:
        """Internal registration method with validation.

        Args:
            dependency_type: The type to register.
            builder: Factory function to create the instance.
            lifetime: How long the instance should live.

        Raises:
            LifetimeError: If already registered with a different lifetime.
        """
        if dependency_type in self._registry:
            existing = self._registry[dependency_type]
            if existing.registration.lifetime != lifetime:
                raise LifetimeError(
                    f"Dependency {dependency_type.__name__} is already registered "
                    f"with lifetime {existing.registration.lifetime.value}, "
                    f"cannot re-register with {lifetime.value}"
                )
            return  # Skip if already registered with same lifetime

        registration = Registration(
            dependency_type=dependency_type,
            builder=builder,
            lifetime=lifetime,
        )
        self._registry[dependency_type] = DependencyMetadata(registration=registration)
        logger.debug("Registered %s as %s", dependency_type.__name__, lifetime)

    def register_singletons(self, dependencies: Dict[Type, Callable[[IContainer], Any]]) -> None:
        """Register multiple singleton dependencies at once.

        Singleton dependencies are created once and shared across the entire application.

        Args:
            dependencies: Dictionary mapping dependency types to builder functions.
                         Each builder receives the container and returns an instance.

        Raises:
            LifetimeError: If a dependency is already registered with a different lifetime.

        Example:
            >>> container.register_singletons({
            ...     DatabaseConfig: lambda c: DatabaseConfig.from_env(),
            ...     DatabaseConnection: lambda c: c.create(DatabaseConnection),
            ... })
        """
        for dependency_type, builder in dependencies.items():
            self._register(dependency_type, builder, Lifetime.SINGLETON)

    def register_transients(self, dependencies: Dict[Type, Callable[[IContainer], Any]]) -> None:
        """Register multiple transient dependencies at once.

        Transient dependencies are created fresh on each resolution.

        Args:
            dependencies: Dictionary mapping dependency types to builder functions.
                         Each builder receives the container and returns an instance.

        Raises:
            LifetimeError: If a dependency is already registered with a different lifetime.
        """
        for dependency_type, builder in dependencies.items():
            self._register(dependency_type, builder, Lifetime.TRANSIENT)

    def register_values(self, values: Mapping[str, Any]) -> None:
        """Register named values for ``Value(name)`` injection points.

        Args:
            values: Mapping of placeholder names to values. Existing names are replaced.

        Example:
            >>> container.register_values({"mail.sender": "noreply@example.com"})
        """
        self._values.update(values)

    def resolve(self, dependency_type: Type[T]) -> T:
        """Resolve and return an instance of the specified type.

        Registered types are built by their builder under their lifetime.
        Unregistered classes are auto-wired, when enabled, through a full
        produce/inject/post-construct lifecycle.

        Args:
            dependency_type: The type to resolve.

        Returns:
            Instance of the requested type with all dependencies injected.

        Raises:
            UnresolvedDependencyError: If the dependency cannot be resolved.

        Example:
            >>> user_service = container.resolve(UserService)
        """
        return self._resolve(dependency_type, InitializationContext(managed_type=dependency_type))

    def _resolve(self, dependency_type: Type[T], context: InitializationContext) -> T:
        if dependency_type in self._registry:
            metadata = self._registry[dependency_type]
            instance = self._lifetime_manager.get_or_create(
                metadata,
                lambda: metadata.registration.builder(self),
            )
            metadata.resolution_count += 1
            return instance

        if self._settings.auto_wire and self._is_auto_wirable(dependency_type):
            return self.create(dependency_type, context)

        raise UnresolvedDependencyError(
            dependency_type,
            "No registration found and the type cannot be auto-wired.",
        )

    @staticmethod
    def _is_auto_wirable(dependency_type: Any) -> bool:
        return (
            inspect.isclass(dependency_type)
            and not inspect.isabstract(dependency_type)
            and getattr(builtins, dependency_type.__name__, None) is not dependency_type
        )

    def resolve_injection_point(self, point: InjectionPoint, context: InitializationContext) -> Any:
        """Return the value satisfying an injection point.

        Points qualified with ``Value(name)`` receive the named value; every
        other point receives ``resolve(point.required_type)``.

        Raises:
            UnresolvedDependencyError: If no value satisfies the point.
        """
        if point.qualifier is not None:
            if point.qualifier not in self._values:
                raise UnresolvedDependencyError(
                    point.required_type,
                    f"No value registered under name '{point.qualifier}'.",
                    point,
                )
            return self._values[point.qualifier]

        return self._resolve(point.required_type, context.child(point.required_type))

    def create_injection_target(self, managed_type: Type[T]) -> InjectionTarget[T]:
        """Return the injection target of a managed type, building it on first use.

        Raises:
            MetadataUnavailableError: If the type cannot be described.
        """
        with self._targets_lock:
            target = self._targets.get(managed_type)
            if target is None:
                target = create_injection_target(
                    managed_type,
                    self._element_manager,
                    self._context_factory,
                    self._settings,
                )
                self._targets[managed_type] = target
        return target

    def create(self, managed_type: Type[T], context: Optional[InitializationContext] = None) -> T:
        """Build a fully initialized instance of a managed type.

        Runs produce, inject and post-construct in order.

        Args:
            managed_type: The class to instantiate.
            context: Initialization context; a fresh one when omitted.

        Returns:
            The initialized instance.

        Raises:
            MetadataUnavailableError: If the type cannot be described.
            UnresolvedDependencyError: If an injection point cannot be satisfied.
            TargetInvocationError: If construction, injection or a hook fails.

        Example:
            >>> mailer = container.create(Mailer)
            >>> mailer.transport  # injected field
        """
        if context is None:
            context = InitializationContext(managed_type=managed_type)

        target = self.create_injection_target(managed_type)
        instance = target.produce(context)
        target.inject(instance, context)
        target.post_construct(instance)
        logger.debug("Created managed %s instance", managed_type.__name__)
        return instance

    def destroy(self, instance: Any) -> List[HookOutcome]:
        """Run the pre-destroy hooks of an instance.

        Instances of a type created through this container use its injection
        target. Any other instance, such as one of a subclass the container
        never constructed, runs the hooks of its runtime type without the
        constructor or fields of that type being described.

        Returns:
            The outcome of each hook.

        Raises:
            PreDestroyError: Best-effort policy, if any hook failed.
            TargetInvocationError: Fail-fast policy, for the first failing hook.
        """
        runtime_type = type(instance)
        with self._targets_lock:
            target = self._targets.get(runtime_type)
        if target is not None:
            return target.pre_destroy(instance)

        hooks = [
            method
            for method in self._element_manager.get_methods(runtime_type)
            if method.has_role(MemberRole.PRE_DESTROY)
        ]
        return run_pre_destroy_hooks(self._context_factory, hooks, instance, self._settings.teardown_policy)

    def get_registry_copy(self) -> Dict[Type, DependencyMetadata]:
        """Get a copy of the registry.

        Returns:
            Copy of the current registry.
        """
        return self._registry.copy()

    def get_values_copy(self) -> Dict[str, Any]:
        """Get a copy of the named values."""
        return self._values.copy()

    def clear(self) -> None:
        """Clear all registrations, values and cached instances.

        Useful for testing or resetting the container state.
        """
        self._registry.clear()
        self._values.clear()
        self._lifetime_manager.clear_cache()
        with self._targets_lock:
            self._targets.clear()
