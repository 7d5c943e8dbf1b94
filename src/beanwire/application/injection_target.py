"""Application layer - Lifecycle orchestration for one managed type."""

import logging
from typing import Any, Iterable, List, Optional, Set, Tuple, Type, TypeVar

from beanwire.application.injection_point_registry import InjectionPointRegistry
from beanwire.config import EngineSettings
from beanwire.domain import (
    HookOutcome,
    IElementManager,
    IInjectionContextFactory,
    IInjectionTarget,
    InitializationContext,
    InjectionPoint,
    MemberKind,
    MemberRole,
    MetaConstructor,
    MetaMethod,
    PreDestroyError,
    TargetInvocationError,
    TeardownPolicy,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


class InjectionTarget(IInjectionTarget[T]):
    """Produces, injects, initializes and tears down instances of one managed type.

    The target does not track the phase of any instance; callers run
    ``produce``, ``inject``, ``post_construct`` and ``pre_destroy`` in that
    order. Lifecycle hook lists are fixed when the target is built.

    Attributes:
        _context_factory: Builds the bound contexts performing each operation.
        _element_manager: Metadata model used for runtime-type checks.
        _registry: Injection points of the managed type.
        _constructor: Constructor of the managed type.
        _post_construct_methods: Hooks run after injection, in order.
        _pre_destroy_methods: Hooks run before teardown, in order.
        _teardown_policy: Handling of failing pre-destroy hooks.
    """

    def __init__(
        self,
        context_factory: IInjectionContextFactory,
        element_manager: IElementManager,
        registry: InjectionPointRegistry,
        constructor: MetaConstructor,
        post_construct_methods: Iterable[MetaMethod],
        pre_destroy_methods: Iterable[MetaMethod],
        teardown_policy: TeardownPolicy = TeardownPolicy.BEST_EFFORT,
    ) -> None:
        self._context_factory = context_factory
        self._element_manager = element_manager
        self._registry = registry
        self._constructor = constructor
        self._post_construct_methods: Tuple[MetaMethod, ...] = tuple(post_construct_methods)
        self._pre_destroy_methods: Tuple[MetaMethod, ...] = tuple(pre_destroy_methods)
        self._teardown_policy = teardown_policy

    @property
    def managed_type(self) -> Type[T]:
        return self._constructor.declaring_class

    @property
    def post_construct_methods(self) -> Tuple[MetaMethod, ...]:
        return self._post_construct_methods

    @property
    def pre_destroy_methods(self) -> Tuple[MetaMethod, ...]:
        return self._pre_destroy_methods

    def produce(self, context: InitializationContext) -> T:
        """Construct a new instance through the registered constructor.

        Args:
            context: Correlation token forwarded to the resolver.

        Returns:
            The new, not yet injected, instance.

        Raises:
            UnresolvedDependencyError: If a constructor parameter cannot be satisfied.
            TargetInvocationError: If the constructor raises.
        """
        points = self._registry.for_member(self._constructor)
        logger.debug("Producing %s with %d injection point(s)", self.managed_type.__name__, len(points))
        return self._context_factory.for_constructor(self._constructor, points).invoke(context)

    def inject(self, instance: T, context: InitializationContext) -> None:
        """Populate the fields and injectable methods of ``instance``.

        Fields are injected before methods. Each method runs at most once per
        call, however many of its parameters are injection points. Earlier
        mutations are kept when a later step fails.

        Args:
            instance: An instance of the managed type or of a subclass.
            context: Correlation token forwarded to the resolver.

        Raises:
            UnresolvedDependencyError: If an injection point cannot be satisfied.
            TargetInvocationError: If an assignment or method call raises.
        """
        logger.debug("Injecting %s instance", type(instance).__name__)
        self._inject_fields(instance, context)
        injected = self._inject_methods(instance, context)

        # Zero-argument injectable methods have no injection point of their own
        for method in self._element_manager.get_methods(type(instance)):
            if (
                method.has_role(MemberRole.INJECT)
                and not method.parameters
                and not method.is_producer_or_disposer
                and method.name not in injected
            ):
                self._context_factory.for_method(method, (), instance).invoke(context)
                injected.add(method.name)

    def _inject_fields(self, instance: T, context: InitializationContext) -> None:
        runtime_type = type(instance)
        for point in self._registry.points:
            member = point.member
            if member.kind is MemberKind.FIELD and self._element_manager.is_assignable(
                member.declaring_class, runtime_type
            ):
                self._context_factory.for_field(member, point, instance).invoke(context)

    def _inject_methods(self, instance: T, context: InitializationContext) -> Set[str]:
        runtime_type = type(instance)
        # Keyed by name: invocation dispatches by name, so overrides share an identity
        injected: Set[str] = set()
        for point in self._registry.points:
            member = point.member
            if (
                member.kind is MemberKind.METHOD
                and member.name not in injected
                and not member.is_producer_or_disposer
                and self._element_manager.is_assignable(member.declaring_class, runtime_type)
            ):
                method_points = self._registry.for_member(member)
                self._context_factory.for_method(member, method_points, instance).invoke(context)
                injected.add(member.name)
        return injected

    def post_construct(self, instance: T) -> None:
        """Run the post-construct hooks, stopping at the first failure.

        Raises:
            TargetInvocationError: If a hook raises; later hooks do not run.
        """
        for method in self._post_construct_methods:
            logger.debug("Running post-construct hook %s", method.display_name)
            self._context_factory.for_hook(method, instance).invoke()

    def pre_destroy(self, instance: T) -> List[HookOutcome]:
        """Run the pre-destroy hooks in their recorded order.

        Under the best-effort policy every hook runs even when an earlier one
        fails; under the fail-fast policy the first failure propagates.

        Returns:
            The outcome of each hook, when all of them succeeded.

        Raises:
            PreDestroyError: Best-effort policy, carrying every outcome, if any hook failed.
            TargetInvocationError: Fail-fast policy, for the first failing hook.
        """
        return run_pre_destroy_hooks(self._context_factory, self._pre_destroy_methods, instance, self._teardown_policy)

    def get_injection_points(self) -> Tuple[InjectionPoint, ...]:
        return self._registry.points


def create_injection_target(
    managed_type: Type[T],
    element_manager: IElementManager,
    context_factory: IInjectionContextFactory,
    settings: Optional[EngineSettings] = None,
) -> InjectionTarget[T]:
    """Assemble the injection target of a managed type from its descriptor.

    Args:
        managed_type: The class whose instances the target manages.
        element_manager: Metadata model describing the class.
        context_factory: Factory for the bound injection contexts.
        settings: Engine settings; read from the environment when omitted.

    Returns:
        A target whose injection points and hook lists are fixed.

    Raises:
        MetadataUnavailableError: If the class cannot be described.

    Example:
        >>> target = create_injection_target(UserService, ElementManager(), InjectionContextFactory(container))
        >>> context = InitializationContext(managed_type=UserService)
        >>> service = target.produce(context)
        >>> target.inject(service, context)
        >>> target.post_construct(service)
    """
    if settings is None:
        settings = EngineSettings()

    meta_class = element_manager.get_meta_class(managed_type)
    registry = InjectionPointRegistry.from_meta_class(meta_class)
    logger.debug(
        "Created injection target for %s with %d injection point(s)",
        managed_type.__name__,
        len(registry),
    )
    return InjectionTarget(
        context_factory,
        element_manager,
        registry,
        meta_class.constructor,
        meta_class.post_construct_methods,
        meta_class.pre_destroy_methods,
        settings.teardown_policy,
    )


def run_pre_destroy_hooks(
    context_factory: IInjectionContextFactory,
    hooks: Iterable[MetaMethod],
    instance: Any,
    teardown_policy: TeardownPolicy,
) -> List[HookOutcome]:
    """Run pre-destroy hooks on ``instance`` in order under a teardown policy.

    Returns:
        The outcome of each hook, when all of them succeeded.

    Raises:
        PreDestroyError: Best-effort policy, carrying every outcome, if any hook failed.
        TargetInvocationError: Fail-fast policy, for the first failing hook.
    """
    outcomes: List[HookOutcome] = []
    for method in hooks:
        logger.debug("Running pre-destroy hook %s", method.display_name)
        try:
            context_factory.for_hook(method, instance).invoke()
        except TargetInvocationError as e:
            if teardown_policy == TeardownPolicy.FAIL_FAST:
                raise
            logger.warning("Pre-destroy hook %s failed: %s", method.display_name, e.cause)
            outcomes.append(HookOutcome(method=method, error=e))
        else:
            outcomes.append(HookOutcome(method=method))

    if any(not outcome.succeeded for outcome in outcomes):
        raise PreDestroyError(instance, outcomes)
    return outcomes
