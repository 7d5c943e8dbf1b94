"""Application layer - Bound injection contexts and their factory."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from beanwire.domain import (
    IDependencyResolver,
    IInjectionContext,
    IInjectionContextFactory,
    InitializationContext,
    InjectionPoint,
    MetaConstructor,
    MetaField,
    MetaMethod,
    TargetInvocationError,
    UnresolvedDependencyError,
)

logger = logging.getLogger(__name__)


def _resolve_point(
    resolver: IDependencyResolver,
    point: InjectionPoint,
    context: InitializationContext,
) -> Any:
    try:
        return resolver.resolve_injection_point(point, context)
    except UnresolvedDependencyError as e:
        if e.point == point:
            raise
        raise UnresolvedDependencyError(point.required_type, str(e), point) from e
    except Exception as e:
        raise UnresolvedDependencyError(point.required_type, f"Resolver failed: {e}", point) from e


def _resolve_arguments(
    resolver: IDependencyResolver,
    points: Iterable[InjectionPoint],
    context: InitializationContext,
) -> Tuple[List[Any], Dict[str, Any]]:
    """Resolve parameter points into call arguments, in parameter order.

    Positional-only parameters are passed by position, every other parameter
    by keyword so that skipped parameters keep their defaults.
    """
    args: List[Any] = []
    kwargs: Dict[str, Any] = {}
    for point in sorted(points, key=lambda p: p.element.position):
        value = _resolve_point(resolver, point, context)
        if point.element.positional_only:
            args.append(value)
        else:
            kwargs[point.element.name] = value
    return args, kwargs


class ConstructorInjectionContext(IInjectionContext):
    """Constructs a new instance with resolved constructor arguments."""

    def __init__(
        self,
        resolver: IDependencyResolver,
        constructor: MetaConstructor,
        points: Iterable[InjectionPoint],
    ) -> None:
        self._resolver = resolver
        self._constructor = constructor
        self._points = tuple(points)

    def invoke(self, context: Optional[InitializationContext] = None) -> Any:
        if context is None:
            context = InitializationContext(managed_type=self._constructor.declaring_class)

        args, kwargs = _resolve_arguments(self._resolver, self._points, context)
        try:
            instance = self._constructor.invoke(*args, **kwargs)
        except Exception as e:
            raise TargetInvocationError(self._constructor, None, e) from e

        logger.debug("Constructed %s", self._constructor.display_name)
        return instance


class FieldInjectionContext(IInjectionContext):
    """Assigns one resolved value into a field of an instance."""

    def __init__(
        self,
        resolver: IDependencyResolver,
        field: MetaField,
        point: InjectionPoint,
        instance: Any,
    ) -> None:
        self._resolver = resolver
        self._field = field
        self._point = point
        self._instance = instance

    def invoke(self, context: Optional[InitializationContext] = None) -> None:
        if context is None:
            context = InitializationContext(managed_type=type(self._instance))

        value = _resolve_point(self._resolver, self._point, context)
        try:
            self._field.assign(self._instance, value)
        except Exception as e:
            raise TargetInvocationError(self._field, self._instance, e) from e

        logger.debug("Injected field %s", self._field.display_name)


class MethodInjectionContext(IInjectionContext):
    """Calls a method of an instance with resolved arguments."""

    def __init__(
        self,
        resolver: IDependencyResolver,
        method: MetaMethod,
        points: Iterable[InjectionPoint],
        instance: Any,
    ) -> None:
        self._resolver = resolver
        self._method = method
        self._points = tuple(points)
        self._instance = instance

    def invoke(self, context: Optional[InitializationContext] = None) -> Any:
        if context is None:
            context = InitializationContext(managed_type=type(self._instance))

        args, kwargs = _resolve_arguments(self._resolver, self._points, context)
        try:
            result = self._method.invoke(self._instance, *args, **kwargs)
        except Exception as e:
            raise TargetInvocationError(self._method, self._instance, e) from e

        logger.debug("Injected method %s", self._method.display_name)
        return result


class LifecycleHookContext(IInjectionContext):
    """Calls a no-argument lifecycle method of an instance."""

    def __init__(self, method: MetaMethod, instance: Any) -> None:
        self._method = method
        self._instance = instance

    def invoke(self, context: Optional[InitializationContext] = None) -> Any:
        try:
            return self._method.invoke(self._instance)
        except Exception as e:
            raise TargetInvocationError(self._method, self._instance, e) from e


class InjectionContextFactory(IInjectionContextFactory):
    """Builds bound injection contexts backed by one resolution engine.

    Attributes:
        resolver: The engine deciding which value satisfies each injection point.

    Example:
        >>> factory = InjectionContextFactory(container)
        >>> meta = element_manager.get_meta_class(UserService)
        >>> points = registry.for_member(meta.constructor)
        >>> service = factory.for_constructor(meta.constructor, points).invoke(context)
    """

    def __init__(self, resolver: IDependencyResolver) -> None:
        self.resolver = resolver

    def for_constructor(
        self, constructor: MetaConstructor, points: Iterable[InjectionPoint]
    ) -> ConstructorInjectionContext:
        return ConstructorInjectionContext(self.resolver, constructor, points)

    def for_field(self, field: MetaField, point: InjectionPoint, instance: Any) -> FieldInjectionContext:
        return FieldInjectionContext(self.resolver, field, point, instance)

    def for_method(
        self, method: MetaMethod, points: Iterable[InjectionPoint], instance: Any
    ) -> MethodInjectionContext:
        return MethodInjectionContext(self.resolver, method, points, instance)

    def for_hook(self, method: MetaMethod, instance: Any) -> LifecycleHookContext:
        return LifecycleHookContext(method, instance)
