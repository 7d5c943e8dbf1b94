import logging
from typing import Any, Callable, Iterator, Type, TypeVar

from fastapi import Depends

from beanwire.application import BeanContainer
from beanwire.domain import IContainer, PreDestroyError, TargetInvocationError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def create_fastapi_dependency(container: IContainer, dependency_type: Type[T]) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that resolves from the container.

    The resolved instance lifetime follows the registration in the container;
    unregistered classes are auto-wired when the container allows it.

    Args:
        container: The container to resolve dependencies from.
        dependency_type: The type to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> get_user_repo = create_fastapi_dependency(container, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> T:
        """Resolve the dependency from the container."""
        return container.resolve(dependency_type)

    return dependency


def create_managed_dependency(container: BeanContainer, managed_type: Type[T]) -> Callable[[], Iterator[T]]:
    """Create a FastAPI dependency managing one instance per request.

    Each request gets a freshly produced, injected and post-constructed
    instance. Its pre-destroy hooks run after the endpoint has finished.
    Teardown failures are logged rather than raised into the request.

    Args:
        container: The container creating and destroying instances.
        managed_type: The managed class to instantiate per request.

    Returns:
        A generator dependency that FastAPI can use with Depends().

    Example:
        >>> get_unit_of_work = create_managed_dependency(container, UnitOfWork)
        >>>
        >>> @app.post("/orders")
        >>> def place_order(uow: UnitOfWork = Depends(get_unit_of_work)):
        ...     uow.orders.add(...)
    """

    def managed_dependency() -> Iterator[T]:
        """Create the instance, hand it to the endpoint, then tear it down."""
        instance = container.create(managed_type)
        try:
            yield instance
        finally:
            try:
                container.destroy(instance)
            except (PreDestroyError, TargetInvocationError) as e:
                logger.error("Teardown of request-managed %s failed: %s", managed_type.__name__, e)

    return managed_dependency


def provide(container: BeanContainer, managed_type: Type[T], managed: bool = False) -> Any:
    """Shorthand for ``Depends()`` on a container-backed dependency.

    Args:
        container: The container backing the dependency.
        managed_type: The type to resolve or manage.
        managed: Whether each request gets its own managed instance torn down after the response.

    Returns:
        A FastAPI ``Depends`` marker.

    Example:
        >>> @app.get("/report")
        >>> def report(service: ReportService = provide(container, ReportService, managed=True)):
        ...     return service.build()
    """
    if managed:
        return Depends(create_managed_dependency(container, managed_type))
    return Depends(create_fastapi_dependency(container, managed_type))
