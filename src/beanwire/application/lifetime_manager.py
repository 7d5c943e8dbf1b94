from typing import Any, Callable, Dict, Type

from beanwire.domain import (
    BeanwireException,
    DependencyMetadata,
    ILifetimeManager,
    Lifetime,
    UnresolvedDependencyError,
)


class LifetimeManager(ILifetimeManager):
    """Manages instance lifetimes for singleton and transient registrations.

    Handles caching of singleton instances and creation of transient instances.

    Attributes:
        _singleton_cache: Cache for singleton instances.
    """

    def __init__(self) -> None:
        """Initialize the lifetime manager with an empty cache."""
        self._singleton_cache: Dict[Type, Any] = {}

    def get_or_create(self, metadata: DependencyMetadata, factory: Callable[[], Any]) -> Any:
        """Get existing instance or create new one based on lifetime.

        Args:
            metadata: Registration metadata containing lifetime info.
            factory: Function to create new instance if needed.

        Returns:
            Instance according to lifetime rules:
            - Singleton: Returns cached instance or creates and caches new one
            - Transient: Always creates new instance

        Raises:
            UnresolvedDependencyError: If the factory fails with a foreign exception.

        Example:
            >>> metadata = DependencyMetadata(
            ...     registration=Registration(
            ...         dependency_type=MyService,
            ...         builder=lambda c: MyService(),
            ...         lifetime=Lifetime.SINGLETON
            ...     )
            ... )
            >>> instance = manager.get_or_create(metadata, lambda: MyService())
        """
        lifetime = metadata.registration.lifetime
        dependency_type = metadata.registration.dependency_type

        if lifetime == Lifetime.SINGLETON:
            if dependency_type not in self._singleton_cache:
                self._singleton_cache[dependency_type] = self._create(dependency_type, factory)
            return self._singleton_cache[dependency_type]

        # Lifetime.TRANSIENT
        return self._create(dependency_type, factory)

    @staticmethod
    def _create(dependency_type: Type, factory: Callable[[], Any]) -> Any:
        try:
            return factory()
        except BeanwireException:
            raise
        except Exception as e:
            raise UnresolvedDependencyError(dependency_type, f"Failed to create instance: {str(e)}") from e

    def clear_cache(self) -> None:
        """Clear all cached singleton instances.

        Useful for testing or resetting container state.
        """
        self._singleton_cache.clear()

    def get_singleton_cache(self) -> Dict[Type, Any]:
        """Get reference to the singleton cache.

        Returns:
            Reference to the singleton cache.
        """
        return self._singleton_cache
