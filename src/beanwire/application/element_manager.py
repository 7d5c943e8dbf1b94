"""Application layer - Metadata model built from class introspection."""

import inspect
import logging
import threading
from typing import Any, Callable, Dict, List, Tuple, Type

from beanwire.domain import (
    IElementManager,
    MemberRole,
    MetaClass,
    MetaConstructor,
    MetaField,
    MetadataUnavailableError,
    MetaMethod,
    MetaParameter,
    Value,
)
from beanwire.domain.markers import roles_of, unwrap_annotation

logger = logging.getLogger(__name__)

_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
_PARAMETERIZED_ROLES = frozenset({MemberRole.INJECT, MemberRole.PRODUCES, MemberRole.DISPOSES})
_HOOK_ROLES = frozenset({MemberRole.POST_CONSTRUCT, MemberRole.PRE_DESTROY})


class ElementManager(IElementManager):
    """Builds and caches immutable descriptors of managed classes.

    Descriptors are read from constructor signatures, ``Annotated`` class
    annotations and the role markers left by the decorators in
    ``beanwire.domain.markers``.

    Attributes:
        _cache: Descriptors already built, keyed by class.
        _methods_cache: Method-only descriptors of classes inspected at runtime.
        _lock: Guards the cache so concurrent first lookups build once.
    """

    def __init__(self) -> None:
        """Initialize the element manager with an empty descriptor cache."""
        self._cache: Dict[Type, MetaClass] = {}
        self._methods_cache: Dict[Type, Tuple[MetaMethod, ...]] = {}
        self._lock = threading.Lock()

    def get_meta_class(self, cls: Type) -> MetaClass:
        """Return the descriptor of a class, building it on first use.

        Args:
            cls: The class to describe.

        Returns:
            The cached descriptor for the class.

        Raises:
            MetadataUnavailableError: If ``cls`` is not a class or cannot be introspected.

        Example:
            >>> class Mailer:
            ...     transport: Annotated[Transport, Inject()]
            ...
            ...     @post_construct
            ...     def connect(self) -> None: ...
            >>>
            >>> meta = ElementManager().get_meta_class(Mailer)
            >>> [field.name for field in meta.injected_fields]
            ['transport']
        """
        if not inspect.isclass(cls):
            raise MetadataUnavailableError(cls, "Only classes can be managed.")

        with self._lock:
            meta_class = self._cache.get(cls)
            if meta_class is None:
                meta_class = self._build_meta_class(cls)
                self._cache[cls] = meta_class
        return meta_class

    def get_methods(self, cls: Type) -> Tuple[MetaMethod, ...]:
        """Return the method descriptors of a class without describing its constructor or fields.

        Used for runtime types of injected or destroyed instances, which are
        never constructed by the engine and need not be managed types themselves.

        Raises:
            MetadataUnavailableError: If ``cls`` is not a class or its methods cannot be introspected.
        """
        if not inspect.isclass(cls):
            raise MetadataUnavailableError(cls, "Only classes can be managed.")

        with self._lock:
            meta_class = self._cache.get(cls)
            if meta_class is not None:
                return meta_class.methods
            methods = self._methods_cache.get(cls)
            if methods is None:
                try:
                    methods = self._describe_methods(cls)
                except MetadataUnavailableError:
                    raise
                except Exception as e:
                    raise MetadataUnavailableError(cls, f"Failed to introspect methods of {cls.__name__}: {e}") from e
                self._methods_cache[cls] = methods
        return methods

    def is_assignable(self, declaring_class: Type, runtime_type: Type) -> bool:
        return inspect.isclass(runtime_type) and declaring_class in runtime_type.__mro__

    def clear(self) -> None:
        """Drop every cached descriptor."""
        with self._lock:
            self._cache.clear()
            self._methods_cache.clear()

    def _build_meta_class(self, cls: Type) -> MetaClass:
        try:
            meta_class = MetaClass(
                managed_type=cls,
                constructor=self._describe_constructor(cls),
                injected_fields=self._describe_fields(cls),
                methods=self._describe_methods(cls),
                type_closure=tuple(cls.__mro__),
            )
        except MetadataUnavailableError:
            raise
        except Exception as e:
            raise MetadataUnavailableError(cls, f"Failed to introspect {cls.__name__}: {e}") from e

        logger.debug(
            "Described %s: %d constructor parameter(s), %d field(s), %d method(s)",
            cls.__name__,
            len(meta_class.constructor.parameters),
            len(meta_class.injected_fields),
            len(meta_class.methods),
        )
        return meta_class

    def _describe_constructor(self, cls: Type) -> MetaConstructor:
        init = cls.__init__
        # object.__init__ and other slot wrappers take nothing to inject
        if not inspect.isfunction(init):
            return MetaConstructor(declaring_class=cls)
        return MetaConstructor(
            declaring_class=cls,
            parameters=self._describe_parameters(cls, init),
            roles=roles_of(init),
        )

    def _describe_fields(self, cls: Type) -> Tuple[MetaField, ...]:
        fields: Dict[str, MetaField] = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            try:
                annotations = inspect.get_annotations(klass, eval_str=True)
            except Exception as e:
                raise MetadataUnavailableError(cls, f"Cannot evaluate annotations of {klass.__name__}: {e}") from e

            for name, annotation in annotations.items():
                required_type, marker = unwrap_annotation(annotation)
                if marker is None:
                    continue
                # A redeclaration in a subclass replaces the inherited field
                fields[name] = MetaField(
                    declaring_class=klass,
                    name=name,
                    required_type=required_type,
                    qualifier=marker.name if isinstance(marker, Value) else None,
                    roles=frozenset({MemberRole.INJECT}),
                )
        return tuple(fields.values())

    def _describe_methods(self, cls: Type) -> Tuple[MetaMethod, ...]:
        names: List[str] = []
        for klass in reversed(cls.__mro__):
            for name, attribute in vars(klass).items():
                if isinstance(attribute, (staticmethod, classmethod)) and _marked(attribute):
                    raise MetadataUnavailableError(
                        cls,
                        f"Role markers on static or class method {klass.__name__}.{name} are not supported.",
                    )
                if inspect.isfunction(attribute) and not _is_dunder(name) and name not in names:
                    names.append(name)

        methods: List[MetaMethod] = []
        for name in names:
            owner, function = _most_derived(cls, name)
            if not inspect.isfunction(function):
                continue
            roles = roles_of(function)
            parameters: Tuple[MetaParameter, ...] = ()
            if roles & _PARAMETERIZED_ROLES:
                parameters = self._describe_parameters(cls, function)
            if roles & _HOOK_ROLES:
                self._check_hook_signature(cls, function)
            methods.append(MetaMethod(declaring_class=owner, name=name, parameters=parameters, roles=roles))
        return tuple(methods)

    def _describe_parameters(self, cls: Type, function: Callable[..., Any]) -> Tuple[MetaParameter, ...]:
        signature = self._signature(cls, function)
        parameters: List[MetaParameter] = []

        # Skip the bound instance parameter
        for position, param in enumerate(list(signature.parameters.values())[1:]):
            if param.kind in _VARIADIC_KINDS:
                continue

            if param.annotation is inspect.Parameter.empty:
                if param.default is not inspect.Parameter.empty:
                    continue
                raise MetadataUnavailableError(
                    cls,
                    f"Parameter '{param.name}' of {function.__qualname__} lacks type hint and has no default value.",
                )

            required_type, marker = unwrap_annotation(param.annotation)

            # Parameters with defaults keep them unless injection is requested explicitly
            if param.default is not inspect.Parameter.empty and marker is None:
                continue

            parameters.append(
                MetaParameter(
                    name=param.name,
                    position=position,
                    required_type=required_type,
                    qualifier=marker.name if isinstance(marker, Value) else None,
                    positional_only=param.kind is inspect.Parameter.POSITIONAL_ONLY,
                )
            )
        return tuple(parameters)

    def _check_hook_signature(self, cls: Type, function: Callable[..., Any]) -> None:
        signature = self._signature(cls, function)
        for param in list(signature.parameters.values())[1:]:
            if param.kind not in _VARIADIC_KINDS and param.default is inspect.Parameter.empty:
                raise MetadataUnavailableError(
                    cls,
                    f"Lifecycle hook {function.__qualname__} must not require arguments, got '{param.name}'.",
                )

    @staticmethod
    def _signature(cls: Type, function: Callable[..., Any]) -> inspect.Signature:
        try:
            return inspect.signature(function, eval_str=True)
        except Exception as e:
            raise MetadataUnavailableError(cls, f"Cannot read signature of {function.__qualname__}: {e}") from e


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _marked(descriptor: Any) -> bool:
    return bool(roles_of(descriptor) or roles_of(descriptor.__func__))


def _most_derived(cls: Type, name: str) -> Tuple[Type, Any]:
    for klass in cls.__mro__:
        if name in vars(klass):
            return klass, vars(klass)[name]
    raise MetadataUnavailableError(cls, f"Attribute '{name}' not found.")

