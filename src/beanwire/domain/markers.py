"""Markers tagging classes, fields and parameters for the lifecycle engine.

Methods are tagged with decorators::

    class Mailer:
        @inject
        def set_transport(self, transport: Transport) -> None: ...

        @post_construct
        def connect(self) -> None: ...

Fields and parameters are tagged through ``typing.Annotated``::

    class Mailer:
        transport: Annotated[Transport, Inject()]
        sender: Annotated[str, Value("mail.sender")]
"""

from typing import Annotated, Any, Callable, FrozenSet, Optional, Tuple, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field

from beanwire.domain.enums import MemberRole

F = TypeVar("F", bound=Callable[..., Any])

ROLES_ATTRIBUTE = "__beanwire_roles__"


class Inject(BaseModel):
    """Requests injection of a field, or of a parameter that has a default."""

    model_config = ConfigDict(frozen=True)


class Value(BaseModel):
    """Requests the named placeholder value ``name`` instead of a value by type."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Name of the placeholder value.")

    def __init__(self, name: str, **data: Any) -> None:
        super().__init__(name=name, **data)


InjectionMarker = Union[Inject, Value]


def _mark(role: MemberRole) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        roles = getattr(func, ROLES_ATTRIBUTE, frozenset())
        setattr(func, ROLES_ATTRIBUTE, roles | {role})
        return func

    return decorator


inject = _mark(MemberRole.INJECT)
post_construct = _mark(MemberRole.POST_CONSTRUCT)
pre_destroy = _mark(MemberRole.PRE_DESTROY)
produces = _mark(MemberRole.PRODUCES)
disposes = _mark(MemberRole.DISPOSES)


def roles_of(func: Any) -> FrozenSet[MemberRole]:
    """Return the role markers attached to a function by the decorators above."""
    return frozenset(getattr(func, ROLES_ATTRIBUTE, frozenset()))


def unwrap_annotation(annotation: Any) -> Tuple[Any, Optional[InjectionMarker]]:
    """Split an annotation into the required type and its injection marker.

    Args:
        annotation: A plain type or an ``Annotated[...]`` form.

    Returns:
        The underlying type and the first ``Inject``/``Value`` marker found,
        or None when the annotation carries no marker. A bare ``Inject``
        class is accepted as ``Inject()``.
    """
    if get_origin(annotation) is not Annotated:
        return annotation, None

    required_type, *extras = get_args(annotation)
    for extra in extras:
        if extra is Inject:
            return required_type, Inject()
        if isinstance(extra, (Inject, Value)):
            return required_type, extra
    return required_type, None
