from typing import TYPE_CHECKING, Any, Callable, FrozenSet, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field

from beanwire.domain.enums import Lifetime, MemberKind, MemberRole

if TYPE_CHECKING:
    from beanwire.domain.interfaces import IContainer


class MetaParameter(BaseModel):
    """Describes one parameter of a constructor or method.

    Attributes:
        name: Parameter name.
        position: Zero-based position, not counting ``self``.
        required_type: The type a value must satisfy.
        qualifier: Name of a placeholder value requested through ``Value``.
        positional_only: Whether the parameter must be passed by position.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="The parameter name.")
    position: int = Field(..., description="Zero-based position of the parameter.")
    required_type: Any = Field(..., description="The type a value must satisfy.")
    qualifier: Optional[str] = Field(default=None, description="Name of the requested placeholder value.")
    positional_only: bool = Field(default=False, description="Whether the parameter is positional-only.")


class MetaMember(BaseModel):
    """Common description of a constructor, field or method.

    Attributes:
        kind: Tag telling which kind of member this is.
        declaring_class: The class whose body declares the member.
        name: Member name.
        roles: Role markers attached to the member.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: MemberKind
    declaring_class: Type = Field(..., description="The class declaring this member.")
    name: str = Field(..., description="The member name.")
    roles: FrozenSet[MemberRole] = Field(default_factory=frozenset, description="Role markers.")

    @property
    def display_name(self) -> str:
        return f"{self.declaring_class.__name__}.{self.name}"

    def has_role(self, role: MemberRole) -> bool:
        return role in self.roles

    @property
    def is_producer_or_disposer(self) -> bool:
        return MemberRole.PRODUCES in self.roles or MemberRole.DISPOSES in self.roles


class MetaConstructor(MetaMember):
    """Describes the constructor of a managed type."""

    kind: MemberKind = MemberKind.CONSTRUCTOR
    name: str = "__init__"
    parameters: Tuple[MetaParameter, ...] = Field(default=(), description="Constructor parameters.")

    def invoke(self, *args: Any, **kwargs: Any) -> Any:
        return self.declaring_class(*args, **kwargs)


class MetaField(MetaMember):
    """Describes an injectable field declared through a class annotation."""

    kind: MemberKind = MemberKind.FIELD
    required_type: Any = Field(..., description="The type a value must satisfy.")
    qualifier: Optional[str] = Field(default=None, description="Name of the requested placeholder value.")

    def assign(self, instance: Any, value: Any) -> None:
        setattr(instance, self.name, value)


class MetaMethod(MetaMember):
    """Describes a method of a managed type.

    Invocation dispatches by name on the instance, so an override defined by
    the runtime type is the one called.
    """

    kind: MemberKind = MemberKind.METHOD
    parameters: Tuple[MetaParameter, ...] = Field(default=(), description="Method parameters.")

    def invoke(self, instance: Any, *args: Any, **kwargs: Any) -> Any:
        return getattr(instance, self.name)(*args, **kwargs)


InjectableMember = Union[MetaConstructor, MetaField, MetaMethod]


class MetaClass(BaseModel):
    """Immutable structural description of a managed type.

    Attributes:
        managed_type: The described class.
        constructor: The class constructor.
        injected_fields: Fields requesting injection, base classes first.
        methods: Most derived definition of every method, base classes first.
        type_closure: The class and all its supertypes (its MRO).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    managed_type: Type = Field(..., description="The described class.")
    constructor: MetaConstructor = Field(..., description="The class constructor.")
    injected_fields: Tuple[MetaField, ...] = Field(default=(), description="Injectable fields.")
    methods: Tuple[MetaMethod, ...] = Field(default=(), description="Methods in base-first order.")
    type_closure: Tuple[Type, ...] = Field(default=(), description="The class MRO.")

    @property
    def post_construct_methods(self) -> Tuple[MetaMethod, ...]:
        return tuple(method for method in self.methods if method.has_role(MemberRole.POST_CONSTRUCT))

    @property
    def pre_destroy_methods(self) -> Tuple[MetaMethod, ...]:
        return tuple(method for method in self.methods if method.has_role(MemberRole.PRE_DESTROY))

    def is_subtype_of(self, cls: Type) -> bool:
        return cls in self.type_closure


class InjectionPoint(BaseModel):
    """One site that must receive an externally resolved value.

    Attributes:
        member: The constructor, field or method owning the point.
        element: The field itself, or one parameter of the owning member.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    member: InjectableMember = Field(..., description="The member owning this injection point.")
    element: Union[MetaField, MetaParameter] = Field(..., description="The injected field or parameter.")

    @property
    def required_type(self) -> Any:
        return self.element.required_type

    @property
    def qualifier(self) -> Optional[str]:
        return self.element.qualifier

    @property
    def display_name(self) -> str:
        if isinstance(self.element, MetaField):
            return self.member.display_name
        return f"{self.member.display_name}({self.element.name})"


class InitializationContext(BaseModel):
    """Correlates the construction of one instance.

    The engine never inspects it; it is handed unchanged to the resolver.

    Attributes:
        managed_type: The type being constructed, if known.
        parent: The context of the instance whose construction caused this one.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    managed_type: Optional[Type] = Field(default=None, description="The type being constructed.")
    parent: Optional["InitializationContext"] = Field(default=None, description="The enclosing context.")

    def child(self, managed_type: Type) -> "InitializationContext":
        return InitializationContext(managed_type=managed_type, parent=self)


class HookOutcome(BaseModel):
    """Result of running one lifecycle hook.

    Attributes:
        method: The hook that ran.
        error: The failure raised by the hook, if any.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: MetaMethod = Field(..., description="The hook that ran.")
    error: Optional[BaseException] = Field(default=None, description="The failure raised by the hook.")

    @property
    def succeeded(self) -> bool:
        return self.error is None


class Registration(BaseModel):
    """Value object representing a container registration.

    Attributes:
        dependency_type: The type being registered.
        builder: Factory function that receives container and returns instance.
        lifetime: How long the instance should live.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    dependency_type: Type = Field(..., description="The dependency type to be registered.")
    builder: Callable[["IContainer"], Any] = Field(
        ..., description="The builder function to create an instance of the class."
    )
    lifetime: Lifetime = Field(..., description="The lifetime of the registered dependency.")


class DependencyMetadata(BaseModel):
    """Tracks registration details and resolution statistics.

    Attributes:
        registration: The original registration configuration.
        resolution_count: Number of times this dependency has been resolved.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    registration: Registration = Field(..., description="The registration details of the dependency.")
    resolution_count: int = Field(
        default=0,
        description="Number of times this dependency has been resolved.",
    )
