from typing import TYPE_CHECKING, Any, List, Optional

if TYPE_CHECKING:
    from beanwire.domain.models import HookOutcome, InjectionPoint, MetaMember


def _type_name(value: Any) -> str:
    return getattr(value, "__name__", repr(value))


class BeanwireException(Exception):
    """Base exception for lifecycle engine errors."""


class MetadataUnavailableError(BeanwireException):
    """Raised when a managed type cannot be introspected.

    This occurs when:
    - The object given is not a class.
    - An injected parameter lacks a type hint.
    - A type hint cannot be evaluated.

    This is a setup-time failure: no instance of the type can be managed.

    Attributes:
        cls: The type that could not be described.
        reason: Optional reason for the failure.
    """

    def __init__(self, cls: Any, reason: Optional[str] = None) -> None:
        self.cls = cls
        self.reason = reason
        message = f"Metadata unavailable for type: {_type_name(cls)}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class UnresolvedDependencyError(BeanwireException):
    """Raised when no value satisfies an injection point.

    Attributes:
        required_type: The type that was requested.
        reason: Optional reason for the failure.
        point: The injection point being satisfied, when known.
    """

    def __init__(
        self,
        required_type: Any,
        reason: Optional[str] = None,
        point: Optional["InjectionPoint"] = None,
    ) -> None:
        self.required_type = required_type
        self.reason = reason
        self.point = point
        message = f"Cannot resolve dependency for type: {_type_name(required_type)}"
        if point is not None:
            message += f" at {point.display_name}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class TargetInvocationError(BeanwireException):
    """Raised when constructing, assigning or calling a member fails.

    Attributes:
        member: The member whose invocation failed.
        instance: The target instance, or None for constructors.
        cause: The original exception.
    """

    def __init__(self, member: "MetaMember", instance: Any, cause: BaseException) -> None:
        self.member = member
        self.instance = instance
        self.cause = cause
        message = f"Failed to invoke {member.display_name}"
        if instance is not None:
            message += f" on {type(instance).__name__} instance"
        message += f": {type(cause).__name__}: {cause}"
        super().__init__(message)


class PreDestroyError(BeanwireException):
    """Raised when one or more pre-destroy hooks failed.

    Carries the outcome of every hook that ran, successful or not.

    Attributes:
        instance: The instance being torn down.
        outcomes: Outcome of each hook in invocation order.
    """

    def __init__(self, instance: Any, outcomes: List["HookOutcome"]) -> None:
        self.instance = instance
        self.outcomes = outcomes
        failed = [outcome.method.display_name for outcome in outcomes if not outcome.succeeded]
        message = f"{len(failed)} pre-destroy hook(s) failed for {type(instance).__name__}: {', '.join(failed)}"
        super().__init__(message)

    @property
    def failures(self) -> List["HookOutcome"]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]


class LifetimeError(BeanwireException):
    """Raised for invalid lifetime configurations.

    This occurs when:
    - Registering the same type with conflicting lifetimes.
    - Overriding a registration with an unsupported lifetime.
    """
