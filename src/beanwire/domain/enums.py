from enum import Enum


class Lifetime(str, Enum):
    """Defines the lifetime of a container registration.

    Attributes:
        SINGLETON: Single instance shared across entire application.
        TRANSIENT: New instance created on each resolution.
    """

    TRANSIENT = "transient"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value


class MemberKind(str, Enum):
    """Tag distinguishing the structural kinds of injectable members."""

    CONSTRUCTOR = "constructor"
    FIELD = "field"
    METHOD = "method"

    def __str__(self) -> str:
        return self.value


class MemberRole(str, Enum):
    """Role markers a member can carry.

    Attributes:
        INJECT: Member receives injected values.
        POST_CONSTRUCT: No-argument hook run after injection.
        PRE_DESTROY: No-argument hook run before teardown.
        PRODUCES: Method supplying values for other injection points.
        DISPOSES: Method releasing values produced elsewhere.
    """

    INJECT = "inject"
    POST_CONSTRUCT = "post_construct"
    PRE_DESTROY = "pre_destroy"
    PRODUCES = "produces"
    DISPOSES = "disposes"

    def __str__(self) -> str:
        return self.value


class TeardownPolicy(str, Enum):
    """How pre-destroy hook failures are handled.

    Attributes:
        BEST_EFFORT: Run every hook and report all failures together.
        FAIL_FAST: Stop at the first failing hook.
    """

    BEST_EFFORT = "best_effort"
    FAIL_FAST = "fail_fast"

    def __str__(self) -> str:
        return self.value
