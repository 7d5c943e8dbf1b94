"""Unit tests for InjectionTarget."""

from typing import Annotated
from unittest.mock import Mock

import pytest

from beanwire.application.element_manager import ElementManager
from beanwire.application.injection_context import InjectionContextFactory
from beanwire.application.injection_target import InjectionTarget, create_injection_target
from beanwire.config import EngineSettings
from beanwire.domain import (
    IInjectionTarget,
    MetadataUnavailableError,
    InitializationContext,
    Inject,
    PreDestroyError,
    TargetInvocationError,
    TeardownPolicy,
    UnresolvedDependencyError,
    disposes,
    inject,
    post_construct,
    pre_destroy,
    produces,
)
from beanwire.infrastructure.testing import RecordingResolver


class Database:
    pass


class Cache:
    pass


class Clock:
    pass


@pytest.fixture
def values():
    return {Database: Database(), Cache: Cache(), Clock: Clock()}


@pytest.fixture
def resolver(values):
    return RecordingResolver(by_type=values)


@pytest.fixture
def settings():
    return EngineSettings(teardown_policy=TeardownPolicy.BEST_EFFORT)


def target_for(cls, resolver, settings=None, factory=None):
    factory = factory if factory is not None else InjectionContextFactory(resolver)
    return create_injection_target(cls, ElementManager(), factory, settings or EngineSettings())


def run_lifecycle(target, context=None):
    context = context or InitializationContext(managed_type=target.managed_type)
    instance = target.produce(context)
    target.inject(instance, context)
    target.post_construct(instance)
    return instance


class TestCreateInjectionTarget:
    """Test cases for assembling injection targets."""

    def test_target_implements_interface(self, resolver):
        """Test that InjectionTarget implements IInjectionTarget."""

        class Service:
            pass

        target = target_for(Service, resolver)

        assert isinstance(target, InjectionTarget)
        assert isinstance(target, IInjectionTarget)
        assert target.managed_type is Service

    def test_hook_lists_are_fixed_at_construction(self, resolver):
        """Test that hook lists are computed once and reused."""

        class Service:
            @post_construct
            def first(self):
                pass

            @pre_destroy
            def last(self):
                pass

        target = target_for(Service, resolver)

        assert [m.name for m in target.post_construct_methods] == ["first"]
        assert [m.name for m in target.pre_destroy_methods] == ["last"]
        assert target.post_construct_methods is target.post_construct_methods

    def test_get_injection_points(self, resolver):
        """Test that every injection point is exposed for inspection."""

        class Service:
            cache: Annotated[Cache, Inject()]

            def __init__(self, db: Database):
                pass

            @inject
            def set_clock(self, clock: Clock):
                pass

        points = target_for(Service, resolver).get_injection_points()

        assert [p.display_name for p in points] == [
            "Service.__init__(db)",
            "Service.cache",
            "Service.set_clock(clock)",
        ]
        assert isinstance(points, tuple)


class TestProduce:
    """Test cases for produce."""

    def test_constructor_context_built_once_with_constructor_points(self, resolver):
        """Test that produce builds exactly one constructor context with only constructor points."""

        class Service:
            cache: Annotated[Cache, Inject()]

            def __init__(self, db: Database, clock: Clock):
                self.db = db
                self.clock = clock

            @inject
            def configure(self, db: Database):
                pass

        factory = Mock(wraps=InjectionContextFactory(resolver))
        target = target_for(Service, resolver, factory=factory)

        instance = target.produce(InitializationContext())

        assert isinstance(instance, Service)
        factory.for_constructor.assert_called_once()
        constructor, points = factory.for_constructor.call_args.args
        assert constructor.declaring_class is Service
        assert [p.element.name for p in points] == ["db", "clock"]
        assert all(p.member == constructor for p in points)

    def test_produce_does_not_inject(self, resolver):
        """Test that produce leaves fields and methods untouched."""

        class Service:
            cache: Annotated[Cache, Inject()]

            @inject
            def ready(self):
                self.ready_called = True

        instance = target_for(Service, resolver).produce(InitializationContext())

        assert not hasattr(instance, "cache")
        assert not hasattr(instance, "ready_called")

    def test_unresolved_constructor_parameter_returns_no_instance(self):
        """Test that a missing constructor value fails produce and names the point."""
        created = []

        class Service:
            def __init__(self, db: Database):
                created.append(self)

        target = target_for(Service, RecordingResolver())

        with pytest.raises(UnresolvedDependencyError) as exc_info:
            target.produce(InitializationContext())

        assert exc_info.value.point.display_name == "Service.__init__(db)"
        assert created == []

    def test_constructor_failure_is_target_invocation_error(self, resolver):
        """Test that a raising constructor surfaces as TargetInvocationError."""

        class Service:
            def __init__(self, db: Database):
                raise RuntimeError("cannot connect")

        with pytest.raises(TargetInvocationError, match="cannot connect"):
            target_for(Service, resolver).produce(InitializationContext())


class TestInjectFields:
    """Test cases for field injection."""

    def test_fields_are_set(self, resolver, values):
        """Test that every injectable field is set."""

        class Service:
            db: Annotated[Database, Inject()]
            cache: Annotated[Cache, Inject()]

        target = target_for(Service, resolver)
        instance = Service()

        target.inject(instance, InitializationContext())

        assert instance.db is values[Database]
        assert instance.cache is values[Cache]

    def test_base_fields_are_set_on_subclass_instance(self, resolver, values):
        """Test that fields declared on the managed type are injected into subclass instances."""

        class Base:
            db: Annotated[Database, Inject()]

        class Child(Base):
            pass

        target = target_for(Base, resolver)
        instance = Child()

        target.inject(instance, InitializationContext())

        assert instance.db is values[Database]

    def test_fields_of_unrelated_declaring_class_are_skipped(self, resolver, values):
        """Test that only fields declared in types of the runtime instance are applied."""

        class Base:
            db: Annotated[Database, Inject()]

        class Child(Base):
            cache: Annotated[Cache, Inject()]

        target = target_for(Child, resolver)
        instance = Base()

        target.inject(instance, InitializationContext())

        assert instance.db is values[Database]
        assert not hasattr(instance, "cache")

    def test_fields_are_injected_before_methods(self, resolver):
        """Test that methods observe already injected fields."""

        class Service:
            db: Annotated[Database, Inject()]

            @inject
            def configure(self, cache: Cache):
                self.saw_db = hasattr(self, "db")

        instance = Service()
        target_for(Service, resolver).inject(instance, InitializationContext())

        assert instance.saw_db is True

    def test_failed_field_keeps_earlier_fields(self, values):
        """Test that inject does not roll back earlier assignments."""

        class Service:
            db: Annotated[Database, Inject()]
            cache: Annotated[Cache, Inject()]

        resolver = RecordingResolver(by_type={Database: values[Database]})
        instance = Service()

        with pytest.raises(UnresolvedDependencyError):
            target_for(Service, resolver).inject(instance, InitializationContext())

        assert instance.db is values[Database]
        assert not hasattr(instance, "cache")


class TestInjectMethods:
    """Test cases for method injection."""

    def test_method_with_several_points_is_invoked_once(self, resolver, values):
        """Test that a method referenced by several points runs once."""

        class Service:
            def __init__(self):
                self.calls = []

            @inject
            def configure(self, db: Database, cache: Cache, clock: Clock):
                self.calls.append((db, cache, clock))

        instance = Service()
        target_for(Service, resolver).inject(instance, InitializationContext())

        assert instance.calls == [(values[Database], values[Cache], values[Clock])]

    def test_each_inject_call_invokes_again(self, resolver):
        """Test that the visited set is scoped to a single inject call."""

        class Service:
            def __init__(self):
                self.calls = 0

            @inject
            def configure(self, db: Database):
                self.calls += 1

        target = target_for(Service, resolver)
        instance = Service()

        target.inject(instance, InitializationContext())
        target.inject(instance, InitializationContext())

        assert instance.calls == 2

    def test_zero_argument_inject_method_is_invoked(self, resolver):
        """Test that injectable methods without parameters are called."""

        class Service:
            def __init__(self):
                self.calls = 0

            @inject
            def ready(self):
                self.calls += 1

        instance = Service()
        target_for(Service, resolver).inject(instance, InitializationContext())

        assert instance.calls == 1

    def test_overridden_zero_argument_method_is_invoked_once(self, resolver):
        """Test that an override of an injectable method runs once, not twice."""
        calls = []

        class Base:
            @inject
            def ready(self):
                calls.append("base")

        class Child(Base):
            @inject
            def ready(self):
                calls.append("child")

        target_for(Base, resolver).inject(Child(), InitializationContext())

        assert calls == ["child"]

    def test_overridden_parameter_method_is_invoked_once(self, resolver):
        """Test that an overridden injectable method with parameters runs once on the override."""
        calls = []

        class Base:
            @inject
            def configure(self, db: Database):
                calls.append("base")

        class Child(Base):
            @inject
            def configure(self, db: Database):
                calls.append("child")

        target_for(Base, resolver).inject(Child(), InitializationContext())

        assert calls == ["child"]

    def test_subclass_zero_argument_inject_method_is_invoked(self, resolver):
        """Test that injectable methods only present on the runtime type are called."""

        class Base:
            pass

        class Child(Base):
            @inject
            def ready(self):
                self.ready_called = True

        instance = Child()
        target_for(Base, resolver).inject(instance, InitializationContext())

        assert instance.ready_called is True

    def test_producer_and_disposer_methods_are_never_injected(self, resolver):
        """Test that producer and disposer methods are skipped even when marked injectable."""
        calls = []

        class Service:
            @inject
            @produces
            def connection(self, db: Database) -> Cache:
                calls.append("produces")
                return Cache()

            @inject
            @disposes
            def release(self, cache: Cache):
                calls.append("disposes")

            @inject
            @produces
            def clock(self) -> Clock:
                calls.append("zero-arg produces")
                return Clock()

            @inject
            def configure(self, db: Database):
                calls.append("configure")

        target = target_for(Service, resolver)
        target.inject(Service(), InitializationContext())

        assert calls == ["configure"]
        assert "Service.connection(db)" in [p.display_name for p in target.get_injection_points()]

    def test_method_failure_propagates(self, resolver):
        """Test that a raising injectable method aborts inject."""

        class Service:
            @inject
            def configure(self, db: Database):
                raise ValueError("bad config")

        with pytest.raises(TargetInvocationError) as exc_info:
            target_for(Service, resolver).inject(Service(), InitializationContext())

        assert isinstance(exc_info.value.cause, ValueError)

    def test_context_is_forwarded(self, resolver):
        """Test that the caller context reaches the resolver."""

        class Service:
            db: Annotated[Database, Inject()]

            @inject
            def configure(self, cache: Cache):
                pass

        context = InitializationContext(managed_type=Service)
        target_for(Service, resolver).inject(Service(), context)

        assert [recorded for _, recorded in resolver.requests] == [context, context]


class TestInjectUnmanagedSubclass:
    """Test cases for subclass instances whose own type cannot be managed."""

    @staticmethod
    def hierarchy():
        class Base:
            db: Annotated[Database, Inject()]

            def __init__(self):
                self.calls = []

            @inject
            def configure(self, cache: Cache):
                self.calls.append("base.configure")

            @inject
            def ready(self):
                self.calls.append("base.ready")

        class Legacy(Base):
            label: "UndeclaredLabel"  # noqa: F821

            def __init__(self, label, size=3):
                super().__init__()
                self.label = label

            @inject
            def configure(self, cache: Cache):
                self.calls.append("legacy.configure")

        return Base, Legacy

    def test_base_fields_and_methods_are_injected(self, resolver, values):
        """Test inject on a subclass with an untyped constructor and unevaluable annotations."""
        Base, Legacy = self.hierarchy()
        target = target_for(Base, resolver)
        instance = Legacy("x")

        target.inject(instance, InitializationContext(managed_type=Base))

        assert instance.db is values[Database]
        assert instance.calls == ["legacy.configure", "base.ready"]

    def test_runtime_type_is_not_a_managed_type(self, resolver):
        """Test that only the runtime type's methods are inspected during inject."""
        Base, Legacy = self.hierarchy()
        manager = ElementManager()
        target = create_injection_target(Base, manager, InjectionContextFactory(resolver), EngineSettings())

        target.inject(Legacy("x"), InitializationContext())

        assert Legacy not in manager._cache
        with pytest.raises(MetadataUnavailableError):
            manager.get_meta_class(Legacy)

    def test_pre_destroy_on_subclass_instance(self, resolver):
        """Test that the base target's hooks run on a subclass instance."""

        class Base:
            @pre_destroy
            def close(self):
                self.closed = True

        class Legacy(Base):
            def __init__(self, label):
                self.label = label

        instance = Legacy("x")

        outcomes = target_for(Base, resolver).pre_destroy(instance)

        assert instance.closed is True
        assert [o.method.name for o in outcomes] == ["close"]


class TestPostConstruct:
    """Test cases for post-construct hooks."""

    def test_hooks_run_in_declaration_order(self, resolver):
        """Test that hooks run in their recorded order."""
        calls = []

        class Service:
            @post_construct
            def second(self):
                calls.append("second")

            @post_construct
            def first(self):
                calls.append("first")

        target_for(Service, resolver).post_construct(Service())

        assert calls == ["second", "first"]

    def test_reordering_declarations_changes_order(self, resolver):
        """Test that the hook order follows declaration order deterministically."""
        calls = []

        class Service:
            @post_construct
            def first(self):
                calls.append("first")

            @post_construct
            def second(self):
                calls.append("second")

        target_for(Service, resolver).post_construct(Service())

        assert calls == ["first", "second"]

    def test_base_hooks_run_before_subclass_hooks(self, resolver):
        """Test base-first hook ordering."""
        calls = []

        class Base:
            @post_construct
            def base_init(self):
                calls.append("base")

        class Child(Base):
            @post_construct
            def child_init(self):
                calls.append("child")

        target_for(Child, resolver).post_construct(Child())

        assert calls == ["base", "child"]

    def test_failure_halts_remaining_hooks(self, resolver):
        """Test that post-construct is fail-fast."""
        calls = []

        class Service:
            @post_construct
            def first(self):
                raise RuntimeError("init failed")

            @post_construct
            def second(self):
                calls.append("second")

        with pytest.raises(TargetInvocationError, match="init failed"):
            target_for(Service, resolver).post_construct(Service())

        assert calls == []

    def test_hooks_do_not_resolve_values(self, resolver):
        """Test that hooks are called without consulting the resolver."""

        class Service:
            @post_construct
            def start(self):
                pass

        target_for(Service, resolver).post_construct(Service())

        assert resolver.requests == []


class TestPreDestroy:
    """Test cases for pre-destroy hooks."""

    def test_hooks_run_in_order_and_report_outcomes(self, resolver):
        """Test successful teardown outcomes."""
        calls = []

        class Service:
            @pre_destroy
            def flush(self):
                calls.append("flush")

            @pre_destroy
            def close(self):
                calls.append("close")

        outcomes = target_for(Service, resolver).pre_destroy(Service())

        assert calls == ["flush", "close"]
        assert [(o.method.name, o.succeeded) for o in outcomes] == [("flush", True), ("close", True)]

    def test_best_effort_runs_remaining_hooks(self, resolver, settings):
        """Test that a failing hook does not stop later hooks under best-effort policy."""
        calls = []

        class Service:
            @pre_destroy
            def flush(self):
                raise RuntimeError("flush failed")

            @pre_destroy
            def close(self):
                calls.append("close")

        with pytest.raises(PreDestroyError) as exc_info:
            target_for(Service, resolver, settings).pre_destroy(Service())

        assert calls == ["close"]
        outcomes = exc_info.value.outcomes
        assert [(o.method.name, o.succeeded) for o in outcomes] == [("flush", False), ("close", True)]
        assert isinstance(outcomes[0].error, TargetInvocationError)

    def test_fail_fast_stops_at_first_failure(self, resolver):
        """Test fail-fast teardown policy."""
        calls = []

        class Service:
            @pre_destroy
            def flush(self):
                raise RuntimeError("flush failed")

            @pre_destroy
            def close(self):
                calls.append("close")

        target = target_for(Service, resolver, EngineSettings(teardown_policy=TeardownPolicy.FAIL_FAST))

        with pytest.raises(TargetInvocationError, match="flush failed"):
            target.pre_destroy(Service())

        assert calls == []

    def test_no_hooks(self, resolver):
        """Test teardown of a type without hooks."""

        class Service:
            pass

        assert target_for(Service, resolver).pre_destroy(Service()) == []


class TestFullLifecycle:
    """Test cases for the produce, inject, post-construct sequence."""

    def test_fields_are_set_before_post_construct(self, resolver, values):
        """Test that post-construct observes a constructor dependency and both injected fields."""

        class Service:
            cache: Annotated[Cache, Inject()]
            clock: Annotated[Clock, Inject()]

            def __init__(self, db: Database):
                self.db = db

            @post_construct
            def start(self):
                self.observed = (self.db, self.cache, self.clock)

        instance = run_lifecycle(target_for(Service, resolver))

        assert instance.observed == (values[Database], values[Cache], values[Clock])
