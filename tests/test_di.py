"""
Dependency Injection (di/)

Tests Container, Providers, Scopes, Decorators, Diagnostics, Errors.
"""

from typing import Annotated
import logging

import pytest

from plinth.di.core import Container
from plinth.di.decorators import Inject, inject, record_injections, service
from plinth.di.diagnostics import (
    ConsoleDiagnosticListener,
    DIDiagnostics,
    DIEventType,
    RecordingDiagnosticListener,
)
from plinth.di.errors import (
    DependencyCycleError,
    DuplicateProviderError,
    InvalidProviderError,
    ProviderNotFoundError,
)
from plinth.di.providers import ClassProvider, FactoryProvider, MISSING, Provider, ValueProvider
from plinth.di.scopes import ServiceScope, is_cacheable


# ============================================================================
# Scopes & Providers
# ============================================================================

class TestScopes:

    def test_scope_values(self):
        assert ServiceScope.SINGLETON.value == "singleton"
        assert ServiceScope.TRANSIENT.value == "transient"

    def test_cacheable(self):
        assert is_cacheable(ServiceScope.SINGLETON) is True
        assert is_cacheable("singleton") is True
        assert is_cacheable(ServiceScope.TRANSIENT) is False
        assert is_cacheable("transient") is False


class TestProviders:

    def test_kinds(self):
        class Repo:
            pass

        assert ClassProvider(Repo).kind == "class"
        assert ValueProvider("x", 1).kind == "value"
        assert FactoryProvider("x", lambda c: 1).kind == "factory"
        assert Provider(token="x").kind is None

    def test_none_is_a_value(self):
        provider = ValueProvider("nothing", None)
        assert provider.kind == "value"
        assert provider.use_value is None
        assert Provider(token="x").use_value is MISSING

    def test_class_provider_token(self):
        class Repo:
            pass

        assert ClassProvider(Repo).token is Repo
        assert ClassProvider(Repo, token="repo").token == "repo"


# ============================================================================
# Container
# ============================================================================

class TestContainer:

    def test_singleton_identity(self, container):
        class Repo:
            pass

        container.register(ClassProvider(Repo))
        assert container.resolve(Repo) is container.resolve(Repo)

    def test_transient_distinct(self, container):
        class Repo:
            pass

        container.register(ClassProvider(Repo, scope=ServiceScope.TRANSIENT))
        assert container.resolve(Repo) is not container.resolve(Repo)

    def test_value_provider(self, container):
        container.register(ValueProvider("config.db_url", "postgres://localhost/db"))
        assert container.resolve("config.db_url") == "postgres://localhost/db"

    def test_none_value(self, container):
        container.register(ValueProvider("nothing", None))
        assert container.resolve("nothing") is None

    def test_factory_receives_container(self, container):
        seen = []

        def factory(c):
            seen.append(c)
            return object()

        container.register(FactoryProvider("clock", factory))
        first = container.resolve("clock")
        assert container.resolve("clock") is first
        assert seen == [container]

    def test_transient_factory(self, container):
        container.register(FactoryProvider("id", lambda c: object(), scope="transient"))
        assert container.resolve("id") is not container.resolve("id")

    def test_register_is_chainable(self, container):
        assert container.register(ValueProvider("a", 1)) is container
        container.register(ValueProvider("b", 2), ValueProvider("c", 3))
        assert [t for t, _ in container.providers()] == ["a", "b", "c"]

    def test_equal_reregistration_is_noop(self, container):
        container.register(ValueProvider("a", 1))
        container.register(ValueProvider("a", 1))
        assert container.resolve("a") == 1

    def test_duplicate_token(self, container):
        container.register(ValueProvider("a", 1))
        with pytest.raises(DuplicateProviderError):
            container.register(ValueProvider("a", 2))

    def test_invalid_provider(self, container):
        container.register(Provider(token="broken"))
        with pytest.raises(InvalidProviderError, match="broken"):
            container.resolve("broken")

    def test_not_found_on_root(self, container):
        class Missing:
            pass

        with pytest.raises(ProviderNotFoundError) as exc_info:
            container.resolve(Missing)
        message = str(exc_info.value)
        assert "Missing" in message
        assert "Suggested fixes" in message
        assert "@service()" in message

    def test_not_found_names_requester(self, container):
        class Needs:
            def __init__(self, dep):
                self.dep = dep

        container.register(ClassProvider(Needs, deps=["absent"]))
        with pytest.raises(ProviderNotFoundError, match="Requested by: .*Needs"):
            container.resolve(Needs)

    def test_not_found_in_parent_names_child_requester(self, container):
        class Service:
            def __init__(self, repo):
                self.repo = repo

        child = container.child("feature")
        child.register(ClassProvider(Service, deps=["repo"]))
        with pytest.raises(ProviderNotFoundError, match="Requested by: .*Service") as info:
            child.resolve(Service)
        assert info.value.requested_by is Service
        assert info.value.token == "repo"

    def test_dependency_cycle(self, container):
        class A:
            def __init__(self, b):
                pass

        class B:
            def __init__(self, a):
                pass

        container.register(ClassProvider(A, deps=[B]), ClassProvider(B, deps=[A]))
        with pytest.raises(DependencyCycleError) as exc_info:
            container.resolve(A)
        assert exc_info.value.cycle == [A, B, A]


class TestHierarchy:

    def test_child_shadows_parent(self, container):
        container.register(ValueProvider("greeting", "parent"))
        child = container.child("child")
        child.register(ValueProvider("greeting", "child"))
        assert child.resolve("greeting") == "child"
        assert container.resolve("greeting") == "parent"

    def test_ancestor_instance_is_shared(self, container):
        class Repo:
            pass

        container.register(ClassProvider(Repo))
        grandchild = container.child().child()
        assert grandchild.resolve(Repo) is container.resolve(Repo)

    def test_parent_cannot_see_child(self, container):
        child = container.child()
        child.register(ValueProvider("local", 1))
        with pytest.raises(ProviderNotFoundError):
            container.resolve("local")

    def test_has_and_is_registered(self, container):
        container.register(ValueProvider("a", 1))
        child = container.child()
        assert not child.has("a")
        assert child.is_registered("a")
        assert child.parent is container

    def test_child_shares_diagnostics(self, container):
        assert container.child().diagnostics is container.diagnostics


# ============================================================================
# Constructor dependencies
# ============================================================================

class TestConstructorDeps:

    def test_declared_deps(self, registry, container):
        @service(registry=registry)
        class Repo:
            pass

        @service([Repo], registry=registry)
        class Users:
            def __init__(self, repo):
                self.repo = repo

        container.add_class(Repo).add_class(Users)
        assert container.resolve(Users).repo is container.resolve(Repo)

    def test_override_replaces_declared_token(self, registry, container):
        class Real:
            pass

        class Fake:
            pass

        @service([Real], registry=registry)
        class Users:
            def __init__(self, repo=Inject(Fake)):
                self.repo = repo

        container.register(ClassProvider(Real), ClassProvider(Fake))
        container.add_class(Users)
        assert isinstance(container.resolve(Users).repo, Fake)

    def test_overrides_only_dense_with_gaps(self, registry, container):
        class Repo:
            pass

        @service(registry=registry)
        class Users:
            def __init__(self, first, repo=Inject(Repo)):
                self.first = first
                self.repo = repo

        container.register(ClassProvider(Repo))
        container.add_class(Users)
        users = container.resolve(Users)
        assert users.first is None
        assert isinstance(users.repo, Repo)

    def test_annotated_inject_uses_annotation(self, registry):
        class Repo:
            pass

        @service(registry=registry)
        class Users:
            def __init__(self, repo: Annotated[Repo, Inject()]):
                self.repo = repo

        assert registry.inject_params(Users) == {0: Repo}

    def test_inject_without_token_needs_annotation(self, registry):
        class Users:
            def __init__(self, repo=inject()):
                pass

        with pytest.raises(TypeError, match="needs a token"):
            record_injections(Users, registry)

    def test_inherited_constructor_injection(self, registry, container):
        class Repo:
            pass

        class Base:
            def __init__(self, repo=Inject(Repo)):
                self.repo = repo

        @service(registry=registry)
        class Users(Base):
            pass

        assert registry.inject_params(Users) == {0: Repo}
        container.register(ClassProvider(Repo))
        container.add_class(Users)
        assert isinstance(container.resolve(Users).repo, Repo)

    def test_default_constructor_records_nothing(self, registry):
        class Plain:
            pass

        record_injections(Plain, registry)
        assert registry.inject_params(Plain) == {}

    def test_no_deps_constructs_without_arguments(self, container):
        class Plain:
            def __init__(self):
                self.ready = True

        container.register(ClassProvider(Plain))
        assert container.resolve(Plain).ready

    def test_end_to_end_repo_service(self, container):
        created = []

        class Repo:
            def __init__(self):
                created.append(self)

        class Service:
            def __init__(self, repo):
                self.repo = repo

        container.register(ClassProvider(Repo), ClassProvider(Service, deps=[Repo]))
        first = container.resolve(Service)
        second = container.resolve(Service)
        assert first is second
        assert len(created) == 1
        assert first.repo is created[0]


# ============================================================================
# Auto-registration
# ============================================================================

class TestAutoRegistration:

    def test_declared_service_resolves_without_registration(self, registry, container):
        @service(registry=registry)
        class Clock:
            pass

        assert isinstance(container.resolve(Clock), Clock)
        assert container.has(Clock)

    def test_undeclared_class_is_not_registered(self, container):
        class Clock:
            pass

        with pytest.raises(ProviderNotFoundError):
            container.resolve(Clock)

    def test_disabled(self, registry):
        @service(registry=registry)
        class Clock:
            pass

        strict = Container(registry=registry, auto_register=False)
        with pytest.raises(ProviderNotFoundError):
            strict.resolve(Clock)

    def test_ancestor_provider_wins(self, registry, container):
        @service(registry=registry)
        class Clock:
            pass

        container.add_class(Clock)
        child = container.child()
        assert child.resolve(Clock) is container.resolve(Clock)
        assert not child.has(Clock)


# ============================================================================
# Diagnostics
# ============================================================================

class TestDiagnostics:

    def test_events(self, registry):
        diagnostics = DIDiagnostics()
        listener = RecordingDiagnosticListener()
        diagnostics.add_listener(listener)

        @service(registry=registry)
        class Clock:
            pass

        c = Container(registry=registry, diagnostics=diagnostics)
        c.register(ValueProvider("a", 1))
        c.resolve(Clock)

        def tokens(event_type):
            return [e.token.rsplit(".", 1)[-1] for e in listener.of_type(event_type)]

        assert tokens(DIEventType.REGISTRATION) == ["a", "Clock"]
        assert tokens(DIEventType.AUTO_REGISTRATION) == ["Clock"]
        assert tokens(DIEventType.RESOLUTION_SUCCESS) == ["Clock"]

    def test_failure_event(self, registry):
        diagnostics = DIDiagnostics()
        listener = RecordingDiagnosticListener()
        diagnostics.add_listener(listener)

        def boom(c):
            raise RuntimeError("boom")

        c = Container(registry=registry, diagnostics=diagnostics)
        c.register(FactoryProvider("f", boom))
        with pytest.raises(RuntimeError):
            c.resolve("f")
        [event] = listener.of_type(DIEventType.RESOLUTION_FAILURE)
        assert isinstance(event.error, RuntimeError)

    def test_console_listener_logs(self, registry, caplog):
        diagnostics = DIDiagnostics()
        diagnostics.add_listener(ConsoleDiagnosticListener(logging.INFO))
        c = Container(registry=registry, diagnostics=diagnostics)

        with caplog.at_level(logging.INFO, logger="plinth.di"):
            c.register(ValueProvider("a", 1))
        assert "Registered value provider for token=a" in caplog.text

    def test_listener_errors_are_swallowed(self, registry):
        class Broken:
            def on_event(self, event):
                raise ValueError("listener")

        diagnostics = DIDiagnostics()
        diagnostics.add_listener(Broken())
        c = Container(registry=registry, diagnostics=diagnostics)
        c.register(ValueProvider("a", 1))
        assert c.resolve("a") == 1
