import pytest

from motoshop.gateway import create_backend
from motoshop.services.router import Screen
from motoshop.services.workspace import WorkspaceRegistry


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def registry(config, http, session_factory, clock):
    limited = config.model_copy(update={"WORKSPACE_IDLE_SECONDS": 60, "MAX_WORKSPACES": 3})
    return WorkspaceRegistry(limited, lambda: create_backend(limited, http, session_factory), clock=clock)


def test_idle_workspaces_are_dropped(registry, clock):
    idle = registry.create()
    clock.now = 30
    active = registry.create()

    clock.now = 75
    assert registry.get(active.id) is active
    assert registry.get(idle.id) is None
    assert len(registry) == 1


def test_least_recently_used_workspace_makes_room(registry, clock):
    first, second, third = registry.create(), registry.create(), registry.create()
    clock.now = 1
    registry.get(first.id)

    fourth = registry.create()

    assert len(registry) == 3
    assert registry.get(second.id) is None
    assert {registry.get(w.id) for w in (first, third, fourth)} == {first, third, fourth}


def test_dropped_workspace_stops_following_auth_events(registry, rider):
    workspace = registry.create()
    registry.discard(workspace.id)
    assert len(registry) == 0
    assert registry.get(workspace.id) is None

    workspace.auth.sign_in_with_password(rider["email"], rider["password"])
    assert workspace.router.screen is Screen.LOGIN


def test_dropping_a_workspace_keeps_the_rider_signed_in(registry, platform, rider, clock):
    workspace = registry.create()
    workspace.accounts.login_form.update({"email": rider["email"], "password": rider["password"]})
    session = workspace.accounts.login()

    clock.now = 120
    restored = registry.create(session.access_token, session.refresh_token)

    assert registry.get(workspace.id) is None
    assert restored.router.screen is Screen.HOME
