import pytest

from motoshop.core.errors import InvalidTransition
from motoshop.services.router import Screen, ViewRouter


def test_boot_without_session_shows_login(backend):
    router = ViewRouter(backend.auth)
    assert router.screen is Screen.LOADING
    assert router.mount() is Screen.LOGIN


def test_boot_with_session_shows_home(signed_in):
    router = ViewRouter(signed_in.auth)
    assert router.mount() is Screen.HOME


def test_sign_in_and_out_are_followed(backend, rider):
    router = ViewRouter(backend.auth)
    router.mount()
    backend.auth.sign_in_with_password(rider["email"], rider["password"])
    assert router.screen is Screen.HOME
    backend.auth.sign_out()
    assert router.screen is Screen.LOGIN


def test_unmounted_router_ignores_auth_events(backend, rider):
    router = ViewRouter(backend.auth)
    router.mount()
    router.unmount()
    backend.auth.sign_in_with_password(rider["email"], rider["password"])
    assert router.screen is Screen.LOGIN
    assert not router.mounted


def test_screens_behind_login_resolve_to_login(backend):
    router = ViewRouter(backend.auth)
    router.mount()
    assert router.navigate(Screen.PROFILE) is Screen.LOGIN
    assert router.navigate(Screen.REGISTER) is Screen.REGISTER


def test_service_documents_needs_a_motorcycle(signed_in):
    router = ViewRouter(signed_in.auth)
    router.mount()
    with pytest.raises(InvalidTransition):
        router.navigate(Screen.SERVICE_DOCUMENTS)
    router.navigate(Screen.SERVICE_DOCUMENTS, "moto-1")
    assert router.selected_motorcycle_id == "moto-1"


def test_selection_is_cleared_when_leaving_documents(signed_in):
    router = ViewRouter(signed_in.auth)
    router.mount()
    router.navigate(Screen.SERVICE_DOCUMENTS, "moto-1")
    assert router.back() is Screen.PROFILE
    assert router.selected_motorcycle_id is None
    assert router.back() is Screen.HOME


def test_loading_cannot_be_navigated_to(signed_in):
    router = ViewRouter(signed_in.auth)
    router.mount()
    with pytest.raises(InvalidTransition):
        router.navigate(Screen.LOADING)
    with pytest.raises(InvalidTransition):
        router.back()


def test_listeners_see_every_screen_change(signed_in):
    router = ViewRouter(signed_in.auth)
    shown = []
    router.add_listener(shown.append)
    router.mount()
    router.navigate(Screen.BOOKING_REQUEST)
    router.back()
    assert shown == [Screen.HOME, Screen.BOOKING_REQUEST, Screen.HOME]
