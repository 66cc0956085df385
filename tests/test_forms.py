from datetime import datetime
import threading
import time

import pytest

from motoshop.core.errors import FormBusyError, FormValidationError, GatewayError
from motoshop.services.forms import FormState, FormStatus
from motoshop.services.validation import LOGIN_RULES

NOW = datetime(2026, 5, 1, 12, 0)


def login_form(**kwargs):
    return FormState(
        "login",
        {"email": "", "password": "", "remember_me": False},
        LOGIN_RULES,
        submit_label="Sign In",
        busy_label="Signing in...",
        **kwargs,
    )


def fill(form, email="rider@example.com", password="secret123"):
    form.edit("email", email)
    form.edit("password", password)


def test_new_form_is_idle_and_editing_starts_on_first_keystroke():
    form = login_form()
    assert form.status is FormStatus.IDLE
    form.edit("email", "r")
    assert form.status is FormStatus.EDITING


def test_unknown_field_is_rejected():
    form = login_form()
    with pytest.raises(KeyError):
        form.edit("username", "rider")


def test_invalid_submit_never_calls_the_action():
    form = login_form()
    calls = []
    with pytest.raises(FormValidationError) as exc_info:
        form.submit(calls.append, now=NOW)
    assert calls == []
    assert exc_info.value.field_errors["email"] == "Please enter your email"
    assert form.error == "Please enter your email"
    assert form.status is FormStatus.EDITING


def test_editing_a_field_clears_only_its_error():
    form = login_form()
    with pytest.raises(FormValidationError):
        form.submit(lambda values: None, now=NOW)
    assert set(form.field_errors) == {"email", "password"}
    form.edit("email", "rider@example.com")
    assert set(form.field_errors) == {"password"}


def test_banner_clears_on_edit_only_when_configured():
    sticky = login_form()
    clearing = login_form(clears_banner_on_edit=True)
    for form in (sticky, clearing):
        form.fail("Invalid login credentials")
        form.edit("email", "x")
    assert sticky.error == "Invalid login credentials"
    assert clearing.error is None


def test_successful_submit_resets_values_and_shows_message():
    form = login_form()
    fill(form)
    seen = []

    def action(values):
        seen.append((form.status, form.submit_label))
        return "session"

    result = form.submit(action, success_message="Welcome", now=NOW)
    assert result == "session"
    assert seen == [(FormStatus.SUBMITTING, "Signing in...")]
    assert form.status is FormStatus.IDLE
    assert form.success == "Welcome"
    assert form.values["email"] == ""
    assert form.submit_label == "Sign In"


def test_on_success_runs_before_reset():
    form = login_form()
    fill(form)
    snapshots = []
    form.submit(lambda values: None, on_success=lambda: snapshots.append(dict(form.values)), now=NOW)
    assert snapshots[0]["email"] == "rider@example.com"


def test_gateway_error_keeps_values_and_shows_backend_message():
    form = login_form()
    fill(form)

    def action(values):
        raise GatewayError("Invalid login credentials", 400)

    with pytest.raises(GatewayError):
        form.submit(action, now=NOW)
    assert form.error == "Invalid login credentials"
    assert form.status is FormStatus.EDITING
    assert form.values["email"] == "rider@example.com"
    assert form.submit_label == "Sign In"


def test_unexpected_error_propagates_and_releases_the_form():
    form = login_form()
    fill(form)

    def action(values):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        form.submit(action, now=NOW)
    assert not form.submitting


def test_second_submit_while_in_flight_is_refused():
    form = login_form()
    fill(form)

    def action(values):
        with pytest.raises(FormBusyError):
            form.submit(lambda inner: None, now=NOW)
        return "first"

    assert form.submit(action, now=NOW) == "first"


def test_simultaneous_submits_run_the_action_once(monkeypatch):
    form = login_form()
    fill(form)
    original_validate = form.validate

    def slow_validate(now=None):
        # Widen the window between the busy check and the status change
        time.sleep(0.05)
        return original_validate(now)

    monkeypatch.setattr(form, "validate", slow_validate)
    calls = []
    refused = threading.Event()
    outcomes = []

    def action(values):
        calls.append(values)
        refused.wait(2)
        return "signed in"

    start = threading.Barrier(2)

    def attempt():
        start.wait()
        try:
            outcomes.append(form.submit(action, now=NOW))
        except FormBusyError:
            outcomes.append("busy")
            refused.set()

    threads = [threading.Thread(target=attempt) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(5)

    assert len(calls) == 1
    assert sorted(outcomes) == ["busy", "signed in"]


def test_render_never_echoes_passwords():
    form = login_form()
    fill(form)
    rendered = form.render()
    assert rendered["values"]["password"] == ""
    assert rendered["values"]["email"] == "rider@example.com"
    assert rendered["submit_disabled"] is False


def test_load_replaces_values_for_editing():
    form = login_form()
    form.load({"email": "stored@example.com", "unknown": "ignored"})
    assert form.values == {"email": "stored@example.com", "password": "", "remember_me": False}
    assert form.status is FormStatus.EDITING
