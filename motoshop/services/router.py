"""
Which screen a workspace is showing.

There is one current screen and no history. Sign-in / sign-out pushed by
the auth client go through the same ``navigate`` as explicit clicks.
"""

from enum import Enum
from typing import Callable, List, Optional
import logging

from motoshop.core.errors import InvalidTransition
from motoshop.gateway.auth import AuthClient, AuthEvent, AuthSession, AuthSubscription

logger = logging.getLogger(__name__)


class Screen(str, Enum):
    LOADING = "loading"
    LOGIN = "login"
    REGISTER = "register"
    HOME = "home"
    PROFILE = "profile"
    BOOKING_REQUEST = "bookingRequest"
    SERVICE_DOCUMENTS = "serviceDocuments"


AUTHENTICATED_SCREENS = frozenset({
    Screen.HOME,
    Screen.PROFILE,
    Screen.BOOKING_REQUEST,
    Screen.SERVICE_DOCUMENTS,
})

# Where "back" leads from each screen
BACK_TARGETS = {
    Screen.SERVICE_DOCUMENTS: Screen.PROFILE,
    Screen.PROFILE: Screen.HOME,
    Screen.BOOKING_REQUEST: Screen.HOME,
    Screen.REGISTER: Screen.LOGIN,
}

ScreenListener = Callable[[Screen], None]


class ViewRouter:
    def __init__(self, auth: AuthClient):
        self._auth = auth
        self._subscription: Optional[AuthSubscription] = None
        self._listeners: List[ScreenListener] = []
        self.screen = Screen.LOADING
        self.selected_motorcycle_id: Optional[str] = None

    @property
    def mounted(self) -> bool:
        return self._subscription is not None

    def add_listener(self, listener: ScreenListener) -> None:
        self._listeners.append(listener)

    def mount(self) -> Screen:
        """Subscribe to auth changes, then resolve ``loading`` from the session check."""
        if self._subscription is None:
            self._subscription = self._auth.on_auth_state_change(self._on_auth_event)
        self.screen = Screen.LOADING
        session = self._auth.get_session()
        return self.navigate(Screen.HOME if session else Screen.LOGIN)

    def unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_auth_event(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        if event is AuthEvent.SIGNED_IN:
            self.navigate(Screen.HOME)
        elif event is AuthEvent.SIGNED_OUT:
            self.navigate(Screen.LOGIN)

    def navigate(self, screen: Screen, motorcycle_id: Optional[str] = None) -> Screen:
        if screen is Screen.LOADING:
            raise InvalidTransition("The loading screen is only shown while booting")
        if screen is Screen.SERVICE_DOCUMENTS and not motorcycle_id:
            raise InvalidTransition("Service documents need a selected motorcycle")
        if screen in AUTHENTICATED_SCREENS and self._auth.current_session is None:
            screen = Screen.LOGIN

        self.selected_motorcycle_id = motorcycle_id if screen is Screen.SERVICE_DOCUMENTS else None
        self.screen = screen
        logger.debug(f"Showing {screen.value}")
        for listener in list(self._listeners):
            listener(screen)
        return screen

    def back(self) -> Screen:
        target = BACK_TARGETS.get(self.screen)
        if target is None:
            raise InvalidTransition(f"No way back from {self.screen.value}")
        return self.navigate(target)
