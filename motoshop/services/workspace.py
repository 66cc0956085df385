"""
One workspace per browser: the platform clients, the view router and the
controller of whichever screen is showing.
"""

from collections import OrderedDict
from typing import Any, Callable, Dict, Optional
import logging
import threading
import time
import uuid

from motoshop.core.config import Settings
from motoshop.core.errors import InvalidTransition, NotAuthenticated
from motoshop.gateway import Backend
from motoshop.services.accounts import AccountController
from motoshop.services.directory import DirectoryController
from motoshop.services.documents import ServiceDocumentsController
from motoshop.services.forms import FormState
from motoshop.services.garage import BookingController, GarageController
from motoshop.services.router import Screen, ViewRouter

logger = logging.getLogger(__name__)


class Workspace:
    def __init__(self, workspace_id: str, backend: Backend, config: Settings):
        self.id = workspace_id
        self.backend = backend
        self.config = config
        self.router = ViewRouter(backend.auth)
        self.accounts = AccountController(backend.auth, self.router)
        self.directory: Optional[DirectoryController] = None
        self.garage: Optional[GarageController] = None
        self.booking: Optional[BookingController] = None
        self.documents: Optional[ServiceDocumentsController] = None
        self.router.add_listener(self._mount_screen)

    @property
    def auth(self):
        return self.backend.auth

    def boot(self) -> Screen:
        return self.router.mount()

    def close(self) -> None:
        self.router.unmount()

    def _mount_screen(self, screen: Screen) -> None:
        """Every time a screen is shown its controller is rebuilt and re-fetches."""
        tables = self.backend.tables
        self.directory = self.garage = self.booking = self.documents = None
        if screen is Screen.HOME:
            self.directory = DirectoryController(
                tables, self.config.SHOPS_PAGE_SIZE, self.config.COUNTRY_SAMPLE_LIMIT
            )
            self.directory.mount()
        elif screen is Screen.PROFILE:
            self.garage = GarageController(self.auth, tables)
            self.garage.mount()
        elif screen is Screen.BOOKING_REQUEST:
            self.booking = BookingController(self.auth, tables)
            self.booking.mount()
        elif screen is Screen.SERVICE_DOCUMENTS:
            self.documents = ServiceDocumentsController(
                self.auth, tables, self.backend.storage,
                self.router.selected_motorcycle_id, self.config.MAX_UPLOAD_BYTES,
            )
            self.documents.mount()

    def require(self, screen: Screen):
        """The controller for ``screen``, shown first if another screen is up."""
        if self.router.screen is not screen:
            if screen is Screen.SERVICE_DOCUMENTS:
                raise InvalidTransition("Open a motorcycle's service documents first")
            self.router.navigate(screen)
        if self.router.screen is not screen:
            raise NotAuthenticated("You must be logged in")
        controller = self._controller(screen)
        if controller is None:
            raise InvalidTransition(f"{screen.value} is not available")
        return controller

    def _controller(self, screen: Screen):
        return {
            Screen.HOME: self.directory,
            Screen.PROFILE: self.garage,
            Screen.BOOKING_REQUEST: self.booking,
            Screen.SERVICE_DOCUMENTS: self.documents,
        }.get(screen)

    def forms(self) -> Dict[str, FormState]:
        """Forms that currently exist, by name."""
        forms = {
            "login": self.accounts.login_form,
            "legacy_login": self.accounts.legacy_login_form,
            "register": self.accounts.register_form,
        }
        for controller in (self.garage, self.booking, self.documents):
            if controller is not None:
                forms[controller.form.name] = controller.form
        return forms

    def render(self) -> Dict[str, Any]:
        screen = self.router.screen
        state: Dict[str, Any] = {}
        if screen is Screen.LOGIN:
            state = {
                "form": self.accounts.login_form.render(),
                "legacy_form": self.accounts.legacy_login_form.render(),
            }
        elif screen is Screen.REGISTER:
            state = {"form": self.accounts.register_form.render()}
        else:
            controller = self._controller(screen)
            if controller is not None:
                state = controller.render().model_dump(mode="json")
        return {
            "screen": screen,
            "selected_motorcycle_id": self.router.selected_motorcycle_id,
            "authenticated": self.auth.current_session is not None,
            "state": state,
        }


class WorkspaceRegistry:
    """
    In-memory workspaces keyed by the browser's workspace cookie.

    A workspace unused for ``WORKSPACE_IDLE_SECONDS`` is dropped. Once
    ``MAX_WORKSPACES`` are held, the least recently used one makes room.
    Dropping a workspace does not sign the rider out: the token cookies
    restore the session in the next workspace.
    """

    def __init__(
        self,
        config: Settings,
        backend_factory: Callable[[], Backend],
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self._backend_factory = backend_factory
        self._clock = clock
        # Least recently used first
        self._workspaces: "OrderedDict[str, Workspace]" = OrderedDict()
        self._last_used: Dict[str, float] = {}
        self._lock = threading.Lock()

    def get(self, workspace_id: Optional[str]) -> Optional[Workspace]:
        if not workspace_id:
            return None
        with self._lock:
            self._evict_idle()
            workspace = self._workspaces.get(workspace_id)
            if workspace is not None:
                self._touch(workspace_id)
            return workspace

    def create(self, access_token: Optional[str] = None,
               refresh_token: Optional[str] = None) -> Workspace:
        """New workspace; the session is re-derived from persisted tokens when present."""
        workspace = Workspace(str(uuid.uuid4()), self._backend_factory(), self.config)
        if access_token:
            workspace.auth.restore(access_token, refresh_token)
        workspace.boot()
        with self._lock:
            self._evict_idle()
            while self._workspaces and len(self._workspaces) >= self.config.MAX_WORKSPACES:
                self._drop(next(iter(self._workspaces)))
            self._workspaces[workspace.id] = workspace
            self._touch(workspace.id)
        logger.info(f"Workspace {workspace.id} booted on {workspace.router.screen.value}")
        return workspace

    def discard(self, workspace_id: str) -> None:
        with self._lock:
            self._drop(workspace_id)

    def _touch(self, workspace_id: str) -> None:
        self._workspaces.move_to_end(workspace_id)
        self._last_used[workspace_id] = self._clock()

    def _evict_idle(self) -> None:
        cutoff = self._clock() - self.config.WORKSPACE_IDLE_SECONDS
        for workspace_id in [wid for wid, used in self._last_used.items() if used < cutoff]:
            self._drop(workspace_id)

    def _drop(self, workspace_id: str) -> None:
        workspace = self._workspaces.pop(workspace_id, None)
        self._last_used.pop(workspace_id, None)
        if workspace is not None:
            workspace.close()
            logger.info(f"Workspace {workspace_id} dropped")

    def __len__(self) -> int:
        return len(self._workspaces)
