# location.py
# Location provider contract and a programmatically fed implementation.
#
# Usage:
#   provider = SimulatedLocationProvider(ui, grant_on_request=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
#   provider.subscribe_authorization(on_auth_changed)
#   provider.update_location(Coord(39.924, 32.845))

import logging
from typing import Callable, Iterable, List, Optional, Protocol

from .models import AuthorizationState, Coord
from .ui_context import UIContext

logger = logging.getLogger(__name__)

AuthorizationCallback = Callable[[AuthorizationState], None]
LocationCallback = Callable[[Coord], None]
Unsubscribe = Callable[[], None]


class LocationProvider(Protocol):
    @property
    def authorization_state(self) -> AuthorizationState: ...

    @property
    def location(self) -> Optional[Coord]: ...

    def location_services_enabled(self) -> bool: ...

    def request_when_in_use_authorization(self) -> None: ...

    def start_updating_location(self) -> None: ...

    def stop_updating_location(self) -> None: ...

    def subscribe_authorization(self, callback: AuthorizationCallback) -> Unsubscribe: ...

    def subscribe_location(self, callback: LocationCallback) -> Unsubscribe: ...


def _remover(listeners: list, callback) -> Unsubscribe:
    def unsubscribe() -> None:
        if callback in listeners:
            listeners.remove(callback)
    return unsubscribe


class SimulatedLocationProvider:
    """
    Location provider driven by the caller instead of GPS hardware.

    Events are delivered on the UI context, like the platform delegate would.

    Args:
        ui:               Context that receives authorization / location events.
        services_enabled: System-wide location services switch.
        initial_state:    Authorization state at construction.
        grant_on_request: State to transition to when permission is requested;
                          None leaves the prompt unanswered.
    """

    def __init__(
        self,
        ui: UIContext,
        services_enabled: bool = True,
        initial_state: AuthorizationState = AuthorizationState.NOT_DETERMINED,
        grant_on_request: Optional[AuthorizationState] = None,
    ) -> None:
        self._ui = ui
        self._services_enabled = services_enabled
        self._state = initial_state
        self.grant_on_request = grant_on_request
        self._location: Optional[Coord] = None
        self._updating = False
        self._auth_listeners: List[AuthorizationCallback] = []
        self._location_listeners: List[LocationCallback] = []
        self.permission_requests = 0

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def authorization_state(self) -> AuthorizationState:
        return self._state

    @property
    def location(self) -> Optional[Coord]:
        return self._location

    @property
    def is_updating(self) -> bool:
        return self._updating

    def location_services_enabled(self) -> bool:
        return self._services_enabled

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def request_when_in_use_authorization(self) -> None:
        self.permission_requests += 1
        logger.info("Location permission requested.")
        if self.grant_on_request is not None:
            self.set_authorization_state(self.grant_on_request)

    def start_updating_location(self) -> None:
        if not self._updating:
            logger.info("Continuous location updates started.")
        self._updating = True

    def stop_updating_location(self) -> None:
        if self._updating:
            logger.info("Continuous location updates stopped.")
        self._updating = False

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe_authorization(self, callback: AuthorizationCallback) -> Unsubscribe:
        self._auth_listeners.append(callback)
        return _remover(self._auth_listeners, callback)

    def subscribe_location(self, callback: LocationCallback) -> Unsubscribe:
        self._location_listeners.append(callback)
        return _remover(self._location_listeners, callback)

    # ------------------------------------------------------------------
    # Simulation inputs
    # ------------------------------------------------------------------

    def set_authorization_state(self, state: AuthorizationState) -> None:
        """Change the permission state and notify listeners on the UI context."""
        logger.info(f"Authorization state: {self._state.value} -> {state.value}")
        self._state = state
        for callback in list(self._auth_listeners):
            self._ui.post(callback, state)

    def update_location(self, coord: Coord) -> None:
        """Record a new fix; listeners hear about it only while updates are running."""
        self._location = coord
        if not self._updating:
            return
        for callback in list(self._location_listeners):
            self._ui.post(callback, coord)

    def replay(self, track: Iterable[Coord]) -> int:
        """Feed a sequence of fixes. Returns how many were fed."""
        count = 0
        for coord in track:
            self.update_location(coord)
            count += 1
        return count
