# alerts.py
# User-facing one-button messages.

import logging
from typing import List, Optional, Protocol

from .map_config import APP_NAME
from .models import Alert

logger = logging.getLogger(__name__)


LOCATION_SERVICES_OFF = Alert(
    title=f'Turn On Location Services to Allow "{APP_NAME}" to Determine Your Location',
    message="Go to Settings > Privacy > Location Services",
)

LOCATION_ACCESS_DENIED = Alert(
    title=f'Allow "{APP_NAME}" to Access Your Location',
    message="Go to Settings > Screen Time > Content & Privacy Restrictions",
)

LOCATION_UNAVAILABLE = Alert(
    title="Current Location Not Available",
    message="Your current location can't be determined at this time.",
)


class AlertPresenter(Protocol):
    def present(self, alert: Alert) -> None: ...


class LoggingAlertPresenter:
    """
    Presents alerts on the console and keeps a history of what was shown.

    Args:
        echo: Print "[ALERT] title: message" in addition to logging.
    """

    def __init__(self, echo: bool = True) -> None:
        self.echo = echo
        self.presented: List[Alert] = []
        self._current: Optional[Alert] = None

    @property
    def current(self) -> Optional[Alert]:
        """Alert waiting to be acknowledged, if any."""
        return self._current

    def present(self, alert: Alert) -> None:
        self.presented.append(alert)
        self._current = alert
        logger.warning(f"Alert: {alert}")
        if self.echo:
            print(f"[ALERT] {alert}")

    def acknowledge(self) -> None:
        """The single "OK" button."""
        self._current = None
