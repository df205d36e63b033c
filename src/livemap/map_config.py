# map_config.py
# All tuneable constants in one place.
# Pass a MapConfig instance to every module that needs settings.

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .models import TransportType


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

APP_NAME: str = "livemap"
APP_VERSION: str = "0.1.0"

REGION_SPAN_M: float = 10_000.0         # camera span when centering on the user
GEOCODE_THRESHOLD_M: float = 50.0       # movement before the address is refreshed

ROUTE_STROKE_COLOR: str = "#FFCC00"     # system yellow

DEFAULT_OSRM_URL: str = "https://router.project-osrm.org"
DEFAULT_NOMINATIM_URL: str = "https://nominatim.openstreetmap.org"


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class MapConfig:
    # Camera
    region_span_m: float = REGION_SPAN_M
    fit_padding_ratio: float = 0.1         # extra span around a fitted route

    # Address label
    geocode_threshold_m: float = GEOCODE_THRESHOLD_M

    # Routing
    transport_type: TransportType = TransportType.AUTOMOBILE
    requests_alternate_routes: bool = True
    route_stroke_color: str = ROUTE_STROKE_COLOR
    route_line_width: float = 5.0

    # Services
    osrm_base_url: str = DEFAULT_OSRM_URL
    nominatim_base_url: str = DEFAULT_NOMINATIM_URL
    user_agent: str = f"{APP_NAME}/{APP_VERSION}"
    request_timeout_s: float = 5.0
    max_workers: int = 2
    language: str = "en"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "MapConfig":
        """
        Build a config from LIVEMAP_* environment variables.

        Example .env:
            LIVEMAP_OSRM_URL=http://localhost:5000
            LIVEMAP_NOMINATIM_URL=http://localhost:8080
            LIVEMAP_USER_AGENT=livemap/0.1 (me@example.com)

        Args:
            env_file: Optional path to a .env file; python-dotenv's search is used otherwise.

        Returns:
            MapConfig with unset variables left at their defaults.
        """
        load_dotenv(env_file)
        config = cls()
        config.osrm_base_url = os.getenv("LIVEMAP_OSRM_URL", config.osrm_base_url)
        config.nominatim_base_url = os.getenv("LIVEMAP_NOMINATIM_URL", config.nominatim_base_url)
        config.user_agent = os.getenv("LIVEMAP_USER_AGENT", config.user_agent)
        config.language = os.getenv("LIVEMAP_LANGUAGE", config.language)
        timeout = os.getenv("LIVEMAP_TIMEOUT_S")
        if timeout:
            config.request_timeout_s = float(timeout)
        return config
