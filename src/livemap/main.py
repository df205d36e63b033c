# main.py
# Entry point: runs the live map screen against a simulated location provider.
# Commands typed at the prompt stand in for GPS fixes, map drags and the GO button;
# geocoding and routing go to the configured Nominatim / OSRM servers.

import argparse
import logging
import traceback
from typing import List, Optional

from .alerts import LoggingAlertPresenter
from .coordinator import LiveMapCoordinator
from .directions import OSRMDirections
from .geo_utils import calculate_bearing, coord_distance
from .geocoder import NominatimReverseGeocoder
from .location import SimulatedLocationProvider
from .map_config import MapConfig
from .map_view import MapView
from .models import AuthorizationState, Coord
from .ui_context import UIContext

logger = logging.getLogger(__name__)

HELP = (
    "Commands:\n"
    "  gps <lat> <lon>    new device fix\n"
    "  pan <lat> <lon>    drag the map to a new center\n"
    "  auth <state>       not_determined | denied | restricted | when_in_use | always\n"
    "  go                 route from the device to the map center\n"
    "  where              show camera, address and overlays\n"
    "  quit"
)


def parse_floats(parts: List[str], count: int) -> List[float]:
    if len(parts) != count:
        raise ValueError(f"expected {count} numbers, got {len(parts)}")
    return [float(x) for x in parts]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Live map: follow the device, label the map center, preview a driving route."
    )
    parser.add_argument("--env-file", default=None,
                        help="Optional .env file with LIVEMAP_* settings")
    parser.add_argument("--lat", type=float, default=None,
                        help="Initial simulated device latitude")
    parser.add_argument("--lon", type=float, default=None,
                        help="Initial simulated device longitude")
    parser.add_argument("--grant", default=AuthorizationState.AUTHORIZED_WHEN_IN_USE.value,
                        choices=[s.value for s in AuthorizationState],
                        help="State granted when permission is requested (default: when_in_use)")
    parser.add_argument("--settle", type=float, default=1.5,
                        help="Seconds to wait for geocode/route results after a command")
    parser.add_argument("--log-level", default="INFO",
                        help="Logging level (default: INFO)")
    return parser


def describe(coordinator: LiveMapCoordinator) -> str:
    region = coordinator.map_view.region
    overlays = coordinator.map_view.overlays
    lines = [
        f"camera:   {region.center} ({int(region.lat_span_m)} x {int(region.lon_span_m)} m)",
        f"address:  {coordinator.displayed_address or '-'}",
        f"overlays: {len(overlays)}",
    ]
    device = coordinator.location.location
    if device is not None:
        center = region.center
        lines.insert(1, (
            f"device:   {device}, map center {coord_distance(device, center):.0f} m away "
            f"at {calculate_bearing(device.lat, device.lon, center.lat, center.lon):.0f}°"
        ))
    for route in overlays:
        style = coordinator.map_view.renderer_for(route)
        lines.append(
            f"  {route.name or 'route'}: {route.distance_m / 1000:.1f} km, "
            f"{route.duration_s / 60:.0f} min, {style.stroke_color}"
        )
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # ------------------------------------------------------------------
    # Logging setup: configure once here, all modules inherit
    # ------------------------------------------------------------------
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = MapConfig.from_env(args.env_file)
    ui = UIContext()

    provider = SimulatedLocationProvider(ui, grant_on_request=AuthorizationState(args.grant))
    if args.lat is not None and args.lon is not None:
        provider.update_location(Coord(args.lat, args.lon))

    geocoder = NominatimReverseGeocoder(config)
    directions = OSRMDirections(config)
    map_view = MapView(ui, config)
    coordinator = LiveMapCoordinator(
        map_view, provider, geocoder, directions, LoggingAlertPresenter(), ui, config
    )
    coordinator.subscribe_address(lambda text: print(f"[ADDRESS] {text}"))
    coordinator.load()
    ui.run_pending(timeout=args.settle)

    print(HELP)
    try:
        while True:
            line = input("> ").strip()
            if not line:
                ui.run_pending()
                continue
            if line.lower() in ("q", "quit", "exit"):
                break

            parts = line.split()
            cmd, rest = parts[0].lower(), parts[1:]
            try:
                if cmd == "gps":
                    lat, lon = parse_floats(rest, 2)
                    provider.update_location(Coord(lat, lon))
                elif cmd == "pan":
                    lat, lon = parse_floats(rest, 2)
                    map_view.set_center(Coord(lat, lon))
                elif cmd == "auth":
                    provider.set_authorization_state(AuthorizationState(rest[0] if rest else ""))
                elif cmd == "go":
                    coordinator.request_route()
                elif cmd == "where":
                    print(describe(coordinator))
                else:
                    print(HELP)
            except ValueError as e:
                print(f"[ERR] {e}")
                logger.debug(traceback.format_exc())

            ui.run_pending(timeout=args.settle)
    except (EOFError, KeyboardInterrupt):
        print()
    finally:
        coordinator.dismiss()
        geocoder.close()
        directions.close()


if __name__ == "__main__":
    main()
