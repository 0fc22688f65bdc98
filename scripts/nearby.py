"""Console front end: list nearby stops, then optionally drill into departures and a trip."""

from __future__ import annotations

import argparse
from pathlib import Path

from futar.app import FutarApplication
from futar.config import load_config
from futar.data.geolocation import FixedGeoLocator
from futar.data.models import Coordinates
from futar.localization import APP_TITLE
from futar.log import configure_logging
from futar.logic.view_state import CONTENT, DEPARTURES, STOPS
from futar.rendering import DetailCard, Screen, render_card, render_screen, save_frame


class ConsoleRenderer:
    """Prints every rendered screen and optionally saves PNG previews."""

    def __init__(self, preview_dir: Path | None) -> None:
        self._preview_dir = preview_dir
        self._frame = 0

    def render(self, screen: Screen) -> None:
        print(f"=== {screen.flow} ===")
        if screen.status is not None:
            retry = " [select to retry]" if screen.status.retry_available else ""
            print(f"  {screen.status.message}{retry}")
        else:
            for section in screen.sections:
                print(f"  # {section.title}")
                for item in section.items:
                    print(f"    {item.title:<24} {item.subtitle}")
        self._save(render_screen(screen, APP_TITLE), screen.flow)

    def show_card(self, card: DetailCard) -> None:
        print(f"=== {card.title} ===")
        print(card.body)
        self._save(render_card(card), "card")

    def _save(self, image, name: str) -> None:
        if self._preview_dir is None:
            return
        self._frame += 1
        save_frame(image, str(self._preview_dir / f"{self._frame:03d}_{name}.png"))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", default="config/config.yaml")
    parser.add_argument("--lat", type=float, help="Override the configured latitude")
    parser.add_argument("--lon", type=float, help="Override the configured longitude")
    parser.add_argument("--drill", action="store_true", help="Open the nearest stop and its first departure")
    parser.add_argument("--preview-dir", type=Path, help="Write PNG previews of each screen here")
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config.log)

    locator = None
    if args.lat is not None and args.lon is not None:
        locator = FixedGeoLocator(Coordinates(args.lat, args.lon, config.location.accuracy_meters))

    app = FutarApplication(config, renderer=ConsoleRenderer(args.preview_dir), locator=locator)
    app.start()

    controller = app.controller
    if not args.drill or controller.state(STOPS).status != CONTENT:
        return
    controller.show_departures(controller.state(STOPS).items[0])
    if controller.state(DEPARTURES).status == CONTENT:
        controller.show_trip_details(controller.state(DEPARTURES).items[0])


if __name__ == "__main__":
    main()
