"""Process entrypoint for the Canteen registration runtime."""

from __future__ import annotations

from packages.canteen_core.app import create_core_app
from packages.canteen_core.components import build_components, import_component_modules
from packages.canteen_shared.config import load_settings
from packages.canteen_shared.http import run_app
from packages.canteen_shared.logging import configure_logging, get_logger

_LOGGER = get_logger(__name__)


def main() -> None:
    """Load settings, build components and serve HTTP until interrupted."""
    settings = load_settings()
    configure_logging(settings.logging)

    imported = import_component_modules()
    components = build_components(settings)
    _LOGGER.info(
        "Canteen startup completed: components=%s backend=%s",
        len(imported),
        settings.persistence.backend,
    )

    app = create_core_app(components=components)
    try:
        run_app(
            app,
            host=settings.http.host,
            port=settings.http.port,
            log_level=settings.logging.level.lower(),
        )
    finally:
        fanout = components.get("service_realtime_fanout")
        close = getattr(fanout, "close", None)
        if callable(close):
            close()
        _LOGGER.info("Canteen runtime stopped")


if __name__ == "__main__":
    main()
