"""Command-line entrypoint that serves the booker with uvicorn."""

import logging
import sys

import uvicorn

from apartment_booker.api.app import create_app
from apartment_booker.app_logging import configure_logging
from apartment_booker.config import Settings
from apartment_booker.containers import build_container
from apartment_booker.errors import StorageError

logger = logging.getLogger("apartment_booker.main")


def main() -> None:
    """Initialise storage, then serve until interrupted."""
    configure_logging()
    settings = Settings()
    try:
        container = build_container(settings)
    except (StorageError, OSError) as exc:
        logger.error("Failed to initialise storage: %s", exc)
        sys.exit(1)

    app = create_app(container)
    logger.info("Serving on http://localhost:%s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
