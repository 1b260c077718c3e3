"""Command-line entrypoint that serves the API with uvicorn."""

import logging

import uvicorn

from expiry_tracker.api.app import create_app
from expiry_tracker.app_logging import configure_logging
from expiry_tracker.config import Settings
from expiry_tracker.containers import build_container


def main(settings: Settings | None = None) -> None:
    """Build the app and serve it on the configured host and port."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    app = create_app(build_container(resolved_settings))
    logging.getLogger(__name__).info(
        "Server is running on port %s", resolved_settings.port
    )
    uvicorn.run(app, host=resolved_settings.host, port=resolved_settings.port)


if __name__ == "__main__":
    main()
