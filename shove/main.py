"""Entry point for the shove webhook server."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import uvicorn
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from shove import __version__
from shove.events import ShoveStartupEvent, decode_event
from shove.settings import Settings, SettingsError, scrub_environ
from shove.utils.config_loader import ConfigLoaderError, load_config
from shove.utils.logging import configure_logging, get_logger
from shove.webhook.handler import WebhookHandler

if TYPE_CHECKING:
    from starlette.requests import Request

logger = get_logger("main")

STARTUP_DELIVERY_ID = "00000000-0000-0000-0000-000000000000"


async def health_route(request: Request) -> JSONResponse:
    """Report that the server is up."""
    del request  # unused but required by Starlette routing
    return JSONResponse({"status": "healthy", "version": __version__})


def create_app(handler: WebhookHandler) -> Starlette:
    """Create the ASGI application serving the webhook handler.

    Args:
        handler: The webhook handler. It serves every path except /health.

    Returns:
        Starlette application.
    """
    return Starlette(
        routes=[
            Route("/health", health_route, methods=["GET"]),
            Mount("/", app=handler),
        ]
    )


def main() -> int:
    """Run the shove server.

    Returns:
        Process exit code.
    """
    configure_logging()

    try:
        settings = Settings.from_environ()
        config = load_config(settings.config_path)
    except (SettingsError, ConfigLoaderError) as e:
        logger.error(str(e))
        return 1

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return 1

    handler = WebhookHandler(
        secret_key=settings.secret_key,
        callback=config.handle_event,
        event_decoder=decode_event,
    )

    scrub_environ()

    config.handle_event(STARTUP_DELIVERY_ID, ShoveStartupEvent())

    logger.info(
        "Starting shove",
        extra={"version": __version__, "port": settings.port, "actions": len(config.actions)},
    )
    app = create_app(handler)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)  # noqa: S104
    return 0


if __name__ == "__main__":
    sys.exit(main())
