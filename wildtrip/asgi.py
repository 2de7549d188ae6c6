"""ASGI application factory."""

import logging

from advanced_alchemy.extensions.litestar import SQLAlchemyPlugin
from litestar import Litestar
from litestar.types import ASGIApp

from wildtrip.app_config import build_db_config, build_session_config
from wildtrip.auth.identity import IdentityProviderClient
from wildtrip.config import Settings, get_settings
from wildtrip.controllers import build_controllers
from wildtrip.lib import observability
from wildtrip.lib.exceptions import EXCEPTION_HANDLERS

logger = logging.getLogger(__name__)


def create_litestar(
    settings: Settings | None = None,
    identity: IdentityProviderClient | None = None,
) -> Litestar:
    """Build the Litestar application.

    Args:
        settings: Settings to use instead of ``get_settings()``
        identity: Identity provider client; built from settings when omitted
            and left unset when no provider secret is configured

    Returns:
        The configured Litestar app
    """
    settings = settings or get_settings()

    observability.configure(settings)
    observability.instrument_httpx()

    if identity is None and settings.identity.enabled:
        identity = IdentityProviderClient.from_config(settings.identity)
    if identity is None:
        logger.info("No identity provider configured, role changes will not be synced")

    db_config = build_db_config(settings)
    session_config = build_session_config(settings)

    app = Litestar(
        route_handlers=build_controllers(),
        plugins=[SQLAlchemyPlugin(config=db_config)],
        middleware=[session_config.middleware],
        exception_handlers=EXCEPTION_HANDLERS,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.db_config = db_config
    app.state.identity = identity
    return app


def create_app() -> ASGIApp:
    """Create the application, wrapped for tracing when logfire is enabled."""
    return observability.instrument_app(create_litestar())
