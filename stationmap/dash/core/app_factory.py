"""
Factory module for creating and configuring the Dash application.
"""

import os

import dash

from stationmap.configs.logging_init import logger


def create_dash_app(debug: bool = False):
    """
    Create and configure a new Dash application instance.

    Args:
        debug: Enable Dash dev tools and hot reload.

    Returns:
        tuple: (dash.Dash application instance, dev_mode flag)
    """
    dev_mode = debug or os.environ.get("DEV_MODE", "false").lower() == "true"

    # Assets live next to the core package: stationmap/dash/assets
    dash_root_path = os.path.dirname(os.path.dirname(__file__))
    assets_folder = os.path.join(dash_root_path, "assets")

    app = dash.Dash(
        __name__,
        requests_pathname_prefix="/",
        suppress_callback_exceptions=True,
        title="Station map",
        assets_folder=assets_folder,
        assets_url_path="/assets",
    )

    # Flask's logger shares the stationmap handlers
    server = app.server
    server.logger.handlers = logger.handlers
    server.logger.setLevel(logger.level)

    logger.info(f"Dash app created (dev_mode={dev_mode}, assets={assets_folder})")
    return app, dev_mode
