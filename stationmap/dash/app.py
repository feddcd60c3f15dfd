from functools import partial

from stationmap.configs.logging_init import logger
from stationmap.configs.settings_models import Settings
from stationmap.dash.controller import Controller
from stationmap.dash.core.app_factory import create_dash_app
from stationmap.dash.core.callbacks import register_all_callbacks
from stationmap.dash.layouts.app_layout import create_app_layout
from stationmap.dash.model import Model


def create_application(settings: Settings | None = None):
    """
    Build Model -> Controller, start the loads and wire the Dash app.

    Args:
        settings: Application settings; read from the environment when omitted.

    Returns:
        tuple: (dash.Dash app, Controller, dev_mode flag)
    """
    if settings is None:
        from stationmap.configs.config import settings

    model = Model.from_settings(settings.data)
    controller = Controller(model, settings)
    controller.init()

    app, dev_mode = create_dash_app(debug=settings.dash.debug)

    # Layout is rebuilt per page load so every page starts a fresh session state
    app.layout = partial(
        create_app_layout, controller, poll_interval_ms=settings.dash.poll_interval_ms
    )
    register_all_callbacks(app, controller)

    return app, controller, dev_mode


def run(settings: Settings | None = None) -> None:
    if settings is None:
        from stationmap.configs.config import settings

    app, controller, dev_mode = create_application(settings)
    logger.info(f"Starting Dash server on {settings.dash.host}:{settings.dash.port}")
    try:
        app.run(host=settings.dash.host, port=settings.dash.port, debug=dev_mode)
    finally:
        controller.shutdown()


# Run the server if executed directly
if __name__ == "__main__":
    run()
