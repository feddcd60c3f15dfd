from pathlib import Path
from typing import Annotated

import typer

from stationmap.cli.rich_utils import rich_print_checked_statement, rich_print_section_separator
from stationmap.configs.logging_init import logger
from stationmap.configs.settings_models import DashConfig, DataConfig, Settings


def build_settings(
    data_src: Path | None = None,
    topology_src: Path | None = None,
    host: str | None = None,
    port: int | None = None,
    debug: bool | None = None,
) -> Settings:
    """Environment settings with the command line overrides applied."""
    data_overrides = {
        key: value
        for key, value in {"data_src": data_src, "topology_src": topology_src}.items()
        if value is not None
    }
    dash_overrides = {
        key: value
        for key, value in {"host": host, "port": port, "debug": debug}.items()
        if value is not None
    }
    return Settings(data=DataConfig(**data_overrides), dash=DashConfig(**dash_overrides))


def register_run_command(app: typer.Typer):
    @app.command("run")
    def run(
        data_src: Annotated[
            Path | None, typer.Option("--data-src", help="Path to the station CSV table")
        ] = None,
        topology_src: Annotated[
            Path | None, typer.Option("--topology-src", help="Path to the US TopoJSON file")
        ] = None,
        host: Annotated[str | None, typer.Option("--host", help="Interface to bind")] = None,
        port: Annotated[int | None, typer.Option("--port", help="Port to listen on")] = None,
        debug: bool = typer.Option(False, "--debug", help="Run Dash in debug mode"),
    ):
        """
        Serve the interactive station map.

        The station table and the topology are loaded in the background; the
        page fills in as each of them becomes available.
        """
        settings = build_settings(data_src, topology_src, host, port, debug or None)
        rich_print_section_separator("Station map")

        for label, path in (
            ("Station data", settings.data.data_src),
            ("Topology", settings.data.topology_src),
        ):
            if path.exists():
                rich_print_checked_statement(f"{label}: {path}", "info")
            else:
                # Missing inputs are logged by the loads; the server still starts
                rich_print_checked_statement(f"{label} not found: {path}", "warning")

        logger.debug(settings)

        from stationmap.dash.app import run as run_server

        run_server(settings)
