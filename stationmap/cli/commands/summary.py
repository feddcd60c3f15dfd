from pathlib import Path
from typing import Annotated

import geopandas as gpd
import typer

from stationmap.cli.rich_utils import (
    rich_print_checked_statement,
    rich_print_section_separator,
    rich_print_station_summary,
)
from stationmap.configs.logging_init import logger
from stationmap.configs.settings_models import DataConfig
from stationmap.dash.controller import STATES_LAYER
from stationmap.models.stations import StationDataset


def register_summary_command(app: typer.Typer):
    @app.command("summary")
    def summary(
        data_src: Annotated[
            Path | None, typer.Option("--data-src", help="Path to the station CSV table")
        ] = None,
        topology_src: Annotated[
            Path | None,
            typer.Option("--topology-src", help="Also check a US TopoJSON file"),
        ] = None,
    ):
        """
        Describe a station table: metric ranges and filter membership.
        """
        src = data_src or DataConfig().data_src
        rich_print_section_separator(f"Stations: {src}")

        try:
            dataset = StationDataset.from_csv(src)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load {src}: {e}")
            rich_print_checked_statement(f"Failed to load station data: {e}", "error", exit=True)
            return

        rich_print_checked_statement(f"{len(dataset)} stations loaded", "success")
        rich_print_station_summary(dataset)

        if topology_src is None:
            return

        try:
            states = gpd.read_file(topology_src, layer=STATES_LAYER)
        except Exception as e:
            rich_print_checked_statement(f"Failed to load topology: {e}", "error", exit=True)
            return
        rich_print_checked_statement(
            f"{len(states)} state outlines in {topology_src}", "success"
        )
