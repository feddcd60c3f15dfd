from typing import TYPE_CHECKING

from stationmap.configs.logging_init import logger
from stationmap.models.stations import StationFilter

if TYPE_CHECKING:
    from stationmap.dash.controller import Controller

ACTIVE_VARIANT = "filled"
INACTIVE_VARIANT = "outline"


class NavigationView:
    """Filter controls: exactly one is active, clicking it again does nothing."""

    def __init__(self, controller: "Controller"):
        self.controller = controller
        self.controls: tuple[StationFilter, ...] = tuple(StationFilter)
        self.active: StationFilter | None = None

    def init(self) -> None:
        self.active = StationFilter.ALL

    def click(self, identifier: str | StationFilter) -> bool:
        """Activate a control and re-apply the filter.

        Returns False when the control was already active.
        """
        clicked = StationFilter.resolve(identifier)
        if clicked == self.active:
            return False
        logger.debug(f"Filter control {self.active} -> {clicked}")
        self.active = clicked
        self.controller.switch_filters(clicked.value)
        return True

    def button_variants(self) -> list[str]:
        return [ACTIVE_VARIANT if c == self.active else INACTIVE_VARIANT for c in self.controls]
