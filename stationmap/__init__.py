"""Interactive bubble map of radio stations."""

from pathlib import Path

BASE_PATH = Path(__file__).parent.parent
