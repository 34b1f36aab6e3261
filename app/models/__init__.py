from .driver import Driver
from .weekly import WeeklyEntry

__all__ = ["Driver", "WeeklyEntry"]
