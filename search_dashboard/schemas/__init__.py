from .auth import Principal
from .stats import DateRange, RecentQuery, StatsResponse, StatsSnapshot

# Define the public API of this module
__all__ = [
    "Principal",
    "DateRange",
    "RecentQuery",
    "StatsResponse",
    "StatsSnapshot",
]
