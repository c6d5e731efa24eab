"""
Time grains -- the bucketing units a query can aggregate over.

``TimeGrain`` holds the zoneless calendar grains that metric makers can be
configured with.  ``AllGranularity`` is the single "no bucketing" granularity:
every row in the requested intervals lands in one bucket.
"""
from __future__ import annotations

from enum import Enum
from typing import Union


class TimeGrain(Enum):
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

    @property
    def api_name(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> TimeGrain:
        """Resolve a grain by member name, case-insensitively (``"day"`` -> ``DAY``)."""
        key = name.strip()
        if key.upper() in cls.__members__:
            return cls[key.upper()]
        raise ValueError(
            f"Unknown time grain '{name}'. Allowed: {', '.join(cls.__members__)}"
        )


class AllGranularity(Enum):
    ALL = "all"

    @property
    def api_name(self) -> str:
        return self.value


Granularity = Union[TimeGrain, AllGranularity]
