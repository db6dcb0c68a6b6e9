"""Index → field table for the ``obs_st`` payload row.

The order is fixed by the Tempest UDP protocol (v171+) and must not be
changed. The decoder reads the row through :func:`named_slots` only.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, Optional, Sequence


class ObsSlot(IntEnum):
    TIMESTAMP = 0  # epoch seconds
    WIND_LULL = 1  # m/s, minimum 3 second sample
    WIND_AVG = 2  # m/s, average over report interval
    WIND_GUST = 3  # m/s, maximum 3 second sample
    WIND_DIRECTION = 4  # degrees
    WIND_SAMPLE_INTERVAL = 5  # seconds
    STATION_PRESSURE = 6  # hPa
    AIR_TEMPERATURE = 7  # °C
    RELATIVE_HUMIDITY = 8  # %
    ILLUMINANCE = 9  # lux
    UV_INDEX = 10
    SOLAR_RADIATION = 11  # W/m^2
    RAIN_LAST_MINUTE = 12  # mm
    PRECIPITATION_TYPE = 13  # 0 none, 1 rain, 2 hail, 3 rain + hail
    LIGHTNING_AVG_DISTANCE = 14  # km
    LIGHTNING_COUNT = 15
    BATTERY = 16  # volts
    REPORT_INTERVAL = 17  # minutes


def named_slots(row: Sequence[Optional[float]]) -> Dict[ObsSlot, Optional[float]]:
    """Map a positional row onto slot names; missing trailing slots are None."""
    return {
        slot: (row[slot] if slot < len(row) else None)
        for slot in ObsSlot
    }
