"""Wind vector value type."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Wind:
    """Wind speed paired with its source direction.

    ``source_direction`` follows the meteorological convention: degrees the
    wind blows *from*, clockwise from north. The value is used as given;
    no range validation is performed.
    """

    speed_magnitude: float
    source_direction: float

    def component_direction(self) -> Tuple[float, float]:
        """Unit vector of the source direction as (north, east)."""
        radians = math.radians(self.source_direction)
        return math.cos(radians), math.sin(radians)

    def component_velocity(self) -> Tuple[float, float]:
        """Velocity components (north, east), same units as the speed."""
        north, east = self.component_direction()
        return self.speed_magnitude * north, self.speed_magnitude * east
