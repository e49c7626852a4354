from enum import Enum


class UnitStatus(str, Enum):
    """Enum for the occupancy status of a unit"""

    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    MAINTENANCE = "MAINTENANCE"

    def __str__(self):
        return self.value
