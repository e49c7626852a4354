from enum import Enum


class UnitType(str, Enum):
    """Enum for different types of units"""

    STUDIO = "studio"
    ONE_BEDROOM = "one_bedroom"
    TWO_BEDROOM = "two_bedroom"
    SUITE = "suite"

    def __str__(self):
        return self.value
