"""Cardinal directions accepted by the farthest-city query."""

from enum import Enum


class Direction(str, Enum):
    """Cardinal direction of an extremum query."""

    north = "north"
    east = "east"
    south = "south"
    west = "west"
