"""Directional, nearest-neighbor, and per-state queries over a registry."""

import math
from operator import attrgetter

from city_map.geo.validator import is_valid_coordinate
from city_map.logging_config import logger
from city_map.models.city import CityRecord, is_valid_state
from city_map.models.direction import Direction
from city_map.registry.registry import CityRegistry

EXTREMUM_SELECTORS = {
    Direction.north: (max, "latitude"),
    Direction.east: (max, "longitude"),
    Direction.south: (min, "latitude"),
    Direction.west: (min, "longitude"),
}


class CityMapError(Exception):
    """Base exception for city query failures."""
    pass


class InvalidArgumentError(CityMapError):
    """Raised when a query argument is malformed or out of bounds."""
    pass


class EmptyCollectionError(CityMapError):
    """Raised when an extremum or nearest query runs over no records."""
    pass


def parse_direction(token: str) -> Direction:
    """Convert a user supplied token into a Direction.

    Args:
        token: Raw direction string such as "north".

    Returns:
        The matching Direction member.

    Raises:
        InvalidArgumentError: If the token is not a cardinal direction.
    """
    try:
        return Direction(token)
    except ValueError as exc:
        raise InvalidArgumentError(
            'Wrong cardinal direction. It should be: "north", "east", "south" or "west".'
        ) from exc


def _records(registry: CityRegistry) -> tuple[CityRecord, ...]:
    records = registry.all()
    if not records:
        raise EmptyCollectionError("No cities in the registry")
    return records


def farthest(registry: CityRegistry, direction: Direction) -> str:
    """Return the name of the city farthest in the given direction.

    Ties resolve to the first matching record in registry order.

    Args:
        registry: Registry to search.
        direction: Cardinal direction.

    Returns:
        The city name.

    Raises:
        EmptyCollectionError: If the registry has no records.
    """
    records = _records(registry)
    select, attribute = EXTREMUM_SELECTORS[direction]
    # max/min return the first extreme element, which keeps ties stable
    return select(records, key=attrgetter(attribute)).city


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def planar_distance(record: CityRecord, latitude: float, longitude: float) -> float:
    """Euclidean distance on raw degrees, without geodesic correction."""
    return math.sqrt(
        (record.latitude - latitude) ** 2 + (record.longitude - longitude) ** 2
    )


def closest(registry: CityRegistry, latitude, longitude) -> str:
    """Return the name of the city nearest to a location.

    Args:
        registry: Registry to search.
        latitude: Target latitude in degrees.
        longitude: Target longitude in degrees.

    Returns:
        The name of the first city at the minimum planar distance.

    Raises:
        InvalidArgumentError: If a coordinate is not a number or out of bounds.
        EmptyCollectionError: If the registry has no records.
    """
    if not (
        _is_number(latitude)
        and _is_number(longitude)
        and is_valid_coordinate(latitude, longitude)
    ):
        logger.info("INVALID_COORDINATES", latitude=latitude, longitude=longitude)
        raise InvalidArgumentError("Invalid latitude or longitude.")
    records = _records(registry)
    return min(
        records, key=lambda record: planar_distance(record, latitude, longitude)
    ).city


def list_states(registry: CityRegistry) -> list[str]:
    """Return distinct state codes in first-occurrence order."""
    return list(dict.fromkeys(record.state for record in registry.all()))


def cities_in_state(registry: CityRegistry, state: str) -> list[str]:
    """Return the names of cities in a state, in registry order.

    Args:
        registry: Registry to search.
        state: Two letter uppercase state code.

    Returns:
        Matching city names, empty when none match.

    Raises:
        InvalidArgumentError: If the state code is malformed.
    """
    if not isinstance(state, str) or not is_valid_state(state):
        raise InvalidArgumentError("Invalid state name.")
    return [record.city for record in registry.all() if record.state == state]
