"""Parsing and serialization of the city record text format.

Each line of the format looks like::

    "Nashville, TN", 36.17, -86.78;
"""

import re
from decimal import Decimal
from typing import Iterable

from city_map.geo.validator import is_valid_coordinate
from city_map.logging_config import logger
from city_map.models.city import CityRecord

ROW_PATTERN = re.compile(
    r'"[a-zA-Z]+(?:[\s-][a-zA-Z]+)*, [A-Z]{2}", -?[0-9]+(\.[0-9]+)?, -?[0-9]+(\.[0-9]+)?;'
)
FIELD_SEPARATOR = ", "

SAMPLE_DATA = """"Nashville, TN", 36.17, -86.78;
"New York, NY", 40.71, -74.00;
"Atlanta, GA", 33.75, -84.39;
"Denver, CO", 39.74, -104.98;
"Seattle, WA", 47.61, -122.33;
"Los Angeles, CA", 34.05, -118.24;
"Memphis, TN", 35.15, -90.05;"""


def _row_in_bounds(row: str) -> bool:
    fields = row.split(FIELD_SEPARATOR)
    return is_valid_coordinate(fields[2], fields[3].rstrip(";"))


def _row_to_record(row: str) -> CityRecord:
    city, state, latitude, longitude = row.split(FIELD_SEPARATOR)
    return CityRecord(
        city=city[1:],
        state=state[:-1],
        latitude=float(latitude),
        longitude=float(longitude.rstrip(";")),
    )


def parse(text: str) -> list[CityRecord]:
    """Parse a text blob into validated city records.

    Lines that do not match the row grammar, or whose coordinates fall
    outside Earth bounds, are skipped.

    Args:
        text: Newline separated record lines.

    Returns:
        The surviving records in their original line order.
    """
    lines = text.split("\n")
    rows = [line for line in lines if ROW_PATTERN.fullmatch(line)]
    rows = [row for row in rows if _row_in_bounds(row)]
    records = [_row_to_record(row) for row in rows]
    logger.info("RECORDS_PARSED", kept=len(records), dropped=len(lines) - len(records))
    return records


def format_coordinate(value: float) -> str:
    """Render a float in positional notation so it re-parses exactly."""
    return format(Decimal(repr(float(value))), "f")


def serialize_record(record: CityRecord) -> str:
    return (
        f'"{record.city}, {record.state}", '
        f"{format_coordinate(record.latitude)}, {format_coordinate(record.longitude)};"
    )


def serialize(records: Iterable[CityRecord]) -> str:
    """Render records in the storage text format, one per line.

    Args:
        records: Records in registry order.

    Returns:
        The newline joined text accepted by parse().
    """
    return "\n".join(serialize_record(record) for record in records)
