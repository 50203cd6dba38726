"""City record models and the grammar they are validated against."""

import re

from pydantic import BaseModel, Field, field_validator

from city_map.geo.validator import is_valid_coordinate

CITY_PATTERN = re.compile(r"[A-Za-z]+(?:[\s-][A-Za-z]+)*")
STATE_PATTERN = re.compile(r"[A-Z]{2}")
COORDINATE_PATTERN = re.compile(r"-?[0-9]+(\.[0-9]+)?")


def is_valid_city_name(city: str) -> bool:
    """Return True for letter groups joined by single spaces or hyphens.

    Line breaks are rejected since stored records are one per line.
    """
    return "\n" not in city and CITY_PATTERN.fullmatch(city) is not None


def is_valid_state(state: str) -> bool:
    """Return True for exactly two uppercase letters."""
    return STATE_PATTERN.fullmatch(state) is not None


class CityRecord(BaseModel):
    """A named geographic point held by the registry."""

    city: str
    state: str
    latitude: float = Field(ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(ge=-180, le=180, allow_inf_nan=False)

    @field_validator("city")
    @classmethod
    def check_city(cls, value: str) -> str:
        if not is_valid_city_name(value):
            raise ValueError(f"Invalid city name: {value!r}")
        return value

    @field_validator("state")
    @classmethod
    def check_state(cls, value: str) -> str:
        if not is_valid_state(value):
            raise ValueError(f"Invalid state code: {value!r}")
        return value


class CityForm(BaseModel):
    """Raw string fields of an "add city" request."""

    city: str
    state: str
    latitude: str
    longitude: str

    def is_valid(self) -> bool:
        """Check the form against the record grammar and coordinate bounds.

        Returns:
            True when every field is well formed and the coordinates are
            inside Earth bounds.
        """
        return (
            is_valid_city_name(self.city)
            and is_valid_state(self.state)
            and COORDINATE_PATTERN.fullmatch(self.latitude) is not None
            and COORDINATE_PATTERN.fullmatch(self.longitude) is not None
            and is_valid_coordinate(self.latitude, self.longitude)
        )

    def to_record(self) -> CityRecord:
        """Convert a validated form into a CityRecord.

        Returns:
            A CityRecord with the coordinates parsed as floats.
        """
        return CityRecord(
            city=self.city,
            state=self.state,
            latitude=float(self.latitude),
            longitude=float(self.longitude),
        )
