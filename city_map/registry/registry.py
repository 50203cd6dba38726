"""In-memory ordered collection of city records."""

from typing import Iterable, Iterator

from city_map.models.city import CityRecord


class CityRegistry:
    """Ordered, append-only collection of CityRecord values.

    Records are not re-validated on add; callers validate first.
    """

    def __init__(self, records: Iterable[CityRecord] = ()):
        self._records: list[CityRecord] = list(records)

    def add(self, record: CityRecord) -> None:
        """Append a record to the end of the registry."""
        self._records.append(record)

    def all(self) -> tuple[CityRecord, ...]:
        """Return a read-only snapshot in insertion order."""
        return tuple(self._records)

    def __iter__(self) -> Iterator[CityRecord]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CityRegistry):
            return NotImplemented
        return self._records == other._records
