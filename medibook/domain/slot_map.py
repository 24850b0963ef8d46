import re
from datetime import date
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .errors import AlreadyReserved

# Legacy keys: "15_12_2024" (day and month may be unpadded) and "10:00" / "10:00 AM"
DATE_KEY_PATTERN = re.compile(r"^(\d{1,2})_(\d{1,2})_(\d{4})$")
TIME_KEY_PATTERN = re.compile(r"^(\d{1,2}):([0-5]\d)(?:\s?([AaPp][Mm]))?$")


def parse_date_key(date_key: str) -> Optional[date]:
    match = DATE_KEY_PATTERN.match(date_key or "")
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def is_valid_date_key(date_key: str) -> bool:
    return parse_date_key(date_key) is not None


def is_valid_time_key(time_key: str) -> bool:
    match = TIME_KEY_PATTERN.match(time_key or "")
    if not match:
        return False
    hour = int(match.group(1))
    if match.group(3):
        return 1 <= hour <= 12
    return hour <= 23


class SlotMap:
    """Reserved time keys of one doctor, grouped by date key.

    Pure value: no locking and no persistence. Stores wrap mutations of it
    in their own atomic primitive.
    """

    def __init__(self, slots: Optional[Dict[str, Iterable[str]]] = None):
        self._slots: Dict[str, Set[str]] = {}
        for date_key, times in (slots or {}).items():
            for time_key in times:
                self._slots.setdefault(date_key, set()).add(time_key)

    @classmethod
    def from_dict(cls, slots_booked: Optional[Dict[str, Iterable[str]]]) -> "SlotMap":
        return cls(slots_booked)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "SlotMap":
        slot_map = cls()
        for date_key, time_key in pairs:
            slot_map._slots.setdefault(date_key, set()).add(time_key)
        return slot_map

    def is_free(self, date_key: str, time_key: str) -> bool:
        return time_key not in self._slots.get(date_key, ())

    def reserve(self, date_key: str, time_key: str) -> None:
        if not self.is_free(date_key, time_key):
            raise AlreadyReserved(date_key=date_key, time_key=time_key)
        self._slots.setdefault(date_key, set()).add(time_key)

    def release(self, date_key: str, time_key: str) -> None:
        times = self._slots.get(date_key)
        if not times:
            return
        times.discard(time_key)
        if not times:
            del self._slots[date_key]

    def dates(self) -> List[str]:
        return sorted(self._slots, key=lambda k: (parse_date_key(k) or date.min, k))

    def times(self, date_key: str) -> List[str]:
        return sorted(self._slots.get(date_key, ()))

    def to_dict(self) -> Dict[str, List[str]]:
        """Legacy ``slots_booked`` shape: date key to list of time keys."""
        return {date_key: self.times(date_key) for date_key in self.dates()}

    def __contains__(self, item: Tuple[str, str]) -> bool:
        date_key, time_key = item
        return not self.is_free(date_key, time_key)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        for date_key in self.dates():
            for time_key in self.times(date_key):
                yield date_key, time_key

    def __len__(self) -> int:
        return sum(len(times) for times in self._slots.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SlotMap):
            return NotImplemented
        return self._slots == other._slots

    def __repr__(self) -> str:
        return f"SlotMap({self.to_dict()!r})"
