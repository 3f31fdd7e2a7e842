"""Month names and arc boundaries of the chronology calendar."""

from datetime import datetime
from types import MappingProxyType

# Genitive month names as written in dates ("15 июля")
MONTHS = MappingProxyType({
    1: "января",
    2: "февраля",
    3: "марта",
    4: "апреля",
    5: "мая",
    6: "июня",
    7: "июля",
    8: "августа",
    9: "сентября",
    10: "октября",
    11: "ноября",
    12: "декабря",
})

MONTHS_BACK = MappingProxyType({name: number for number, name in MONTHS.items()})

# (arc index, first moment of the arc), ascending. Arc 0 is everything before
# the first boundary and has no boundary of its own.
ARCS: tuple[tuple[int, datetime], ...] = (
    (1, datetime(2017, 7, 15)),
    (2, datetime(2017, 9, 1)),
    (3, datetime(2017, 10, 1)),
    (4, datetime(2017, 10, 16)),
    (5, datetime(2017, 11, 1)),
    (6, datetime(2017, 12, 1)),
    (7, datetime(2018, 1, 1)),
)

# Every arc index, including 0. Each one has its own chronology page.
ARC_INDICES: tuple[int, ...] = (0,) + tuple(index for index, _ in ARCS)


def month_name(number: int) -> str:
    """Return the genitive name of month ``number`` (1-12)."""
    return MONTHS[number]


def month_number(name: str) -> int:
    """Return the month number for an exact genitive month name."""
    return MONTHS_BACK[name]
