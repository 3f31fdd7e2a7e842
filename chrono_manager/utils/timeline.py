"""Timezone correction and arc classification."""

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Iterable, Optional

from ..constants.calendar import ARCS
from ..constants.config import ARC_DIGITS

if TYPE_CHECKING:
    from ..models.entry import ChronoEntry


def correct_timezone(timestamp: Optional[datetime], offset_hours: Optional[int]) -> Optional[datetime]:
    """
    Move a locally reported timestamp to canonical time.
    
    Args:
        timestamp: Time as reported in the poster's timezone
        offset_hours: Signed hour offset of that timezone
        
    Returns:
        The canonical timestamp, or ``timestamp`` unchanged if either
        argument is None
    """
    if timestamp is None or offset_hours is None:
        return timestamp
    return timestamp - timedelta(hours=offset_hours)


def classify_arc(timestamp: Optional[datetime]) -> int:
    """Return the index of the arc ``timestamp`` falls into (0 if before all arcs)."""
    if timestamp is None:
        return 0
    
    for index, boundary in reversed(ARCS):
        if timestamp >= boundary:
            return index
    
    return 0


def arc_sort_key(entry: "ChronoEntry") -> tuple[int, datetime, str]:
    """Sort key ordering by arc (arc 0 last), then start time, then name."""
    arc = entry.arc or 10 ** ARC_DIGITS - 1
    return arc, entry.start, entry.name


def sort_entries(entries: Iterable["ChronoEntry"]) -> list["ChronoEntry"]:
    """
    Order entries by arc, then start time, then name.
    
    Entries outside of any arc (arc 0) go last.
    """
    return sorted(entries, key=arc_sort_key)
