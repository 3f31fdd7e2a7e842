"""HTML and JSON output for chronology entries."""

import json
from datetime import datetime
from html import escape
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..constants.calendar import month_name
from ..constants.config import (
    CHARACTER_URL,
    EPISODE_DONE,
    EPISODE_MODE,
    STATUS_COMPLETED,
    TOPIC_URL,
)
from ..models.entry import ChronoEntry

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S+00:00"


def escape_html(text: str) -> str:
    """HTML-escape text, writing apostrophes as &#39; like the published pages."""
    return escape(text).replace("&#x27;", "&#39;")


def render_live_html(entry: ChronoEntry) -> str:
    """
    Render an entry with a known end as a ``setepisode`` script call.
    
    The name is JSON-encoded only; no HTML escaping happens inside the script.
    """
    start, end = entry.start, entry.end
    args = ",".join(str(arg) for arg in (
        entry.id,
        start.day,
        json.dumps(month_name(start.month), ensure_ascii=False),
        start.hour,
        start.minute,
        end.hour,
        end.minute,
        entry.tz,
        json.dumps(entry.name, ensure_ascii=False),
        EPISODE_MODE,
        ",".join(str(chara_id) for chara_id in entry.chara),
        EPISODE_DONE,
    ))
    
    return (
        f'<p id="{entry.id}"></p>\n'
        f'<script type="text/javascript">\n'
        f"setepisode({args});\n"
        f"</script>\n"
    )


def render_completed_html(entry: ChronoEntry, characters: Mapping[int, str]) -> str:
    """
    Render a completed episode as a static block.
    
    Args:
        entry: Entry to render
        characters: Character registry used to name the cast
        
    Raises:
        KeyError: If a cast member is missing from ``characters``
    """
    start = entry.start
    cast = ", ".join(
        f'<a href="{CHARACTER_URL.format(id=chara_id)}">{escape_html(characters[chara_id])}</a>'
        for chara_id in entry.chara
    )
    
    return (
        f'<div class="chep">\n'
        f'<div class="chtime1">{start.day} {month_name(start.month)} {start.year} года</div>\n'
        f'<div class="chepname"><a href="{TOPIC_URL.format(id=entry.id)}">{escape_html(entry.name)}</a></div>\n'
        f'<div class="chcast">{cast}</div>\n'
        f'<div class="chstat">{STATUS_COMPLETED}</div>\n'
        f"</div>\n"
    )


def render_html(entry: ChronoEntry, characters: Mapping[int, str]) -> str:
    """Render an entry live if its end is known, as completed otherwise."""
    if not entry.timeless:
        return render_live_html(entry)
    return render_completed_html(entry, characters)


def format_timestamp(timestamp: Optional[datetime]) -> str:
    return timestamp.strftime(TIMESTAMP_FORMAT) if timestamp else ""


def entry_to_record(entry: ChronoEntry, done: bool = True) -> dict[str, Any]:
    """
    Build the JSON record of an entry.
    
    Args:
        entry: Entry to serialize
        done: Completion flag to write; pass a page's status to carry it over
    """
    return {
        "id": entry.id,
        "start": format_timestamp(entry.start),
        "end": format_timestamp(entry.end),
        "tz": entry.tz,
        "turn": entry.arc,
        "name": escape_html(entry.name),
        "mode": EPISODE_MODE,
        "chara": list(entry.chara),
        "done": done,
    }


def entries_to_json(
    entries: Iterable[ChronoEntry],
    done_flags: Optional[Sequence[bool]] = None,
) -> str:
    """
    Serialize entries as a JSON array.
    
    Args:
        entries: Entries in output order
        done_flags: Per-entry completion flags; every record is done if None
    """
    entries = list(entries)
    if done_flags is None:
        done_flags = [True] * len(entries)
    elif len(done_flags) != len(entries):
        raise ValueError(f"Got {len(done_flags)} done flags for {len(entries)} entries")
    
    records = [entry_to_record(entry, done) for entry, done in zip(entries, done_flags)]
    return json.dumps(records, indent=2, ensure_ascii=False)
