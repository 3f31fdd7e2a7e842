"""Parsers for the markup of previously published chronology pages.

Pages written over the years carry episodes in three different forms:

* ``setepisode(...)`` script calls with start/end times and a timezone,
* ``setepisodenotime(...)`` script calls with dates only,
* a rendered ``<div class="chep">`` snippet showing both the local and the
  corrected time.

Every form is matched line by line and read into a :class:`RawEntry`.
"""

import json
import re
from datetime import datetime, timedelta
from html import unescape
from html.parser import HTMLParser
from typing import Callable, Optional

from ..constants.calendar import month_number
from ..constants.config import (
    ERA_CUTOVER_ARC,
    STATUS_COMPLETED,
    YEAR_BEFORE_CUTOVER,
    YEAR_FROM_CUTOVER,
)
from ..models.entry import EntrySource, RawEntry


SETEPISODE_PATTERN = re.compile(r"""
    setepisode\(
    (?P<id>\d+),
    (?P<day>\d+),
    '(?P<month>.*?)',
    (?P<start_hour>\d+),
    (?P<start_minute>\d+),
    (?P<end_hour>\d+),
    (?P<end_minute>\d+),
    (?P<tz>\d+),
    '(?P<name>.*?)',
    (?P<mode>\d+),
    (?P<chara>\d+(?:,\d+)*),
    (?P<done>\d+)
    \);
""", re.VERBOSE)

SETEPISODE_NOTIME_PATTERN = re.compile(r"""
    setepisodenotime\(
    (?P<id>\d+),
    '(?P<start_day>\d+)\ (?P<start_month>.*?)',
    '(?P<end_day>\d+)\ (?P<end_month>.*?)',
    '(?P<name>.*?)',
    (?P<mode>\d+),
    (?P<chara>\d+(?:,\d+)*),
    (?P<done>\d+)
    \);
""", re.VERBOSE)

SNIPPET_PATTERN = re.compile(r"""
    <div\ class="chep">
      <div\ class="chtime0">
        \((?P<day>\d+)\ (?P<month>.*?)\)<br>
        \ (?P<start_hour>\d+):(?P<start_minute>\d+)\ -
        \ (?P<end_hour>\d+):(?P<end_minute>\d+)
      </div>
      <div\ class="chtime">
        \((?P<tzs_day>\d+)\ (?P<tzs_month>.*?)\)<br>
        \ (?P<tzs_start_hour>\d+):(?P<tzs_start_minute>\d+)\ -
        \ .*?
      </div>
      <div\ class="chepname">
        <a\ href="http://codegeass\.ru/viewtopic\.php\?id=(?P<id>\d+)">
          (?P<name>.*?)
        </a>
      </div>
      <div\ class="chcast">
        (?P<chara>
          (?:<a\ href="http://codegeass\.ru/pages/id\d+">.*?</a>,?\ ?)+
        )
      </div>
      <div\ class="chstat">(?P<status>.*?)</div>
    </div>
""", re.VERBOSE)

YEAR_WRAP = timedelta(days=180)

CHARACTER_HREF_PATTERN = re.compile(r"^http://codegeass\.ru/pages/id(\d+)$")

# A double quote not already escaped by an odd run of backslashes
UNESCAPED_QUOTE_PATTERN = re.compile(r'(?<!\\)((?:\\\\)*)"')


class CastHTMLParser(HTMLParser):
    """Collect character ids from the cast links of a rendered episode."""
    
    def __init__(self):
        super().__init__()
        self.character_ids: list[int] = []
    
    def handle_starttag(self, tag: str, attrs: list[tuple[str, Optional[str]]]):
        if tag != "a":
            return
        
        href = dict(attrs).get("href") or ""
        match = CHARACTER_HREF_PATTERN.match(href)
        if match:
            self.character_ids.append(int(match.group(1)))


def page_year(arc: int) -> int:
    """Year the dates on the chronology page of ``arc`` belong to."""
    return YEAR_BEFORE_CUTOVER if arc < ERA_CUTOVER_ARC else YEAR_FROM_CUTOVER


def decode_js_string(value: str) -> str:
    """Decode the body of a quoted script string literal."""
    escaped = UNESCAPED_QUOTE_PATTERN.sub(r'\1\\"', value)
    return json.loads(f'"{escaped}"')


def parse_chara_list(value: str) -> list[int]:
    return [int(chara_id) for chara_id in value.split(",")]


def parse_cast_html(html: str) -> list[int]:
    """Character ids linked from a cast list, in order."""
    parser = CastHTMLParser()
    parser.feed(html)
    parser.close()
    return parser.character_ids


def parse_setepisode(line: str, year: int) -> Optional[RawEntry]:
    """Read a ``setepisode(...)`` call with times and timezone."""
    match = SETEPISODE_PATTERN.search(line)
    if not match:
        return None
    
    month = month_number(decode_js_string(match["month"]))
    day = int(match["day"])
    
    return RawEntry(
        source=EntrySource.SETEPISODE,
        id=int(match["id"]),
        name=decode_js_string(match["name"]),
        start=datetime(year, month, day, int(match["start_hour"]), int(match["start_minute"])),
        end=datetime(year, month, day, int(match["end_hour"]), int(match["end_minute"])),
        timeless=False,
        chara=parse_chara_list(match["chara"]),
        tz=int(match["tz"]),
        done=match["done"] != "0",
    )


def parse_setepisode_notime(line: str, year: int) -> Optional[RawEntry]:
    """
    Read a ``setepisodenotime(...)`` call.
    
    These calls never carried a timezone, so the dates are taken as canonical.
    """
    match = SETEPISODE_NOTIME_PATTERN.search(line)
    if not match:
        return None
    
    start_month = month_number(decode_js_string(match["start_month"]))
    end_month = month_number(decode_js_string(match["end_month"]))
    
    return RawEntry(
        source=EntrySource.SETEPISODE_NOTIME,
        id=int(match["id"]),
        name=decode_js_string(match["name"]),
        start=datetime(year, start_month, int(match["start_day"])),
        end=datetime(year, end_month, int(match["end_day"])),
        timeless=False,
        chara=parse_chara_list(match["chara"]),
        tz=0,
        done=match["done"] != "0",
    )


def parse_snippet(line: str, year: int) -> Optional[RawEntry]:
    """
    Read a rendered ``<div class="chep">`` episode.
    
    The timezone is the whole-hour difference between the corrected and the
    local start time, truncated toward zero.
    """
    match = SNIPPET_PATTERN.search(line)
    if not match:
        return None
    
    month = month_number(match["month"])
    day = int(match["day"])
    start = datetime(year, month, day, int(match["start_hour"]), int(match["start_minute"]))
    end = datetime(year, month, day, int(match["end_hour"]), int(match["end_minute"]))
    corrected_start = datetime(
        year,
        month_number(match["tzs_month"]),
        int(match["tzs_day"]),
        int(match["tzs_start_hour"]),
        int(match["tzs_start_minute"]),
    )
    # The corrected column may fall into the neighbouring year (31 декабря -> 1 января)
    if corrected_start - start > YEAR_WRAP:
        corrected_start = corrected_start.replace(year=year - 1)
    elif start - corrected_start > YEAR_WRAP:
        corrected_start = corrected_start.replace(year=year + 1)
    tz = int((corrected_start - start).total_seconds() / 3600)
    
    return RawEntry(
        source=EntrySource.SNIPPET,
        id=int(match["id"]),
        name=unescape(match["name"]),
        start=start,
        end=end,
        timeless=False,
        chara=parse_cast_html(match["chara"]),
        tz=tz,
        done=match["status"] == STATUS_COMPLETED,
    )


# Tried in order, first match wins
GRAMMARS: tuple[Callable[[str, int], Optional[RawEntry]], ...] = (
    parse_setepisode,
    parse_setepisode_notime,
    parse_snippet,
)


def parse_markup_line(line: str, year: int) -> Optional[RawEntry]:
    """
    Match one page line against every grammar.
    
    Returns:
        The raw fields of the first grammar that matches, or None for a line
        carrying no episode
    """
    for grammar in GRAMMARS:
        raw = grammar(line, year)
        if raw is not None:
            return raw
    return None


def parse_chronology_page(body: str, arc: int) -> list[RawEntry]:
    """Read every episode on the chronology page of ``arc``, in page order."""
    year = page_year(arc)
    raw_entries: list[RawEntry] = []
    
    for line in body.splitlines():
        raw = parse_markup_line(line, year)
        if raw is not None:
            raw_entries.append(raw)
    
    return raw_entries
