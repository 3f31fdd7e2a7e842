"""Parser for chronology entries posted as labeled forum text.

A post dump is a sequence of blocks separated by ``------`` lines. Each block
describes one episode with ``Label: value`` lines, e.g.::

    Название: [Эпизод] Встреча на крыше
    Id темы: 1234
    Начало: 15.07.2017 10:00
    Конец: 15.07.2017 12:00
    Персонажи: [3, 14]
    Часовой пояс: [3, "MSK"]
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from ..constants.config import ENTRY_DELIMITER
from ..models.entry import ChronoEntry, EntryError, EntrySource, RawEntry

NAME_LABEL = "Название:"
ID_LABEL = "Id темы:"
START_LABEL = "Начало:"
DATE_LABEL = "Дата:"
END_LABEL = "Конец:"
CHARA_LABEL = "Персонажи:"
TZ_LABEL = "Часовой пояс:"

DATETIME_FORMAT = "%d.%m.%Y %H:%M"
DATE_FORMAT = "%d.%m.%Y"

CHARA_PATTERN = re.compile(r"Персонажи: \[?(\d+(?:, \d+)*)?\]?")
# [3, "MSK"] -> 3
TZ_DECORATION_PATTERN = re.compile(r'\[(\d+), ".*?"\]')
NUMBER_PATTERN = re.compile(r"\d+")


def _value(line: str, label: str) -> str:
    return line[len(label):].strip()


def parse_name(line: str) -> Optional[str]:
    """Take the title from a name line, dropping the leading tag word."""
    parts = _value(line, NAME_LABEL).split(None, 1)
    return parts[-1] if parts else None


def parse_chara(line: str) -> list[int]:
    """Extract character ids from ``Персонажи: [1, 2]``; empty if none listed."""
    match = CHARA_PATTERN.search(line)
    if not match or not match.group(1):
        return []
    return [int(chara_id) for chara_id in match.group(1).split(", ")]


def parse_tz(line: str) -> int:
    """
    Extract the hour offset from a timezone line.
    
    Raises:
        EntryError: If the line holds no number or more than one
    """
    candidates = NUMBER_PATTERN.findall(TZ_DECORATION_PATTERN.sub(r"\1", line))
    if len(candidates) > 1:
        raise EntryError(f"Ambiguous timezone: {line!r}")
    if not candidates:
        raise EntryError(f"No timezone on timezone line: {line!r}")
    return int(candidates[0])


def parse_post_fields(text: str) -> RawEntry:
    """
    Read the labeled lines of one block into raw fields.
    
    Unknown lines are ignored. Missing labels leave their field unset.
    
    Raises:
        EntryError: On an ambiguous or empty timezone line
        ValueError: On a malformed id or date
    """
    fields: dict = {}
    
    for line in text.splitlines():
        if line.startswith(NAME_LABEL):
            fields["name"] = parse_name(line)
        elif line.startswith(ID_LABEL):
            fields["id"] = int(_value(line, ID_LABEL))
        elif line.startswith(START_LABEL):
            fields["start"] = datetime.strptime(_value(line, START_LABEL), DATETIME_FORMAT)
        elif line.startswith(DATE_LABEL):
            fields["start"] = datetime.strptime(_value(line, DATE_LABEL), DATE_FORMAT)
        elif line.startswith(END_LABEL):
            fields["end"] = datetime.strptime(_value(line, END_LABEL), DATETIME_FORMAT)
        elif line.startswith(CHARA_LABEL):
            fields["chara"] = parse_chara(line)
        elif line.startswith(TZ_LABEL):
            fields["tz"] = parse_tz(line)
    
    return RawEntry(
        source=EntrySource.POST,
        timeless="end" not in fields,
        **fields,
    )


def parse_post_block(text: str) -> ChronoEntry:
    """
    Parse one block into a canonical entry.
    
    Raises:
        ValueError: If the block is incomplete or malformed (this includes
            EntryError and pydantic's ValidationError)
    """
    return parse_post_fields(text).to_entry()


def iter_post_blocks(lines: Iterable[str]) -> Iterator[str]:
    """
    Split a post dump into blocks.
    
    Empty lines are skipped. Only text followed by a delimiter line forms a
    block; trailing lines after the last delimiter are not yielded.
    """
    block: list[str] = []
    
    for line in lines:
        line = line.rstrip("\r\n")
        
        if line == ENTRY_DELIMITER:
            yield "\n".join(block)
            block = []
            continue
        
        if line:
            block.append(line)


def read_post_entries(
    lines: Iterable[str],
    on_skipped: Optional[Callable[[str, ValueError], None]] = None,
) -> list[ChronoEntry]:
    """
    Parse every block of a post dump, dropping the ones that fail.
    
    Args:
        lines: Lines of the dump
        on_skipped: Called with the block text and the error for each dropped block
        
    Returns:
        Entries in the order their blocks appear
    """
    entries: list[ChronoEntry] = []
    
    for block in iter_post_blocks(lines):
        try:
            entries.append(parse_post_block(block))
        except ValueError as e:
            if on_skipped:
                on_skipped(block, e)
    
    return entries


def read_post_file(
    path: Path,
    on_skipped: Optional[Callable[[str, ValueError], None]] = None,
) -> list[ChronoEntry]:
    """Read and parse a post dump file."""
    with open(path, "r", encoding="utf-8") as f:
        return read_post_entries(f, on_skipped=on_skipped)
