"""Tests for the three legacy chronology page grammars."""

import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from chrono_manager.models.entry import EntrySource
from chrono_manager.parsers.markup import (
    decode_js_string,
    page_year,
    parse_cast_html,
    parse_chronology_page,
    parse_markup_line,
    parse_setepisode,
    parse_setepisode_notime,
    parse_snippet,
)


SETEPISODE_LINE = r"setepisode(101,15,'июля',10,0,12,0,3,'Ночь \"над\" городом',0,1,2,3,1);"
NOTIME_LINE = "setepisodenotime(55,'3 августа','4 августа','Тихий день',0,2,0);"
SNIPPET_LINE = (
    '<div class="chep">'
    '<div class="chtime0">(15 июля)<br> 10:00 - 12:00</div>'
    '<div class="chtime">(15 июля)<br> 13:00 - 15:00</div>'
    '<div class="chepname"><a href="http://codegeass.ru/viewtopic.php?id=77">Бал &amp; маски</a></div>'
    '<div class="chcast">'
    '<a href="http://codegeass.ru/pages/id01">Лелуш</a>, '
    '<a href="http://codegeass.ru/pages/id14">Карен</a>'
    '</div>'
    '<div class="chstat">Завершен</div>'
    '</div>'
)


def test_page_year_eras():
    assert page_year(0) == 2017
    assert page_year(6) == 2017
    assert page_year(7) == 2018


def test_decode_js_string():
    assert decode_js_string(r"Ночь \"над\" городом") == 'Ночь "над" городом'
    assert decode_js_string('Say "hi"') == 'Say "hi"'
    assert decode_js_string('""') == '""'
    assert decode_js_string(r"back\\slash") == "back\\slash"
    assert decode_js_string(r"ж") == "ж"


def test_setepisode_line():
    raw = parse_setepisode(SETEPISODE_LINE, 2017)

    assert raw.source == EntrySource.SETEPISODE
    assert raw.id == 101
    assert raw.name == 'Ночь "над" городом'
    assert raw.start == datetime(2017, 7, 15, 10, 0)
    assert raw.end == datetime(2017, 7, 15, 12, 0)
    assert raw.chara == [1, 2, 3]
    assert raw.tz == 3
    assert raw.done is True


def test_setepisode_canonical_times():
    entry = parse_setepisode(SETEPISODE_LINE, 2017).to_entry()

    assert entry.start == datetime(2017, 7, 15, 7, 0)
    assert entry.end == datetime(2017, 7, 15, 9, 0)
    assert entry.timeless is False
    assert entry.arc == 1


def test_setepisode_uses_page_year():
    line = "setepisode(300,5,'января',18,30,20,0,0,'Новый год',0,4,1);"
    entry = parse_markup_line(line, page_year(7)).to_entry()

    assert entry.start == datetime(2018, 1, 5, 18, 30)
    assert entry.arc == 7


def test_setepisode_unknown_month_is_fatal():
    line = "setepisode(300,5,'мартобря',18,30,20,0,0,'Новый год',0,4,1);"
    with pytest.raises(KeyError):
        parse_markup_line(line, 2017)


def test_setepisode_notime_line():
    raw = parse_setepisode_notime(NOTIME_LINE, 2017)
    entry = raw.to_entry()

    assert raw.source == EntrySource.SETEPISODE_NOTIME
    assert raw.done is False
    assert entry.id == 55
    assert entry.name == "Тихий день"
    assert entry.start == datetime(2017, 8, 3)
    assert entry.end == datetime(2017, 8, 4)
    assert entry.tz == 0
    assert entry.chara == (2,)
    assert entry.timeless is False


def test_notime_line_not_taken_for_setepisode():
    assert parse_setepisode(NOTIME_LINE, 2017) is None
    assert parse_markup_line(NOTIME_LINE, 2017).source == EntrySource.SETEPISODE_NOTIME


def test_snippet_line():
    raw = parse_snippet(SNIPPET_LINE, 2017)
    entry = raw.to_entry()

    assert raw.source == EntrySource.SNIPPET
    assert raw.done is True
    assert entry.id == 77
    assert entry.name == "Бал & маски"
    assert entry.tz == 3
    assert entry.start == datetime(2017, 7, 15, 7, 0)
    assert entry.end == datetime(2017, 7, 15, 9, 0)
    assert entry.chara == (1, 14)


@pytest.mark.parametrize("corrected,expected_tz", [
    ("13:30", 3),
    ("08:30", -1),
    ("10:59", 0),
])
def test_snippet_tz_truncates_toward_zero(corrected, expected_tz):
    line = SNIPPET_LINE.replace("<br> 13:00 - 15:00", f"<br> {corrected} - 15:00")
    assert parse_snippet(line, 2017).tz == expected_tz


def test_snippet_tz_across_midnight():
    line = (
        SNIPPET_LINE
        .replace("(15 июля)<br> 10:00 - 12:00", "(15 июля)<br> 22:00 - 23:00")
        .replace("(15 июля)<br> 13:00 - 15:00", "(16 июля)<br> 01:00 - 02:00")
    )
    assert parse_snippet(line, 2017).tz == 3


def test_snippet_status_other_than_completed():
    line = SNIPPET_LINE.replace("Завершен", "В процессе")
    assert parse_snippet(line, 2017).done is False


def test_snippet_cast_without_spaces():
    line = SNIPPET_LINE.replace("</a>, <a", "</a>,<a")
    assert parse_snippet(line, 2017).chara == [1, 14]


def test_parse_cast_html_reads_only_character_links():
    html = (
        '<a href="http://codegeass.ru/pages/id07">Джереми</a>, '
        '<a href="http://codegeass.ru/viewtopic.php?id=5">тема</a>, '
        '<a href="http://codegeass.ru/pages/id120">Ролло</a>'
    )
    assert parse_cast_html(html) == [7, 120]


@pytest.mark.parametrize("line", [
    "",
    "<p>Хронология второй арки</p>",
    "setepisode(1,2,'июля');",
    '<script type="text/javascript">',
])
def test_unrelated_lines_ignored(line):
    assert parse_markup_line(line, 2017) is None


def test_parse_chronology_page_keeps_line_order():
    body = "\n".join([
        "<html><body>",
        SNIPPET_LINE,
        "<p></p>",
        f"<script>{SETEPISODE_LINE}</script>",
        NOTIME_LINE,
        "</body></html>",
    ])

    raw_entries = parse_chronology_page(body, 2)

    assert [raw.id for raw in raw_entries] == [77, 101, 55]
    assert all(raw.start.year == 2017 for raw in raw_entries)


def test_snippet_corrected_column_in_next_year():
    line = (
        SNIPPET_LINE
        .replace("(15 июля)<br> 10:00 - 12:00", "(31 декабря)<br> 22:00 - 23:00")
        .replace("(15 июля)<br> 13:00 - 15:00", "(1 января)<br> 01:00 - 02:00")
    )
    entry = parse_snippet(line, page_year(6)).to_entry()

    assert entry.tz == 3
    assert entry.start == datetime(2017, 12, 31, 19, 0)


def test_snippet_corrected_column_in_previous_year():
    line = (
        SNIPPET_LINE
        .replace("(15 июля)<br> 10:00 - 12:00", "(1 января)<br> 01:00 - 02:00")
        .replace("(15 июля)<br> 13:00 - 15:00", "(31 декабря)<br> 22:00 - 23:00")
    )
    raw = parse_snippet(line, page_year(7))

    assert raw.tz == -3
    assert raw.to_entry().start == datetime(2018, 1, 1, 4, 0)
