"""Tests for HTML fragments and JSON records."""

import json
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from chrono_manager.models.entry import ChronoEntry
from chrono_manager.renderers.entry import (
    entries_to_json,
    entry_to_record,
    render_completed_html,
    render_html,
    render_live_html,
)


CHARACTERS = {
    1: "Лелуш Ламперуж",
    14: "Карен <Кодзуки>",
}


@pytest.fixture
def live_entry():
    return ChronoEntry(
        id=1234,
        name='Встреча "на" крыше & <b>',
        start=datetime(2017, 7, 15, 7, 5),
        end=datetime(2017, 7, 15, 9, 0),
        chara=[3, 14],
        tz=3,
    )


@pytest.fixture
def completed_entry():
    return ChronoEntry(
        id=88,
        name="Старые <письма>",
        start=datetime(2017, 8, 20),
        timeless=True,
        chara=[1, 14],
        tz=0,
    )


def test_live_html(live_entry):
    html = render_live_html(live_entry)

    assert html == (
        '<p id="1234"></p>\n'
        '<script type="text/javascript">\n'
        'setepisode(1234,15,"июля",7,5,9,0,3,"Встреча \\"на\\" крыше & <b>",0,3,14,1);\n'
        "</script>\n"
    )


def test_live_html_empty_cast(live_entry):
    entry = live_entry.model_copy(update={"chara": ()})
    assert ",0,,1);" in render_live_html(entry)


def test_completed_html(completed_entry):
    html = render_completed_html(completed_entry, CHARACTERS)

    assert html.startswith('<div class="chep">\n')
    assert '<div class="chtime1">20 августа 2017 года</div>' in html
    assert (
        '<div class="chepname"><a href="http://codegeass.ru/viewtopic.php?id=88">'
        "Старые &lt;письма&gt;</a></div>"
    ) in html
    assert (
        '<div class="chcast">'
        '<a href="http://codegeass.ru/pages/id01">Лелуш Ламперуж</a>, '
        '<a href="http://codegeass.ru/pages/id14">Карен &lt;Кодзуки&gt;</a>'
        "</div>"
    ) in html
    assert '<div class="chstat">Завершен</div>' in html


def test_completed_html_unknown_character(completed_entry):
    with pytest.raises(KeyError):
        render_completed_html(completed_entry, {1: "Лелуш Ламперуж"})


def test_render_html_picks_branch(live_entry, completed_entry):
    assert "setepisode(" in render_html(live_entry, CHARACTERS)
    assert 'class="chep"' in render_html(completed_entry, CHARACTERS)


def test_record_of_live_entry(live_entry):
    record = entry_to_record(live_entry)

    assert record == {
        "id": 1234,
        "start": "2017-07-15T07:05:00+00:00",
        "end": "2017-07-15T09:00:00+00:00",
        "tz": 3,
        "turn": 1,
        "name": "Встреча &quot;на&quot; крыше &amp; &lt;b&gt;",
        "mode": 0,
        "chara": [3, 14],
        "done": True,
    }


def test_record_of_timeless_entry(completed_entry):
    record = entry_to_record(completed_entry, done=False)

    assert record["end"] == ""
    assert record["turn"] == 1
    assert record["done"] is False


def test_entries_to_json(live_entry, completed_entry):
    text = entries_to_json([live_entry, completed_entry])
    records = json.loads(text)

    assert [record["id"] for record in records] == [1234, 88]
    assert all(record["done"] is True for record in records)
    assert "Старые" in text


def test_entries_to_json_threads_done_flags(live_entry, completed_entry):
    records = json.loads(entries_to_json([live_entry, completed_entry], [False, True]))
    assert [record["done"] for record in records] == [False, True]


def test_entries_to_json_flag_count_mismatch(live_entry):
    with pytest.raises(ValueError):
        entries_to_json([live_entry], [True, False])


def test_load_character_names(tmp_path):
    from chrono_manager.utils.characters import load_character_names

    path = tmp_path / "characters.json"
    path.write_text('{"1": "Лелуш Ламперуж", "14": "Карен Кодзуки"}', encoding="utf-8")

    assert load_character_names(path) == {1: "Лелуш Ламперуж", 14: "Карен Кодзуки"}
    assert load_character_names(tmp_path / "missing.json") == {}


def test_apostrophes_escaped_as_published(completed_entry):
    entry = completed_entry.model_copy(update={"name": "Д'Артаньян"})

    assert entry_to_record(entry)["name"] == "Д&#39;Артаньян"
    assert "Д&#39;Артаньян</a>" in render_completed_html(entry, CHARACTERS)
