import dataclasses

import pytest

from history import HistoryEntry, SongHistory, make_label, strip_label_suffix
from prompt_templates import GenerationMode


@pytest.mark.parametrize("mode, label", [
    (GenerationMode.NEW_SONG, "Drake"),
    (GenerationMode.REMIX, "Drake (Reimagined)"),
    (GenerationMode.HOOK_REMIX, "Drake (Hook Remix)"),
    (GenerationMode.ENHANCE, "Drake (Enhanced)"),
])
def test_labels_round_trip(mode, label):
    assert make_label("Drake", mode) == label
    assert strip_label_suffix(label) == "Drake"


def test_strip_only_trailing_known_suffix():
    assert strip_label_suffix("Prince (Live)") == "Prince (Live)"
    assert strip_label_suffix("The (Enhanced) Band") == "The (Enhanced) Band"
    # a single suffix is removed per load
    assert strip_label_suffix("Drake (Reimagined) (Enhanced)") == "Drake (Reimagined)"


def test_newest_first_with_increasing_ids():
    history = SongHistory()
    first = history.add("A", "t1", "l1")
    second = history.add("B", "t2", "l2")
    third = history.add("C", "t3", "l3")
    assert [e.label for e in history] == ["C", "B", "A"]
    assert first.id < second.id < third.id
    assert history[0] is third
    assert len(history) == 3


def test_get_and_clear():
    history = SongHistory()
    entry = history.add("A", "t", "l")
    assert history.get(entry.id) is entry
    assert history.get(entry.id + 100) is None
    history.clear()
    assert len(history) == 0
    assert history.entries() == []


def test_ids_not_reused_after_clear():
    history = SongHistory()
    old = history.add("A", "t", "l")
    history.clear()
    assert history.add("B", "t", "l").id > old.id


def test_entries_are_immutable():
    entry = HistoryEntry(id=1, label="A", topic="t", lyrics="l")
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.lyrics = "changed"
    assert entry.created_at
