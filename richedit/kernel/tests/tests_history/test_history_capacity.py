"""
richedit History -- Capacity Tests

The stack holds at most `capacity` entries at rest. Eviction drops the
oldest entries first and keeps the cursor on the same logical entry.

Covers:
  - 40 edits to 40 distinct keys leave exactly 30 entries
  - cursor addresses the newest entry after eviction
  - oldest surviving entry is the first one not evicted
  - undo stops at the oldest surviving entry
  - custom capacities
"""

from richedit.kernel.history import EditHistory
from richedit.kernel.types import HistoryEntry


def make_history(capacity=30):
    published = []
    return EditHistory(published.append, capacity=capacity), published


class TestCapacity:
    def test_forty_distinct_keys_keep_thirty(self):
        history, _ = make_history()
        for i in range(40):
            history.push(f"k{i}", i, i + 100)

        assert len(history.entries) == 30
        assert history.index == 29
        assert history.entries[history.index] == HistoryEntry(key="k39", value=139)

    def test_oldest_entries_evicted_first(self):
        history, _ = make_history()
        for i in range(40):
            history.push(f"k{i}", i, i + 100)

        # 80 entries were recorded, the first 50 are gone
        assert history.entries[0] == HistoryEntry(key="k25", value=25)

    def test_never_exceeds_capacity_while_pushing(self):
        history, _ = make_history()
        for i in range(100):
            history.push(f"k{i % 7}" if i % 2 else f"j{i}", i, i + 1)
            assert len(history.entries) <= 30
            assert history.index == len(history.entries) - 1

    def test_undo_stops_at_oldest_surviving_entry(self):
        history, published = make_history()
        for i in range(40):
            history.push(f"k{i}", i, i + 100)

        steps = 0
        while history.undo():
            steps += 1

        assert steps == 29
        assert history.index == 0
        assert published[-1] == {"k25": 25}

    def test_small_capacity(self):
        history, _ = make_history(capacity=3)
        history.push("a", 1, 2)
        history.push("b", 1, 2)
        assert history.entries == [
            HistoryEntry(key="a", value=2),
            HistoryEntry(key="b", value=1),
            HistoryEntry(key="b", value=2),
        ]
        assert history.index == 2

    def test_same_key_streak_does_not_grow(self):
        history, _ = make_history()
        for i in range(100):
            history.push("nodes", i, i + 1)
        assert len(history.entries) == 2
        assert history.entries[0].value == 0
        assert history.entries[1].value == 100
