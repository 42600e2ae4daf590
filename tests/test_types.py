"""Tests for the item model and frecency scoring."""

import pytest

from fdb.errors import DataCorrupt
from fdb.types import HITS_MAX, Item, frecency

from conftest import NOW


class TestFrecency:
    """Tests for the frecency score."""

    def test_fresh_item_scores_four_per_hit(self):
        item = Item(path="/a", atime=NOW, hits=3)
        assert frecency(item, NOW) == pytest.approx(12.0)

    def test_matches_formula(self):
        item = Item(path="/a", atime=NOW - 86_400, hits=5)
        expected = 5 / (0.25 + 3e-6 * 86_400)
        assert frecency(item, NOW) == pytest.approx(expected)

    def test_decays_with_age(self):
        item = Item(path="/a", atime=NOW, hits=2)
        assert frecency(item, NOW + 3600) < frecency(item, NOW)

    def test_future_atime_counts_as_fresh(self):
        item = Item(path="/a", atime=NOW + 500, hits=1)
        assert frecency(item, NOW) == pytest.approx(4.0)

    def test_more_hits_beat_fewer_at_same_age(self):
        many = Item(path="/many", atime=NOW - 10, hits=5)
        few = Item(path="/few", atime=NOW - 10, hits=1)
        assert frecency(many, NOW) > frecency(few, NOW)


class TestItem:
    """Tests for Item mutation and decoding."""

    def test_touch_increments_hits_and_sets_atime(self):
        item = Item(path="/a", atime=NOW - 100, hits=1)
        item.touch(NOW)
        assert item.hits == 2
        assert item.atime == NOW

    def test_touch_saturates_at_max(self):
        item = Item(path="/a", atime=NOW, hits=HITS_MAX)
        item.touch(NOW + 1)
        assert item.hits == HITS_MAX

    def test_from_dict_roundtrip(self):
        item = Item(path="/srv/www", atime=NOW, hits=7)
        assert Item.from_dict(item.to_dict()) == item

    @pytest.mark.parametrize("data", [
        ["/a", 1, 1],
        {"path": "/a", "atime": 1},
        {"path": 5, "atime": 1, "hits": 1},
        {"path": "/a", "atime": "yesterday", "hits": 1},
        {"path": "/a", "atime": 1.5, "hits": 1},
        {"path": "/a", "atime": 1, "hits": -1},
        {"path": "/a", "atime": 1, "hits": 2 ** 32},
        {"path": "/a", "atime": 2 ** 63, "hits": 1},
        {"path": "/a", "atime": 1, "hits": True},
    ])
    def test_from_dict_rejects_bad_schema(self, data):
        with pytest.raises(DataCorrupt):
            Item.from_dict(data)
