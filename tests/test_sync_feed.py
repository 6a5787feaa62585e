from __future__ import annotations

import pytest

from fitsync.models import HealthTip
from fitsync.sync import TipFeed


@pytest.fixture
def feed() -> TipFeed:
    return TipFeed(
        [
            HealthTip(id="1", title="Hydrate", description="Drink water", category="wellness", likes=234),
            HealthTip(id="2", title="Protein", description="Eat eggs", category="nutrition", likes=456, is_liked=True),
            HealthTip(id="3", title="Sleep", description="8 hours", category="sleep", likes=189),
        ]
    )


def test_like_adjusts_counter(feed):
    tip = feed.toggle_like("1")
    assert (tip.is_liked, tip.likes) == (True, 235)


def test_unlike_adjusts_counter(feed):
    tip = feed.toggle_like("2")
    assert (tip.is_liked, tip.likes) == (False, 455)


@pytest.mark.parametrize("tip_id", ["1", "2", "3"])
def test_double_toggle_restores_original(feed, tip_id):
    before = (feed.get(tip_id).is_liked, feed.get(tip_id).likes)

    feed.toggle_like(tip_id)
    tip = feed.toggle_like(tip_id)

    assert (tip.is_liked, tip.likes) == before


def test_bookmark(feed):
    feed.toggle_bookmark("3")
    assert [tip.id for tip in feed.bookmarked()] == ["3"]
    feed.toggle_bookmark("3")
    assert feed.bookmarked() == []


def test_comments(feed):
    assert feed.add_comment("1", "   ") is None
    comment = feed.add_comment("1", " Great tip ")

    assert comment.text == "Great tip"
    assert comment.user == "You"
    assert feed.get("1").comments == [comment]


def test_filter(feed):
    assert len(feed.filter()) == 3
    assert [tip.id for tip in feed.filter("nutrition")] == ["2"]
    with pytest.raises(ValueError):
        feed.filter("cooking")


def test_unknown_tip(feed):
    with pytest.raises(KeyError):
        feed.toggle_like("404")
