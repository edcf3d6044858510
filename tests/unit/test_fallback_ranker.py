import pytest

from aiclipper.config import Config
from aiclipper.candidates.models import Candidate
from aiclipper.candidates.fallback import (
    compute_viral_score,
    duration_category,
    rank_fallback,
    viral_reason,
)

PLAIN_TEXT = "The weather stayed mild all day."


def _clip(start, duration, quality=0.0, text=PLAIN_TEXT):
    return Candidate(start=start, end=start + duration, text=text, quality_score=quality)


def test_one_clip_from_each_duration_category():
    pool = [_clip(0.0, 8.0), _clip(100.0, 15.0), _clip(200.0, 25.0), _clip(300.0, 40.0)]

    selected = rank_fallback(pool, Config())

    assert len(selected) == 4
    categories = [duration_category(s.duration) for s in selected]
    assert categories == ["very_short", "short", "medium", "long"]
    assert all(not s.ai_selected for s in selected)
    assert all(s.reason == "Potential interest elements" for s in selected)


def test_best_clip_wins_its_category():
    pool = [_clip(0.0, 8.0, quality=0.2), _clip(50.0, 9.0, quality=0.8)]

    selected = rank_fallback(pool, Config())

    assert selected[0].start == 50.0
    assert selected[0].final_score == pytest.approx(0.8 * 0.4)
    assert selected[0].clip_index == 1


def test_top_up_skips_clips_overlapping_selection():
    pool = [
        _clip(0.0, 8.0, quality=0.5),
        _clip(100.0, 15.0, quality=0.5),
        _clip(101.0, 14.0, quality=0.9),
        _clip(500.0, 12.0, quality=0.1),
    ]

    selected = rank_fallback(pool, Config())

    starts = [s.start for s in selected]
    assert starts == [0.0, 101.0, 500.0]


def test_category_picks_are_trimmed_to_limit():
    cfg = Config()
    cfg.llm.clips_to_select = 2
    pool = [
        _clip(0.0, 8.0, quality=0.1),
        _clip(100.0, 15.0, quality=0.9),
        _clip(200.0, 25.0, quality=0.5),
        _clip(300.0, 40.0, quality=0.3),
    ]

    selected = rank_fallback(pool, cfg)

    assert [s.start for s in selected] == [100.0, 200.0]


def test_empty_pool_returns_nothing():
    assert rank_fallback([], Config()) == []


def test_viral_score_components():
    assert compute_viral_score("") == 0.0
    assert compute_viral_score(PLAIN_TEXT) == 0.0
    # curiosity opening plus one emotional and one educational keyword
    assert compute_viral_score("Here's why most people never learn") == pytest.approx(0.5)


def test_viral_reason_thresholds():
    assert viral_reason(0.6) == "High viral potential"
    assert viral_reason(0.5) == "Moderate viral potential"
    assert viral_reason(0.3) == "Potential interest elements"
    assert viral_reason(0.0) == "Potential interest elements"


@pytest.mark.parametrize("duration,category", [
    (5.0, "very_short"),
    (10.0, "short"),
    (19.9, "short"),
    (20.0, "medium"),
    (30.0, "long"),
])
def test_duration_categories(duration, category):
    assert duration_category(duration) == category
