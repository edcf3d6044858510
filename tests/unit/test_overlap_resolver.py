from aiclipper.candidates.models import Candidate, Selection
from aiclipper.candidates.overlap import clip_score, drop_invalid_clips, resolve_overlaps


def _selection(start, end, quality=0.0, final=None, reason=None):
    candidate = Candidate(start=start, end=end, text="Some words.", quality_score=quality)
    return Selection.from_candidate(candidate, final_score=final, reason=reason)


def test_heavily_overlapping_lower_score_is_dropped():
    low = _selection(2.0, 12.0, quality=0.5)
    high = _selection(0.0, 10.0, quality=0.9)

    kept = resolve_overlaps([low, high])

    assert kept == [high]


def test_small_overlap_keeps_both_best_first():
    a = _selection(0.0, 10.0, quality=0.4)
    b = _selection(6.0, 20.0, quality=0.8)

    kept = resolve_overlaps([a, b])

    assert kept == [b, a]


def test_final_score_takes_precedence_over_quality():
    a = _selection(0.0, 10.0, quality=0.9, final=0.1)
    b = _selection(1.0, 11.0, quality=0.1, final=0.6)

    assert clip_score(a) == 0.1
    assert resolve_overlaps([a, b]) == [b]


def test_reason_breaks_score_ties():
    plain = _selection(0.0, 10.0, quality=0.5)
    explained = _selection(1.0, 11.0, quality=0.5, reason="Strong hook.")

    assert resolve_overlaps([plain, explained]) == [explained]


def test_equal_scores_keep_original_order():
    first = _selection(0.0, 10.0, quality=0.5, reason="A")
    second = _selection(1.0, 11.0, quality=0.5, reason="B")

    assert resolve_overlaps([first, second]) == [first]


def test_empty_input():
    assert resolve_overlaps([]) == []


def test_invalid_timestamps_are_dropped():
    good = _selection(1.0, 9.0)
    clips = [
        good,
        _selection(float("nan"), 9.0),
        _selection(10.0, 5.0),
        _selection(-1.0, 5.0),
        _selection(3.0, 3.0),
    ]

    assert drop_invalid_clips(clips) == [good]
