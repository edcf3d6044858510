import pytest

from aiclipper.config import Config
from aiclipper.candidates.models import Candidate, ViralElements
from aiclipper.candidates.selection import (
    bucket_index,
    build_review_pool,
    compute_overlap_ratio,
    has_excessive_overlap,
    remove_near_duplicates,
    select_diverse_candidates,
    shuffle_candidates,
)


def _clip(start, duration, score, complete=True, text=None):
    return Candidate(
        start=start,
        end=start + duration,
        text=text or f"Clip starting at {start} seconds tells its own story.",
        quality_score=score,
        ends_with_complete_sentence=complete,
    )


def _spread(durations_and_scores):
    return [_clip(i * 100.0, d, s) for i, (d, s) in enumerate(durations_and_scores)]


def test_diversity_is_preserved_across_buckets():
    specs = [(12.0, 0.9 - i * 0.01) for i in range(20)]
    specs += [(7.0, 0.2), (7.5, 0.19), (8.0, 0.18)]
    specs += [(25.0, 0.1), (26.0, 0.09), (27.0, 0.08)]
    candidates = _spread(specs)

    selected = select_diverse_candidates(candidates, 10, top_fraction=0.5)

    assert len(selected) == 10
    buckets = {bucket_index(c.duration) for c in selected}
    assert len(buckets) >= 3


def test_complete_sentences_are_preferred():
    candidates = [_clip(i * 100.0, 12.0, 0.9, complete=False) for i in range(5)]
    candidates += [_clip(1000.0 + i * 100.0, 12.0, 0.1) for i in range(3)]

    selected = select_diverse_candidates(candidates, 4)
    assert len(selected) == 3
    assert all(c.ends_with_complete_sentence for c in selected)


def test_incomplete_candidates_used_when_complete_ones_are_scarce():
    candidates = [_clip(i * 100.0, 12.0, 0.9, complete=False) for i in range(5)]
    candidates.append(_clip(1000.0, 12.0, 0.1))

    selected = select_diverse_candidates(candidates, 10)
    assert len(selected) == 6
    # whole pool fits, so it comes back sorted by score
    assert selected[-1].quality_score == 0.1


def test_near_duplicates_are_removed():
    text = "The exact same opening words appear in both of these clips, and more."
    a = _clip(10.0, 12.0, 0.9, text=text)
    b = _clip(14.0, 20.0, 0.8, text=text + " Extra ending.")
    far = _clip(40.0, 12.0, 0.7, text=text)

    unique = remove_near_duplicates([a, b, far])
    assert unique == [a, far]


def test_seeded_shuffle_is_deterministic():
    candidates = _spread([(12.0, 0.5)] * 12)
    first = shuffle_candidates(candidates, seed=42)
    second = shuffle_candidates(candidates, seed=42)

    assert [c.start for c in first] == [c.start for c in second]
    assert sorted(c.start for c in first) == [c.start for c in candidates]
    assert [c.start for c in candidates] == sorted(c.start for c in candidates)


def test_review_pool_sizes_depend_on_source():
    cfg = Config()
    candidates = _spread([([7.0, 12.0, 17.0, 25.0, 40.0][i % 5], 1.0 - i * 0.001) for i in range(100)])

    text_pool = build_review_pool(candidates, "text", cfg, seed=1)
    utterance_pool = build_review_pool(candidates, "utterances", cfg, seed=1)

    assert len(text_pool) == 60
    assert len(utterance_pool) == 40
    assert [c.start for c in build_review_pool(candidates, "text", cfg, seed=1)] == [c.start for c in text_pool]


def test_utterance_pool_draws_from_viral_categories():
    cfg = Config()
    candidates = _spread([(12.0, 1.0 - i * 0.001) for i in range(60)])
    for i, category in enumerate(["curiosity_hook"] * 10 + ["emotional_language"] * 10):
        viral = _clip(10000.0 + i * 100.0, 12.0, 0.01)
        viral.viral_elements = ViralElements(**{category: True})
        candidates.append(viral)

    def viral_count(pool, category):
        return sum(1 for c in pool if c.viral_elements and getattr(c.viral_elements, category))

    utterance_pool = build_review_pool(candidates, "utterances", cfg, seed=3)
    assert len(utterance_pool) == 40
    assert viral_count(utterance_pool, "curiosity_hook") == 5
    assert viral_count(utterance_pool, "emotional_language") == 5

    text_pool = build_review_pool(candidates, "text", cfg, seed=3)
    assert len(text_pool) == 60
    assert viral_count(text_pool, "curiosity_hook") == 0


def test_empty_input():
    assert select_diverse_candidates([], 10) == []


def test_compute_overlap_ratio():
    assert compute_overlap_ratio(0, 10, 5, 15) == pytest.approx(0.5)
    assert compute_overlap_ratio(0, 10, 2, 6) == pytest.approx(1.0)
    assert compute_overlap_ratio(0, 10, 10, 20) == 0.0


def test_has_excessive_overlap():
    kept = [_clip(0.0, 10.0, 0.5)]
    assert has_excessive_overlap(_clip(3.0, 10.0, 0.5), kept, 0.4)
    assert not has_excessive_overlap(_clip(7.0, 10.0, 0.5), kept, 0.4)
