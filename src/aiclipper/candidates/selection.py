"""Candidate pool selection with duration diversity.

This module shrinks a scored candidate list to a bounded pool, either for
LLM review (60 text windows, 40 utterance windows) or for the post-filter
step (15).

Selection logic:
1. Prefer candidates that end on a complete sentence, unless fewer than
   half the target have one
2. Keep the top fraction by score unconditionally
3. On utterance and word pools, add the best few clips from each viral
   category (emotional, story, educational, curiosity)
4. Bucket the rest by duration and take at least one from every
   non-empty bucket, then a share proportional to bucket size
5. Fill any remaining slots with the best leftovers
6. Drop near-duplicates and optionally shuffle with a seeded RNG
"""
from __future__ import annotations
import logging
import math
import random
from typing import List, Optional, Sequence, Tuple

from aiclipper.config import Config
from aiclipper.candidates.models import Candidate

logger = logging.getLogger(__name__)

DIVERSITY_BUCKETS: List[Tuple[float, float]] = [
    (5.0, 10.0),
    (10.0, 15.0),
    (15.0, 20.0),
    (20.0, 30.0),
    (30.0, 60.0),
]

DUPLICATE_PREFIX_CHARS = 50

VIRAL_CATEGORIES = ("emotional_language", "story_element", "educational_value", "curiosity_hook")


def bucket_index(duration: float, buckets: Sequence[Tuple[float, float]] = DIVERSITY_BUCKETS) -> Optional[int]:
    """Index of the first bucket holding the duration, or None."""
    for i, (low, high) in enumerate(buckets):
        if low <= duration <= high:
            return i
    return None


def _by_score(candidates: List[Candidate]) -> List[Candidate]:
    return sorted(candidates, key=lambda c: c.quality_score or 0.0, reverse=True)


def select_diverse_candidates(
    candidates: List[Candidate],
    target: int,
    top_fraction: float = 0.5,
    duplicate_window_s: float = 10.0,
    shuffle: bool = False,
    seed: Optional[int] = None,
    viral_fraction: float = 0.0,
) -> List[Candidate]:
    """
    Select a high-quality, duration-diverse subset of candidates.

    Args:
        candidates: Scored candidates (any order)
        target: Maximum number of candidates to return
        top_fraction: Share of the target filled by score alone
        duplicate_window_s: Start-time distance for near-duplicate checks
        shuffle: Permute the result to remove position bias
        seed: Seed for the permutation (None for a fresh RNG)
        viral_fraction: Share of the target drawn from each viral category
            before the duration buckets (0 disables the step)

    Returns:
        At most `target` candidates
    """
    if not candidates or target <= 0:
        return []

    complete = [c for c in candidates if c.ends_with_complete_sentence]
    if len(complete) >= math.ceil(target * 0.5):
        preferred = _by_score(complete)
    else:
        preferred = _by_score(candidates)

    if len(complete) < 3 and len(candidates) > 10:
        logger.warning(
            f"Only found {len(complete)} clips with complete sentence endings "
            f"out of {len(candidates)} total clips. Clip quality may be affected."
        )

    if len(preferred) <= target:
        combined = preferred
    else:
        top_n = math.ceil(target * top_fraction)
        top = preferred[:top_n]
        rest = preferred[top_n:]
        viral = _pick_viral(rest, target - len(top), math.ceil(target * viral_fraction))
        if viral:
            chosen = {id(c) for c in viral}
            rest = [c for c in rest if id(c) not in chosen]
        combined = top + viral + _pick_from_buckets(rest, target - len(top) - len(viral))

    selected = remove_near_duplicates(combined, duplicate_window_s)[:target]

    complete_count = sum(1 for c in selected if c.ends_with_complete_sentence)
    logger.info(
        f"Diverse selection: {len(selected)} of {len(candidates)} candidates, "
        f"{complete_count} with complete sentence endings"
    )

    if shuffle:
        selected = shuffle_candidates(selected, seed)
    return selected


def _pick_viral(remaining: List[Candidate], slots: int, per_category: int) -> List[Candidate]:
    """Best clips from each viral category, each clip taken at most once."""
    if slots <= 0 or per_category <= 0:
        return []

    picks: List[Candidate] = []
    chosen = set()
    for category in VIRAL_CATEGORIES:
        members = _by_score([
            c for c in remaining
            if c.viral_elements is not None
            and getattr(c.viral_elements, category)
            and id(c) not in chosen
        ])
        for c in members[:per_category]:
            if len(picks) >= slots:
                return picks
            picks.append(c)
            chosen.add(id(c))
    return picks


def _pick_from_buckets(remaining: List[Candidate], slots: int) -> List[Candidate]:
    """Round-robin one per bucket, then proportional shares, then best leftovers."""
    if slots <= 0 or not remaining:
        return []

    buckets: List[List[Candidate]] = [[] for _ in DIVERSITY_BUCKETS]
    unbucketed = []
    for c in remaining:
        idx = bucket_index(c.duration)
        if idx is None:
            unbucketed.append(c)
        else:
            buckets[idx].append(c)

    buckets = [_by_score(b) for b in buckets]
    non_empty = [b for b in buckets if b]
    total = sum(len(b) for b in non_empty)

    picks = [b[0] for b in non_empty]

    if len(picks) < slots:
        extra_slots = slots - len(picks)
        for b in non_empty:
            share = math.floor(extra_slots * len(b) / total) if total else 0
            picks.extend(b[1:1 + share])

    if len(picks) < slots:
        chosen = {id(c) for c in picks}
        leftovers = _by_score([c for c in remaining if id(c) not in chosen])
        picks.extend(leftovers[:slots - len(picks)])

    return picks


def is_near_duplicate(a: Candidate, b: Candidate, window_s: float = 10.0) -> bool:
    """Starts within the window and one text contains the other's opening."""
    if abs(a.start - b.start) >= window_s:
        return False
    return (
        b.text[:DUPLICATE_PREFIX_CHARS] in a.text
        or a.text[:DUPLICATE_PREFIX_CHARS] in b.text
    )


def remove_near_duplicates(candidates: List[Candidate], window_s: float = 10.0) -> List[Candidate]:
    unique: List[Candidate] = []
    for c in candidates:
        if not any(is_near_duplicate(c, kept, window_s) for kept in unique):
            unique.append(c)
    return unique


def shuffle_candidates(candidates: List[Candidate], seed: Optional[int] = None) -> List[Candidate]:
    """Fisher-Yates permutation from a dedicated RNG; the input list is untouched."""
    shuffled = list(candidates)
    random.Random(seed).shuffle(shuffled)
    return shuffled


def build_review_pool(
    candidates: List[Candidate],
    source: str,
    cfg: Config,
    seed: Optional[int] = None,
) -> List[Candidate]:
    """
    Bounded, shuffled pool of candidates for LLM review.

    Text windows get the larger pool; utterance and word windows the smaller.
    Utterance and word windows also draw from each viral category.
    """
    candidate_cfg = cfg.candidate
    if source == "text":
        target, viral_fraction = candidate_cfg.review_pool_text, 0.0
    else:
        target, viral_fraction = candidate_cfg.review_pool_utterances, candidate_cfg.review_viral_fraction
    pool = select_diverse_candidates(
        candidates,
        target,
        top_fraction=candidate_cfg.review_top_fraction,
        duplicate_window_s=candidate_cfg.duplicate_window_s,
        shuffle=True,
        seed=seed,
        viral_fraction=viral_fraction,
    )
    logger.info(f"Selected {len(pool)} diverse clips for AI review")
    return pool


def compute_overlap_ratio(
    start1: float, end1: float,
    start2: float, end2: float
) -> float:
    """
    Compute overlap ratio between two time ranges.

    Returns the overlap duration divided by the shorter clip duration.
    """
    overlap_start = max(start1, start2)
    overlap_end = min(end1, end2)
    overlap_duration = max(overlap_end - overlap_start, 0)

    if overlap_duration == 0:
        return 0.0

    duration1 = end1 - start1
    duration2 = end2 - start2
    min_duration = max(min(duration1, duration2), 0.001)

    return overlap_duration / min_duration


def has_excessive_overlap(
    candidate: Candidate,
    selected: Sequence[Candidate],
    max_overlap: float
) -> bool:
    """Check if candidate overlaps too much with any selected clip."""
    for clip in selected:
        overlap = compute_overlap_ratio(
            candidate.start, candidate.end,
            clip.start, clip.end
        )
        if overlap > max_overlap:
            return True
    return False
