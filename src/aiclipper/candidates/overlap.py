"""Final overlap resolution and clip validation.

Chosen clips (from the LLM or the fallback ranker) are ranked by score,
ties broken by whether a reason was given and then by original order. A
clip overlapping a kept clip by more than half of the shorter duration is
skipped, unless its score beats the kept clip's by more than 20%, in which
case it takes that clip's place.
"""
from __future__ import annotations
import logging
import math
from typing import List, Optional

from aiclipper.candidates.models import Candidate
from aiclipper.candidates.selection import compute_overlap_ratio

logger = logging.getLogger(__name__)

MAX_OVERLAP_RATIO = 0.5
REPLACEMENT_MARGIN = 1.2


def clip_score(clip: Candidate) -> float:
    """Fallback final score when present, otherwise the heuristic quality score."""
    final_score = getattr(clip, "final_score", None)
    if final_score is not None:
        return final_score
    return clip.quality_score or 0.0


def _find_overlapping(clip: Candidate, kept: List[Candidate], max_overlap: float) -> Optional[int]:
    for i, existing in enumerate(kept):
        if compute_overlap_ratio(clip.start, clip.end, existing.start, existing.end) > max_overlap:
            return i
    return None


def resolve_overlaps(
    clips: List[Candidate],
    max_overlap: float = MAX_OVERLAP_RATIO,
) -> List[Candidate]:
    """
    Remove clips that substantially overlap a better clip.

    Args:
        clips: Chosen clips in selection order
        max_overlap: Overlap ratio (of the shorter clip) above which two clips conflict

    Returns:
        Non-overlapping clips, best first
    """
    order = sorted(
        range(len(clips)),
        key=lambda i: (-clip_score(clips[i]), 0 if clips[i].reason else 1, i),
    )

    kept: List[Candidate] = []
    for i in order:
        clip = clips[i]
        conflict = _find_overlapping(clip, kept, max_overlap)
        if conflict is None:
            kept.append(clip)
            continue

        existing_score = clip_score(kept[conflict])
        if existing_score > 0 and clip_score(clip) > existing_score * REPLACEMENT_MARGIN:
            logger.debug(
                f"Replacing clip [{kept[conflict].start:.2f}-{kept[conflict].end:.2f}] "
                f"with higher scoring [{clip.start:.2f}-{clip.end:.2f}]"
            )
            kept[conflict] = clip
        else:
            logger.debug(f"Dropping overlapping clip [{clip.start:.2f}-{clip.end:.2f}]")

    if len(kept) < len(clips):
        logger.info(f"Overlap resolution kept {len(kept)} of {len(clips)} clips")
    return kept


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (math.isnan(value) or math.isinf(value))


def drop_invalid_clips(clips: List[Candidate]) -> List[Candidate]:
    """Reject clips with non-numeric, negative or inverted timestamps."""
    valid = []
    for clip in clips:
        if not (_is_number(clip.start) and _is_number(clip.end)):
            logger.warning(f"Skipping clip with non-numeric timestamps: {clip.start!r}-{clip.end!r}")
            continue
        if clip.start < 0 or clip.end <= clip.start:
            logger.warning(f"Skipping clip with invalid timestamps: {clip.start:.2f}-{clip.end:.2f}")
            continue
        valid.append(clip)
    return valid
