"""Deterministic clip ranking used when LLM selection is unavailable.

Viral score components:
- narrative opening (text longer than 50 chars): +0.3
- emotional keywords: +0.1 each, up to 0.4
- educational keywords: +0.1 each, up to 0.4
- curiosity hook opening: +0.3
- contradiction/twist marker: +0.2
- 16-49 words: +0.2

Final score blends 0.4 * quality + 0.6 * viral when a quality score exists.
One clip is taken from each duration category, then the list is topped up
with the best clips that overlap no selection by more than 40%.
"""
from __future__ import annotations
import logging
import re
from typing import List

from aiclipper.config import Config
from aiclipper.candidates.models import Candidate, Selection
from aiclipper.candidates.selection import has_excessive_overlap
from aiclipper.utils.text import count_words

logger = logging.getLogger(__name__)

NARRATIVE_OPENING = re.compile(
    r"^(when|once|there was|i|we|they|if you|eventually|at first|finally|ultimately)", re.IGNORECASE
)
EMOTIONAL_IMPACT = re.compile(
    r"amazing|incredible|surprising|shocking|mind-blowing|never|always|changed|stunned"
    r"|couldn't believe|realized|discovered|astonishing|powerful|transformative|fascinating",
    re.IGNORECASE,
)
EDUCATIONAL_KEYWORDS = re.compile(
    r"learn|understand|know|explain|how to|works|actually|truth|fact|study|research|found"
    r"|most people don't|realize|secret|technique|method|steps",
    re.IGNORECASE,
)
CURIOSITY_OPENING = re.compile(
    r"^(what if|here's why|the truth about|most people don't know|the secret to|this is how"
    r"|i never knew|you won't believe|the real reason)",
    re.IGNORECASE,
)
CONTRADICTION = re.compile(
    r"but|however|surprisingly|instead|contrary|opposite|unlike|unexpected|twist|plot twist"
    r"|actually|reality|truth",
    re.IGNORECASE,
)

DURATION_CATEGORIES = ("very_short", "short", "medium", "long")
TOP_UP_MAX_OVERLAP = 0.4


def compute_viral_score(text: str) -> float:
    """Keyword-driven estimate of how shareable a clip's text is."""
    text = text.lower()
    score = 0.0

    if NARRATIVE_OPENING.search(text) and len(text) > 50:
        score += 0.3
    score += min(0.4, len(EMOTIONAL_IMPACT.findall(text)) * 0.1)
    score += min(0.4, len(EDUCATIONAL_KEYWORDS.findall(text)) * 0.1)
    if CURIOSITY_OPENING.search(text):
        score += 0.3
    if CONTRADICTION.search(text):
        score += 0.2

    word_count = count_words(text)
    if 15 < word_count < 50:
        score += 0.2
    return score


def duration_category(duration: float) -> str:
    if duration < 10:
        return "very_short"
    if duration < 20:
        return "short"
    if duration < 30:
        return "medium"
    return "long"


def viral_reason(viral_score: float) -> str:
    if viral_score > 0.5:
        return "High viral potential"
    if viral_score > 0.3:
        return "Moderate viral potential"
    return "Potential interest elements"


def _to_selection(candidate: Candidate, index: int) -> Selection:
    viral_score = compute_viral_score(candidate.text)
    if candidate.quality_score:
        final_score = candidate.quality_score * 0.4 + viral_score * 0.6
    else:
        final_score = viral_score
    return Selection.from_candidate(
        candidate,
        reason=viral_reason(viral_score),
        final_score=final_score,
        ai_selected=False,
        clip_index=index,
    )


def rank_fallback(pool: List[Candidate], cfg: Config) -> List[Selection]:
    """
    Pick clips by viral potential with one clip per duration category.

    Args:
        pool: Candidates that were offered for review
        cfg: Configuration (number of clips to select)

    Returns:
        Up to cfg.llm.clips_to_select selections
    """
    logger.info("Using fallback clip selection method with viral focus and duration diversity")
    if not pool:
        logger.warning("No clips to select from")
        return []

    limit = cfg.llm.clips_to_select
    scored = [_to_selection(c, i) for i, c in enumerate(pool)]
    ranked = sorted(scored, key=lambda s: s.final_score, reverse=True)

    selected: List[Selection] = []
    for category in DURATION_CATEGORIES:
        best = next((s for s in ranked if duration_category(s.duration) == category), None)
        if best is not None:
            selected.append(best)

    if len(selected) > limit:
        selected.sort(key=lambda s: s.final_score, reverse=True)
        return selected[:limit]

    for clip in ranked:
        if len(selected) >= limit:
            break
        if any(clip is s for s in selected):
            continue
        if has_excessive_overlap(clip, selected, TOP_UP_MAX_OVERLAP):
            continue
        selected.append(clip)

    logger.info(f"Fallback selected {len(selected)} clips")
    return selected
