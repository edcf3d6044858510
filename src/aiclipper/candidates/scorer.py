"""Heuristic quality scoring for clip candidates.

Two entry-path scores exist, plus an optional enrichment pass:

Text path (sentence-grouped windows):
- duration quality: 1 - |duration - ideal| / ideal
- impact bonus: question 0.10, powerful words 0.15, numbers 0.10
- sentence completion bonus: 0.5 when the clip ends on a full sentence

Utterance path (speaker utterance windows):
- 0.3 * duration closeness to 15s
- 0.1 per sentence
- words per second / 5
- 0.5 * viral score (emotional 0.15, story 0.15, educational 0.15, curiosity 0.25)

Post-filter (filter_clips_for_quality) recombines the original score with
relevance, sentence completion, transitions, density, duration and a
content-type bonus, then keeps a diverse top 15.
"""
from __future__ import annotations
import logging
import re
from dataclasses import replace
from typing import List, Optional

from aiclipper.config import Config
from aiclipper.candidates.models import Candidate, ImpactFactors, ScoringDetails, ViralElements
from aiclipper.candidates.content_type import BonusContext, get_content_profile
from aiclipper.utils.text import count_words, split_sentences

logger = logging.getLogger(__name__)

UTTERANCE_IDEAL_DURATION = 15.0  # utterance windows are judged against a fixed 15s target

POWERFUL_WORDS = re.compile(
    r"(amazing|incredible|never|always|best|worst|must|essential|critical|vital|key"
    r"|revolutionary|game-changing|mind-blowing)",
    re.IGNORECASE,
)
NUMBER_WORDS = re.compile(
    r"\b(one|two|three|four|five|ten|1|2|3|4|5|10|hundred|thousand|million|billion)\b",
    re.IGNORECASE,
)

EMOTIONAL_LANGUAGE = re.compile(
    r"amazing|incredible|surprising|shocking|never|always|changed|stunned|realized"
    r"|discovered|astonishing|powerful",
    re.IGNORECASE,
)
STORY_ELEMENT = re.compile(
    r"when|there was|once|eventually|at first|finally|ultimately", re.IGNORECASE
)
EDUCATIONAL_VALUE = re.compile(
    r"learn|understand|know|explain|how to|works|actually|truth|fact|research|found"
    r"|most people don't|realize|secret",
    re.IGNORECASE,
)
CURIOSITY_HOOK = re.compile(
    r"what if|here's why|the truth about|most people don't know|the secret to|this is how"
    r"|you won't believe|the real reason",
    re.IGNORECASE,
)

GOOD_STARTS = [
    re.compile(r"^(so |now |here |let me |let's |i'm going to |today |if you |when you |what |how |why )", re.IGNORECASE),
    re.compile(r"^(the |this |these |those |a |one |two |first |second |third )", re.IGNORECASE),
    re.compile(r"^(in |on |at |by |for |with |about |before |after )", re.IGNORECASE),
]
GOOD_ENDINGS = [
    re.compile(r"[.!?]$"),
    re.compile(r"(right|okay|got it|understand|see that|there you go|makes sense)\.?$", re.IGNORECASE),
    re.compile(r"(thank you|in conclusion|to summarize|in summary|remember|that's all|as you can see)\.?$", re.IGNORECASE),
]
BARE_CONJUNCTION_START = re.compile(
    r"^\s*(and|but|so|because|however|therefore|thus|hence|otherwise|anyway)\b", re.IGNORECASE
)


def detect_impact_factors(text: str) -> ImpactFactors:
    """Find question marks, powerful words and numbers in the text."""
    has_question = "?" in text
    has_powerful_words = bool(POWERFUL_WORDS.search(text))
    has_numbers = bool(NUMBER_WORDS.search(text))
    bonus = (0.1 if has_question else 0) + (0.15 if has_powerful_words else 0) + (0.1 if has_numbers else 0)
    return ImpactFactors(
        has_question=has_question,
        has_powerful_words=has_powerful_words,
        has_numbers=has_numbers,
        impact_bonus=round(bonus, 4),
    )


def detect_viral_elements(text: str) -> ViralElements:
    return ViralElements(
        emotional_language=bool(EMOTIONAL_LANGUAGE.search(text)),
        story_element=bool(STORY_ELEMENT.search(text)),
        educational_value=bool(EDUCATIONAL_VALUE.search(text)),
        curiosity_hook=bool(CURIOSITY_HOOK.search(text)),
    )


def score_text_candidate(
    duration: float,
    impact: ImpactFactors,
    ends_with_complete_sentence: bool,
    ideal_duration: float,
) -> float:
    """
    Score a sentence-grouped text window.

    Args:
        duration: Padded clip duration in seconds
        impact: Impact factors detected in the text
        ends_with_complete_sentence: Whether the text ends on a full sentence
        ideal_duration: Target clip length

    Returns:
        Quality score (unbounded above, typically -1 to 1.85)
    """
    duration_quality = 1 - abs(duration - ideal_duration) / ideal_duration
    completion_bonus = 0.5 if ends_with_complete_sentence else 0.0
    return duration_quality + impact.impact_bonus + completion_bonus


def score_utterance_candidate(
    duration: float,
    sentence_count: int,
    word_count: int,
    viral_score: float,
) -> float:
    """Score an utterance window from duration fit, sentences, density and viral markers."""
    if duration <= 0:
        return 0.0
    score = 0.3 * (1 - abs(duration - UTTERANCE_IDEAL_DURATION) / UTTERANCE_IDEAL_DURATION)
    score += 0.1 * sentence_count
    score += (word_count / duration) / 5
    score += 0.5 * viral_score
    return score


def compute_relevance(text: str, pattern: re.Pattern) -> float:
    """Keyword hits per five words; zero for very short clips."""
    word_count = count_words(text)
    if word_count <= 5:
        return 0.0
    return len(pattern.findall(text)) / (word_count / 5)


def compute_sentence_completion(text: str) -> float:
    """Share of sentence pieces longer than 10 characters."""
    pieces = [s for s in re.split(r"[.!?]+", text) if s.strip()]
    if not pieces:
        return 0.0
    return sum(1 for s in pieces if len(s.strip()) > 10) / len(pieces)


def compute_transition_score(text: str) -> float:
    """Reward natural openings and conclusions, penalize a bare conjunction opening."""
    stripped = text.strip()
    sentences = split_sentences(stripped) or [stripped]
    first = sentences[0].strip()
    last = sentences[-1].strip()

    score = 0.0
    if any(p.search(first) for p in GOOD_STARTS):
        score += 0.15
    if any(p.search(last) for p in GOOD_ENDINGS):
        score += 0.15
    if BARE_CONJUNCTION_START.search(stripped):
        score -= 0.2
    return score


def enrich_candidate(
    candidate: Candidate,
    content_type: str,
    cfg: Config,
    bonus_ctx: Optional[BonusContext] = None,
) -> Candidate:
    """Recompute a candidate's quality score with the post-filter weights."""
    profile = get_content_profile(content_type)
    weights = profile.weights
    bonus_ctx = bonus_ctx or BonusContext()
    text = candidate.text
    duration = candidate.duration
    ideal = cfg.clip.ideal_duration

    details = ScoringDetails(
        original_quality=candidate.quality_score or 0.0,
        relevance=compute_relevance(text, profile.relevance_pattern),
        sentence_completion=compute_sentence_completion(text),
        transitions=compute_transition_score(text),
        density=min(0.3, (count_words(text) / duration) / 2.5) if duration > 0 else 0.0,
        duration=1 - min(1.0, abs(duration - ideal) / ideal),
        content_type=profile.bonus(text, bonus_ctx),
    )
    final_score = (
        details.original_quality * weights["original_quality"]
        + details.relevance * weights["relevance"]
        + details.sentence_completion * weights["sentence_completion"]
        + details.transitions * weights["transitions"]
        + details.density * weights["density"]
        + details.duration * weights["duration"]
        + details.content_type * weights["content_type"]
    )
    return replace(candidate, quality_score=final_score, scoring_details=details)


def filter_clips_for_quality(
    candidates: List[Candidate],
    content_type: str,
    cfg: Config,
    full_text: Optional[str] = None,
    title: Optional[str] = None,
) -> List[Candidate]:
    """
    Re-score candidates on several quality dimensions and keep a diverse subset.

    Args:
        candidates: Candidates with their entry-path quality scores
        content_type: Detected content type
        cfg: Configuration
        full_text: Whole transcript text (music repetition bonus)
        title: Media title (music title bonus)

    Returns:
        Up to cfg.candidate.post_filter_pool candidates, duration-diverse
    """
    from aiclipper.candidates.selection import select_diverse_candidates

    logger.info(f"Filtering and enhancing {len(candidates)} potential clips for quality")
    if not candidates:
        return []

    bonus_ctx = BonusContext(full_text=full_text, title=title)
    scored = [enrich_candidate(c, content_type, cfg, bonus_ctx) for c in candidates]
    scored.sort(key=lambda c: c.quality_score, reverse=True)

    selected = select_diverse_candidates(
        scored,
        cfg.candidate.post_filter_pool,
        top_fraction=cfg.candidate.post_filter_top_fraction,
        duplicate_window_s=cfg.candidate.duplicate_window_s,
    )
    logger.info(f"Selected {len(selected)} diverse high-quality clips for consideration")

    for clip in selected[:5]:
        d = clip.scoring_details
        logger.debug(
            f"  quality={clip.quality_score:.2f} relevance={d.relevance:.2f} "
            f"completeness={d.sentence_completion:.2f} transitions={d.transitions:.2f} "
            f"duration={clip.duration:.1f}s text={clip.text[:70]!r}"
        )
    return selected
