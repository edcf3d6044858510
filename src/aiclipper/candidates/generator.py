"""Candidate window generator.

This module turns a transcript into candidate clip windows. The first
transcript shape that yields candidates wins:

1. text: sliding groups of 1..N whole sentences, timed by word position
2. utterances: windows grown utterance by utterance, cut back to the last
   complete sentence
3. words: grouped into utterances by speaker and sentence, then step 2
4. chapters: provider chapters that already fit the clip duration band
5. basic: greedy utterance concatenation (last resort)

No generator emits text that stops mid-sentence.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from aiclipper.config import Config
from aiclipper.candidates.models import Candidate
from aiclipper.candidates.content_type import get_content_profile
from aiclipper.candidates.scorer import (
    detect_impact_factors,
    detect_viral_elements,
    score_text_candidate,
    score_utterance_candidate,
)
from aiclipper.models.transcript import Chapter, Transcript, Utterance, Word
from aiclipper.utils.text import (
    count_sentences,
    count_words,
    ends_with_sentence,
    split_sentences,
    trim_to_last_sentence,
)

logger = logging.getLogger(__name__)

SOURCE_TEXT = "text"
SOURCE_UTTERANCES = "utterances"
SOURCE_WORDS = "words"
SOURCE_CHAPTERS = "chapters"
SOURCE_BASIC = "basic"

# Sources whose output is already a final selection (no LLM review)
DIRECT_SOURCES = (SOURCE_CHAPTERS, SOURCE_BASIC)

BASIC_REASON = "Basic clip identification"


@dataclass
class GenerationResult:
    """Candidates plus the transcript shape they came from."""
    candidates: List[Candidate] = field(default_factory=list)
    source: Optional[str] = None

    @property
    def is_direct(self) -> bool:
        return self.source in DIRECT_SOURCES


def generate_candidates(
    transcript: Transcript,
    cfg: Config,
    content_type: str,
) -> GenerationResult:
    """
    Generate candidate windows from the richest transcript shape available.

    Args:
        transcript: Loaded transcript
        cfg: Configuration object
        content_type: Detected content type (controls text window size)

    Returns:
        GenerationResult with candidates and the source that produced them
    """
    if not transcript.has_content:
        logger.warning("Transcript has no text, words, utterances or chapters")

    if transcript.text:
        logger.info("Using full transcript text for clip identification")
        candidates = generate_from_text(
            transcript.text, transcript.audio_duration_s, cfg, content_type
        )
        if candidates:
            return GenerationResult(candidates, SOURCE_TEXT)

    if transcript.utterances:
        logger.info("Using utterances for clip identification")
        candidates = generate_from_utterances(transcript.utterances, cfg)
        if candidates:
            return GenerationResult(candidates, SOURCE_UTTERANCES)

    if transcript.words:
        logger.info("Using words for clip identification")
        candidates = generate_from_words(transcript.words, cfg)
        if candidates:
            return GenerationResult(candidates, SOURCE_WORDS)

    if transcript.chapters:
        logger.info("Using chapters for clip identification")
        candidates = generate_from_chapters(transcript.chapters, cfg)
        if candidates:
            return GenerationResult(candidates, SOURCE_CHAPTERS)

    logger.warning("No candidates from any transcript source. Using basic clip identification...")
    utterances = transcript.utterances or group_words_into_utterances(
        transcript.words, cfg.clip.ceiling
    )
    return GenerationResult(generate_basic(utterances, cfg), SOURCE_BASIC)


def generate_from_text(
    text: str,
    audio_duration_s: Optional[float],
    cfg: Config,
    content_type: str,
) -> List[Candidate]:
    """
    Build windows of consecutive whole sentences, largest groups first.

    Timing is estimated from word position: seconds per word is the audio
    duration divided by the word count, or a fixed estimate without audio.

    Args:
        text: Full transcript text
        audio_duration_s: Media duration, if known
        cfg: Configuration object
        content_type: Detected content type

    Returns:
        Candidates whose padded duration lies in the relaxed band
    """
    sentences = [s.strip() for s in split_sentences(text)]
    if not sentences:
        logger.warning("No sentences found in transcript text")
        return []
    logger.info(f"Split transcript into {len(sentences)} sentences")

    total_words = count_words(text)
    if audio_duration_s and total_words > 0:
        time_per_word = audio_duration_s / total_words
        logger.info(f"Using actual audio duration for timing: {time_per_word:.3f} seconds per word")
    else:
        time_per_word = cfg.candidate.seconds_per_word
        logger.info(f"Using estimated timing: {time_per_word:.3f} seconds per word")

    bands = cfg.clip.bands
    max_group = get_content_profile(content_type).max_sentences_per_clip

    # words_before[i] = words in sentences[0:i]
    words_before = [0]
    for sentence in sentences:
        words_before.append(words_before[-1] + count_words(sentence))

    candidates = []
    for group_size in range(max_group, 0, -1):
        for i in range(len(sentences) - group_size + 1):
            group_text = " ".join(sentences[i:i + group_size])
            word_count = words_before[i + group_size] - words_before[i]
            if word_count < cfg.candidate.min_words_per_window:
                continue

            offset = words_before[i] * time_per_word
            estimated = word_count * time_per_word
            start_pad = min(1.5, max(0.5, estimated * 0.05))
            end_pad = min(2.5, max(1.0, estimated * 0.1))
            start = max(0.0, offset - start_pad)
            end = offset + estimated + end_pad

            if not bands.relaxed.contains(end - start):
                continue

            impact = detect_impact_factors(group_text)
            complete = ends_with_sentence(group_text)
            candidates.append(Candidate(
                start=start,
                end=end,
                text=group_text,
                source=SOURCE_TEXT,
                word_count=word_count,
                sentence_count=group_size,
                quality_score=score_text_candidate(
                    end - start, impact, complete, cfg.clip.ideal_duration
                ),
                ends_with_complete_sentence=complete,
                impact_factors=impact,
            ))

        if len(candidates) >= cfg.candidate.max_text_candidates:
            break

    logger.info(f"Created {len(candidates)} potential clips from text")

    if audio_duration_s:
        candidates = _clamp_to_media(candidates, audio_duration_s, cfg)
    return [_rounded(c) for c in candidates]


def _clamp_to_media(
    candidates: List[Candidate],
    media_duration_s: float,
    cfg: Config,
) -> List[Candidate]:
    """Pull estimated windows back inside the media, dropping any that become too short."""
    bands = cfg.clip.bands
    min_len = bands.relaxed.min_s
    clamped = []

    for c in candidates:
        start = max(0.0, min(c.start, media_duration_s - min_len))
        end = min(media_duration_s, max(start + min_len, c.end))
        if start != c.start or end != c.end:
            logger.warning(
                f"Adjusted clip timestamps from [{c.start:.2f}s-{c.end:.2f}s] "
                f"to [{start:.2f}s-{end:.2f}s]"
            )
        if end - start < bands.floor:
            logger.warning(f"Dropping clip shorter than {bands.floor:.1f}s after adjustment")
            continue
        c.start, c.end = start, end
        clamped.append(c)

    return clamped


def generate_from_utterances(
    utterances: List[Utterance],
    cfg: Config,
    source: str = SOURCE_UTTERANCES,
) -> List[Candidate]:
    """
    Grow a window from every utterance and emit each sentence-complete prefix.

    Each start index also yields a single-utterance candidate when the
    utterance is substantial on its own.

    Args:
        utterances: Speaker utterances in time order
        cfg: Configuration object
        source: Source label recorded on the candidates

    Returns:
        Deduplicated candidates
    """
    bands = cfg.clip.bands
    floor = bands.floor
    ceiling = cfg.clip.ceiling

    logger.info("Looking for potential viral clips from utterances...")
    candidates = []

    for i, first in enumerate(utterances):
        window_start = first.start_s
        window: List[Utterance] = []

        for utterance in utterances[i:]:
            if utterance.end_s - window_start > ceiling:
                break
            window.append(utterance)
            if utterance.end_s - window_start < floor:
                continue

            trimmed = _trim_window(window)
            if trimmed is None:
                continue
            text, end_s = trimmed
            candidate = _utterance_candidate(window_start, end_s, text, source, floor)
            if candidate:
                candidates.append(candidate)

        single = _single_utterance_candidate(first, cfg, source)
        if single:
            candidates.append(single)

    logger.info(f"Created {len(candidates)} potential clips from utterances")
    candidates = _remove_duplicate_candidates(candidates)
    logger.info(f"After deduplication: {len(candidates)} unique candidates")
    return candidates


def _single_utterance_candidate(
    utterance: Utterance,
    cfg: Config,
    source: str,
) -> Optional[Candidate]:
    bands = cfg.clip.bands
    if not (bands.floor <= utterance.duration_s <= cfg.clip.ceiling):
        return None
    if count_words(utterance.text) < cfg.candidate.min_single_utterance_words:
        return None
    if count_sentences(utterance.text) < 1:
        return None

    trimmed = _trim_window([utterance])
    if trimmed is None:
        return None
    text, end_s = trimmed
    return _utterance_candidate(utterance.start_s, end_s, text, source, bands.floor)


def _trim_window(window: List[Utterance]) -> Optional[Tuple[str, float]]:
    """
    Cut a window back to its last complete sentence.

    The last utterance is kept whole if it ends on a terminator, cut at its
    last inner sentence boundary (end time moved proportionally) if it has
    one, or dropped so the previous utterance gets the same treatment.

    Returns:
        (text, end_s) or None when no utterance in the window ends a sentence
    """
    kept = list(window)
    while kept:
        last = kept[-1]
        trimmed = trim_to_last_sentence(last.text)
        if trimmed is not None:
            last_text, ratio = trimmed
            end_s = last.end_s if ratio >= 1.0 else last.start_s + last.duration_s * ratio
            parts = [u.text.strip() for u in kept[:-1]] + [last_text]
            return " ".join(p for p in parts if p), end_s
        kept.pop()
    return None


def _utterance_candidate(
    start_s: float,
    end_s: float,
    text: str,
    source: str,
    floor: float,
) -> Optional[Candidate]:
    duration = end_s - start_s
    if duration < floor:
        return None

    word_count = count_words(text)
    sentence_count = count_sentences(text)
    viral = detect_viral_elements(text)
    return Candidate(
        start=round(start_s, 3),
        end=round(end_s, 3),
        text=text,
        source=source,
        word_count=word_count,
        sentence_count=sentence_count,
        quality_score=score_utterance_candidate(duration, sentence_count, word_count, viral.score),
        viral_score=viral.score,
        ends_with_complete_sentence=ends_with_sentence(text),
        impact_factors=detect_impact_factors(text),
        viral_elements=viral,
    )


def group_words_into_utterances(
    words: List[Word],
    max_span_s: Optional[float] = None,
) -> List[Utterance]:
    """
    Merge consecutive words into utterances.

    A new utterance starts on a speaker change, after a word that ends a
    sentence, and when the group would grow past max_span_s. Words without
    speaker labels therefore still split into sentence-sized utterances.
    """
    utterances = []
    current: List[Word] = []

    for word in words:
        if current and (
            word.speaker != current[-1].speaker
            or ends_with_sentence(current[-1].text)
            or (max_span_s is not None and word.end_s - current[0].start_s > max_span_s)
        ):
            utterances.append(_words_to_utterance(current))
            current = []
        current.append(word)

    if current:
        utterances.append(_words_to_utterance(current))
    return utterances


def _words_to_utterance(words: List[Word]) -> Utterance:
    return Utterance(
        text=" ".join(w.text.strip() for w in words if w.text.strip()),
        start_s=words[0].start_s,
        end_s=words[-1].end_s,
        speaker=words[0].speaker,
    )


def generate_from_words(words: List[Word], cfg: Config) -> List[Candidate]:
    utterances = group_words_into_utterances(words, cfg.clip.ceiling)
    logger.info(f"Grouped {len(words)} words into {len(utterances)} utterances")
    return generate_from_utterances(utterances, cfg, source=SOURCE_WORDS)


def generate_from_chapters(chapters: List[Chapter], cfg: Config) -> List[Candidate]:
    """Chapters that fit the strict duration band, in order, capped."""
    strict = cfg.clip.bands.strict
    candidates = []

    for chapter in chapters:
        if not strict.contains(chapter.end_s - chapter.start_s):
            continue
        text = chapter.headline or chapter.summary
        candidates.append(Candidate(
            start=chapter.start_s,
            end=chapter.end_s,
            text=text,
            source=SOURCE_CHAPTERS,
            word_count=count_words(text),
            sentence_count=count_sentences(text),
            ends_with_complete_sentence=ends_with_sentence(text),
            impact_factors=detect_impact_factors(text),
            reason=f"Chapter: {chapter.headline or 'Untitled'}",
        ))

    logger.info(f"Found {len(candidates)} chapters that match clip duration requirements")
    return candidates[:cfg.candidate.max_direct_clips]


def generate_basic(utterances: List[Utterance], cfg: Config) -> List[Candidate]:
    """
    Concatenate utterances until the next one would exceed the max duration.

    Each flushed clip is trimmed to its last full sentence and kept if it is
    at least the minimum duration.
    """
    if not utterances:
        logger.warning("No utterances found for basic clip identification")
        return []

    max_duration = cfg.clip.max_duration
    clips = []
    current: List[Utterance] = []

    for utterance in utterances:
        if current and utterance.end_s - current[0].start_s > max_duration:
            clip = _flush_basic(current, cfg)
            if clip:
                clips.append(clip)
            current = []
        current.append(utterance)

    if current:
        clip = _flush_basic(current, cfg)
        if clip:
            clips.append(clip)

    logger.info(f"Created {len(clips)} basic clips")
    return clips[:cfg.candidate.max_direct_clips]


def _flush_basic(group: List[Utterance], cfg: Config) -> Optional[Candidate]:
    start = group[0].start_s
    end = group[-1].end_s
    text = " ".join(u.text.strip() for u in group if u.text.strip())

    trimmed = trim_to_last_sentence(text)
    if trimmed is None:
        logger.debug(f"Skipping basic clip at {start:.2f}s with no complete sentence")
        return None
    text, ratio = trimmed
    if ratio < 1.0:
        end = start + (end - start) * ratio

    if not (cfg.clip.min_duration <= end - start <= cfg.clip.ceiling):
        return None
    return Candidate(
        start=round(start, 3),
        end=round(end, 3),
        text=text,
        source=SOURCE_BASIC,
        word_count=count_words(text),
        sentence_count=count_sentences(text),
        ends_with_complete_sentence=ends_with_sentence(text),
        reason=BASIC_REASON,
    )


def _rounded(candidate: Candidate) -> Candidate:
    candidate.start = round(candidate.start, 3)
    candidate.end = round(candidate.end, 3)
    return candidate


def _remove_duplicate_candidates(candidates: List[Candidate]) -> List[Candidate]:
    """
    Remove duplicate candidates with same start/end times.

    Args:
        candidates: List of candidates

    Returns:
        Deduplicated list, first occurrence kept
    """
    seen = set()
    unique = []

    for c in candidates:
        key = (round(c.start, 1), round(c.end, 1))
        if key not in seen:
            seen.add(key)
            unique.append(c)

    return unique
