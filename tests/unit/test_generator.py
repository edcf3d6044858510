import pytest

from aiclipper.config import Config
from aiclipper.models.transcript import Transcript, Utterance, Word
from aiclipper.candidates.generator import (
    generate_basic,
    generate_candidates,
    generate_from_text,
    generate_from_utterances,
    group_words_into_utterances,
)
from aiclipper.utils.text import ends_with_sentence

SCENARIO_TEXT = "Learning is key. This is the best strategy you will ever find. It changes everything."


def _utterance(text, start_s, end_s, speaker="A"):
    return Utterance(text=text, start_s=start_s, end_s=end_s, speaker=speaker)


def _assert_candidate_invariants(candidates):
    for c in candidates:
        assert c.start >= 0
        assert c.end > c.start
        assert c.duration == pytest.approx(c.end - c.start)
        assert c.duration >= 5
        if c.ends_with_complete_sentence:
            assert c.text.strip()[-1] in ".!?"


def test_short_text_without_audio_duration_yields_complete_clip():
    transcript = Transcript.from_dict({"text": SCENARIO_TEXT})
    result = generate_candidates(transcript, Config(), "educational")

    assert result.source == "text"
    assert any(c.ends_with_complete_sentence for c in result.candidates)
    _assert_candidate_invariants(result.candidates)


def test_text_windows_use_padding_and_word_timing():
    candidates = generate_from_text(SCENARIO_TEXT, None, Config(), "generic")
    whole = [c for c in candidates if c.sentence_count == 3]
    assert len(whole) == 1
    # 15 words * 0.4s = 6s, start pad clamps at 0, end pad is 1s
    assert whole[0].start == 0.0
    assert whole[0].end == pytest.approx(7.0)
    assert whole[0].impact_factors.has_powerful_words


def test_text_windows_are_clamped_to_audio_duration():
    candidates = generate_from_text(SCENARIO_TEXT, 6.0, Config(), "generic")
    assert candidates
    for c in candidates:
        assert c.end <= 6.0
    _assert_candidate_invariants(candidates)


def test_text_without_sentences_yields_nothing():
    assert generate_from_text("no punctuation here at all", None, Config(), "generic") == []


def test_utterance_windows_never_end_mid_sentence():
    utterances = [
        _utterance("We started with nothing at all.", 0.0, 4.0),
        _utterance("Then the whole market changed overnight. And then we", 4.0, 10.0),
        _utterance("kept building anyway.", 10.0, 13.0),
    ]
    candidates = generate_from_utterances(utterances, Config())

    assert candidates
    _assert_candidate_invariants(candidates)
    assert all(ends_with_sentence(c.text) for c in candidates)
    assert not any(c.text.endswith("And then we") for c in candidates)

    trimmed = [c for c in candidates if c.start == 0.0 and c.end < 10.0]
    assert trimmed
    assert trimmed[0].text == "We started with nothing at all. Then the whole market changed overnight."

    full = [c for c in candidates if c.start == 0.0 and c.end == 13.0]
    assert len(full) == 1
    assert full[0].viral_elements is not None


def test_utterance_without_any_sentence_end_is_dropped():
    utterances = [_utterance("this keeps going and never really finishes its thought", 0.0, 8.0)]
    assert generate_from_utterances(utterances, Config()) == []


def test_substantial_single_utterance_is_trimmed():
    utterances = [
        _utterance(
            "Most people never realize how much compounding matters over time. And the second part",
            0.0, 12.0,
        ),
    ]
    candidates = generate_from_utterances(utterances, Config())
    assert len(candidates) == 1
    assert candidates[0].text == "Most people never realize how much compounding matters over time."
    assert candidates[0].end < 12.0
    assert candidates[0].viral_elements.emotional_language


def test_group_words_into_utterances_by_speaker():
    words = [
        Word("Hello", 0.0, 0.4, "A"),
        Word("there.", 0.4, 0.8, "A"),
        Word("Hi.", 1.0, 1.3, "B"),
        Word("Again.", 1.5, 1.9, "A"),
    ]
    utterances = group_words_into_utterances(words)
    assert [u.text for u in utterances] == ["Hello there.", "Hi.", "Again."]
    assert utterances[0].start_s == 0.0
    assert utterances[0].end_s == 0.8
    assert utterances[1].speaker == "B"


def test_words_are_used_when_no_text_or_utterances():
    words = []
    t = 0.0
    for sentence in ["We tried it.", "It worked really well for us."]:
        for token in sentence.split():
            words.append({"text": token, "start": int(t * 1000), "end": int((t + 0.6) * 1000), "speaker": "A"})
            t += 0.7
    result = generate_candidates(Transcript.from_dict({"words": words}), Config(), "generic")
    assert result.source == "words"
    assert all(c.source == "words" for c in result.candidates)
    _assert_candidate_invariants(result.candidates)


def test_chapters_within_strict_band_are_direct_clips():
    transcript = Transcript.from_dict({
        "chapters": [
            {"headline": "Intro", "summary": "Intro summary.", "start": 0, "end": 20000},
            {"headline": "Too short", "start": 20000, "end": 25000},
            {"headline": "Too long", "start": 25000, "end": 100000},
            {"headline": "", "summary": "Wrap up.", "start": 100000, "end": 115000},
        ],
    })
    result = generate_candidates(transcript, Config(), "generic")

    assert result.source == "chapters"
    assert result.is_direct
    assert [c.text for c in result.candidates] == ["Intro", "Wrap up."]
    assert [c.reason for c in result.candidates] == ["Chapter: Intro", "Chapter: Untitled"]


def test_basic_identification_trims_to_last_sentence():
    utterances = [
        _utterance("Alpha beta gamma.", 0.0, 6.0),
        _utterance("Delta epsilon.", 6.0, 12.0),
        _utterance("Zeta eta theta.", 12.0, 20.0),
        _utterance("Iota kappa.", 20.0, 35.0),
        _utterance("Lambda mu nu", 35.0, 40.0),
    ]
    clips = generate_basic(utterances, Config())

    assert len(clips) == 2
    assert clips[0].start == 0.0 and clips[0].end == 20.0
    assert clips[1].text == "Iota kappa."
    assert clips[1].end == pytest.approx(30.0)
    assert all(c.reason == "Basic clip identification" for c in clips)


def test_empty_transcript_yields_no_candidates():
    result = generate_candidates(Transcript(), Config(), "generic")
    assert result.source == "basic"
    assert result.candidates == []


def _speakerless_words(count, step_s=0.4, sentence_every=12):
    words = []
    for i in range(count):
        text = f"word{i}." if (i + 1) % sentence_every == 0 else f"word{i}"
        words.append({"text": text, "start": round(i * step_s * 1000), "end": round((i + 1) * step_s * 1000)})
    return words


def test_words_without_speakers_still_yield_candidates():
    transcript = Transcript.from_dict({"words": _speakerless_words(300)})
    result = generate_candidates(transcript, Config(), "generic")

    assert result.source == "words"
    assert result.candidates
    assert all(c.duration <= 60.0 for c in result.candidates)
    _assert_candidate_invariants(result.candidates)


def test_word_groups_break_at_sentence_end_and_span_limit():
    transcript = Transcript.from_dict({"words": _speakerless_words(300)})
    utterances = group_words_into_utterances(transcript.words)
    assert len(utterances) == 25
    assert all(u.text.endswith(".") for u in utterances)

    unpunctuated = Transcript.from_dict({"words": _speakerless_words(300, sentence_every=1000)})
    capped = group_words_into_utterances(unpunctuated.words, max_span_s=60.0)
    assert len(capped) > 1
    assert all(u.duration_s <= 60.0 for u in capped)


def test_utterance_windows_stop_growing_at_ceiling():
    utterances = [
        _utterance(f"Part {i} of the story is told here.", i * 10.0, (i + 1) * 10.0)
        for i in range(10)
    ]
    candidates = generate_from_utterances(utterances, Config())

    assert candidates
    assert max(c.duration for c in candidates) == pytest.approx(60.0)
    assert all(c.duration <= 60.0 for c in candidates)


def test_single_utterance_longer_than_ceiling_is_rejected():
    text = "This single answer runs on for a very long time without any pause at all."
    assert generate_from_utterances([_utterance(text, 0.0, 75.0)], Config()) == []

    kept = generate_from_utterances([_utterance(text, 0.0, 55.0)], Config())
    assert len(kept) == 1
    assert kept[0].duration == pytest.approx(55.0)


def test_music_allows_longer_text_windows():
    text = " ".join(f"Line number {i} here." for i in range(10))

    music = generate_from_text(text, None, Config(), "music")
    generic = generate_from_text(text, None, Config(), "generic")

    assert max(c.sentence_count for c in music) == 7
    assert max(c.sentence_count for c in generic) == 6


def test_text_generation_stops_after_enough_candidates():
    text = " ".join(f"Short line {i} ends." for i in range(200))
    candidates = generate_from_text(text, None, Config(), "generic")

    assert len(candidates) >= 150
    assert {c.sentence_count for c in candidates} == {6}


def test_chapter_clips_are_capped():
    chapters = [{"headline": f"Part {i}", "start": i * 20000, "end": (i + 1) * 20000} for i in range(8)]
    result = generate_candidates(Transcript.from_dict({"chapters": chapters}), Config(), "generic")

    assert result.source == "chapters"
    assert len(result.candidates) == 5
    assert [c.start for c in result.candidates] == [0.0, 20.0, 40.0, 60.0, 80.0]


def test_basic_clips_are_capped():
    utterances = [_utterance(f"Sentence {i}.", i * 10.0, (i + 1) * 10.0) for i in range(20)]
    clips = generate_basic(utterances, Config())

    assert len(clips) == 5
    assert clips[0].start == 0.0 and clips[0].end == 30.0
