"""Transcript data models for the provider JSON (text, words, utterances, chapters).

All timestamps arrive in milliseconds and are stored in seconds.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional
import json
import logging
import math

logger = logging.getLogger(__name__)


@dataclass
class Word:
    """Single word with timestamps."""
    text: str
    start_s: float
    end_s: float
    speaker: Optional[str] = None


@dataclass
class Utterance:
    """Speaker-attributed span of transcript text."""
    text: str
    start_s: float
    end_s: float
    speaker: Optional[str] = None

    @property
    def duration_s(self) -> float:
        return self.end_s - self.start_s


@dataclass
class Chapter:
    """Provider-generated topic segment."""
    start_s: float
    end_s: float
    headline: str = ""
    summary: str = ""
    gist: str = ""


@dataclass
class Transcript:
    """
    Time-aligned transcript in any of the provider's shapes.

    Matches the transcription provider JSON:
    {
      "text": "...",
      "words": [{"text", "start", "end", "speaker"}],
      "utterances": [{"text", "start", "end", "speaker"}],
      "chapters": [{"headline", "summary", "gist", "start", "end"}],
      "audio_duration": 123.4
    }
    """
    text: Optional[str] = None
    words: List[Word] = field(default_factory=list)
    utterances: List[Utterance] = field(default_factory=list)
    chapters: List[Chapter] = field(default_factory=list)
    audio_duration_s: Optional[float] = None

    @property
    def has_content(self) -> bool:
        return bool(self.text or self.words or self.utterances or self.chapters)

    @property
    def full_text(self) -> str:
        """Best available plain text, used for content classification."""
        if self.text:
            return self.text
        if self.utterances:
            return " ".join(u.text.strip() for u in self.utterances)
        if self.words:
            return " ".join(w.text.strip() for w in self.words)
        return " ".join(
            (c.headline or c.summary).strip() for c in self.chapters
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transcript":
        """Build a transcript, dropping items with unusable timestamps."""
        if not isinstance(data, dict):
            raise ValueError(f"Transcript JSON must be an object, got {type(data).__name__}")

        words = []
        for item in data.get("words") or []:
            span = _read_span(item, "word", allow_zero=True)
            if span:
                words.append(Word(
                    text=str(item.get("text", "")),
                    start_s=span[0],
                    end_s=span[1],
                    speaker=item.get("speaker"),
                ))

        utterances = []
        for item in data.get("utterances") or []:
            span = _read_span(item, "utterance")
            if span:
                utterances.append(Utterance(
                    text=str(item.get("text", "")),
                    start_s=span[0],
                    end_s=span[1],
                    speaker=item.get("speaker"),
                ))

        chapters = []
        for item in data.get("chapters") or []:
            span = _read_span(item, "chapter")
            if span:
                chapters.append(Chapter(
                    start_s=span[0],
                    end_s=span[1],
                    headline=item.get("headline") or "",
                    summary=item.get("summary") or "",
                    gist=item.get("gist") or "",
                ))

        duration = None
        for key in ("audio_duration_seconds", "audio_duration", "audioDuration"):
            duration = _as_number(data.get(key))
            if duration is not None:
                break
        if duration is not None and duration <= 0:
            duration = None

        return cls(
            text=data.get("text") or None,
            words=words,
            utterances=utterances,
            chapters=chapters,
            audio_duration_s=duration,
        )

    @classmethod
    def load(cls, path: str) -> "Transcript":
        """Load transcript from JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def _read_span(item: Dict[str, Any], kind: str, allow_zero: bool = False) -> Optional[tuple]:
    """Return (start_s, end_s) or None if the timestamps cannot be used."""
    if not isinstance(item, dict):
        logger.warning(f"Skipping {kind} that is not an object: {item!r}")
        return None
    start_ms = _as_number(item.get("start_ms", item.get("start")))
    end_ms = _as_number(item.get("end_ms", item.get("end")))

    if start_ms is None or end_ms is None:
        logger.warning(f"Skipping {kind} with non-numeric timestamps: {item!r}")
        return None
    if start_ms < 0 or end_ms < start_ms or (end_ms == start_ms and not allow_zero):
        logger.warning(f"Skipping {kind} with inverted timestamps: {item!r}")
        return None
    return start_ms / 1000.0, end_ms / 1000.0
