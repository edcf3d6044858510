"""Data models for the clip candidate pipeline."""
from __future__ import annotations
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime, timezone
from typing import List, Optional

from aiclipper.utils.system import make_run_id, write_json


@dataclass
class ImpactFactors:
    """High-impact markers found in a candidate's text."""
    has_question: bool = False
    has_powerful_words: bool = False
    has_numbers: bool = False
    impact_bonus: float = 0.0

    def tags(self) -> List[str]:
        tags = []
        if self.has_question:
            tags.append("Contains questions")
        if self.has_powerful_words:
            tags.append("Uses powerful words")
        if self.has_numbers:
            tags.append("Contains numbers/statistics")
        return tags


@dataclass
class ViralElements:
    """Engagement indicators found in a candidate's text."""
    emotional_language: bool = False
    story_element: bool = False
    educational_value: bool = False
    curiosity_hook: bool = False

    @property
    def score(self) -> float:
        score = 0.0
        if self.emotional_language:
            score += 0.15
        if self.story_element:
            score += 0.15
        if self.educational_value:
            score += 0.15
        if self.curiosity_hook:
            score += 0.25
        return round(score, 4)


@dataclass
class ScoringDetails:
    """Component scores from the post-filter enrichment pass."""
    original_quality: float = 0.0
    relevance: float = 0.0
    sentence_completion: float = 0.0
    transitions: float = 0.0
    density: float = 0.0
    duration: float = 0.0
    content_type: float = 0.0


@dataclass
class Candidate:
    """Candidate clip window with its heuristic scores."""
    start: float
    end: float
    text: str
    source: str = "text"               # text, utterances, words, chapters, basic
    word_count: int = 0
    sentence_count: int = 0
    quality_score: float = 0.0
    viral_score: float = 0.0
    ends_with_complete_sentence: bool = False
    impact_factors: ImpactFactors = field(default_factory=ImpactFactors)
    viral_elements: Optional[ViralElements] = None
    scoring_details: Optional[ScoringDetails] = None
    reason: Optional[str] = None

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict:
        d = asdict(self)
        d["duration"] = round(self.duration, 3)
        return d


@dataclass
class Selection(Candidate):
    """Candidate chosen by the LLM or by the fallback ranker."""
    target_audience: str = "General audience"
    duration_effectiveness: str = ""
    ai_selected: bool = False
    final_score: Optional[float] = None
    clip_index: Optional[int] = None   # 0-based position in the review pool

    @classmethod
    def from_candidate(cls, candidate: Candidate, **extra) -> "Selection":
        fields = {k: getattr(candidate, k) for k in Candidate.__dataclass_fields__}
        fields.update(extra)
        return cls(**fields)

    def with_reason(self, reason: str) -> "Selection":
        return replace(self, reason=reason)


@dataclass
class RunContext:
    """Identity of one pipeline invocation, passed explicitly to whatever needs it."""
    timestamp: datetime
    run_id: str
    source_video: Optional[str] = None
    seed: Optional[int] = None

    @classmethod
    def create(
        cls,
        source_video: Optional[str] = None,
        seed: Optional[int] = None,
        timestamp: Optional[datetime] = None,
    ) -> "RunContext":
        timestamp = timestamp or datetime.now(timezone.utc)
        return cls(
            timestamp=timestamp,
            run_id=make_run_id(timestamp),
            source_video=source_video,
            seed=seed,
        )


@dataclass
class SelectionAudit:
    """Audit record of the clips selected in one run."""
    timestamp: str
    source_video: Optional[str]
    clips: List[Selection] = field(default_factory=list)

    @classmethod
    def for_run(cls, ctx: RunContext, clips: List[Selection]) -> "SelectionAudit":
        return cls(
            timestamp=ctx.timestamp.isoformat(),
            source_video=ctx.source_video,
            clips=list(clips),
        )

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "source_video": self.source_video,
            "clips": [c.to_dict() for c in self.clips],
        }

    def save(self, path: str) -> None:
        """Save audit record to JSON file."""
        write_json(self.to_dict(), path)
