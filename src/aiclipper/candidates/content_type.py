"""Content type detection and per-type scoring profiles.

Detection runs in priority order and the first match wins:
- music: music markers, or more than 3 phrases repeated in the text
- educational: teaching/strategy markers
- interview: question/answer markers
- generic: everything else

CONTENT_PROFILES maps each type to the keyword set, window sizes and
weights used by the generator and the post-filter scorer.
"""
from __future__ import annotations
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

MUSIC = "music"
EDUCATIONAL = "educational"
INTERVIEW = "interview"
GENERIC = "generic"

MUSIC_PATTERN = re.compile(
    r"(chorus|verse|never gonna give you up|lyrics|singing|song|music|beat|melody|rhyme)",
    re.IGNORECASE,
)
EDUCATIONAL_PATTERN = re.compile(
    r"(learn|teach|strategy|concept|principle|important|key|idea|method|technique"
    r"|framework|step|process|solution)",
    re.IGNORECASE,
)
INTERVIEW_PATTERN = re.compile(
    r"(interview|question|answer|asked|tell me about|talk about|discussed|conversation)",
    re.IGNORECASE,
)

MIN_PHRASE_WORDS = 3
MAX_PHRASE_WORDS = 8
MUSIC_REPEATED_PHRASES = 3

DEFINITION_PATTERN = re.compile(
    r"\b(means|is defined as|refers to|is when|is a|are when|are|is)\b", re.IGNORECASE
)
EXAMPLE_PATTERN = re.compile(
    r"\b(example|instance|like|such as|for instance|imagine|consider)\b", re.IGNORECASE
)

COMMON_MARKERS = [
    "important", "key", "essential", "crucial", "must", "best", "top",
    "lesson", "learn", "discover", "strategy", "success", "growth",
    "tips", "advice", "how to", "problem", "solution", "benefit",
    "result", "outcome", "process", "method", "technique", "framework",
    "principle", "concept",
]

# Post-filter weights; every profile currently shares them
DEFAULT_WEIGHTS = {
    "original_quality": 0.3,
    "relevance": 0.15,
    "sentence_completion": 0.15,
    "transitions": 0.15,
    "density": 0.05,
    "duration": 0.1,
    "content_type": 0.1,
}


@dataclass
class BonusContext:
    """Extra inputs for content-type bonuses that need more than the clip text."""
    full_text: Optional[str] = None
    title: Optional[str] = None


def _music_bonus(text: str, ctx: BonusContext) -> float:
    bonus = 0.0
    sentences = re.findall(r"[^.!?]+[.!?]*", text)
    hook = sentences[0].strip() if sentences else text.strip()
    if ctx.full_text and hook and is_repeated_phrase(hook, ctx.full_text):
        bonus += 0.5
    if ctx.title and ctx.title.lower() in text.lower():
        bonus += 0.3
    return bonus


def _educational_bonus(text: str, ctx: BonusContext) -> float:
    bonus = 0.0
    if DEFINITION_PATTERN.search(text):
        bonus += 0.3
    if EXAMPLE_PATTERN.search(text):
        bonus += 0.3
    return bonus


def _interview_bonus(text: str, ctx: BonusContext) -> float:
    if "?" not in text:
        return 0.0
    response = text.split("?")[1]
    return 0.5 if len(response) > 30 else 0.2


def _no_bonus(text: str, ctx: BonusContext) -> float:
    return 0.0


@dataclass
class ContentProfile:
    """Scoring strategy for one content type."""
    name: str
    relevance_markers: List[str]
    max_sentences_per_clip: int = 6
    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    bonus: Callable[[str, BonusContext], float] = _no_bonus

    @property
    def relevance_pattern(self) -> re.Pattern:
        return re.compile("|".join(re.escape(m) for m in self.relevance_markers), re.IGNORECASE)


CONTENT_PROFILES: Dict[str, ContentProfile] = {
    MUSIC: ContentProfile(
        name=MUSIC,
        relevance_markers=COMMON_MARKERS + [
            "chorus", "hook", "beat", "rhythm", "melody", "lyric", "song", "verse",
            "bridge", "album", "track", "artist", "vocal", "sing", "rap", "performance",
        ],
        max_sentences_per_clip=7,
        bonus=_music_bonus,
    ),
    EDUCATIONAL: ContentProfile(
        name=EDUCATIONAL,
        relevance_markers=COMMON_MARKERS + [
            "understand", "explanation", "explain", "definition", "define", "example",
            "demonstrate", "illustration", "case study", "research", "analysis", "theory",
            "practice", "application", "skill", "knowledge", "study", "learning",
        ],
        bonus=_educational_bonus,
    ),
    INTERVIEW: ContentProfile(
        name=INTERVIEW,
        relevance_markers=COMMON_MARKERS + [
            "experience", "opinion", "perspective", "view", "insight", "thought",
            "belief", "story", "anecdote", "question", "answer", "response",
            "challenge", "opportunity", "reflection", "comment", "point",
        ],
        bonus=_interview_bonus,
    ),
    GENERIC: ContentProfile(name=GENERIC, relevance_markers=list(COMMON_MARKERS)),
}


def get_content_profile(content_type: str) -> ContentProfile:
    return CONTENT_PROFILES.get(content_type, CONTENT_PROFILES[GENERIC])


def detect_content_type(text: str) -> str:
    """
    Classify transcript text into music, educational, interview or generic.

    Args:
        text: Transcript text

    Returns:
        Content type name
    """
    text = text or ""
    if MUSIC_PATTERN.search(text) or len(find_repeated_phrases(text)) > MUSIC_REPEATED_PHRASES:
        return MUSIC
    if EDUCATIONAL_PATTERN.search(text):
        return EDUCATIONAL
    if INTERVIEW_PATTERN.search(text):
        return INTERVIEW
    return GENERIC


def find_repeated_phrases(text: str) -> List[tuple]:
    """
    Find word n-grams (3 to 8 words) that occur more than once.

    Returns:
        List of (phrase, count), most frequent first
    """
    words = (text or "").split()
    phrases = []
    for length in range(MIN_PHRASE_WORDS, MAX_PHRASE_WORDS + 1):
        counts = Counter(
            " ".join(words[i:i + length]).lower()
            for i in range(len(words) - length + 1)
        )
        phrases.extend((phrase, count) for phrase, count in counts.items() if count > 1)
    phrases.sort(key=lambda p: p[1], reverse=True)
    return phrases


def is_repeated_phrase(snippet: str, full_text: str) -> bool:
    """True if the snippet occurs more than once in the full text."""
    needle = snippet.lower().strip()
    if not needle:
        return False
    return full_text.lower().count(needle) > 1
