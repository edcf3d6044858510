"""Sentence and word helpers shared by the generators and scorers."""
from __future__ import annotations
import re
from typing import List, Optional, Tuple

SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]+")
TERMINATOR_PATTERN = re.compile(r"[.!?]\s*$")
BOUNDARY_PATTERN = re.compile(r"[.!?]\s+")
SENTENCE_MARK_PATTERN = re.compile(r"[.!?]+")


def split_sentences(text: str) -> List[str]:
    """Sentences ending in '.', '!' or '?'. A trailing fragment is dropped."""
    return SENTENCE_PATTERN.findall(text or "")


def count_words(text: str) -> int:
    return len((text or "").split())


def count_sentences(text: str) -> int:
    return len(SENTENCE_MARK_PATTERN.findall(text or ""))


def ends_with_sentence(text: str) -> bool:
    """True if the text stops on sentence-final punctuation."""
    return bool(TERMINATOR_PATTERN.search((text or "").strip()))


def last_sentence_boundary(text: str) -> Optional[int]:
    """
    Character offset just past the last inner sentence boundary.

    Only boundaries followed by whitespace count, so a terminator at the very
    end of the text is not reported here.
    """
    last = None
    for match in BOUNDARY_PATTERN.finditer(text or ""):
        last = match.end()
    return last


def trim_to_last_sentence(text: str) -> Optional[Tuple[str, float]]:
    """
    Cut text back to its last complete sentence.

    Returns:
        (trimmed_text, kept_ratio) where kept_ratio is the character share
        of the original text that was kept, or None if the text holds no
        sentence boundary at all.
    """
    stripped = (text or "").strip()
    if not stripped:
        return None
    if ends_with_sentence(stripped):
        return stripped, 1.0
    boundary = last_sentence_boundary(stripped)
    if boundary is None:
        return None
    return stripped[:boundary].strip(), boundary / len(stripped)
