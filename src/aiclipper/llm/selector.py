"""LLM clip selection over the review pool.

The reply is parsed by an ordered tuple of independent strategies; the
first one that yields at least one in-range clip number wins:

1. json: {"selections": [{"clip_number": n, ...}]} (structured output)
2. selected_clip: "SELECTED CLIP #: n"
3. clip_label: line-level "CLIP #: n", "CLIP NUMBER: n" or "CLIP n:" labels
4. viral_context: each "VIRAL POTENTIAL:" block paired with the nearest
   preceding heading line that names a clip
5. any_mention: every "CLIP n" anywhere, unique, in order

Clip numbers are 1-based in the prompt and the reply.
"""
from __future__ import annotations
import os
import json
import re
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from aiclipper.config import Config
from aiclipper.candidates.models import Candidate, Selection
from aiclipper.llm.prompts import build_selection_prompt, build_system_prompt

logger = logging.getLogger(__name__)

DEFAULT_AUDIENCE = "General audience"

SELECTED_CLIP_PATTERN = re.compile(r"SELECTED\s+CLIP\s*(?:#|NUMBER)?\s*:?\s*\**\s*(\d+)", re.IGNORECASE)
CLIP_LABEL_PATTERNS = [
    re.compile(r"^[\s*#>\-]*CLIP\s*(?:#|NUMBER)\s*:?\s*\**\s*(\d+)", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^[\s*#>\-]*CLIP\s+(\d+)\s*[:*]", re.IGNORECASE | re.MULTILINE),
]
HEADING_MENTION_PATTERN = re.compile(
    r"^[\s*#>\-\d.)]*(?:CLIP|SELECTION)\s*#?\s*(\d+)", re.IGNORECASE | re.MULTILINE
)
VIRAL_BLOCK_PATTERN = re.compile(r"VIRAL\s+POTENTIAL\s*\**\s*:", re.IGNORECASE)
ANY_MENTION_PATTERN = re.compile(r"\bCLIP\s*#?\s*:?\s*\**\s*(\d+)", re.IGNORECASE)

SECTION_HEADERS = (
    r"SELECTED\s+CLIP|CLIP\s*(?:#|NUMBER)|VIRAL\s+POTENTIAL|TARGET\s+AUDIENCE|DURATION\s+EFFECTIVENESS"
)


def _section_pattern(label: str) -> re.Pattern:
    # Value runs until the next header line or the end of the text
    return re.compile(
        rf"{label}\s*\**\s*:\s*\**\s*(.*?)\s*(?=^[\s*#>\-]*(?:{SECTION_HEADERS})|\Z)",
        re.IGNORECASE | re.MULTILINE | re.DOTALL,
    )


SECTION_PATTERNS = {
    "viral_potential": _section_pattern(r"VIRAL\s+POTENTIAL"),
    "target_audience": _section_pattern(r"TARGET\s+AUDIENCE"),
    "duration_effectiveness": _section_pattern(r"DURATION\s+EFFECTIVENESS"),
}


@dataclass
class ClipMatch:
    """A clip number found in the reply and where its details start."""
    number: int
    position: int = 0      # details start here
    anchor: int = 0        # where the mention itself starts
    fields: Optional[Dict[str, str]] = None


@dataclass
class ParseResult:
    selections: List[Selection] = field(default_factory=list)
    strategy: Optional[str] = None


def _matches_from(pattern: re.Pattern, text: str) -> List[ClipMatch]:
    return [ClipMatch(int(m.group(1)), m.end(), m.start()) for m in pattern.finditer(text)]


def parse_json_selections(text: str) -> List[ClipMatch]:
    """Structured reply, fenced or bare."""
    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
    json_str = fenced.group(1) if fenced else text[text.find("{"):text.rfind("}") + 1]
    if not json_str:
        return []
    try:
        data = json.loads(json_str)
    except ValueError:
        return []
    if not isinstance(data, dict) or not isinstance(data.get("selections"), list):
        return []

    matches = []
    for item in data["selections"]:
        if not isinstance(item, dict):
            continue
        try:
            number = int(item.get("clip_number"))
        except (TypeError, ValueError):
            continue
        matches.append(ClipMatch(number, fields={
            key: str(item.get(key) or "").strip() for key in SECTION_PATTERNS
        }))
    return matches


def parse_selected_clip_labels(text: str) -> List[ClipMatch]:
    return _matches_from(SELECTED_CLIP_PATTERN, text)


def parse_clip_labels(text: str) -> List[ClipMatch]:
    matches = []
    for pattern in CLIP_LABEL_PATTERNS:
        matches.extend(_matches_from(pattern, text))
    return sorted(matches, key=lambda m: m.position)


def parse_viral_context(text: str) -> List[ClipMatch]:
    """Pair every VIRAL POTENTIAL block with the closest heading line above it."""
    headings = list(HEADING_MENTION_PATTERN.finditer(text))
    matches = []
    for block in VIRAL_BLOCK_PATTERN.finditer(text):
        preceding = [h for h in headings if h.end() <= block.start()]
        if preceding:
            heading = preceding[-1]
            matches.append(ClipMatch(int(heading.group(1)), heading.end(), heading.start()))
    return matches


def parse_any_mention(text: str) -> List[ClipMatch]:
    return _matches_from(ANY_MENTION_PATTERN, text)


PARSE_STRATEGIES: Tuple[Tuple[str, Callable[[str], List[ClipMatch]]], ...] = (
    ("json", parse_json_selections),
    ("selected_clip", parse_selected_clip_labels),
    ("clip_label", parse_clip_labels),
    ("viral_context", parse_viral_context),
    ("any_mention", parse_any_mention),
)


def _valid_matches(matches: List[ClipMatch], pool_size: int) -> List[ClipMatch]:
    """In-range, first occurrence of each clip number."""
    seen = set()
    valid = []
    for m in matches:
        if not 1 <= m.number <= pool_size:
            logger.debug(f"Dropping out-of-range clip number {m.number}")
            continue
        if m.number in seen:
            continue
        seen.add(m.number)
        valid.append(m)
    return valid


def extract_sections(segment: str) -> Dict[str, str]:
    """Labeled sections found in one clip's part of the reply."""
    sections = {}
    for key, pattern in SECTION_PATTERNS.items():
        m = pattern.search(segment)
        if m:
            value = m.group(1).strip().strip("*").strip()
            if value:
                sections[key] = value
    return sections


def _to_selection(match: ClipMatch, segment: str, pool: List[Candidate]) -> Selection:
    sections = match.fields if match.fields is not None else extract_sections(segment)
    return Selection.from_candidate(
        pool[match.number - 1],
        reason=sections.get("viral_potential") or f"Selected by AI (Clip {match.number})",
        target_audience=sections.get("target_audience") or DEFAULT_AUDIENCE,
        duration_effectiveness=sections.get("duration_effectiveness") or "",
        ai_selected=True,
        clip_index=match.number - 1,
    )


def parse_selection_response(text: str, pool: List[Candidate]) -> ParseResult:
    """
    Turn an LLM reply into selections from the review pool.

    Args:
        text: Raw reply text
        pool: Candidates in prompt order

    Returns:
        ParseResult with the winning strategy name, or an empty result
    """
    text = text or ""
    for name, strategy in PARSE_STRATEGIES:
        raw = strategy(text)
        matches = _valid_matches(raw, len(pool))
        if not matches:
            continue

        # Each match owns the reply up to the next mention
        anchors = sorted(m.anchor for m in raw)
        selections = []
        for m in matches:
            end = next((a for a in anchors if a >= m.position), len(text))
            selections.append(_to_selection(m, text[m.position:end], pool))
        logger.info(f"Parsed {len(selections)} clip selections using '{name}' strategy")
        return ParseResult(selections, name)

    return ParseResult()


def detect_llm_availability(cfg: Config) -> bool:
    return bool(cfg.llm.api_key or os.getenv("OPENAI_API_KEY"))


def call_openai_for_selection(
    system_prompt: str,
    user_prompt: str,
    cfg: Config,
    client=None,
) -> str:
    """Send the selection prompt and return the reply text."""
    if client is None:
        from openai import OpenAI
        client = OpenAI(api_key=cfg.llm.api_key or os.getenv("OPENAI_API_KEY"))

    params = {
        "model": cfg.llm.model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": cfg.llm.temperature,
        "max_tokens": cfg.llm.max_tokens,
    }
    if cfg.llm.structured_output:
        params["response_format"] = {"type": "json_object"}

    response = client.chat.completions.create(**params)
    return response.choices[0].message.content or ""


def select_with_llm(
    pool: List[Candidate],
    content_type: str,
    cfg: Config,
    client=None,
) -> Optional[List[Selection]]:
    """
    Ask the LLM to pick the best clips from the review pool.

    Args:
        pool: Review pool, numbered in order
        content_type: Detected content type (system prompt flavor)
        cfg: Configuration with LLM settings
        client: Optional pre-built OpenAI-compatible client

    Returns:
        Selections, or None when the LLM is unavailable, fails or the reply
        cannot be parsed (caller falls back to heuristic ranking)
    """
    if not cfg.llm.enabled:
        logger.info("LLM selection disabled")
        return None
    if client is None and not detect_llm_availability(cfg):
        logger.warning("OPENAI_API_KEY not set, skipping LLM selection")
        return None
    if not pool:
        return None

    system_prompt = build_system_prompt(content_type)
    user_prompt = build_selection_prompt(
        pool, cfg.llm.clips_to_select, cfg.llm.structured_output
    )

    logger.info(f"Asking {cfg.llm.model} to select clips from {len(pool)} candidates...")
    try:
        reply = call_openai_for_selection(system_prompt, user_prompt, cfg, client)
    except Exception as e:
        logger.warning(f"LLM selection failed: {e}")
        return None

    logger.debug(f"AI RESPONSE TEXT:\n{reply}")

    result = parse_selection_response(reply, pool)
    if not result.selections:
        logger.warning("Could not parse any clip selections from the LLM reply")
        return None
    return result.selections
