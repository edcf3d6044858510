"""Prompt templates for LLM clip selection."""
from __future__ import annotations
from typing import List

from aiclipper.candidates.models import Candidate
from aiclipper.utils.system import format_clip_duration

SYSTEM_PROMPT = """You are a legendary social media content strategist who has helped create dozens of viral videos with billions of combined views.

You have an exceptional ability to identify moments that will captivate audiences and perform well. You understand that effective content typically contains one or more of these elements:

1. EMOTIONAL IMPACT - Content that makes people feel something deeply (joy, surprise, awe, inspiration)
2. STORYTELLING - Concise narratives with clear beginnings, middles, and ends that resonate
3. VALUABLE INSIGHTS - Educational content that teaches something useful quickly
4. AUTHENTICITY - Real, genuine moments that feel honest and relatable
5. CURIOSITY TRIGGERS - Content that makes viewers want to know more
6. CONVERSATION STARTERS - Content that makes people want to comment, debate, or share with friends
7. UNIQUE PERSPECTIVE - Content that offers a fresh viewpoint or challenges assumptions

THE ABSOLUTE MOST IMPORTANT RULE: Never select clips that cut off mid-sentence or thought. Always prioritize clips with natural endings and complete thoughts. A clip that feels complete and satisfying is significantly more effective than one that feels abruptly cut.

Users IMMEDIATELY close videos that cut off mid-sentence, making this the #1 factor in determining clip success.

You can identify the potential in content regardless of length, and you understand the importance of varied clip durations for different platforms. But above all else, clips MUST have complete sentence endings."""

CONTENT_TYPE_HINTS = {
    "music": "This content is music. Favor hooks, choruses and memorable lines that stand on their own.",
    "educational": "This content is educational. Favor clear explanations, definitions and concrete examples.",
    "interview": "This content is an interview. Favor strong questions paired with complete, insightful answers.",
    "generic": "",
}

SELECTION_PROMPT_TEMPLATE = """You are a world-class content strategist specialized in identifying the most engaging and viral-worthy clips from long-form content.

Analyze these {clip_count} potential clips and select the {num_select} that would be MOST LIKELY TO PERFORM WELL on social media platforms.

{clip_descriptions}
WHAT MAKES CONTENT PERFORM WELL:
- COMPLETE ENDINGS ARE ESSENTIAL - clips that cut off mid-sentence will be immediately skipped
- Clear beginnings and endings - viewers need natural entry and exit points
- Intriguing hooks that make viewers want to know more
- Stories with emotional impact (surprising, shocking, heartwarming, inspiring)
- Educational content that teaches something valuable in a concise way
- Content that challenges assumptions or presents unexpected perspectives
- Clips that feel complete on their own and don't require additional context

CRITICAL SELECTION CRITERIA (IN ORDER OF IMPORTANCE):
1. COMPLETE SENTENCES - NEVER select clips that cut off mid-sentence.
2. NATURAL ENDINGS - The clip should end at a logical conclusion point that feels satisfying
3. DIVERSE DURATIONS - Include varied clip lengths (short, medium, long) for different platform requirements
4. ENGAGING CONTENT - Select clips with strong hooks and valuable content

For each clip you select, provide:
1. The clip number (e.g., "CLIP 3")
2. A detailed explanation of WHY this clip has strong potential
3. Why this clip's particular duration is effective for the content
4. The target audience who would engage most with this content

Format your response as:

SELECTED CLIP #: [clip number]
VIRAL POTENTIAL: [detailed explanation of viral potential elements]
TARGET AUDIENCE: [who would engage with this content most]
DURATION EFFECTIVENESS: [why this duration works for this clip]

Select exactly {num_select} clips that you believe have the STRONGEST POTENTIAL, with varied durations. ONLY SELECT CLIPS WITH COMPLETE ENDINGS."""

STRUCTURED_OUTPUT_SUFFIX = """

Return JSON only, with this exact schema:
{
  "selections": [
    {
      "clip_number": number,
      "viral_potential": string,
      "target_audience": string,
      "duration_effectiveness": string
    }
  ]
}"""


def build_system_prompt(content_type: str) -> str:
    hint = CONTENT_TYPE_HINTS.get(content_type, "")
    return f"{SYSTEM_PROMPT}\n\n{hint}" if hint else SYSTEM_PROMPT


def describe_clip(index: int, clip: Candidate) -> str:
    """One numbered block per clip: duration, quoted text, ending flag, impact tags."""
    status = "COMPLETE ENDING: ✓" if clip.ends_with_complete_sentence else "INCOMPLETE ENDING: ✗"
    tags = " ".join(clip.impact_factors.tags())
    return (
        f"CLIP {index + 1} ({format_clip_duration(clip.duration)}):\n"
        f"\"{clip.text.strip()}\"\n"
        f"{status}\n"
        f"IMPACT FACTORS: {tags}\n\n"
    )


def build_selection_prompt(
    pool: List[Candidate],
    num_select: int = 5,
    structured_output: bool = False,
) -> str:
    """
    Build the user prompt listing every clip in the review pool.

    Args:
        pool: Candidates in the order they are numbered (1-based)
        num_select: Number of clips the model should pick
        structured_output: Also ask for a JSON reply

    Returns:
        Prompt text
    """
    prompt = SELECTION_PROMPT_TEMPLATE.format(
        clip_count=len(pool),
        num_select=num_select,
        clip_descriptions="".join(describe_clip(i, c) for i, c in enumerate(pool)),
    )
    if structured_output:
        prompt += STRUCTURED_OUTPUT_SUFFIX
    return prompt
