"""
This package implements clip candidate discovery, scoring and selection.

Modules:
- models: Data models for candidates, selections and the audit record
- content_type: Content type detection and per-type scoring profiles
- generator: Candidate windows from text, utterances, words or chapters
- scorer: Deterministic heuristic scoring and post-filter enrichment
- selection: Duration-diverse pool selection and near-duplicate removal
- fallback: Viral-potential ranking used when the LLM is unavailable
- overlap: Final overlap resolution and clip validation

Note: To avoid circular imports, import functions directly from submodules:
    from aiclipper.candidates.generator import generate_candidates
    from aiclipper.candidates.selection import select_diverse_candidates
"""

# Only export models at package level (no circular import risk)
from aiclipper.candidates.models import (
    Candidate,
    ImpactFactors,
    ViralElements,
    ScoringDetails,
    Selection,
    RunContext,
    SelectionAudit,
)

__all__ = [
    # Models
    "Candidate",
    "ImpactFactors",
    "ViralElements",
    "ScoringDetails",
    "Selection",
    "RunContext",
    "SelectionAudit",
]
