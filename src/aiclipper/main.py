import os
import logging
from typing import List, Optional

from aiclipper.config import Config
from aiclipper.models.transcript import Transcript
from aiclipper.utils.system import format_timestamp
from aiclipper.candidates.models import RunContext, Selection, SelectionAudit
from aiclipper.candidates.content_type import detect_content_type
from aiclipper.candidates.generator import generate_candidates
from aiclipper.candidates.scorer import filter_clips_for_quality
from aiclipper.candidates.selection import build_review_pool
from aiclipper.candidates.fallback import rank_fallback
from aiclipper.candidates.overlap import drop_invalid_clips, resolve_overlaps
from aiclipper.llm.selector import select_with_llm

logger = logging.getLogger(__name__)


def setup_logging(debug: bool, log_file: Optional[str] = None):
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

    # App logger
    app_logger = logging.getLogger("aiclipper")
    app_logger.setLevel(level)
    app_logger.propagate = False

    # Clean up existing handlers to avoid duplication (for long-running processes)
    if app_logger.hasHandlers():
        app_logger.handlers.clear()

    # Console handler
    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(formatter)
    app_logger.addHandler(ch)

    # Per-run log file
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        app_logger.addHandler(fh)

    # Root logger (suppress others)
    root = logging.getLogger()
    root.setLevel(logging.WARNING)


def identify_clips(
    transcript: Transcript,
    cfg: Config,
    ctx: RunContext,
    client=None,
    title: Optional[str] = None,
) -> List[Selection]:
    """Transcript to overlap-free selections; nothing is written to disk."""
    full_text = transcript.full_text
    content_type = detect_content_type(full_text)
    logger.info(f"Detected content type: {content_type}")

    result = generate_candidates(transcript, cfg, content_type)
    if not result.candidates:
        logger.warning("No candidate clips passed the duration and sentence constraints")
        return []

    if result.is_direct:
        # Chapter and basic clips are already a final pick
        selections = [Selection.from_candidate(c) for c in result.candidates]
    else:
        candidates = result.candidates
        if cfg.candidate.post_filter:
            candidates = filter_clips_for_quality(
                candidates, content_type, cfg, full_text=full_text, title=title
            )

        pool = build_review_pool(candidates, result.source, cfg, seed=ctx.seed)
        selections = select_with_llm(pool, content_type, cfg, client=client)
        if selections is None:
            selections = rank_fallback(pool, cfg)

    selections = resolve_overlaps(selections)
    return drop_invalid_clips(selections)


def run_pipeline(
    transcript: Transcript,
    cfg: Config,
    ctx: Optional[RunContext] = None,
    client=None,
    title: Optional[str] = None,
) -> List[Selection]:
    """Run clip identification for one transcript and write the audit record."""
    ctx = ctx or RunContext.create()
    logger.info(f"Starting clip identification run {ctx.run_id}")

    selections = identify_clips(transcript, cfg, ctx, client=client, title=title)

    logger.info(f"Selected {len(selections)} clips")
    for i, clip in enumerate(selections, 1):
        source = "AI" if clip.ai_selected else "heuristic"
        logger.info(
            f"  Clip {i}: {format_timestamp(clip.start)} -> {format_timestamp(clip.end)} "
            f"({clip.duration:.1f}s, {source}) {clip.reason or ''}"
        )

    if cfg.write_audit:
        audit_path = cfg.paths.audit_json(ctx.run_id)
        try:
            SelectionAudit.for_run(ctx, selections).save(audit_path)
            logger.info(f"Saved selection audit to '{audit_path}'")
        except OSError as e:
            logger.warning(f"Could not write selection audit '{audit_path}': {e}")

    return selections
