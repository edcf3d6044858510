import sys
import argparse
import logging
from aiclipper.config import Config
from aiclipper.main import run_pipeline, setup_logging
from aiclipper.models.transcript import Transcript
from aiclipper.candidates.models import RunContext
from aiclipper.llm.selector import detect_llm_availability

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Transcript to short-form clip selector")
    parser.add_argument("--transcript", type=str, required=True, help="Transcript JSON file")
    parser.add_argument("--source-video", type=str, help="Source video recorded in the audit file")
    parser.add_argument("--project", type=str, help="Project name (creates a project folder)")
    parser.add_argument("--num-clips", type=int, help="Number of clips the LLM should select")
    parser.add_argument("--no-llm", action="store_true", help="Skip the LLM and rank heuristically")
    parser.add_argument("--llm-model", type=str, help="Override LLM model")
    parser.add_argument("--structured-output", action="store_true", help="Ask the LLM for a JSON reply")
    parser.add_argument("--post-filter", action="store_true", help="Re-score candidates before review")
    parser.add_argument("--title", type=str, help="Media title (music scoring bonus)")
    parser.add_argument("--seed", type=int, help="Seed for the review pool shuffle")
    parser.add_argument("--log-file", action="store_true", help="Also write a per-run log file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    cfg = Config.from_settings()

    if args.debug: cfg.debug = True
    if args.project: cfg.paths.project_name = args.project
    if args.num_clips: cfg.llm.clips_to_select = args.num_clips
    if args.no_llm: cfg.llm.enabled = False
    if args.llm_model: cfg.llm.model = args.llm_model
    if args.structured_output: cfg.llm.structured_output = True
    if args.post_filter: cfg.candidate.post_filter = True
    if args.log_file: cfg.write_log_file = True

    ctx = RunContext.create(source_video=args.source_video, seed=args.seed)
    setup_logging(cfg.debug, cfg.paths.log_file(ctx.run_id) if cfg.write_log_file else None)

    if cfg.llm.enabled and not detect_llm_availability(cfg):
        logger.warning("OPENAI_API_KEY missing. Using heuristic clip ranking.")
        cfg.llm.enabled = False

    try:
        transcript = Transcript.load(args.transcript)
    except (OSError, ValueError) as e:
        logger.error(f"Could not load transcript '{args.transcript}': {e}")
        return 1

    run_pipeline(transcript, cfg, ctx, title=args.title)
    return 0


if __name__ == "__main__":
    sys.exit(main())
