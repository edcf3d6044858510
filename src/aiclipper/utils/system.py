import os
import math
import json
import logging
from datetime import datetime

logger = logging.getLogger(__name__)


def format_timestamp(t: float) -> str:
    """Convert seconds to HH:MM:SS,mmm for log output."""
    if t < 0:
        t = 0
    hours = int(t // 3600)
    minutes = int((t % 3600) // 60)
    seconds = int(t % 60)
    millis = int(round((t - math.floor(t)) * 1000)) % 1000
    return f"{hours:02}:{minutes:02}:{seconds:02},{millis:03}"


def format_clip_duration(seconds: float) -> str:
    """Clip length as M:SS, the way it is shown to the LLM."""
    seconds = max(seconds, 0)
    return f"{int(seconds // 60)}:{int(seconds % 60):02d}"


def make_run_id(when: datetime) -> str:
    """Filesystem-safe run identifier derived from the run timestamp."""
    return when.strftime("%Y%m%dT%H%M%S") + f"{when.microsecond // 1000:03d}"


def write_json(data: dict, path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
