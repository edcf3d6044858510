from __future__ import annotations
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from dataclasses import dataclass, field
from typing import Optional

from aiclipper.settings import Settings, get_settings


@dataclass(frozen=True)
class DurationBand:
    """Closed duration range in seconds."""
    min_s: float
    max_s: float

    def contains(self, duration: float) -> bool:
        return self.min_s <= duration <= self.max_s


@dataclass(frozen=True)
class DurationBands:
    """Named duration bands shared by every candidate generator."""
    strict: DurationBand       # configured MIN..MAX
    relaxed: DurationBand      # widened band for sentence-grouped text windows
    very_short: DurationBand   # punchy clips; its lower edge is the global floor

    @property
    def floor(self) -> float:
        return self.very_short.min_s


@dataclass
class ClipConfig:
    """Clip duration parameters (seconds)."""
    min_duration: float = 8.0
    max_duration: float = 30.0
    ideal_duration: float = 15.0
    relaxed_min_factor: float = 0.7
    relaxed_max_factor: float = 1.5
    floor: float = 5.0                # no generator emits anything shorter
    ceiling: float = 60.0             # longest window ever considered
    very_short_max: float = 10.0

    @property
    def bands(self) -> DurationBands:
        return DurationBands(
            strict=DurationBand(self.min_duration, self.max_duration),
            relaxed=DurationBand(
                max(self.floor, self.min_duration * self.relaxed_min_factor),
                min(self.ceiling, self.max_duration * self.relaxed_max_factor),
            ),
            very_short=DurationBand(self.floor, self.very_short_max),
        )


@dataclass
class CandidateConfig:
    """Candidate generation and pool sizing parameters."""
    seconds_per_word: float = 0.4      # used when the transcript has no audio duration
    min_words_per_window: int = 5
    max_text_candidates: int = 150
    min_single_utterance_words: int = 10
    max_direct_clips: int = 5          # chapter and basic fallback output cap
    review_pool_text: int = 60         # clips shown to the LLM from the text path
    review_pool_utterances: int = 40   # clips shown to the LLM from utterances/words
    review_top_fraction: float = 0.5
    review_viral_fraction: float = 0.125  # per viral category, utterance/word pools only
    post_filter: bool = False          # run filter_clips_for_quality before review
    post_filter_pool: int = 15
    post_filter_top_fraction: float = 0.2
    duplicate_window_s: float = 10.0


@dataclass
class LLMConfig:
    """External LLM configuration for clip selection."""
    provider: str = "openai"
    model: str = "gpt-4o"
    enabled: bool = True
    max_tokens: int = 2500
    temperature: float = 0.7
    clips_to_select: int = 5
    structured_output: bool = False    # ask for JSON; regex cascade stays as fallback
    api_key: Optional[str] = None


@dataclass
class PathConfig:
    """File paths and directories."""
    output_root: str = "logs"
    project_name: Optional[str] = None

    @property
    def output_dir(self) -> str:
        if self.project_name:
            return os.path.join(self.project_name, self.output_root)
        return self.output_root

    def audit_json(self, run_id: str) -> str:
        """Selected clips audit record for a run."""
        return os.path.join(self.output_dir, f"selected_clips_{run_id}.json")

    def log_file(self, run_id: str) -> str:
        return os.path.join(self.output_dir, f"run_{run_id}.log")


@dataclass
class Config:
    """Main configuration container combining all settings."""
    paths: PathConfig = field(default_factory=PathConfig)
    clip: ClipConfig = field(default_factory=ClipConfig)
    candidate: CandidateConfig = field(default_factory=CandidateConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    debug: bool = False
    write_log_file: bool = False
    write_audit: bool = True

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Config":
        """Build a config with environment overrides applied."""
        settings = settings or get_settings()
        cfg = cls()
        cfg.clip.min_duration = settings.clip_min_duration
        cfg.clip.max_duration = settings.clip_max_duration
        cfg.clip.ideal_duration = settings.clip_ideal_duration
        cfg.llm.api_key = settings.openai_api_key or None
        if settings.output_dir:
            cfg.paths.output_root = settings.output_dir
        return cfg
