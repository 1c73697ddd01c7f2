from __future__ import annotations

import logging
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)

FEEDBACK_DELAY_ENV = "MULTIPLICATION_DRILL_FEEDBACK_DELAY_S"
QUESTIONS_ENV = "MULTIPLICATION_DRILL_QUESTIONS"
MAX_NUMBER_ENV = "MULTIPLICATION_DRILL_MAX_NUMBER"
SEED_ENV = "MULTIPLICATION_DRILL_SEED"


@dataclass(frozen=True, slots=True)
class DrillConfig:
    """Startup settings for the drill UI.

    The default question count and max number only pre-fill the settings
    screen; the controller still validates whatever the user submits.
    """

    default_total_questions: int = 10
    default_max_number: int = 5
    feedback_delay_s: float = 1.5
    window_size: tuple[int, int] = (960, 540)
    target_fps: int = 60
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.feedback_delay_s < 0:
            raise ValueError("feedback_delay_s must be >= 0")
        if self.target_fps <= 0:
            raise ValueError("target_fps must be > 0")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "DrillConfig":
        env = os.environ if environ is None else environ
        config = cls()

        delay = _env_float(env, FEEDBACK_DELAY_ENV)
        if delay is not None:
            if not math.isfinite(delay) or delay < 0:
                logger.warning("Ignoring %s=%r: must be finite and >= 0", FEEDBACK_DELAY_ENV, env[FEEDBACK_DELAY_ENV])
            else:
                config = replace(config, feedback_delay_s=delay)

        questions = _env_int(env, QUESTIONS_ENV)
        if questions is not None:
            config = replace(config, default_total_questions=questions)

        max_number = _env_int(env, MAX_NUMBER_ENV)
        if max_number is not None:
            config = replace(config, default_max_number=max_number)

        seed = _env_int(env, SEED_ENV)
        if seed is not None:
            config = replace(config, seed=seed)

        return config


def _env_int(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return None


def _env_float(env: Mapping[str, str], name: str) -> float | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw.strip())
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return None
