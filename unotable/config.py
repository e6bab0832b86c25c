"""Settings read from the environment (and a .env file, loaded by the CLI)."""

import os
from dataclasses import dataclass

from unotable.agents.strategy import Personality
from unotable.engine.game_state import DEFAULT_TARGET_SCORE


@dataclass(frozen=True)
class Settings:
    target_score: int = DEFAULT_TARGET_SCORE
    personality: Personality = Personality.SASSY
    llm_provider: str = "openrouter"
    llm_model: str = "openai/gpt-4o-mini"
    decision_timeout: float = 10.0  # seconds before the computer falls back
    think_delay: float = 1.5  # pacing pause before the computer moves


def _env(name: str, default: str) -> str:
    value = os.environ.get(name, "").strip()
    return value or default


def load_settings() -> Settings:
    """Build Settings from UNOTABLE_* environment variables.

    Raises ValueError for values that do not parse.
    """
    defaults = Settings()
    target = int(_env("UNOTABLE_TARGET_SCORE", str(defaults.target_score)))
    if target <= 0:
        raise ValueError(f"UNOTABLE_TARGET_SCORE must be positive, got {target}")
    return Settings(
        target_score=target,
        personality=Personality.parse(_env("UNOTABLE_PERSONALITY", defaults.personality.value)),
        llm_provider=_env("UNOTABLE_LLM_PROVIDER", defaults.llm_provider),
        llm_model=_env("UNOTABLE_LLM_MODEL", defaults.llm_model),
        decision_timeout=float(_env("UNOTABLE_DECISION_TIMEOUT", str(defaults.decision_timeout))),
        think_delay=float(_env("UNOTABLE_THINK_DELAY", str(defaults.think_delay))),
    )
