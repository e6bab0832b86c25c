"""Game orchestration."""

from unotable.orchestration.game_runner import GameRunner, MatchResult
from unotable.orchestration.session import GameSession

__all__ = ["GameRunner", "GameSession", "MatchResult"]
