"""Built-in agents."""

from unotable.agents.computer import ComputerPlayer
from unotable.agents.human_agent import HumanAgent
from unotable.agents.llm_agent import LLMMoveService
from unotable.agents.protocol import MoveDecision, MoveRequest, MoveService, MoveServiceError
from unotable.agents.strategy import Personality, choose_wild_color, fallback_decision

__all__ = [
    "ComputerPlayer",
    "HumanAgent",
    "LLMMoveService",
    "MoveDecision",
    "MoveRequest",
    "MoveService",
    "MoveServiceError",
    "Personality",
    "choose_wild_color",
    "fallback_decision",
]
