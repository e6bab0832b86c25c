"""LLM move service using the OpenAI library with OpenRouter, Groq, Ollama or Hugging Face."""

import json
import logging
import os
import re
import time
from typing import Any, Optional

from openai import AsyncOpenAI

from unotable.agents.protocol import MoveDecision, MoveRequest, MoveServiceError
from unotable.engine import COLORS, Color

logger = logging.getLogger(__name__)

OPENROUTER_BASE = "https://openrouter.ai/api/v1"
GROQ_BASE = "https://api.groq.com/openai/v1"
OLLAMA_BASE = "http://localhost:11434/v1"
HUGGINGFACE_BASE = "https://router.huggingface.co/v1"

BASE_INSTRUCTION = """You are playing a game of UNO against a human.
You will be provided with the current game state.
Your goal is to win by getting rid of all your cards.
You must output a JSON object representing your move.

Rules needed for decision:
1. You can play a card if it matches the active color or the top card's value/symbol.
2. WILD cards can always be played.
3. If you have no valid moves, you must draw.
4. If you play a WILD card, you must choose a "wildColor" (RED, BLUE, GREEN, YELLOW), usually the color you have the most of.

Commentary guidelines:
- If you have exactly 2 cards and play one, you MUST say "UNO!" in your comment.
- If you play a WILD_DRAW_FOUR or DRAW_TWO, gloat, tease or fake an apology depending on personality.
- If you play a SKIP or REVERSE, mention delaying the human.
- If you are drawing, express frustration or strategic patience.
- Keep comments short (max 1 sentence).

Output schema:
{"action": "play" | "draw", "cardIndex": number (-1 if drawing), "wildColor": "RED" | "BLUE" | "GREEN" | "YELLOW", "comment": string}
"""

PERSONALITY_PROMPTS = {
    "Friendly": (
        "You are a friendly, polite and encouraging UNO player. STRATEGY: play passively. "
        "Prioritize simple number cards. Avoid DRAW_TWO, WILD_DRAW_FOUR, SKIP and REVERSE "
        "unless you have no other choice."
    ),
    "Sassy": (
        "You are a witty, sassy player who likes to tease. STRATEGY: balanced play. "
        "Change the color to suit your hand when you can."
    ),
    "Ruthless": (
        "You are a ruthless, trash-talking UNO player. STRATEGY: aggressive. Always prioritize "
        "WILD_DRAW_FOUR, DRAW_TWO, SKIP and REVERSE to hurt the opponent."
    ),
}


def _format_request(request: MoveRequest) -> str:
    """Format the move request as text for the LLM."""
    lines = [
        "=== Active color ===",
        request.active_color.value,
        "",
        "=== Top discard card ===",
        request.top_card,
        "",
        f"=== Your hand ({len(request.hand)} cards) ===",
    ]
    lines.extend(f"{i}: {desc}" for i, desc in enumerate(request.hand))
    lines.extend([
        "",
        "=== Opponent hand ===",
        f"{request.opponent_hand_count} cards",
    ])
    return "\n".join(lines)


def _extract_json(response: str) -> dict[str, Any]:
    # Try to find a JSON-like object in the response, also with single quotes
    match = re.search(r"(\{.*\})", response, re.DOTALL)
    if not match:
        raise MoveServiceError("No JSON object in response")
    raw = match.group(1)
    for candidate in (raw, raw.replace("'", '"')):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    raise MoveServiceError("Malformed JSON in response")


def _parse_decision(response: str) -> MoveDecision:
    """Parse an LLM response into a MoveDecision, raising MoveServiceError."""
    data = _extract_json(response)

    action = str(data.get("action", "")).strip().lower()
    comment = data.get("comment")
    if action not in ("play", "draw"):
        raise MoveServiceError(f"Missing or unknown action: {data.get('action')!r}")
    if not isinstance(comment, str):
        raise MoveServiceError("Missing comment")
    if action == "draw":
        return MoveDecision.draw(comment)

    index = data.get("cardIndex")
    if isinstance(index, bool) or not isinstance(index, int):
        raise MoveServiceError(f"cardIndex must be an integer, got {index!r}")

    wild_color: Optional[Color] = None
    raw_color = data.get("wildColor")
    if raw_color:
        try:
            wild_color = Color(str(raw_color).upper())
        except ValueError:
            wild_color = None
        if wild_color not in COLORS:
            wild_color = None

    return MoveDecision(action="play", card_index=index, wild_color=wild_color, comment=comment)


class LLMMoveService:
    """Move service that asks an LLM to choose the computer's move."""

    def __init__(
        self,
        provider: str = "openrouter",
        model: str = "openai/gpt-4o-mini",
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        rate_limit: Optional[float] = None,
    ):
        if provider == "openrouter":
            base_url = OPENROUTER_BASE
            key = api_key or os.environ.get("OPENROUTER_API_KEY")
        elif provider == "groq":
            base_url = GROQ_BASE
            key = api_key or os.environ.get("GROQ_API_KEY")
        elif provider == "ollama":
            base_url = os.environ.get("OLLAMA_BASE_URL", OLLAMA_BASE)
            key = "ollama"
        elif provider == "huggingface":
            base_url = HUGGINGFACE_BASE
            key = api_key or os.environ.get("HUGGINGFACE_API_KEY")
        else:
            raise ValueError(f"Unknown provider: {provider}")

        if not key:
            raise ValueError(f"API key required for {provider}. Set {provider.upper()}_API_KEY or pass api_key.")

        self._client = AsyncOpenAI(api_key=key, base_url=base_url)
        self._model = model
        self._timeout = timeout
        self._provider = provider
        self._rate_limit = rate_limit  # Requests per minute
        self._request_history: list[float] = []

        logger.info("[%s] Initialized with provider=%s, base_url=%s, timeout=%ss", self.name, provider, base_url, timeout)

    @property
    def name(self) -> str:
        return f"llm-{self._model}"

    def _within_rate_limit(self) -> bool:
        if not self._rate_limit:
            return True
        now = time.time()
        # Filter history to last 60 seconds
        self._request_history = [t for t in self._request_history if now - t < 60.0]
        if len(self._request_history) >= self._rate_limit:
            return False
        self._request_history.append(now)
        return True

    async def choose_move(self, request: MoveRequest) -> MoveDecision:
        # Waiting out the limit would stall the turn; let the caller fall back
        if not self._within_rate_limit():
            raise MoveServiceError(f"Rate limit reached ({self._rate_limit} rpm)")

        personality = PERSONALITY_PROMPTS.get(request.personality, PERSONALITY_PROMPTS["Sassy"])
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {
                    "role": "system",
                    "content": f"{BASE_INSTRUCTION}\nPersonality mode: {request.personality}\n{personality}",
                },
                {
                    "role": "user",
                    "content": f"Current game state:\n{_format_request(request)}\n\nDecide your move.",
                },
            ],
            "timeout": self._timeout,
        }
        # Only pass response_format where the provider is known to support JSON mode
        if "gpt-4" in self._model or "gpt-3.5" in self._model or self._provider == "groq":
            kwargs["response_format"] = {"type": "json_object"}

        start_time = time.time()
        logger.debug("[%s] Sending request to %s", self.name, self._provider)
        resp = await self._client.chat.completions.create(**kwargs)
        logger.debug("[%s] Received response in %.2fs", self.name, time.time() - start_time)

        if not resp.choices:
            raise MoveServiceError("Empty response from LLM")
        content = resp.choices[0].message.content or ""
        if not content:
            raise MoveServiceError("Empty response from LLM")
        return _parse_decision(content)
