"""Human agent - reads actions from terminal."""

from unotable.engine import Action, PlayerView
from unotable.engine.rules import DrawCard


class HumanAgent:
    """Agent that prompts the human for input via terminal."""

    def __init__(self, name: str = "human"):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def get_action(
        self,
        player_view: PlayerView,
        legal_actions: list[Action],
        player_index: int,
    ) -> Action | None:
        if not legal_actions:
            return None

        cards = {c.id: c for c in player_view.my_hand}
        print(f"\n--- {self._name}'s turn ---")
        if player_view.commentary:
            print(">", player_view.commentary)
        print("Your hand:", " ".join(str(c) for c in player_view.my_hand))
        print("Top discard:", player_view.top_discard, f"(active color: {player_view.active_color.value})")
        print("Opponents:", ", ".join(f"{n} cards" for n in player_view.opponent_card_counts()))
        print("\nLegal actions:")
        for i, a in enumerate(legal_actions):
            if isinstance(a, DrawCard):
                print(f"  {i}: DRAW")
            else:
                extra = f" (choose color: {a.chosen_color.value})" if a.chosen_color else ""
                print(f"  {i}: PLAY {cards[a.card_id]}{extra}")

        while True:
            try:
                raw = input("Enter number: ").strip()
                idx = int(raw)
                if 0 <= idx < len(legal_actions):
                    return legal_actions[idx]
            except ValueError:
                pass
            except EOFError:
                return None
            print("Invalid. Try again.")
