from dataclasses import dataclass
from typing import Literal

from commanderforge.models.card import CardRecord

Priority = Literal["high", "medium", "low"]


@dataclass(frozen=True, slots=True)
class Archetype:
    """
    A strategy inferred from a commander's rules text.

    Attributes:
        name: Display name (e.g., "Token Swarm")
        description: One-line summary shown to the user
        keywords: Lower-case text fragments used to score cards
    """

    name: str
    description: str
    keywords: tuple[str, ...] = ()

    @property
    def primary_keyword(self) -> str | None:
        return self.keywords[0] if self.keywords else None


@dataclass(slots=True)
class DeckCardEntry:
    """A card in a deck with its quantity (always >= 1)."""

    card: CardRecord
    quantity: int = 1


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A card outside the collection that would strengthen a deck."""

    card: CardRecord
    reason: str
    priority: Priority


@dataclass(frozen=True)
class DeckOption:
    """
    One generated deck built around a commander for a single archetype.

    Entries start with the commander; suggestions are ordered by discovery.
    """

    commander: CardRecord
    name: str
    strategy: str
    description: str
    entries: tuple[DeckCardEntry, ...]
    suggestions: tuple[Suggestion, ...] = ()
    color_identity: tuple[str, ...] = ()
    synergy_score: int = 0
    notes: tuple[str, ...] = ()

    @property
    def total_cards(self) -> int:
        """Sum of quantities, commander included."""
        return sum(entry.quantity for entry in self.entries)

    def quantities(self) -> dict[str, int]:
        """Card name -> quantity."""
        return {entry.card.name: entry.quantity for entry in self.entries}
