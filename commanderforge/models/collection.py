from dataclasses import dataclass, field
from typing import Protocol

from commanderforge.models.card import OwnedCardRef


class CollectionStore(Protocol):
    """Read-only source of owned card references."""

    def list_owned(self) -> list[OwnedCardRef]: ...


@dataclass
class Collection:
    """
    A user's card collection held in memory.

    Entries keep their import order, which decides tie-breaks when cards
    score equally during deck generation.
    """

    entries: list[OwnedCardRef] = field(default_factory=list)

    def list_owned(self) -> list[OwnedCardRef]:
        """Owned entries with a positive quantity, in insertion order."""
        return [entry for entry in self.entries if entry.quantity > 0]

    def total_cards(self) -> int:
        """Total number of cards in collection."""
        return sum(e.quantity for e in self.entries)

    def unique_cards(self) -> int:
        """Number of unique card names in collection."""
        return len({e.name for e in self.entries})
