"""
Format definitions.

Deck size and copy limits per supported format. The commander family
(commander, brawl) allows a single copy of each non-basic card.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FormatDefinition:
    """
    A constructed format.

    Attributes:
        id: Format key as used in Scryfall legalities (e.g., "commander")
        name: Display name
        deck_size: Total cards in a finished deck
        max_copies: Copies allowed per non-basic card
    """

    id: str
    name: str
    deck_size: int
    max_copies: int


FORMATS: dict[str, FormatDefinition] = {
    fmt.id: fmt
    for fmt in (
        FormatDefinition("commander", "Commander", 100, 1),
        FormatDefinition("brawl", "Brawl", 60, 1),
        FormatDefinition("vintage", "Vintage", 60, 4),
        FormatDefinition("legacy", "Legacy", 60, 4),
        FormatDefinition("modern", "Modern", 60, 4),
        FormatDefinition("standard", "Standard", 60, 4),
    )
}


def get_format(format_id: str) -> FormatDefinition:
    """
    Look up a format by id (case-insensitive).

    Raises:
        KeyError: If the format is not defined
    """
    key = format_id.lower()
    if key not in FORMATS:
        raise KeyError(f"Unknown format: {format_id}. Must be one of {sorted(FORMATS)}")
    return FORMATS[key]
