"""
Card scoring against an archetype.

Every term is independent and additive, so the order they are applied in
never changes the result.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from commanderforge.models.card import CardRecord
from commanderforge.models.deck import Archetype

KEYWORD_POINTS = 5
COLOR_MATCH_POINTS = 2
FAMILY_POINTS = 4
LOW_CURVE_POINTS = 1
HIGH_CURVE_PENALTY = 1

LOW_CURVE_MAX_CMC = 3
HIGH_CURVE_MIN_CMC = 7

# Archetype name fragment -> term a card must carry to earn the family bonus
FAMILY_TERMS: dict[str, str] = {
    "token": "token",
    "artifact": "artifact",
    "enchantment": "enchantment",
}


@dataclass(frozen=True, slots=True)
class ScoredCard:
    """A collection card with its owned quantity and archetype score."""

    card: CardRecord
    quantity: int
    score: int


def is_eligible(card: CardRecord, commander: CardRecord) -> bool:
    """
    Check whether a card may join the commander's pool.

    The commander itself (in any printing) and other legendary creatures
    are excluded.
    """
    if card.oracle_key == commander.oracle_key:
        return False
    return not card.is_legendary_creature


def raw_score(card: CardRecord, commander: CardRecord, archetype: Archetype) -> int:
    """Unclamped archetype score; negative for expensive off-theme cards."""
    oracle = card.oracle_text.lower()
    type_line = card.type_line.lower()
    name = card.name.lower()
    score = 0

    for keyword in archetype.keywords:
        keyword = keyword.lower()
        if keyword in oracle or keyword in name:
            score += KEYWORD_POINTS

    if card.color_identity & commander.color_identity:
        score += COLOR_MATCH_POINTS

    archetype_name = archetype.name.lower()
    for fragment, term in FAMILY_TERMS.items():
        if fragment in archetype_name and (term in oracle or term in type_line):
            score += FAMILY_POINTS

    if card.cmc <= LOW_CURVE_MAX_CMC:
        score += LOW_CURVE_POINTS
    if card.cmc >= HIGH_CURVE_MIN_CMC:
        score -= HIGH_CURVE_PENALTY

    return score


def score_card(card: CardRecord, commander: CardRecord, archetype: Archetype) -> int:
    """Score a card's fit for an archetype (never negative)."""
    return max(raw_score(card, commander, archetype), 0)


def rank_candidates(
    cards: Iterable[tuple[CardRecord, int]],
    commander: CardRecord,
    archetype: Archetype,
) -> list[ScoredCard]:
    """
    Score and order collection cards for an archetype.

    Args:
        cards: (card, owned quantity) pairs in collection order
        commander: The deck's commander
        archetype: Strategy being built

    Returns:
        Eligible cards with a positive score, best first. Equal scores keep
        collection order.
    """
    scored = [
        ScoredCard(card, quantity, raw_score(card, commander, archetype))
        for card, quantity in cards
        if is_eligible(card, commander)
    ]
    kept = [item for item in scored if item.score > 0]
    kept.sort(key=lambda item: -item.score)
    return kept
