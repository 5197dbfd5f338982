"""
Commander synergy scoring.

Rates how thematically coherent a card pool is with its commander on a
0-100 scale, from direct name references and shared rules vocabulary.
"""

import math
from collections.abc import Sequence

from commanderforge.models.card import CardRecord

# Rules terms compared between the commander and each pool card
SYNERGY_TERMS = (
    "token",
    "sacrifice",
    "draw",
    "graveyard",
    "counter",
    "destroy",
    "exile",
    "create",
    "whenever",
    "when",
    "enters",
    "dies",
)

NAME_REFERENCE_POINTS = 5
MAX_SYNERGY = 100


def extract_terms(text: str) -> set[str]:
    """Synergy terms present in (lower-cased) rules text."""
    return {term for term in SYNERGY_TERMS if term in text}


def synergy_score(commander: CardRecord, pool: Sequence[CardRecord]) -> int:
    """
    Score a pool's synergy with its commander.

    Each card with rules text earns 5 points for naming the commander and
    1 point per shared term. The average is scaled by 10, rounded half up
    and clamped to [0, 100]. An empty pool scores 0.
    """
    if not pool:
        return 0

    commander_name = commander.name.lower()
    commander_terms = extract_terms(commander.oracle_text.lower())

    points = 0
    for card in pool:
        if not card.oracle_text:
            continue
        text = card.oracle_text.lower()
        if commander_name and commander_name in text:
            points += NAME_REFERENCE_POINTS
        points += len(commander_terms & extract_terms(text))

    scaled = math.floor(points / len(pool) * 10 + 0.5)
    return max(0, min(MAX_SYNERGY, scaled))
