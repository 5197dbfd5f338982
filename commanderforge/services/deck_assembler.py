"""
Commander deck assembler.

Turns ranked collection cards into a deck: commander, up to 63 non-land
spells, then a mana base sized to the pool's curve and colored by its
mana symbols.
"""

import logging
import re
from collections.abc import Iterable

from commanderforge.config import COMMANDER_DECK_SIZE, MIN_VIABLE_DECK_SIZE, NONLAND_TARGET
from commanderforge.models.card import WUBRG, CardRecord
from commanderforge.models.deck import Archetype, DeckCardEntry
from commanderforge.models.formats import FormatDefinition
from commanderforge.services.card_scorer import ScoredCard
from commanderforge.services.mana_base import ManaBaseBuilder

logger = logging.getLogger(__name__)

# Matches each {..} symbol in a mana cost
MANA_SYMBOL = re.compile(r"\{([^}]+)\}")

LOW_CURVE_LANDS = 33
DEFAULT_LANDS = 36
HIGH_CURVE_LANDS = 38


def mana_curve(entries: Iterable[DeckCardEntry]) -> dict[int, int]:
    """Mana value -> number of cards (quantities counted)."""
    curve: dict[int, int] = {}
    for entry in entries:
        bucket = int(entry.card.cmc)
        curve[bucket] = curve.get(bucket, 0) + entry.quantity
    return dict(sorted(curve.items()))


def average_cmc(entries: Iterable[DeckCardEntry]) -> float:
    """Quantity-weighted average mana value; 0.0 for an empty pool."""
    total = 0.0
    count = 0
    for entry in entries:
        total += entry.card.cmc * entry.quantity
        count += entry.quantity
    return total / count if count else 0.0


def colored_symbols(mana_cost: str) -> list[list[str]]:
    """
    Colors named by each colored symbol of a mana cost.

    Hybrid symbols name both colors ({W/U} -> ["W", "U"]); Phyrexian symbols
    name their color ({G/P} -> ["G"]). Generic and colorless symbols are
    dropped.
    """
    symbols: list[list[str]] = []
    for symbol in MANA_SYMBOL.findall(mana_cost.upper()):
        colors = [part for part in symbol.split("/") if part in WUBRG]
        if colors:
            symbols.append(colors)
    return symbols


def color_weights(entries: Iterable[DeckCardEntry]) -> dict[str, float]:
    """
    Color demand of a non-land pool.

    Each colored symbol adds (cmc + 1) x quantity to its color. Cards with no
    colored symbols but a colored identity add half of that to every identity
    color.
    """
    weights: dict[str, float] = {}
    for entry in entries:
        card = entry.card
        weight = (card.cmc + 1) * entry.quantity
        symbols = colored_symbols(card.mana_cost)
        if symbols:
            for colors in symbols:
                for color in colors:
                    weights[color] = weights.get(color, 0.0) + weight
        else:
            for color in card.sorted_colors():
                weights[color] = weights.get(color, 0.0) + weight / 2
    return weights


def land_target(avg: float) -> int:
    """Lands wanted for a curve: 33 below 2.5, 38 above 4.0, else 36."""
    if avg < 2.5:
        return LOW_CURVE_LANDS
    if avg > 4.0:
        return HIGH_CURVE_LANDS
    return DEFAULT_LANDS


async def assemble(
    commander: CardRecord,
    candidates: list[ScoredCard],
    archetype: Archetype,
    deck_format: FormatDefinition,
    mana_base: ManaBaseBuilder,
) -> list[DeckCardEntry] | None:
    """
    Assemble a deck around a commander.

    Args:
        commander: The deck's commander
        candidates: Ranked collection cards (see rank_candidates)
        archetype: Strategy the candidates were ranked for
        deck_format: Format supplying the copy limit and legality
        mana_base: Builder for lands and mana rocks

    Returns:
        Deck entries with the commander first, or None if fewer than
        MIN_VIABLE_DECK_SIZE cards (commander plus spells) come from the
        collection. The mana base is only requested for viable pools.
    """
    entries: list[DeckCardEntry] = [DeckCardEntry(commander, 1)]
    by_key: dict[str, DeckCardEntry] = {commander.oracle_key: entries[0]}

    spells: list[DeckCardEntry] = []
    spell_count = 0
    for candidate in candidates:
        if spell_count >= NONLAND_TARGET:
            break
        card = candidate.card
        if card.is_land or card.oracle_key in by_key:
            continue
        quantity = min(candidate.quantity, deck_format.max_copies, NONLAND_TARGET - spell_count)
        if quantity <= 0:
            continue
        entry = DeckCardEntry(card, quantity)
        entries.append(entry)
        spells.append(entry)
        by_key[card.oracle_key] = entry
        spell_count += quantity

    pool_size = 1 + spell_count
    if pool_size < MIN_VIABLE_DECK_SIZE:
        logger.info(
            "%s / %s: only %d cards assembled from the collection, deck discarded",
            commander.name,
            archetype.name,
            pool_size,
        )
        return None

    avg = average_cmc(spells)
    weights = color_weights(spells)
    lands_wanted = min(land_target(avg), COMMANDER_DECK_SIZE - pool_size)

    logger.debug(
        "%s / %s: %d spells, avg cmc %.2f, curve %s, target %d lands",
        commander.name,
        archetype.name,
        spell_count,
        avg,
        mana_curve(spells),
        lands_wanted,
    )

    lands = await mana_base.build(
        commander.color_identity,
        lands_wanted,
        deck_format.id,
        weights,
        avg,
        exclude=frozenset(by_key),
    )
    for land in lands:
        existing = by_key.get(land.oracle_key)
        if existing is None:
            entry = DeckCardEntry(land, 1)
            entries.append(entry)
            by_key[land.oracle_key] = entry
        elif mana_base.stack_basics and land.is_basic_land:
            existing.quantity += 1

    return entries
