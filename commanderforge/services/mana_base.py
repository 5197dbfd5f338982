"""
Mana base builder.

Chooses lands and mana rocks for a commander deck from the card data
provider: a five-color fixing land, basics weighted by color demand,
on-color non-basic lands and a few mana rocks scaled to the curve.
"""

import asyncio
import logging

from commanderforge.config import settings
from commanderforge.models.card import WUBRG, CardRecord
from commanderforge.services.card_provider import CardDataProvider, ProviderError

logger = logging.getLogger(__name__)

COLOR_TO_BASIC_LAND = {
    "W": "Plains",
    "U": "Island",
    "B": "Swamp",
    "R": "Mountain",
    "G": "Forest",
}

# Tried in order; the first legal one is used
FIVE_COLOR_LANDS = ("Command Tower", "Exotic Orchard", "City of Brass", "Mana Confluence")

# Mana rocks in priority order
MANA_ROCKS = (
    "Sol Ring",
    "Arcane Signet",
    "Mind Stone",
    "Fellwar Stone",
    "Commander's Sphere",
    "Thought Vessel",
    "Worn Powerstone",
    "Thran Dynamo",
    "Gilded Lotus",
)

# Rocks accepted even if their text fails the "produces mana" check
MANA_ROCK_ALLOW_LIST = frozenset({"Sol Ring", "Arcane Signet", "Thought Vessel"})

# A color must supply more than this share of demand to get a dedicated basic
MIN_COLOR_SHARE = 0.10

MAX_NONBASIC_LANDS = 8


def mana_rock_count(avg_cmc: float) -> int:
    """Number of mana rocks for a curve: heavier curves want more."""
    if avg_cmc > 3.5:
        return 3
    if avg_cmc > 2.5:
        return 2
    return 1


def produces_mana(card: CardRecord) -> bool:
    """Heuristic: text mentions adding mana, or the card is allow-listed."""
    if card.name in MANA_ROCK_ALLOW_LIST:
        return True
    oracle = card.oracle_text.lower()
    return "add" in oracle or "mana" in oracle


def weighted_colors(color_identity: frozenset[str], color_weights: dict[str, float]) -> list[str]:
    """
    Identity colors that carry more than MIN_COLOR_SHARE of total demand.

    Ordered by weight descending; equal weights keep WUBRG order.
    """
    weights = {c: color_weights.get(c, 0.0) for c in WUBRG if c in color_identity}
    total = sum(weights.values())
    if total <= 0:
        return []
    ranked = sorted(weights, key=lambda c: -weights[c])
    return [c for c in ranked if weights[c] / total > MIN_COLOR_SHARE]


def apportion(slots: int, colors: list[str], color_weights: dict[str, float]) -> dict[str, int]:
    """Split slots across colors in proportion to weight (largest remainder)."""
    total = sum(color_weights.get(c, 0.0) for c in colors)
    if slots <= 0 or total <= 0:
        return {}

    exact = {c: slots * color_weights.get(c, 0.0) / total for c in colors}
    counts = {c: int(exact[c]) for c in colors}
    leftover = slots - sum(counts.values())
    for c in sorted(colors, key=lambda c: -(exact[c] - counts[c]))[:leftover]:
        counts[c] += 1
    return counts


class ManaBaseBuilder:
    """
    Builds the land and mana rock package for one deck.

    Args:
        provider: Card data provider used to resolve lands and rocks
        lookup_delay: Pause after each provider call
        stack_basics: When True, the final fill tops up basics with repeated
            copies instead of stopping at one per color
    """

    def __init__(
        self,
        provider: CardDataProvider,
        lookup_delay: float | None = None,
        stack_basics: bool = False,
    ) -> None:
        self.provider = provider
        self.lookup_delay = settings.lookup_delay if lookup_delay is None else lookup_delay
        self.stack_basics = stack_basics

    async def _resolve(self, name: str) -> CardRecord | None:
        try:
            return await self.provider.resolve_by_name(name)
        except ProviderError as e:
            logger.warning("Could not resolve %s for mana base: %s", name, e)
            return None
        finally:
            await asyncio.sleep(self.lookup_delay)

    async def _search(self, query: str) -> list[CardRecord]:
        try:
            return await self.provider.search(query)
        except ProviderError as e:
            logger.warning("Land search failed for %r: %s", query, e)
            return []
        finally:
            await asyncio.sleep(self.lookup_delay)

    async def build(
        self,
        color_identity: frozenset[str],
        target_count: int,
        format_id: str,
        color_weights: dict[str, float],
        avg_cmc: float,
        exclude: frozenset[str] = frozenset(),
    ) -> list[CardRecord]:
        """
        Choose up to `target_count` mana sources.

        Args:
            color_identity: Commander's color identity
            target_count: Number of mana sources wanted
            format_id: Format whose legality every pick must satisfy
            color_weights: Color -> demand from the non-land pool
            avg_cmc: Average mana value of the non-land pool
            exclude: Oracle keys already in the deck, never picked again

        Returns:
            Chosen cards; basics may repeat only when stack_basics is set.
        """
        chosen: list[CardRecord] = []
        chosen_keys: set[str] = set(exclude)
        basics: dict[str, CardRecord | None] = {}

        def room() -> bool:
            return len(chosen) < target_count

        def take(card: CardRecord) -> bool:
            if card.oracle_key in chosen_keys or not room():
                return False
            chosen.append(card)
            chosen_keys.add(card.oracle_key)
            return True

        async def basic_for(color: str) -> CardRecord | None:
            if color not in basics:
                basics[color] = await self._resolve(COLOR_TO_BASIC_LAND[color])
            return basics[color]

        colors = [c for c in WUBRG if c in color_identity]
        total_weight = sum(color_weights.get(c, 0.0) for c in colors)

        # 1. Five-color fixing land
        if len(colors) > 1:
            for name in FIVE_COLOR_LANDS:
                land = await self._resolve(name)
                if land and land.is_legal_in(format_id):
                    take(land)
                    break

        # 2. Basics
        if total_weight <= 0:
            fill_colors = colors
        else:
            fill_colors = weighted_colors(color_identity, color_weights)
        for color in fill_colors:
            if not room():
                break
            basic = await basic_for(color)
            if basic:
                take(basic)

        # 3. On-color non-basic lands
        if len(colors) >= 2 and room():
            query = f"t:land -t:basic id<={''.join(colors).lower()} o:add"
            added = 0
            for land in await self._search(query):
                if added >= MAX_NONBASIC_LANDS or not room():
                    break
                if not land.is_land or land.is_basic_land:
                    continue
                if not land.is_legal_in(format_id) or "add" not in land.oracle_text.lower():
                    continue
                if not land.color_identity <= color_identity:
                    continue
                if take(land):
                    added += 1

        # 4. Mana rocks
        wanted = mana_rock_count(avg_cmc)
        taken = 0
        for name in MANA_ROCKS:
            if taken >= wanted or not room():
                break
            rock = await self._resolve(name)
            if rock and rock.is_legal_in(format_id) and produces_mana(rock) and take(rock):
                taken += 1

        # 5. Weighted basic fill for the remainder
        if room() and total_weight > 0:
            fill_colors = weighted_colors(color_identity, color_weights)
            if self.stack_basics:
                for color, count in apportion(
                    target_count - len(chosen), fill_colors, color_weights
                ).items():
                    basic = await basic_for(color)
                    if basic:
                        chosen.extend([basic] * count)
            else:
                for color in fill_colors:
                    basic = await basic_for(color)
                    if basic:
                        take(basic)

        if len(chosen) < target_count:
            logger.info("Mana base has %d of %d target sources", len(chosen), target_count)

        return chosen[:target_count]
