"""
Acquisition suggestions.

Searches the card data provider for cards outside the deck that reference
the commander or the archetype, so users know what to pick up next.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence

from commanderforge.config import MAX_SUGGESTIONS, settings
from commanderforge.models.card import CardRecord
from commanderforge.models.deck import Archetype, Priority, Suggestion
from commanderforge.services.card_provider import CardDataProvider, ProviderError

logger = logging.getLogger(__name__)

# Ranks a suggested card; swap in price or popularity based rankers as needed
PriorityRanker = Callable[[CardRecord], Priority]

MAX_QUERIES = 3


def rarity_priority(card: CardRecord) -> Priority:
    """Mythic and rare cards are high priority, everything else medium."""
    return "high" if card.rarity in ("mythic", "rare") else "medium"


def build_queries(commander: CardRecord, archetype: Archetype) -> list[str]:
    """
    Search queries for a commander and archetype, in priority order.

    1. Cards naming the commander
    2. Cards with the archetype's primary keyword
    3. Cards in any of the commander's colors
    """
    queries: list[str] = []
    if commander.name:
        queries.append(f'oracle:"{commander.name}"')
    if archetype.primary_keyword:
        keyword = archetype.primary_keyword
        queries.append(f'oracle:"{keyword}"' if " " in keyword else f"oracle:{keyword}")
    colors = commander.sorted_colors()
    if colors:
        queries.append(" OR ".join(f"color={c.lower()}" for c in colors))
    return queries[:MAX_QUERIES]


class SuggestionFinder:
    """
    Finds cards worth acquiring for a generated deck.

    Args:
        provider: Card data provider to search
        ranker: Assigns a priority tier to each suggestion
        search_delay: Pause after each search
    """

    def __init__(
        self,
        provider: CardDataProvider,
        ranker: PriorityRanker = rarity_priority,
        search_delay: float | None = None,
    ) -> None:
        self.provider = provider
        self.ranker = ranker
        self.search_delay = settings.search_delay if search_delay is None else search_delay

    async def suggest(
        self,
        commander: CardRecord,
        pool: Sequence[CardRecord],
        archetype: Archetype,
        format_id: str,
    ) -> list[Suggestion]:
        """
        Suggest up to MAX_SUGGESTIONS cards for a deck.

        A failing search is logged and skipped; the others still run.
        Results are deduplicated by card (any printing) and keep discovery
        order. Cards already in the deck under another printing are skipped.
        """
        in_pool = {card.oracle_key for card in pool}
        commander_name = commander.name.lower()
        keywords = [k.lower() for k in archetype.keywords if k]

        suggestions: list[Suggestion] = []
        seen: set[str] = set()

        for query in build_queries(commander, archetype):
            try:
                results = await self.provider.search(query)
            except ProviderError as e:
                logger.warning("Suggestion search failed for %r: %s", query, e)
                continue
            finally:
                await asyncio.sleep(self.search_delay)

            for card in results:
                key = card.oracle_key
                if key in seen or key in in_pool or key == commander.oracle_key:
                    continue
                if not card.is_legal_in(format_id):
                    continue

                text = card.oracle_text.lower()
                mentions_commander = bool(commander_name) and commander_name in text
                if not mentions_commander and not any(k in text for k in keywords):
                    continue

                reason = (
                    f"Specifically synergizes with {commander.name}"
                    if mentions_commander
                    else f"Popular {archetype.name} card for this strategy"
                )
                suggestions.append(Suggestion(card, reason, self.ranker(card)))
                seen.add(key)

        return suggestions[:MAX_SUGGESTIONS]
