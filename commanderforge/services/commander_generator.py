"""
Commander deck generation.

Runs the full pipeline for one commander: resolve the owned collection,
classify the commander, then rank, assemble, score and suggest per
archetype. Each call owns all of its intermediate state.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from commanderforge.config import settings
from commanderforge.models.card import CardRecord, OwnedCardRef
from commanderforge.models.deck import DeckOption
from commanderforge.models.formats import get_format
from commanderforge.services.card_provider import (
    CardDataProvider,
    ProviderError,
    ProviderUnavailableError,
)
from commanderforge.services.card_scorer import rank_candidates
from commanderforge.services.deck_assembler import assemble, average_cmc, land_target
from commanderforge.services.mana_base import ManaBaseBuilder
from commanderforge.services.strategy_classifier import classify
from commanderforge.services.suggestions import PriorityRanker, SuggestionFinder, rarity_priority
from commanderforge.services.synergy import synergy_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedCard:
    """An owned card matched to its provider record."""

    card: CardRecord
    quantity: int


async def resolve_collection(
    provider: CardDataProvider,
    owned: Sequence[OwnedCardRef],
    lookup_delay: float | None = None,
) -> list[ResolvedCard]:
    """
    Resolve owned references one at a time, pausing between lookups.

    Unknown cards and failed lookups are logged and skipped.

    Raises:
        ProviderUnavailableError: If every attempted lookup failed because
            the provider was unreachable
    """
    delay = settings.lookup_delay if lookup_delay is None else lookup_delay
    resolved: list[ResolvedCard] = []
    attempted = 0
    unavailable = 0
    last_error: ProviderUnavailableError | None = None

    for ref in owned:
        if ref.quantity <= 0:
            continue
        attempted += 1
        try:
            card = await provider.resolve_by_name(ref.name, ref.set_code)
        except ProviderUnavailableError as e:
            logger.error("Error loading %s: %s", ref.name, e)
            unavailable += 1
            last_error = e
            card = None
        except ProviderError as e:
            logger.error("Error loading %s: %s", ref.name, e)
            card = None

        if card is None:
            logger.debug("Skipping unresolved card %s (%s)", ref.name, ref.set_code or "any set")
        else:
            resolved.append(ResolvedCard(card, ref.quantity))
        await asyncio.sleep(delay)

    if attempted and unavailable == attempted and last_error is not None:
        raise last_error

    logger.info("Resolved %d of %d owned cards", len(resolved), attempted)
    return resolved


def merge_printings(resolved: Sequence[ResolvedCard]) -> list[ResolvedCard]:
    """
    Collapse printings of the same card into one entry.

    Quantities are summed onto the first printing seen, which keeps its
    collection position.
    """
    merged: dict[str, ResolvedCard] = {}
    for item in resolved:
        key = item.card.oracle_key
        existing = merged.get(key)
        if existing is None:
            merged[key] = item
        else:
            merged[key] = ResolvedCard(existing.card, existing.quantity + item.quantity)
    return list(merged.values())


async def find_commander_candidates(
    provider: CardDataProvider,
    owned: Sequence[OwnedCardRef],
    lookup_delay: float | None = None,
) -> list[CardRecord]:
    """Legendary creatures in the collection, in collection order."""
    resolved = await resolve_collection(provider, owned, lookup_delay)
    candidates: list[CardRecord] = []
    seen: set[str] = set()
    for item in resolved:
        if item.card.is_legendary_creature and item.card.oracle_key not in seen:
            candidates.append(item.card)
            seen.add(item.card.oracle_key)
    return candidates


def fits_color_identity(card: CardRecord, commander: CardRecord) -> bool:
    """Colorless cards always fit; others must stay inside the commander's colors."""
    return card.color_identity <= commander.color_identity


class CommanderDeckGenerator:
    """
    Generates deck options around a commander from an owned collection.

    Args:
        provider: Card data provider for resolution, lands and suggestions
        lookup_delay: Pause after each card lookup
        search_delay: Pause after each suggestion search
        stack_basics: Let the mana base repeat basic lands to reach its target
        ranker: Priority tiering for suggestions
    """

    def __init__(
        self,
        provider: CardDataProvider,
        lookup_delay: float | None = None,
        search_delay: float | None = None,
        stack_basics: bool = False,
        ranker: PriorityRanker = rarity_priority,
    ) -> None:
        self.provider = provider
        self.lookup_delay = settings.lookup_delay if lookup_delay is None else lookup_delay
        self.search_delay = settings.search_delay if search_delay is None else search_delay
        self.stack_basics = stack_basics
        self.ranker = ranker

    async def generate_deck_options(
        self,
        commander: CardRecord,
        owned: Sequence[OwnedCardRef],
        format_id: str = "commander",
    ) -> list[DeckOption]:
        """
        Build one deck option per viable archetype.

        Args:
            commander: The chosen commander
            owned: The user's collection
            format_id: Format for copy limits and legality

        Returns:
            Deck options in archetype priority order; empty when the
            collection is empty, the commander is not legendary, or no
            archetype yields a viable deck.

        Raises:
            KeyError: If the format is unknown
            ProviderUnavailableError: If the card data provider is down
        """
        deck_format = get_format(format_id)

        if not owned:
            logger.info("Empty collection, nothing to build for %s", commander.name)
            return []
        if "legendary" not in commander.type_line.lower():
            logger.info("%s is not legendary and cannot lead a deck", commander.name)
            return []

        resolved = await resolve_collection(self.provider, owned, self.lookup_delay)
        pool = [
            (item.card, item.quantity)
            for item in merge_printings(resolved)
            if fits_color_identity(item.card, commander)
        ]

        mana_base = ManaBaseBuilder(self.provider, self.lookup_delay, self.stack_basics)
        finder = SuggestionFinder(self.provider, self.ranker, self.search_delay)
        color_identity = tuple(commander.sorted_colors())

        options: list[DeckOption] = []
        for archetype in classify(commander):
            candidates = rank_candidates(pool, commander, archetype)
            entries = await assemble(commander, candidates, archetype, deck_format, mana_base)
            if entries is None:
                continue

            cards = [entry.card for entry in entries]
            suggestions = await finder.suggest(commander, cards, archetype, deck_format.id)

            spells = [e for e in entries[1:] if not e.card.is_land]
            avg = average_cmc(spells)
            lands = sum(e.quantity for e in entries if e.card.is_land)
            notes = (
                f"Average mana value: {avg:.2f}",
                f"Lands: {lands} (curve target {land_target(avg)})",
                f"Candidates scored for {archetype.name}: {len(candidates)}",
            )

            options.append(
                DeckOption(
                    commander=commander,
                    name=f"{commander.name} - {archetype.name}",
                    strategy=archetype.name,
                    description=archetype.description,
                    entries=tuple(entries),
                    suggestions=tuple(suggestions),
                    color_identity=color_identity,
                    synergy_score=synergy_score(commander, cards),
                    notes=notes,
                )
            )

        if not options:
            logger.info("No viable deck for %s from %d owned cards", commander.name, len(owned))
        return options
