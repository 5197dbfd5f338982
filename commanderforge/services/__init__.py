"""
CommanderForge services.

Business logic for commander deck generation.
"""

from commanderforge.services.card_provider import (
    CardDataProvider,
    InMemoryCardProvider,
    ProviderError,
    ProviderUnavailableError,
    ScryfallProvider,
)
from commanderforge.services.card_scorer import ScoredCard, rank_candidates, score_card
from commanderforge.services.commander_generator import (
    CommanderDeckGenerator,
    ResolvedCard,
    find_commander_candidates,
    merge_printings,
    resolve_collection,
)
from commanderforge.services.deck_assembler import assemble, land_target
from commanderforge.services.deck_formatter import export_deck_list, format_deck_option
from commanderforge.services.mana_base import ManaBaseBuilder
from commanderforge.services.strategy_classifier import ARCHETYPE_RULES, ArchetypeRule, classify
from commanderforge.services.suggestions import PriorityRanker, SuggestionFinder, rarity_priority
from commanderforge.services.synergy import synergy_score

__all__ = [
    "ARCHETYPE_RULES",
    "ArchetypeRule",
    "CardDataProvider",
    "CommanderDeckGenerator",
    "InMemoryCardProvider",
    "ManaBaseBuilder",
    "PriorityRanker",
    "ProviderError",
    "ProviderUnavailableError",
    "ResolvedCard",
    "ScoredCard",
    "ScryfallProvider",
    "SuggestionFinder",
    "assemble",
    "classify",
    "export_deck_list",
    "find_commander_candidates",
    "format_deck_option",
    "land_target",
    "merge_printings",
    "rank_candidates",
    "rarity_priority",
    "resolve_collection",
    "score_card",
    "synergy_score",
]
