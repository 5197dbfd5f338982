from commanderforge.models.card import WUBRG, CardRecord, OwnedCardRef
from commanderforge.models.collection import Collection, CollectionStore
from commanderforge.models.deck import Archetype, DeckCardEntry, DeckOption, Priority, Suggestion
from commanderforge.models.failure import (
    ApiResponse,
    CardServiceUnavailableError,
    FailureDetail,
    FailureKind,
    KnownError,
    NotEnoughCardsError,
    OutcomeType,
    create_success,
    finalize_response,
)
from commanderforge.models.formats import FORMATS, FormatDefinition, get_format

__all__ = [
    "FORMATS",
    "WUBRG",
    "ApiResponse",
    "Archetype",
    "CardRecord",
    "CardServiceUnavailableError",
    "Collection",
    "CollectionStore",
    "DeckCardEntry",
    "DeckOption",
    "FailureDetail",
    "FailureKind",
    "FormatDefinition",
    "KnownError",
    "NotEnoughCardsError",
    "OutcomeType",
    "OwnedCardRef",
    "Priority",
    "Suggestion",
    "create_success",
    "finalize_response",
    "get_format",
]
