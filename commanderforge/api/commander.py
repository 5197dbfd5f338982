"""
Commander deck generation endpoints.

Lists commander candidates in a stored collection and builds deck options
around a chosen commander. Generation outcomes use the ApiResponse envelope
so clients can tell an insufficient collection apart from a card service
outage.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from commanderforge.config import settings
from commanderforge.db import load_collection
from commanderforge.db.database import get_session
from commanderforge.models.card import CardRecord
from commanderforge.models.collection import Collection
from commanderforge.models.deck import DeckOption
from commanderforge.models.failure import (
    ApiResponse,
    CardServiceUnavailableError,
    FailureKind,
    KnownError,
    NotEnoughCardsError,
    create_success,
)
from commanderforge.models.formats import FORMATS, get_format
from commanderforge.services.card_provider import (
    CardDataProvider,
    ProviderError,
    ProviderUnavailableError,
    ScryfallProvider,
)
from commanderforge.services.commander_generator import (
    CommanderDeckGenerator,
    find_commander_candidates,
)
from commanderforge.services.deck_formatter import export_deck_list

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/commander", tags=["commander"])


async def get_card_provider() -> AsyncGenerator[CardDataProvider, None]:
    """Dependency that provides a Scryfall provider scoped to one request."""
    async with ScryfallProvider() as provider:
        yield provider


class CardResponse(BaseModel):
    """A card as shown in generation results."""

    name: str
    mana_cost: str = ""
    cmc: float = 0.0
    type_line: str = ""
    rarity: str = "common"
    color_identity: list[str] = Field(default_factory=list)


class DeckEntryResponse(BaseModel):
    """A deck card with its quantity."""

    card: CardResponse
    quantity: int


class SuggestionResponse(BaseModel):
    """A card worth acquiring for a deck."""

    card: CardResponse
    reason: str
    priority: str


class DeckOptionResponse(BaseModel):
    """One generated deck option."""

    name: str
    strategy: str
    description: str
    commander: CardResponse
    color_identity: list[str]
    synergy_score: int
    total_cards: int
    cards: list[DeckEntryResponse]
    suggestions: list[SuggestionResponse] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)
    deck_list: str = ""


class DeckOptionsPayload(BaseModel):
    """Successful generation result."""

    commander: str
    format: str
    options: list[DeckOptionResponse]


class GenerateDecksRequest(BaseModel):
    """Request model for deck generation."""

    commander: str = Field(..., min_length=1, examples=["Rhys the Redeemed"])
    set_code: str | None = None
    format: str = Field(default_factory=lambda: settings.default_format)
    stack_basics: bool = False


class CommanderCandidatesResponse(BaseModel):
    """Legendary creatures a user could build around."""

    user_id: str
    commanders: list[CardResponse]
    count: int


def _card_response(card: CardRecord) -> CardResponse:
    return CardResponse(
        name=card.name,
        mana_cost=card.mana_cost,
        cmc=card.cmc,
        type_line=card.type_line,
        rarity=card.rarity,
        color_identity=card.sorted_colors(),
    )


def option_to_response(option: DeckOption) -> DeckOptionResponse:
    """Convert a generated deck option to its API model."""
    return DeckOptionResponse(
        name=option.name,
        strategy=option.strategy,
        description=option.description,
        commander=_card_response(option.commander),
        color_identity=list(option.color_identity),
        synergy_score=option.synergy_score,
        total_cards=option.total_cards,
        cards=[
            DeckEntryResponse(card=_card_response(e.card), quantity=e.quantity)
            for e in option.entries
        ],
        suggestions=[
            SuggestionResponse(card=_card_response(s.card), reason=s.reason, priority=s.priority)
            for s in option.suggestions
        ],
        notes=list(option.notes),
        deck_list=export_deck_list(option),
    )


def _failure(error: KnownError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_response().model_dump(mode="json"),
    )


async def _require_collection(session: AsyncSession, user_id: str) -> Collection:
    collection = await load_collection(session, user_id)
    if collection is None or not collection.list_owned():
        raise KnownError(
            kind=FailureKind.NOT_FOUND,
            message=f"No collection found for user '{user_id}'.",
            suggestion="Import your collection first.",
            status_code=404,
        )
    return collection


@router.get(
    "/{user_id}/candidates",
    response_model=CommanderCandidatesResponse,
    responses={404: {"model": ApiResponse[Any]}, 503: {"model": ApiResponse[Any]}},
)
async def list_commander_candidates(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    provider: Annotated[CardDataProvider, Depends(get_card_provider)],
) -> CommanderCandidatesResponse | JSONResponse:
    """List the legendary creatures in a user's collection."""
    try:
        collection = await _require_collection(session, user_id)
        try:
            candidates = await find_commander_candidates(provider, collection.list_owned())
        except ProviderUnavailableError as e:
            raise CardServiceUnavailableError(str(e)) from e
    except KnownError as e:
        return _failure(e)

    return CommanderCandidatesResponse(
        user_id=user_id,
        commanders=[_card_response(card) for card in candidates],
        count=len(candidates),
    )


@router.post(
    "/{user_id}/decks",
    response_model=ApiResponse[DeckOptionsPayload],
    responses={
        400: {"model": ApiResponse[Any]},
        404: {"model": ApiResponse[Any]},
        422: {"model": ApiResponse[Any]},
        502: {"model": ApiResponse[Any]},
        503: {"model": ApiResponse[Any]},
    },
)
async def generate_commander_decks(
    user_id: str,
    request: GenerateDecksRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    provider: Annotated[CardDataProvider, Depends(get_card_provider)],
) -> ApiResponse[DeckOptionsPayload] | JSONResponse:
    """
    Generate deck options around a commander from a stored collection.

    Failure kinds:
        invalid_input: Unknown format or a commander that is not legendary
        not_found: No stored collection, or the commander name is unknown
        empty_result: The collection cannot support any archetype
        service_unavailable: The card data service is down
        external_api_error: The card data service rejected a request
    """
    try:
        if request.format.lower() not in FORMATS:
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message=f"Unknown format '{request.format}'.",
                suggestion=f"Use one of: {', '.join(sorted(FORMATS))}.",
            )
        deck_format = get_format(request.format)
        collection = await _require_collection(session, user_id)

        try:
            commander = await provider.resolve_by_name(request.commander, request.set_code)
            if commander is None:
                raise KnownError(
                    kind=FailureKind.NOT_FOUND,
                    message=f"Card '{request.commander}' was not found.",
                    suggestion="Check the spelling of the commander's name.",
                    status_code=404,
                )
            if "legendary" not in commander.type_line.lower():
                raise KnownError(
                    kind=FailureKind.INVALID_INPUT,
                    message=f"{commander.name} is not legendary and cannot be a commander.",
                )

            generator = CommanderDeckGenerator(provider, stack_basics=request.stack_basics)
            options = await generator.generate_deck_options(
                commander, collection.list_owned(), deck_format.id
            )
        except ProviderUnavailableError as e:
            logger.warning("Card service unavailable during generation: %s", e)
            raise CardServiceUnavailableError(str(e)) from e
        except ProviderError as e:
            raise KnownError(
                kind=FailureKind.EXTERNAL_API_ERROR,
                message="The card data service returned an error.",
                detail=str(e),
                status_code=502,
            ) from e

        if not options:
            raise NotEnoughCardsError(commander.name)
    except KnownError as e:
        return _failure(e)

    return create_success(
        DeckOptionsPayload(
            commander=commander.name,
            format=deck_format.id,
            options=[option_to_response(option) for option in options],
        )
    )
