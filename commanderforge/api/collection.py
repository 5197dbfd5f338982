"""
Collection API endpoints.

Stores the owned-card list deck generation reads from.
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from commanderforge.db import delete_collection, load_collection, replace_collection_cards
from commanderforge.db.database import get_session
from commanderforge.models.card import OwnedCardRef
from commanderforge.models.collection import Collection
from commanderforge.parsers.collection_import import parse_collection_text

router = APIRouter(prefix="/collection", tags=["collection"])


class OwnedCardModel(BaseModel):
    """One owned card (optionally pinned to a printing)."""

    name: str = Field(..., min_length=1)
    set_code: str | None = None
    quantity: int = Field(default=1, ge=0)


class CollectionResponse(BaseModel):
    """Response model for collection data."""

    user_id: str
    cards: list[OwnedCardModel] = Field(default_factory=list)
    total_cards: int = 0
    unique_cards: int = 0


class CollectionUpdateRequest(BaseModel):
    """Request model for replacing a collection."""

    cards: list[OwnedCardModel] = Field(
        ...,
        examples=[[{"name": "Sol Ring", "quantity": 1}, {"name": "Forest", "quantity": 30}]],
    )


class CollectionImportRequest(BaseModel):
    """Request model for importing a collection from text."""

    text: str = Field(
        ...,
        description="Raw collection text (simple list or CSV)",
        examples=["1 Sol Ring\n1 Llanowar Elves (M19)"],
    )
    format: Literal["auto", "simple", "csv"] = "auto"


def _to_response(user_id: str, collection: Collection) -> CollectionResponse:
    return CollectionResponse(
        user_id=user_id,
        cards=[
            OwnedCardModel(name=e.name, set_code=e.set_code, quantity=e.quantity)
            for e in collection.entries
        ],
        total_cards=collection.total_cards(),
        unique_cards=collection.unique_cards(),
    )


async def _replace(
    session: AsyncSession, user_id: str, cards: list[OwnedCardRef]
) -> CollectionResponse:
    await replace_collection_cards(session, user_id, cards)
    collection = await load_collection(session, user_id)
    return _to_response(user_id, collection or Collection())


@router.get("/{user_id}", response_model=CollectionResponse)
async def get_user_collection(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """Get a user's collection. Returns 404 if none exists."""
    collection = await load_collection(session, user_id)
    if collection is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No collection for user '{user_id}'",
        )
    return _to_response(user_id, collection)


@router.put("/{user_id}", response_model=CollectionResponse)
async def update_user_collection(
    user_id: str,
    request: CollectionUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """Replace a user's collection with the given cards."""
    cards = [OwnedCardRef(c.name, c.set_code, c.quantity) for c in request.cards]
    return await _replace(session, user_id, cards)


@router.post("/{user_id}/import", response_model=CollectionResponse)
async def import_user_collection(
    user_id: str,
    request: CollectionImportRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """Replace a user's collection with cards parsed from export text."""
    cards = parse_collection_text(request.text, request.format)
    if not cards:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No cards could be parsed from the provided text",
        )
    return await _replace(session, user_id, cards)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_collection(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> None:
    """Delete a user's collection. Returns 404 if none exists."""
    deleted = await delete_collection(session, user_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No collection for user '{user_id}'",
        )
