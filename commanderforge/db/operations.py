"""
Database CRUD operations.

Provides async functions for creating, reading, replacing and deleting
user collections.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from commanderforge.models.card import OwnedCardRef
from commanderforge.models.collection import Collection
from commanderforge.models.db import CardOwnershipDB, UserCollectionDB


async def get_collection(session: AsyncSession, user_id: str) -> UserCollectionDB | None:
    """
    Get a user's collection by user_id.

    Returns None if no collection exists for this user.
    """
    result = await session.execute(
        select(UserCollectionDB)
        .where(UserCollectionDB.user_id == user_id)
        .options(selectinload(UserCollectionDB.cards))
    )
    return result.scalar_one_or_none()


async def get_or_create_collection(
    session: AsyncSession, user_id: str
) -> tuple[UserCollectionDB, bool]:
    """
    Get existing collection or create new one.

    Returns:
        Tuple of (collection, created) where created is True if new.
    """
    collection = await get_collection(session, user_id)
    if collection:
        return collection, False

    collection = UserCollectionDB(user_id=user_id)
    session.add(collection)
    await session.flush()
    return collection, True


async def replace_collection_cards(
    session: AsyncSession,
    user_id: str,
    cards: list[OwnedCardRef],
) -> UserCollectionDB:
    """
    Replace a user's collection with new card data.

    Deletes existing ownership records and stores the new ones in order.
    Entries with a non-positive quantity are dropped; repeated name and set
    pairs are stored once with their quantities summed.
    """
    await get_or_create_collection(session, user_id)

    # Re-fetch with eager loading to avoid async lazy load issues
    loaded = await get_collection(session, user_id)
    if not loaded:
        msg = f"Collection for user {user_id} not found after creation"
        raise RuntimeError(msg)
    collection = loaded

    await session.execute(
        delete(CardOwnershipDB).where(CardOwnershipDB.collection_id == collection.id)
    )
    collection.cards.clear()

    merged: dict[tuple[str, str | None], int] = {}
    for ref in cards:
        if ref.quantity > 0:
            key = (ref.name, ref.set_code)
            merged[key] = merged.get(key, 0) + ref.quantity

    for (name, set_code), quantity in merged.items():
        collection.cards.append(
            CardOwnershipDB(card_name=name, set_code=set_code, quantity=quantity)
        )

    await session.flush()
    return collection


def collection_to_model(collection: UserCollectionDB) -> Collection:
    """Convert a database collection to a domain model."""
    return Collection(
        entries=[
            OwnedCardRef(card.card_name, card.set_code, card.quantity) for card in collection.cards
        ]
    )


async def load_collection(session: AsyncSession, user_id: str) -> Collection | None:
    """Load a user's collection as a read-only store, or None if absent."""
    collection = await get_collection(session, user_id)
    if collection is None:
        return None
    return collection_to_model(collection)


async def delete_collection(session: AsyncSession, user_id: str) -> bool:
    """
    Delete a user's collection.

    Returns True if deleted, False if not found.
    """
    collection = await get_collection(session, user_id)
    if not collection:
        return False

    await session.delete(collection)
    return True
