from commanderforge.db.database import get_session, init_db
from commanderforge.db.operations import (
    collection_to_model,
    delete_collection,
    get_collection,
    get_or_create_collection,
    load_collection,
    replace_collection_cards,
)

__all__ = [
    "collection_to_model",
    "delete_collection",
    "get_collection",
    "get_or_create_collection",
    "get_session",
    "init_db",
    "load_collection",
    "replace_collection_cards",
]
