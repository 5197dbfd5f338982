from commanderforge.api.collection import router as collection_router
from commanderforge.api.commander import router as commander_router
from commanderforge.api.health import router as health_router

__all__ = ["collection_router", "commander_router", "health_router"]
