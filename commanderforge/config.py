from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "CommanderForge"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/commanderforge"

    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_timeout: float = 30.0
    user_agent: str = "CommanderForge/1.0"

    # Scryfall asks for 50-100ms between requests. Lookups and searches are
    # awaited one at a time with these pauses in between.
    lookup_delay: float = 0.05
    search_delay: float = 0.2

    # Bulk data for offline generation (see jobs/download_cards)
    scryfall_bulk_type: str = "oracle_cards"
    card_data_path: Path = Path("data/oracle-cards.json")

    # Upper bound on paginated search results followed per query
    max_search_pages: int = 1

    default_format: str = "commander"


settings = Settings()


# =============================================================================
# DECK CONSTRUCTION LIMITS
# =============================================================================

# Commander decks are 99 cards plus the commander
COMMANDER_DECK_SIZE = 100

# Non-land spells accepted into a commander pool (63 + commander + ~36 lands)
NONLAND_TARGET = 63

# Below this many total cards a generated deck is discarded
MIN_VIABLE_DECK_SIZE = 20

# Maximum suggestions returned per deck option
MAX_SUGGESTIONS = 10

# Maximum archetypes evaluated per commander
MAX_ARCHETYPES = 3
