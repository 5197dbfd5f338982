"""
Card data providers.

Resolves card names to CardRecords and runs catalog searches. The Scryfall
provider talks to the public API; the in-memory provider serves a fixed card
list (a bulk data file or test fixtures) through the same interface.

Scryfall API: https://scryfall.com/docs/api
"""

import asyncio
import json
import logging
import re
from pathlib import Path
from types import TracebackType
from typing import Any, Protocol

import httpx

from commanderforge.config import settings
from commanderforge.models.card import CardRecord

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when a card data lookup fails."""

    pass


class ProviderUnavailableError(ProviderError):
    """Raised when the card data service cannot be reached or is overloaded."""

    pass


class CardDataProvider(Protocol):
    """Capability needed by the deck generator: resolve by name and search."""

    async def resolve_by_name(self, name: str, set_code: str | None = None) -> CardRecord | None:
        """Resolve an exact card name, optionally pinned to a set."""
        ...

    async def search(self, query: str) -> list[CardRecord]:
        """Run a Scryfall-syntax search query."""
        ...


class ScryfallProvider:
    """
    Card data provider backed by the Scryfall REST API.

    Named lookups are memoized for the lifetime of the instance, so a provider
    should be created per generation request. Usable as an async context
    manager, which closes the underlying client if the provider created it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        max_pages: int | None = None,
        page_delay: float | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.scryfall_timeout,
            headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        )
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self.max_pages = max_pages if max_pages is not None else settings.max_search_pages
        self.page_delay = page_delay if page_delay is not None else settings.search_delay
        self._named_cache: dict[str, CardRecord | None] = {}

    async def __aenter__(self) -> "ScryfallProvider":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response | None:
        """
        GET a Scryfall endpoint.

        Returns:
            The response, or None for 404 (no such card / no search matches)

        Raises:
            ProviderUnavailableError: Network failure, rate limiting or 5xx
            ProviderError: Any other HTTP error (e.g., malformed query)
        """
        try:
            response = await self._client.get(url, params=params)
        except httpx.RequestError as e:
            raise ProviderUnavailableError(f"Scryfall request failed: {e}") from e

        if response.status_code == 404:
            return None
        if response.status_code == 429 or response.status_code >= 500:
            raise ProviderUnavailableError(f"Scryfall unavailable: HTTP {response.status_code}")

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"Scryfall request failed: HTTP {e.response.status_code}") from e
        return response

    async def resolve_by_name(self, name: str, set_code: str | None = None) -> CardRecord | None:
        cache_key = f"{name}:{set_code}" if set_code else name
        if cache_key in self._named_cache:
            return self._named_cache[cache_key]

        params = {"exact": name}
        if set_code:
            params["set"] = set_code.lower()

        response = await self._get(f"{self.base_url}/cards/named", params)
        card = CardRecord.from_scryfall(response.json()) if response is not None else None
        self._named_cache[cache_key] = card
        return card

    async def search(self, query: str) -> list[CardRecord]:
        url = f"{self.base_url}/cards/search"
        params: dict[str, str] | None = {"q": query, "unique": "cards", "order": "released"}
        cards: list[CardRecord] = []

        for page in range(max(self.max_pages, 1)):
            if page > 0:
                await asyncio.sleep(self.page_delay)

            response = await self._get(url, params)
            if response is None:
                break

            data = response.json()
            cards.extend(CardRecord.from_scryfall(item) for item in data.get("data", []))

            if not data.get("has_more"):
                break
            url = data.get("next_page", "")
            params = None  # next_page URL carries the query

        return cards


# Query terms understood by the in-memory provider:
#   oracle:"text" / o:text    substring of oracle text
#   t:type / -t:type          substring of type line (negated with "-")
#   color=x / c=x             color identity is exactly x
#   id:xy / id<=xy            color identity within xy
#   legal:format              legal in format
#   bare words                substring of name
_TERM_PATTERN = re.compile(r'(-?)(?:(\w+)(:|<=|=))?("[^"]*"|\S+)')


class InMemoryCardProvider:
    """
    Card data provider over a fixed list of records.

    Used offline with a Scryfall bulk data file and as the test double for
    ScryfallProvider. Supports the subset of the search syntax the deck
    generator emits.
    """

    def __init__(self, cards: list[CardRecord] | None = None) -> None:
        self._cards: list[CardRecord] = list(cards or [])
        self._by_name: dict[str, CardRecord] = {}
        for card in self._cards:
            self._by_name.setdefault(card.name.lower(), card)
        self.lookups: list[str] = []
        self.queries: list[str] = []

    @classmethod
    def from_bulk_file(cls, path: Path) -> "InMemoryCardProvider":
        """
        Load a Scryfall bulk data file (e.g., oracle-cards.json).

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        if not path.exists():
            raise FileNotFoundError(f"Card data not found at {path}")

        with open(path, encoding="utf-8") as f:
            raw: list[dict[str, Any]] = json.load(f)

        cards = [CardRecord.from_scryfall(item) for item in raw if item.get("name")]
        logger.info("Loaded %d cards from %s", len(cards), path)
        return cls(cards)

    def add(self, card: CardRecord) -> None:
        self._cards.append(card)
        self._by_name.setdefault(card.name.lower(), card)

    async def resolve_by_name(self, name: str, set_code: str | None = None) -> CardRecord | None:
        self.lookups.append(name)
        return self._by_name.get(name.lower())

    async def search(self, query: str) -> list[CardRecord]:
        self.queries.append(query)
        alternatives = [_parse_terms(part) for part in re.split(r"\s+OR\s+", query.strip())]
        return [
            card
            for card in self._cards
            if any(all(_term_matches(card, *term) for term in terms) for terms in alternatives)
        ]


def _parse_terms(text: str) -> list[tuple[bool, str, str, str]]:
    """Split one conjunction into (negated, key, operator, value) terms."""
    terms: list[tuple[bool, str, str, str]] = []
    for match in _TERM_PATTERN.finditer(text):
        negated, key, operator, value = match.groups()
        terms.append((bool(negated), (key or "").lower(), operator or "", value.strip('"').lower()))
    return terms


def _term_matches(card: CardRecord, negated: bool, key: str, operator: str, value: str) -> bool:
    if key in ("oracle", "o"):
        result = value in card.oracle_text.lower()
    elif key in ("t", "type"):
        result = value in card.type_line.lower()
    elif key in ("color", "c"):
        result = card.color_identity == frozenset(value.upper())
    elif key in ("id", "identity"):
        result = card.color_identity <= frozenset(value.upper())
    elif key == "legal":
        result = card.is_legal_in(value)
    else:
        result = value in card.name.lower()
    return result != negated
