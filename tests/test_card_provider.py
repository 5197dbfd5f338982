"""Tests for card data providers."""

import json
from pathlib import Path

import httpx
import pytest
import respx

from commanderforge.models.card import CardRecord
from commanderforge.services.card_provider import (
    InMemoryCardProvider,
    ProviderError,
    ProviderUnavailableError,
    ScryfallProvider,
)

NAMED_URL = "https://api.scryfall.com/cards/named"
SEARCH_URL = "https://api.scryfall.com/cards/search"


@pytest.fixture
def sol_ring_json() -> dict:
    """Sample Scryfall card object."""
    return {
        "object": "card",
        "id": "4cbc6901-6a4a-4d0a-83ea-7eefa3b35021",
        "name": "Sol Ring",
        "mana_cost": "{1}",
        "cmc": 1.0,
        "type_line": "Artifact",
        "oracle_text": "{T}: Add {C}{C}.",
        "color_identity": [],
        "rarity": "uncommon",
        "legalities": {"commander": "legal", "vintage": "restricted", "legacy": "banned"},
    }


@pytest.fixture
def search_page() -> dict:
    return {
        "object": "list",
        "has_more": True,
        "next_page": "https://api.scryfall.com/cards/search?page=2&q=o%3Atoken",
        "data": [
            {"id": "a", "name": "Raise the Alarm", "type_line": "Instant", "cmc": 2.0},
        ],
    }


@pytest.fixture
def last_page() -> dict:
    return {
        "object": "list",
        "has_more": False,
        "data": [
            {"id": "b", "name": "Secure the Wastes", "type_line": "Instant", "cmc": 1.0},
        ],
    }


class TestScryfallResolve:
    @pytest.mark.asyncio
    @respx.mock
    async def test_resolves_card(self, sol_ring_json: dict) -> None:
        route = respx.get(NAMED_URL).mock(return_value=httpx.Response(200, json=sol_ring_json))

        async with ScryfallProvider() as provider:
            card = await provider.resolve_by_name("Sol Ring", "C21")

        assert card is not None
        assert card.name == "Sol Ring"
        assert card.color_identity == frozenset()
        assert route.calls.last.request.url.params["exact"] == "Sol Ring"
        assert route.calls.last.request.url.params["set"] == "c21"

    @pytest.mark.asyncio
    @respx.mock
    async def test_unknown_card_is_none(self) -> None:
        respx.get(NAMED_URL).mock(return_value=httpx.Response(404, json={"object": "error"}))

        async with ScryfallProvider() as provider:
            assert await provider.resolve_by_name("Not A Card") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_lookups_are_memoized(self, sol_ring_json: dict) -> None:
        route = respx.get(NAMED_URL).mock(return_value=httpx.Response(200, json=sol_ring_json))

        async with ScryfallProvider() as provider:
            await provider.resolve_by_name("Sol Ring")
            await provider.resolve_by_name("Sol Ring")

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    @pytest.mark.parametrize("status", [429, 500, 503])
    async def test_overload_and_server_errors_are_unavailable(self, status: int) -> None:
        respx.get(NAMED_URL).mock(return_value=httpx.Response(status))

        async with ScryfallProvider() as provider:
            with pytest.raises(ProviderUnavailableError):
                await provider.resolve_by_name("Sol Ring")

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_is_unavailable(self) -> None:
        respx.get(NAMED_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        async with ScryfallProvider() as provider:
            with pytest.raises(ProviderUnavailableError, match="request failed"):
                await provider.resolve_by_name("Sol Ring")

    @pytest.mark.asyncio
    @respx.mock
    async def test_client_error_is_plain_provider_error(self) -> None:
        respx.get(NAMED_URL).mock(return_value=httpx.Response(400))

        async with ScryfallProvider() as provider:
            with pytest.raises(ProviderError) as exc_info:
                await provider.resolve_by_name("Sol Ring")

        assert not isinstance(exc_info.value, ProviderUnavailableError)

    @pytest.mark.asyncio
    async def test_borrowed_client_stays_open(self) -> None:
        client = httpx.AsyncClient()

        async with ScryfallProvider(client=client):
            pass

        assert not client.is_closed
        await client.aclose()


class TestScryfallSearch:
    @pytest.mark.asyncio
    @respx.mock
    async def test_single_page_by_default(self, search_page: dict) -> None:
        route = respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=search_page))

        async with ScryfallProvider() as provider:
            cards = await provider.search("o:token")

        assert [card.name for card in cards] == ["Raise the Alarm"]
        assert route.call_count == 1
        params = route.calls.last.request.url.params
        assert params["q"] == "o:token"
        assert params["unique"] == "cards"
        assert params["order"] == "released"

    @pytest.mark.asyncio
    @respx.mock
    async def test_follows_next_page(self, search_page: dict, last_page: dict) -> None:
        route = respx.get(SEARCH_URL).mock(
            side_effect=[
                httpx.Response(200, json=search_page),
                httpx.Response(200, json=last_page),
            ]
        )

        async with ScryfallProvider(max_pages=5, page_delay=0) as provider:
            cards = await provider.search("o:token")

        assert [card.name for card in cards] == ["Raise the Alarm", "Secure the Wastes"]
        assert route.call_count == 2
        assert route.calls.last.request.url.params["page"] == "2"

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_matches_is_empty(self) -> None:
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(404, json={"object": "error"}))

        async with ScryfallProvider() as provider:
            assert await provider.search("o:zzzz") == []


class TestCardRecordFromScryfall:
    def test_double_faced_card(self) -> None:
        data = {
            "id": "dfc",
            "name": "Delver of Secrets // Insectile Aberration",
            "cmc": 1.0,
            "type_line": "Creature — Human Wizard // Creature — Human Insect",
            "color_identity": ["U"],
            "card_faces": [
                {"mana_cost": "{U}", "oracle_text": "Look at the top card of your library."},
                {"mana_cost": "", "oracle_text": "Flying"},
            ],
        }

        card = CardRecord.from_scryfall(data)

        assert card.mana_cost == "{U}"
        assert card.oracle_text == "Look at the top card of your library.\nFlying"

    def test_legality(self, sol_ring_json: dict) -> None:
        card = CardRecord.from_scryfall(sol_ring_json)

        assert card.is_legal_in("commander")
        assert card.is_legal_in("brawl")  # missing entry counts as legal
        assert not card.is_legal_in("vintage")
        assert not card.is_legal_in("legacy")


class TestInMemoryCardProvider:
    @pytest.fixture
    def cards(self) -> list[CardRecord]:
        return [
            CardRecord(
                "1",
                "Raise the Alarm",
                "{1}{W}",
                2.0,
                frozenset("W"),
                "Instant",
                "Create two 1/1 white Soldier creature tokens.",
            ),
            CardRecord(
                "2",
                "Selesnya Sanctuary",
                type_line="Land",
                oracle_text="{T}: Add {G}{W}.",
                color_identity=frozenset("GW"),
            ),
            CardRecord(
                "3",
                "Forest",
                type_line="Basic Land — Forest",
                oracle_text="({T}: Add {G}.)",
                color_identity=frozenset("G"),
            ),
            CardRecord(
                "4",
                "Hordeling Outburst",
                "{1}{R}{R}",
                3.0,
                frozenset("R"),
                "Instant",
                "Create three 1/1 red Goblin creature tokens.",
                legalities={"commander": "not_legal"},
            ),
        ]

    async def test_resolve_is_case_insensitive(self, cards: list[CardRecord]) -> None:
        provider = InMemoryCardProvider(cards)

        card = await provider.resolve_by_name("raise the alarm", "M10")

        assert card is not None and card.id == "1"
        assert provider.lookups == ["raise the alarm"]

    async def test_oracle_and_color_terms(self, cards: list[CardRecord]) -> None:
        provider = InMemoryCardProvider(cards)

        assert [c.name for c in await provider.search('oracle:"creature tokens"')] == [
            "Raise the Alarm",
            "Hordeling Outburst",
        ]
        assert [c.name for c in await provider.search("o:tokens color=r")] == [
            "Hordeling Outburst"
        ]

    async def test_type_negation_and_identity(self, cards: list[CardRecord]) -> None:
        provider = InMemoryCardProvider(cards)

        result = await provider.search("t:land -t:basic id<=wg o:add")

        assert [c.name for c in result] == ["Selesnya Sanctuary"]

    async def test_or_alternatives(self, cards: list[CardRecord]) -> None:
        provider = InMemoryCardProvider(cards)

        result = await provider.search("color=w OR color=r")

        assert [c.name for c in result] == ["Raise the Alarm", "Hordeling Outburst"]
        assert provider.queries == ["color=w OR color=r"]

    async def test_legal_term(self, cards: list[CardRecord]) -> None:
        provider = InMemoryCardProvider(cards)

        result = await provider.search("o:tokens legal:commander")

        assert [c.name for c in result] == ["Raise the Alarm"]

    async def test_from_bulk_file(self, tmp_path: Path) -> None:
        path = tmp_path / "oracle-cards.json"
        path.write_text(
            json.dumps(
                [
                    {"id": "x", "name": "Sol Ring", "type_line": "Artifact", "cmc": 1},
                    {"id": "y", "type_line": "Token"},
                ]
            )
        )

        provider = InMemoryCardProvider.from_bulk_file(path)

        assert await provider.resolve_by_name("Sol Ring") is not None
        assert await provider.search("t:token") == []

    def test_missing_bulk_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            InMemoryCardProvider.from_bulk_file(tmp_path / "missing.json")
