from collections.abc import Callable

import pytest

from commanderforge.config import settings
from commanderforge.models.card import CardRecord
from commanderforge.services.card_provider import InMemoryCardProvider


@pytest.fixture(autouse=True)
def no_provider_delays(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run provider calls back to back in tests."""
    monkeypatch.setattr(settings, "lookup_delay", 0.0)
    monkeypatch.setattr(settings, "search_delay", 0.0)


def build_card(
    name: str,
    *,
    card_id: str | None = None,
    mana_cost: str = "",
    cmc: float = 0.0,
    colors: str = "",
    type_line: str = "Instant",
    oracle_text: str = "",
    rarity: str = "common",
    legalities: dict[str, str] | None = None,
) -> CardRecord:
    return CardRecord(
        id=card_id or name.lower().replace(" ", "-"),
        name=name,
        mana_cost=mana_cost,
        cmc=cmc,
        color_identity=frozenset(colors),
        type_line=type_line,
        oracle_text=oracle_text,
        rarity=rarity,
        legalities=legalities or {},
    )


@pytest.fixture
def make_card() -> Callable[..., CardRecord]:
    """Factory for CardRecords with sensible defaults."""
    return build_card


@pytest.fixture
def commander() -> CardRecord:
    """A green-white token and card draw commander."""
    return build_card(
        "Tokenmaster Gwen",
        mana_cost="{1}{G}{W}",
        cmc=3.0,
        colors="GW",
        type_line="Legendary Creature — Elf Druid",
        oracle_text=(
            "Whenever you cast a creature spell, create a 1/1 green Elf Warrior "
            "creature token.\n{T}: Draw a card."
        ),
        rarity="mythic",
    )


@pytest.fixture
def mana_cards() -> list[CardRecord]:
    """Basics, fixing lands and mana rocks the mana base builder asks for."""
    basics = [
        build_card(
            land,
            type_line=f"Basic Land — {land}",
            oracle_text=f"({{T}}: Add {{{c}}}.)",
            colors=c,
        )
        for land, c in (
            ("Plains", "W"),
            ("Island", "U"),
            ("Swamp", "B"),
            ("Mountain", "R"),
            ("Forest", "G"),
        )
    ]
    return [
        *basics,
        build_card(
            "Command Tower",
            type_line="Land",
            oracle_text="{T}: Add one mana of any color in your commander's color identity.",
        ),
        build_card(
            "Selesnya Sanctuary",
            type_line="Land",
            oracle_text=(
                "Selesnya Sanctuary enters tapped.\nWhen Selesnya Sanctuary enters, "
                "return a land you control to its owner's hand.\n{T}: Add {G}{W}."
            ),
            colors="GW",
        ),
        build_card(
            "Sulfurous Springs",
            type_line="Land",
            oracle_text="{T}: Add {C}.\n{T}: Add {B} or {R}.",
            colors="BR",
        ),
        build_card(
            "Sol Ring",
            mana_cost="{1}",
            cmc=1.0,
            type_line="Artifact",
            oracle_text="{T}: Add {C}{C}.",
            rarity="uncommon",
        ),
        build_card(
            "Arcane Signet",
            mana_cost="{2}",
            cmc=2.0,
            type_line="Artifact",
            oracle_text="{T}: Add one mana of any color in your commander's color identity.",
        ),
        build_card(
            "Mind Stone",
            mana_cost="{2}",
            cmc=2.0,
            type_line="Artifact",
            oracle_text="{T}: Add {C}.\n{1}, {T}, Sacrifice Mind Stone: Draw a card.",
            rarity="uncommon",
        ),
        build_card(
            "Fellwar Stone",
            mana_cost="{2}",
            cmc=2.0,
            type_line="Artifact",
            oracle_text=(
                "{T}: Add one mana of any color that a land an opponent controls could produce."
            ),
            rarity="uncommon",
        ),
    ]


@pytest.fixture
def token_spells() -> list[CardRecord]:
    """Seventy green token makers with mana values cycling 1 to 5."""
    return [
        build_card(
            f"Sproutling Call {i}",
            mana_cost=f"{{{i % 5}}}{{G}}" if i % 5 else "{G}",
            cmc=float(i % 5 + 1),
            colors="G",
            type_line="Sorcery",
            oracle_text="Create a 1/1 green Saproling creature token.",
        )
        for i in range(70)
    ]


@pytest.fixture
def provider(mana_cards: list[CardRecord]) -> InMemoryCardProvider:
    """In-memory provider preloaded with the mana base cards."""
    return InMemoryCardProvider(list(mana_cards))
