"""Tests for end-to-end commander deck generation."""

from collections.abc import Callable
from dataclasses import replace

import pytest

from commanderforge.models.card import CardRecord, OwnedCardRef
from commanderforge.services.card_provider import (
    InMemoryCardProvider,
    ProviderError,
    ProviderUnavailableError,
)
from commanderforge.services.commander_generator import (
    CommanderDeckGenerator,
    ResolvedCard,
    find_commander_candidates,
    fits_color_identity,
    merge_printings,
    resolve_collection,
)

CardFactory = Callable[..., CardRecord]


class DownProvider(InMemoryCardProvider):
    """Every call fails as if the service were unreachable."""

    async def resolve_by_name(self, name: str, set_code: str | None = None) -> CardRecord | None:
        raise ProviderUnavailableError("connection refused")

    async def search(self, query: str) -> list[CardRecord]:
        raise ProviderUnavailableError("connection refused")


class PartlyBrokenProvider(InMemoryCardProvider):
    """One named card always errors; the rest resolve."""

    async def resolve_by_name(self, name: str, set_code: str | None = None) -> CardRecord | None:
        if name == "Cursed Scroll":
            raise ProviderError("bad response")
        return await super().resolve_by_name(name, set_code)


class PrintingProvider(InMemoryCardProvider):
    """Set-pinned lookups return a distinct printing with its own id."""

    async def resolve_by_name(self, name: str, set_code: str | None = None) -> CardRecord | None:
        card = await super().resolve_by_name(name, set_code)
        if card is None or set_code is None:
            return card
        return replace(card, id=f"{card.id}-{set_code.lower()}")


def owned_refs(cards: list[CardRecord], quantity: int = 1) -> list[OwnedCardRef]:
    return [OwnedCardRef(card.name, None, quantity) for card in cards]


@pytest.fixture
def full_provider(
    provider: InMemoryCardProvider,
    commander: CardRecord,
    token_spells: list[CardRecord],
) -> InMemoryCardProvider:
    provider.add(commander)
    for card in token_spells:
        provider.add(card)
    return provider


@pytest.fixture
def generator(full_provider: InMemoryCardProvider) -> CommanderDeckGenerator:
    return CommanderDeckGenerator(full_provider, lookup_delay=0, search_delay=0)


class TestResolveCollection:
    async def test_skips_unknown_and_empty_entries(
        self, full_provider: InMemoryCardProvider, token_spells: list[CardRecord]
    ) -> None:
        owned = [
            OwnedCardRef(token_spells[0].name, None, 2),
            OwnedCardRef("Not A Real Card"),
            OwnedCardRef(token_spells[1].name, None, 0),
        ]

        resolved = await resolve_collection(full_provider, owned, lookup_delay=0)

        assert [(r.card.name, r.quantity) for r in resolved] == [(token_spells[0].name, 2)]
        assert token_spells[1].name not in full_provider.lookups

    async def test_per_card_errors_are_skipped(
        self, mana_cards: list[CardRecord], token_spells: list[CardRecord]
    ) -> None:
        provider = PartlyBrokenProvider([*mana_cards, token_spells[0]])
        owned = [OwnedCardRef("Cursed Scroll"), OwnedCardRef(token_spells[0].name)]

        resolved = await resolve_collection(provider, owned, lookup_delay=0)

        assert [r.card.name for r in resolved] == [token_spells[0].name]

    async def test_unreachable_provider_raises(self) -> None:
        owned = [OwnedCardRef("Sol Ring"), OwnedCardRef("Forest")]

        with pytest.raises(ProviderUnavailableError):
            await resolve_collection(DownProvider([]), owned, lookup_delay=0)

    async def test_empty_collection_resolves_to_nothing(self) -> None:
        assert await resolve_collection(DownProvider([]), [], lookup_delay=0) == []


class TestMergePrintings:
    def test_quantities_sum_onto_first_printing(self, make_card: CardFactory) -> None:
        c21 = make_card("Sol Ring", card_id="sol-ring-c21")
        cmr = replace(c21, id="sol-ring-cmr")
        elf = make_card("Llanowar Elves")

        merged = merge_printings(
            [ResolvedCard(c21, 1), ResolvedCard(elf, 2), ResolvedCard(cmr, 3)]
        )

        assert merged == [ResolvedCard(c21, 4), ResolvedCard(elf, 2)]


class TestCommanderCandidates:
    async def test_lists_legendary_creatures_once(
        self,
        full_provider: InMemoryCardProvider,
        commander: CardRecord,
        token_spells: list[CardRecord],
        make_card: CardFactory,
    ) -> None:
        relic = make_card("Old Relic", type_line="Legendary Artifact")
        full_provider.add(relic)
        owned = [
            OwnedCardRef(token_spells[0].name),
            OwnedCardRef(commander.name, "M21"),
            OwnedCardRef(relic.name),
            OwnedCardRef(commander.name, "CMR"),
        ]

        candidates = await find_commander_candidates(full_provider, owned, lookup_delay=0)

        assert [card.name for card in candidates] == [commander.name]


class TestFitsColorIdentity:
    def test_subset_fits(self, make_card: CardFactory, commander: CardRecord) -> None:
        assert fits_color_identity(make_card("G", colors="G"), commander)
        assert fits_color_identity(make_card("Colorless"), commander)

    def test_outside_color_does_not_fit(
        self, make_card: CardFactory, commander: CardRecord
    ) -> None:
        assert not fits_color_identity(make_card("GU", colors="GU"), commander)


class TestGenerateDeckOptions:
    async def test_builds_one_option_per_archetype(
        self,
        generator: CommanderDeckGenerator,
        commander: CardRecord,
        token_spells: list[CardRecord],
    ) -> None:
        options = await generator.generate_deck_options(commander, owned_refs(token_spells))

        assert [o.strategy for o in options] == ["Token Swarm", "Card Advantage"]
        for option in options:
            assert option.name == f"Tokenmaster Gwen - {option.strategy}"
            assert option.entries[0].card == commander
            assert option.color_identity == ("W", "G")
            assert 20 <= option.total_cards <= 100
            assert 0 <= option.synergy_score <= 100
            assert len(option.suggestions) <= 10
            ids = [e.card.id for e in option.entries]
            assert len(ids) == len(set(ids))

    async def test_stack_basics_reaches_full_deck(
        self,
        full_provider: InMemoryCardProvider,
        commander: CardRecord,
        token_spells: list[CardRecord],
    ) -> None:
        generator = CommanderDeckGenerator(
            full_provider, lookup_delay=0, search_delay=0, stack_basics=True
        )

        options = await generator.generate_deck_options(commander, owned_refs(token_spells))

        assert options
        assert all(option.total_cards == 100 for option in options)

    async def test_small_collection_yields_nothing(
        self,
        generator: CommanderDeckGenerator,
        commander: CardRecord,
        token_spells: list[CardRecord],
    ) -> None:
        options = await generator.generate_deck_options(commander, owned_refs(token_spells[:15]))

        assert options == []

    async def test_empty_collection_yields_nothing(
        self,
        generator: CommanderDeckGenerator,
        full_provider: InMemoryCardProvider,
        commander: CardRecord,
    ) -> None:
        assert await generator.generate_deck_options(commander, []) == []
        assert full_provider.lookups == []

    async def test_non_legendary_commander_yields_nothing(
        self,
        generator: CommanderDeckGenerator,
        full_provider: InMemoryCardProvider,
        make_card: CardFactory,
        token_spells: list[CardRecord],
    ) -> None:
        grunt = make_card("Elvish Grunt", colors="G", type_line="Creature — Elf")

        options = await generator.generate_deck_options(grunt, owned_refs(token_spells))

        assert options == []
        assert full_provider.lookups == []

    async def test_off_color_cards_never_included(
        self,
        generator: CommanderDeckGenerator,
        full_provider: InMemoryCardProvider,
        commander: CardRecord,
        token_spells: list[CardRecord],
        make_card: CardFactory,
    ) -> None:
        blue = make_card(
            "Blue Token Engine",
            mana_cost="{U}",
            cmc=1.0,
            colors="U",
            type_line="Enchantment",
            oracle_text="Whenever you draw a card, create a token.",
        )
        full_provider.add(blue)

        options = await generator.generate_deck_options(
            commander, owned_refs([blue, *token_spells])
        )

        assert options
        for option in options:
            assert blue.name not in option.quantities()
            assert all(e.card.color_identity <= commander.color_identity for e in option.entries)

    async def test_generation_is_deterministic(
        self,
        generator: CommanderDeckGenerator,
        commander: CardRecord,
        token_spells: list[CardRecord],
    ) -> None:
        owned = owned_refs(token_spells)

        first = await generator.generate_deck_options(commander, owned)
        second = await generator.generate_deck_options(commander, owned)

        assert [o.quantities() for o in first] == [o.quantities() for o in second]
        assert [o.synergy_score for o in first] == [o.synergy_score for o in second]

    async def test_unknown_format_raises(
        self,
        generator: CommanderDeckGenerator,
        commander: CardRecord,
        token_spells: list[CardRecord],
    ) -> None:
        with pytest.raises(KeyError):
            await generator.generate_deck_options(commander, owned_refs(token_spells), "pauper")

    async def test_provider_down_is_not_an_empty_result(
        self, commander: CardRecord, token_spells: list[CardRecord]
    ) -> None:
        generator = CommanderDeckGenerator(DownProvider([]), lookup_delay=0, search_delay=0)

        with pytest.raises(ProviderUnavailableError):
            await generator.generate_deck_options(commander, owned_refs(token_spells))

    async def test_notes_describe_the_build(
        self,
        generator: CommanderDeckGenerator,
        commander: CardRecord,
        token_spells: list[CardRecord],
    ) -> None:
        options = await generator.generate_deck_options(commander, owned_refs(token_spells))

        notes = options[0].notes
        assert notes[0].startswith("Average mana value: ")
        assert notes[1].startswith("Lands: ")
        assert notes[2] == "Candidates scored for Token Swarm: 70"


class TestPrintings:
    @pytest.fixture
    def printing_provider(
        self,
        mana_cards: list[CardRecord],
        commander: CardRecord,
        token_spells: list[CardRecord],
    ) -> PrintingProvider:
        return PrintingProvider([*mana_cards, commander, *token_spells])

    async def test_one_card_in_two_printings_enters_once(
        self,
        printing_provider: PrintingProvider,
        commander: CardRecord,
        token_spells: list[CardRecord],
    ) -> None:
        generator = CommanderDeckGenerator(printing_provider, lookup_delay=0, search_delay=0)
        owned = [
            *owned_refs(token_spells[:30]),
            OwnedCardRef("Sol Ring", "C21"),
            OwnedCardRef("Sol Ring", "CMR"),
        ]

        options = await generator.generate_deck_options(commander, owned)

        assert options
        for option in options:
            rings = [e for e in option.entries if e.card.name == "Sol Ring"]
            assert len(rings) == 1
            assert rings[0].quantity == 1
            names = [e.card.name for e in option.entries]
            assert len(names) == len(set(names))

    async def test_printings_share_the_copy_limit(
        self,
        printing_provider: PrintingProvider,
        commander: CardRecord,
        token_spells: list[CardRecord],
    ) -> None:
        generator = CommanderDeckGenerator(printing_provider, lookup_delay=0, search_delay=0)
        owned = [
            *owned_refs(token_spells[:30]),
            OwnedCardRef("Sol Ring", "C21", 3),
            OwnedCardRef("Sol Ring", "CMR", 3),
        ]

        options = await generator.generate_deck_options(commander, owned, "modern")

        assert options
        for option in options:
            assert sum(e.quantity for e in option.entries if e.card.name == "Sol Ring") == 4
