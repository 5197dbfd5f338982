"""
Generate commander deck options from the command line.

Reads a collection export, builds deck options around the named commander
and prints them. Cards are resolved through Scryfall, or offline from a bulk
data file when --card-data is given.

Usage:
    python -m commanderforge.jobs.generate_deck --collection cards.txt \
        --commander "Rhys the Redeemed"
"""

import argparse
import asyncio
import logging
from pathlib import Path

from commanderforge.config import settings
from commanderforge.models.deck import DeckOption
from commanderforge.models.formats import FORMATS
from commanderforge.parsers.collection_import import parse_collection
from commanderforge.services.card_provider import (
    CardDataProvider,
    InMemoryCardProvider,
    ProviderError,
    ScryfallProvider,
)
from commanderforge.services.commander_generator import CommanderDeckGenerator
from commanderforge.services.deck_formatter import export_deck_list, format_deck_option

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the command line inputs cannot produce a deck."""

    pass


async def generate_with_provider(
    provider: CardDataProvider,
    collection_text: str,
    commander_name: str,
    format_id: str,
    stack_basics: bool = False,
    lookup_delay: float | None = None,
    search_delay: float | None = None,
) -> list[DeckOption]:
    """
    Generate deck options with an already constructed provider.

    Raises:
        GenerationError: If the commander is unknown or not legendary, or
            nothing viable is built
    """
    collection = parse_collection(collection_text)
    logger.info(
        "Loaded %d cards (%d unique) from collection",
        collection.total_cards(),
        collection.unique_cards(),
    )

    commander = await provider.resolve_by_name(commander_name)
    if commander is None:
        raise GenerationError(f"Commander not found: {commander_name}")
    if "legendary" not in commander.type_line.lower():
        raise GenerationError(f"{commander.name} is not legendary and cannot be a commander")

    generator = CommanderDeckGenerator(
        provider,
        lookup_delay=lookup_delay,
        search_delay=search_delay,
        stack_basics=stack_basics,
    )
    options = await generator.generate_deck_options(
        commander, collection.list_owned(), format_id
    )
    if not options:
        raise GenerationError(
            f"Not enough cards in the collection to build around {commander.name}"
        )
    return options


async def run_generation(
    collection_path: Path,
    commander_name: str,
    format_id: str,
    stack_basics: bool = False,
    card_data: Path | None = None,
) -> list[DeckOption]:
    """Generate deck options for the files and names given on the command line."""
    collection_text = collection_path.read_text(encoding="utf-8")

    if card_data is not None:
        provider = InMemoryCardProvider.from_bulk_file(card_data)
        return await generate_with_provider(
            provider,
            collection_text,
            commander_name,
            format_id,
            stack_basics,
            lookup_delay=0.0,
            search_delay=0.0,
        )

    async with ScryfallProvider() as scryfall:
        return await generate_with_provider(
            scryfall, collection_text, commander_name, format_id, stack_basics
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate commander deck options")
    parser.add_argument("--collection", type=Path, required=True, help="Collection export file")
    parser.add_argument("--commander", required=True, help="Commander card name")
    parser.add_argument(
        "--format",
        default=settings.default_format,
        choices=sorted(FORMATS),
        help="Format for copy limits and legality",
    )
    parser.add_argument(
        "--stack-basics",
        action="store_true",
        help="Fill the mana base with repeated basic lands",
    )
    parser.add_argument(
        "--card-data",
        type=Path,
        default=None,
        help="Scryfall bulk data file for offline generation",
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help="Print plain deck lists instead of summaries",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)

    try:
        options = asyncio.run(
            run_generation(
                args.collection,
                args.commander,
                args.format,
                stack_basics=args.stack_basics,
                card_data=args.card_data,
            )
        )
    except GenerationError as e:
        logger.error("%s", e)
        raise SystemExit(1) from e
    except ProviderError as e:
        logger.error("Card data service failed: %s", e)
        raise SystemExit(1) from e

    render = export_deck_list if args.export else format_deck_option
    print("\n\n".join(render(option) for option in options))


if __name__ == "__main__":
    main()
