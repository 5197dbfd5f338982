"""
Download Scryfall bulk card data.

Run this job to fetch the card file used for offline deck generation
(`generate_deck --card-data`).
"""

import asyncio
import logging
from pathlib import Path

import httpx

from commanderforge.config import settings

logger = logging.getLogger(__name__)


async def download_card_data(
    output_path: Path | None = None,
    client: httpx.AsyncClient | None = None,
) -> Path:
    """
    Download the configured Scryfall bulk data file.

    Args:
        output_path: Where to save the file. Defaults to settings.card_data_path
        client: HTTP client to use; one is created when omitted

    Returns:
        Path to downloaded file.

    Raises:
        ValueError: If the bulk data type is not offered
        httpx.HTTPError: If download fails
    """
    if output_path is None:
        output_path = settings.card_data_path

    output_path.parent.mkdir(parents=True, exist_ok=True)

    owns_client = client is None
    http = client or httpx.AsyncClient(
        timeout=settings.scryfall_timeout,
        headers={"User-Agent": settings.user_agent},
    )
    try:
        response = await http.get(f"{settings.scryfall_api_url.rstrip('/')}/bulk-data")
        response.raise_for_status()

        download_url = None
        for item in response.json()["data"]:
            if item["type"] == settings.scryfall_bulk_type:
                download_url = item["download_uri"]
                break

        if not download_url:
            raise ValueError(f"Could not find {settings.scryfall_bulk_type} bulk data URL")

        # Stream download (oracle cards is ~150MB)
        async with http.stream("GET", download_url, timeout=300.0) as stream:
            stream.raise_for_status()
            with open(output_path, "wb") as f:
                async for chunk in stream.aiter_bytes(8192):
                    f.write(chunk)
    finally:
        if owns_client:
            await http.aclose()

    return output_path


async def run_download() -> None:
    """Download the Scryfall bulk card data."""
    logger.info("Downloading Scryfall %s...", settings.scryfall_bulk_type)

    try:
        path = await download_card_data()
        logger.info("Downloaded card data to %s", path)
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Failed to download card data: %s", e)
        raise


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download())


if __name__ == "__main__":
    main()
