from commanderforge.parsers.collection_import import (
    detect_format,
    parse_collection,
    parse_collection_text,
    parse_csv_format,
    parse_simple_format,
)

__all__ = [
    "detect_format",
    "parse_collection",
    "parse_collection_text",
    "parse_csv_format",
    "parse_simple_format",
]
