"""
Deck option rendering.

Markdown summaries for display and plain "1 Card Name" lists for export.
"""

from commanderforge.models.deck import DeckCardEntry, DeckOption
from commanderforge.services.deck_assembler import mana_curve

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def _section(title: str, entries: list[DeckCardEntry]) -> list[str]:
    if not entries:
        return []
    lines = [f"## {title} ({sum(e.quantity for e in entries)})"]
    for entry in sorted(entries, key=lambda e: (e.card.cmc, e.card.name)):
        lines.append(f"- {entry.quantity}x {entry.card.name}")
    lines.append("")
    return lines


def format_deck_option(option: DeckOption) -> str:
    """Format a deck option for display."""
    lines = [f"# {option.name}\n", f"*{option.description}*\n"]

    lines.append(f"**Colors:** {', '.join(option.color_identity) or 'Colorless'}")
    lines.append(f"**Strategy:** {option.strategy}")
    lines.append(f"**Total Cards:** {option.total_cards}")
    lines.append(f"**Synergy Score:** {option.synergy_score}/100")

    spells = [e for e in option.entries[1:] if not e.card.is_land]
    curve_items = [(cmc, count) for cmc, count in mana_curve(spells).items() if count > 0]
    if curve_items:
        curve_text = " | ".join(f"{cmc}:{count}" for cmc, count in curve_items)
        lines.append(f"**Mana Curve:** {curve_text}")
    lines.append("")

    if option.notes:
        lines.append("**Notes:**")
        for note in option.notes:
            lines.append(f"- {note}")
        lines.append("")

    lines.append("## Commander")
    lines.append(f"- 1x {option.commander.name}")
    lines.append("")

    creatures = [e for e in spells if "creature" in e.card.type_line.lower()]
    others = [e for e in spells if "creature" not in e.card.type_line.lower()]
    lands = [e for e in option.entries[1:] if e.card.is_land]

    lines.extend(_section("Creatures", creatures))
    lines.extend(_section("Spells", others))
    lines.extend(_section("Lands", lands))

    if option.suggestions:
        lines.append("## Suggested Additions")
        ranked = sorted(option.suggestions, key=lambda s: PRIORITY_ORDER[s.priority])
        for suggestion in ranked:
            lines.append(
                f"- [{suggestion.priority}] **{suggestion.card.name}** - {suggestion.reason}"
            )
        lines.append("")

    return "\n".join(lines)


def export_deck_list(option: DeckOption) -> str:
    """Export a deck option as a plain text list, commander first."""
    lines = ["Commander", f"1 {option.commander.name}", "", "Deck"]
    for entry in option.entries[1:]:
        lines.append(f"{entry.quantity} {entry.card.name}")
    return "\n".join(lines)
