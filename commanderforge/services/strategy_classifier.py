"""
Commander strategy classifier.

Infers up to three archetypes from a commander's rules text. Rules are plain
data evaluated in declaration order; the order is the priority.
"""

from collections.abc import Callable
from dataclasses import dataclass

from commanderforge.config import MAX_ARCHETYPES
from commanderforge.models.card import CardRecord
from commanderforge.models.deck import Archetype


@dataclass(frozen=True, slots=True)
class CommanderText:
    """Lower-cased view of the commander fields rules inspect."""

    oracle: str
    type_line: str
    cmc: float

    @classmethod
    def of(cls, card: CardRecord) -> "CommanderText":
        return cls(card.oracle_text.lower(), card.type_line.lower(), card.cmc)

    def has(self, *fragments: str) -> bool:
        """True if the oracle text contains any of the fragments."""
        return any(fragment in self.oracle for fragment in fragments)


@dataclass(frozen=True, slots=True)
class ArchetypeRule:
    archetype: Archetype
    predicate: Callable[[CommanderText], bool]

    def matches(self, text: CommanderText) -> bool:
        return self.predicate(text)


TOKEN_SWARM = Archetype(
    "Token Swarm",
    "Generate tokens and overwhelm opponents",
    ("token", "create", "whenever", "generate"),
)
SACRIFICE_VALUE = Archetype(
    "Sacrifice Value",
    "Sacrifice creatures for value and recursion",
    ("sacrifice", "when dies", "death trigger", "whenever a creature dies"),
)
CARD_ADVANTAGE = Archetype(
    "Card Advantage",
    "Draw cards and maintain card advantage",
    ("draw", "card", "whenever you draw", "library"),
)
GRAVEYARD_RECURSION = Archetype(
    "Graveyard Recursion",
    "Use graveyard as a resource with recursion",
    ("graveyard", "reanimate", "flashback", "from graveyard", "return"),
)
COUNTERS_MATTER = Archetype(
    "Counters Matter",
    "Build around +1/+1 counters and proliferate",
    ("+1/+1", "counter", "proliferate", "whenever a counter"),
)
ARTIFACTS_EQUIPMENT = Archetype(
    "Artifacts & Equipment",
    "Build around artifacts and equipment",
    ("artifact", "equipment", "equip", "whenever an artifact"),
)
ENCHANTMENTS = Archetype(
    "Enchantments",
    "Build around enchantments and auras",
    ("enchantment", "aura", "whenever an enchantment"),
)
AGGRESSIVE = Archetype(
    "Aggressive",
    "Fast, aggressive strategy with early pressure",
    ("haste", "trample", "combat", "attack", "damage"),
)
CONTROL = Archetype(
    "Control",
    "Control the board and win with value",
    ("counter", "destroy", "exile", "removal", "control"),
)
GENERAL_GOODSTUFF = Archetype(
    "General Goodstuff",
    "Build a well-rounded deck around the commander",
    (),
)

ARCHETYPE_RULES: tuple[ArchetypeRule, ...] = (
    ArchetypeRule(
        TOKEN_SWARM,
        lambda t: (t.has("create") and t.has("token"))
        or (t.has("token") and t.has("whenever", "each")),
    ),
    ArchetypeRule(SACRIFICE_VALUE, lambda t: t.has("sacrifice", "when dies", "death trigger")),
    ArchetypeRule(CARD_ADVANTAGE, lambda t: t.has("draw", "card advantage")),
    ArchetypeRule(
        GRAVEYARD_RECURSION,
        lambda t: t.has("graveyard", "reanimate", "flashback", "from graveyard"),
    ),
    ArchetypeRule(
        COUNTERS_MATTER,
        lambda t: t.has("+1/+1") or (t.has("counter") and "creature" in t.type_line),
    ),
    ArchetypeRule(
        ARTIFACTS_EQUIPMENT,
        lambda t: "artifact" in t.type_line or t.has("equipment", "equip"),
    ),
    ArchetypeRule(
        ENCHANTMENTS,
        lambda t: "enchantment" in t.type_line or t.has("enchantment"),
    ),
    ArchetypeRule(AGGRESSIVE, lambda t: t.cmc <= 3 and t.has("haste", "trample", "combat")),
    ArchetypeRule(CONTROL, lambda t: t.cmc >= 5 or t.has("counter", "destroy")),
)


def classify(
    commander: CardRecord,
    rules: tuple[ArchetypeRule, ...] = ARCHETYPE_RULES,
    limit: int = MAX_ARCHETYPES,
) -> list[Archetype]:
    """
    Infer candidate archetypes for a commander.

    Returns the first `limit` matching archetypes in rule order, or the
    General Goodstuff fallback when nothing matches.
    """
    text = CommanderText.of(commander)
    matched = [rule.archetype for rule in rules if rule.matches(text)]
    if not matched:
        return [GENERAL_GOODSTUFF]
    return matched[:limit]
