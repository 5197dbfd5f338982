from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

WUBRG = ("W", "U", "B", "R", "G")


@dataclass(frozen=True, slots=True)
class CardRecord:
    """
    A card as described by the card data provider.

    Attributes:
        id: Provider identifier (Scryfall UUID)
        name: Card name
        mana_cost: Mana cost string (e.g., "{2}{G}{W}")
        cmc: Converted mana cost
        color_identity: Color symbols (W, U, B, R, G); empty for colorless
        type_line: Full type line (e.g., "Legendary Creature — Elf Druid")
        oracle_text: Rules text; faces of double-faced cards joined by newline
        rarity: common, uncommon, rare, mythic
        legalities: Format id -> "legal", "not_legal", "banned", "restricted"
        oracle_id: Identifier shared by every printing of the card
    """

    id: str
    name: str
    mana_cost: str = ""
    cmc: float = 0.0
    color_identity: frozenset[str] = frozenset()
    type_line: str = ""
    oracle_text: str = ""
    rarity: str = "common"
    legalities: Mapping[str, str] = field(default_factory=dict, compare=False, hash=False)
    oracle_id: str = ""

    @classmethod
    def from_scryfall(cls, data: dict[str, Any]) -> "CardRecord":
        """Build a record from a Scryfall card object."""
        faces = data.get("card_faces") or []

        oracle_text = data.get("oracle_text")
        if oracle_text is None:
            oracle_text = "\n".join(f.get("oracle_text", "") for f in faces)

        mana_cost = data.get("mana_cost")
        if mana_cost is None:
            mana_cost = "".join(f.get("mana_cost", "") for f in faces)

        identity = data.get("color_identity")
        if identity is None:
            identity = data.get("colors", [])

        return cls(
            id=str(data.get("id") or data["name"]),
            name=data["name"],
            mana_cost=mana_cost,
            cmc=float(data.get("cmc", 0) or 0),
            color_identity=frozenset(identity),
            type_line=data.get("type_line", ""),
            oracle_text=oracle_text,
            rarity=data.get("rarity", "common"),
            legalities=dict(data.get("legalities", {})),
            oracle_id=str(data.get("oracle_id") or ""),
        )

    @property
    def is_land(self) -> bool:
        return "land" in self.type_line.lower()

    @property
    def is_basic_land(self) -> bool:
        type_line = self.type_line.lower()
        return "basic" in type_line and "land" in type_line

    @property
    def is_legendary_creature(self) -> bool:
        type_line = self.type_line.lower()
        return "legendary" in type_line and "creature" in type_line

    @property
    def oracle_key(self) -> str:
        """Printing-independent identity: the oracle id, else the lower-cased name."""
        return self.oracle_id or self.name.lower()

    def is_legal_in(self, format_id: str) -> bool:
        """
        Check format legality.

        A missing legality entry counts as legal; any explicit value other
        than "legal" does not.
        """
        status = self.legalities.get(format_id.lower())
        return status is None or status == "legal"

    def sorted_colors(self) -> list[str]:
        """Color identity in WUBRG order."""
        return [c for c in WUBRG if c in self.color_identity]


@dataclass(frozen=True, slots=True)
class OwnedCardRef:
    """
    A card reference from the collection store.

    Attributes:
        name: Card name
        set_code: Optional set code narrowing the printing
        quantity: Copies owned; 0 means the card is absent
    """

    name: str
    set_code: str | None = None
    quantity: int = 1
