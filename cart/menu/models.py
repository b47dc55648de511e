"""
Menu Domain Models

Coffee identity is its name: two coffees with the same name are equal, hash
alike and sort together regardless of their database id.
"""

from dataclasses import dataclass, field

from cart.core.config.constants import COFFEE_DELIMITER


@dataclass(frozen=True, order=True)
class Coffee:
    """A coffee on the menu. Ordered and compared by name only."""

    name: str
    id: int | None = field(default=None, compare=False)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Coffee name must be a non-empty string")

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


def parse_coffees(raw: str) -> tuple[Coffee, ...]:
    """
    Parse a semicolon-delimited coffee list.

    Tokens are trimmed, empty tokens dropped, duplicates removed and the
    result sorted by name:

        >>> [c.name for c in parse_coffees("a;b; c ;;b")]
        ['a', 'b', 'c']
    """
    names = {token.strip() for token in raw.split(COFFEE_DELIMITER)}
    names.discard("")
    return tuple(sorted(Coffee(name=name) for name in names))
