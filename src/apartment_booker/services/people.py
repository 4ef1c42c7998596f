"""Directory of residents allowed to book."""

from collections.abc import Iterable
from dataclasses import dataclass

from apartment_booker.domain.people import PALETTE, Person


def assign_colours(names: Iterable[str]) -> list[Person]:
    """Pair each non-blank name with a palette colour, in order."""
    people: list[Person] = []
    for raw in names:
        name = raw.strip()
        if not name:
            continue
        people.append(Person(name=name, color=PALETTE[len(people) % len(PALETTE)]))
    return people


@dataclass(frozen=True)
class PeopleDirectory:
    """Ordered, read-only list of known residents."""

    people: tuple[Person, ...]

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "PeopleDirectory":
        """Build a directory, assigning colours from the palette."""
        return cls(tuple(assign_colours(names)))

    def is_known(self, name: str) -> bool:
        """Return True when ``name`` exactly matches a resident."""
        return any(person.name == name for person in self.people)

    def as_dicts(self) -> list[dict[str, str]]:
        """Return the people as JSON-ready dictionaries."""
        return [{"name": person.name, "color": person.color} for person in self.people]
