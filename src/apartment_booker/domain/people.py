"""Domain models for residents."""

from dataclasses import dataclass

PALETTE = (
    "#800000",
    "#3cb44b",
    "#ffe119",
    "#0082c8",
    "#f58231",
    "#911eb4",
    "#46f0f0",
    "#f032e6",
    "#d2f53c",
    "#fabebe",
    "#008080",
    "#e6beff",
    "#aa6e28",
    "#fffac8",
    "#aaffc3",
    "#808000",
    "#ffd8b1",
    "#000080",
    "#808080",
)


@dataclass(frozen=True)
class Person:
    """A resident allowed to book, with the colour used on the planning."""

    name: str
    color: str
