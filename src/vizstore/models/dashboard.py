from dataclasses import dataclass, field
from typing import List

from .model import Model


@dataclass
class Cell:
    """A rectangle and the time series queries to visualize in it."""

    x: int
    y: int
    w: int
    h: int
    queries: List[str] = field(default_factory=list)


@dataclass
class Dashboard(Model):
    cells: List[Cell] = field(default_factory=list)

    def __post_init__(self):
        # cells come back from json columns as plain dicts
        self.cells = [
            cell if isinstance(cell, Cell) else Cell(**cell) for cell in self.cells
        ]
