from __future__ import annotations

from dataclasses import dataclass, replace
from itertools import combinations
from typing import Iterable, Optional, Tuple

MATCH_SUM = 10


@dataclass(frozen=True)
class Tile:
    id: str
    value: int
    matched: bool = False
    row: int = 0
    col: int = 0

    @classmethod
    def at(cls, row: int, col: int, value: int) -> "Tile":
        return cls(tile_id(row, col), value, False, row, col)

    def mark_matched(self) -> "Tile":
        return replace(self, matched=True)

    def to_dict(self) -> dict:
        return {"id": self.id, "value": self.value, "matched": self.matched, "row": self.row, "col": self.col}

    @classmethod
    def from_dict(cls, data: dict) -> "Tile":
        return cls(
            id=str(data["id"]),
            value=int(data["value"]),
            matched=bool(data["matched"]),
            row=int(data["row"]),
            col=int(data["col"]),
        )


Row = Tuple[Tile, ...]
Grid = Tuple[Row, ...]


def tile_id(row: int, col: int) -> str:
    return f"{row}-{col}"


def is_match(a: Optional[Tile], b: Optional[Tile]) -> bool:
    """Two distinct tiles match when their values are equal or sum to ten."""
    if a is None or b is None or a.id == b.id:
        return False
    return a.value == b.value or a.value + b.value == MATCH_SUM


def iter_tiles(grid: Grid) -> Iterable[Tile]:
    for row in grid:
        for tile in row:
            yield tile


def find_tile(grid: Grid, tid: str) -> Optional[Tile]:
    for tile in iter_tiles(grid):
        if tile.id == tid:
            return tile
    return None


def mark_tiles_matched(grid: Grid, first: Tile, second: Tile) -> Grid:
    """Return a grid with both tiles flagged; rows without either tile are shared."""
    ids = {first.id, second.id}
    new_rows = []
    for row in grid:
        if any(t.id in ids for t in row):
            new_rows.append(tuple(t.mark_matched() if t.id in ids else t for t in row))
        else:
            new_rows.append(row)
    return tuple(new_rows)


def unmatched_tiles(grid: Grid) -> Tuple[Tile, ...]:
    return tuple(t for t in iter_tiles(grid) if not t.matched)


def count_available_matches(grid: Grid) -> int:
    return sum(1 for a, b in combinations(unmatched_tiles(grid), 2) if is_match(a, b))


def find_available_match(grid: Grid) -> Optional[Tuple[Tile, Tile]]:
    for a, b in combinations(unmatched_tiles(grid), 2):
        if is_match(a, b):
            return a, b
    return None
