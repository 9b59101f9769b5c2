"""Board model: one player's grid of cells and the attack mutation."""
from enum import Enum
from typing import List, Optional

from .errors import CellAlreadyAttacked, MalformedMessage, OutOfBounds

DEFAULT_BOARD_SIZE = 10


class Cell(Enum):
    EMPTY = '~'
    SHIP = 'N'
    SHIP_HIT = 'X'
    EMPTY_HIT = 'O'


class Outcome(Enum):
    HIT = 'hit'
    MISS = 'miss'


# Markers clients may use for open water
_EMPTY_MARKERS = {'', '~', 'A'}
_MARKERS = {cell.value: cell for cell in Cell}


class Board:
    """A square grid of cells.

    The count of untouched ship cells is kept alongside the grid and only
    changes on a Ship -> ShipHit transition, so win detection never has to
    rescan the grid.
    """

    def __init__(self, cells: List[List[Cell]]):
        self.size = len(cells)
        self._cells = [list(row) for row in cells]
        self._remaining = sum(row.count(Cell.SHIP) for row in self._cells)

    @classmethod
    def from_markers(cls, grid, size: int = DEFAULT_BOARD_SIZE) -> 'Board':
        """Build a board from the wire representation (rows of marker strings)."""
        if not isinstance(grid, list) or len(grid) != size:
            raise MalformedMessage(f'Board must have {size} rows')
        cells = []
        for row in grid:
            if not isinstance(row, list) or len(row) != size:
                raise MalformedMessage(f'Board rows must have {size} cells')
            parsed = []
            for marker in row:
                if marker is None or (isinstance(marker, str) and marker in _EMPTY_MARKERS):
                    parsed.append(Cell.EMPTY)
                elif isinstance(marker, str) and marker in _MARKERS:
                    parsed.append(_MARKERS[marker])
                else:
                    raise MalformedMessage(f'Unknown board marker: {marker!r}')
            cells.append(parsed)
        return cls(cells)

    def cell(self, row: int, col: int) -> Cell:
        self._check_bounds(row, col)
        return self._cells[row][col]

    def attack(self, row: int, col: int) -> Outcome:
        self._check_bounds(row, col)
        current = self._cells[row][col]
        if current in (Cell.SHIP_HIT, Cell.EMPTY_HIT):
            raise CellAlreadyAttacked(f'Cell ({row}, {col}) was already attacked')
        if current is Cell.SHIP:
            self._cells[row][col] = Cell.SHIP_HIT
            self._remaining -= 1
            return Outcome.HIT
        self._cells[row][col] = Cell.EMPTY_HIT
        return Outcome.MISS

    def remaining_ship_count(self) -> int:
        return self._remaining

    def _check_bounds(self, row: Optional[int], col: Optional[int]) -> None:
        for value in (row, col):
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < self.size:
                raise OutOfBounds(f'({row}, {col}) is outside the {self.size}x{self.size} board')
