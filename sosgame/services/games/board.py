from typing import List

from .errors import CellOccupied, InvalidLetter, OutOfBounds

EMPTY = ''
LETTERS = ('S', 'O')
MIN_SIZE = 3
DEFAULT_SIZE = 8


class Board:
    """Square grid of write-once cells.

    Cells hold ``''`` (empty), ``'S'`` or ``'O'``. A filled cell never
    changes until the whole board is replaced.
    """

    def __init__(self, rows: List[List[str]]):
        self.size = len(rows)
        self._cells = rows

    @classmethod
    def empty(cls, size: int = DEFAULT_SIZE) -> 'Board':
        if not isinstance(size, int) or size < MIN_SIZE:
            raise ValueError(f'Board size must be an integer >= {MIN_SIZE}, got {size!r}')
        return cls([[EMPTY] * size for _ in range(size)])

    @classmethod
    def from_list(cls, rows) -> 'Board':
        """Rebuild a board from its nested-list form (storage or wire)."""
        size = len(rows)
        if size < MIN_SIZE or any(len(r) != size for r in rows):
            raise ValueError('Board must be a square grid')
        cells = []
        for r in rows:
            row = []
            for value in r:
                value = value or EMPTY
                if value != EMPTY and value not in LETTERS:
                    raise ValueError(f'Unknown cell value {value!r}')
                row.append(value)
            cells.append(row)
        return cls(cells)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row <= self.size - 1 and 0 <= col <= self.size - 1

    def _check(self, row, col) -> None:
        # bool is an int subclass; True/False are not coordinates
        for v in (row, col):
            if not isinstance(v, int) or isinstance(v, bool):
                raise OutOfBounds(f'Invalid cell ({row!r}, {col!r})')
        if not self.in_bounds(row, col):
            raise OutOfBounds(f'Cell ({row}, {col}) is outside the {self.size}x{self.size} board')

    def get(self, row: int, col: int) -> str:
        self._check(row, col)
        return self._cells[row][col]

    def set(self, row: int, col: int, value: str) -> None:
        self._check(row, col)
        if value not in LETTERS:
            raise InvalidLetter()
        if self._cells[row][col] != EMPTY:
            raise CellOccupied()
        self._cells[row][col] = value

    def is_empty_at(self, row: int, col: int) -> bool:
        return self.get(row, col) == EMPTY

    def is_full(self) -> bool:
        return all(cell != EMPTY for r in self._cells for cell in r)

    def to_list(self) -> List[List[str]]:
        return [list(r) for r in self._cells]

    def __repr__(self):
        filled = sum(1 for r in self._cells for cell in r if cell != EMPTY)
        return f'<Board {self.size}x{self.size} filled={filled}>'
