from .board import Board

# (row step, col step) per axis: horizontal, vertical, diagonal ↘, diagonal ↙
AXES = ((0, 1), (1, 0), (1, 1), (1, -1))


def _letter_at(board: Board, row: int, col: int):
    if not board.in_bounds(row, col):
        return None
    return board.get(row, col)


def count_new_lines(board: Board, row: int, col: int, letter: str) -> int:
    """Count the S-O-S lines completed by placing ``letter`` at (row, col).

    Must be called right after the letter is written and before any other
    cell changes.

    An 'O' can sit in the middle of at most one line per axis (both
    neighbours must be 'S'). An 'S' can end a line in each of the 8
    directions: the adjacent cell must be 'O' and the one beyond it 'S'.
    """
    count = 0
    if letter == 'O':
        for dr, dc in AXES:
            if (_letter_at(board, row - dr, col - dc) == 'S'
                    and _letter_at(board, row + dr, col + dc) == 'S'):
                count += 1
    elif letter == 'S':
        for dr, dc in AXES:
            for sign in (1, -1):
                step_r, step_c = dr * sign, dc * sign
                if (_letter_at(board, row + step_r, col + step_c) == 'O'
                        and _letter_at(board, row + 2 * step_r, col + 2 * step_c) == 'S'):
                    count += 1
    return count
