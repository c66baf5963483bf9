"""Seating grid helpers.

A grid is a list of rows, each a list of cell states. Rows are labelled with
letters starting at ``A`` and columns are numbered from 1 when displayed.
"""

import json
import string

from errors import SeatAlreadyReserved, ValidationError

AVAILABLE = 0
RESERVED = 1
NON_BOOKABLE = 2

GRID_ROWS = 8
GRID_COLS = 10
AISLE_COLUMNS = (4, 5)

MAX_SEATS_PER_SELECTION = 10


def generate_seating_map(rows=GRID_ROWS, cols=GRID_COLS, aisles=AISLE_COLUMNS):
    grid = [[AVAILABLE for _ in range(cols)] for _ in range(rows)]
    for row in grid:
        for col in aisles:
            if col < cols:
                row[col] = NON_BOOKABLE
    return grid


def seat_number(row, col):
    return f"{string.ascii_uppercase[row]}{col + 1}"


def make_seat(row, col):
    return {"row": row, "col": col, "seatNumber": seat_number(row, col)}


def dumps_grid(grid):
    return json.dumps(grid)


def loads_grid(raw):
    return json.loads(raw) if raw else []


def cell_state(grid, row, col):
    """Return the state of a cell, or None when it lies outside the grid."""
    if row < 0 or col < 0 or row >= len(grid) or col >= len(grid[row]):
        return None
    return grid[row][col]


def count_available(grid):
    return sum(1 for row in grid for cell in row if cell == AVAILABLE)


def check_seats_bookable(grid, seats):
    """Raise unless every seat in ``seats`` is currently available.

    Each seat is a mapping with ``row`` and ``col``.
    """
    seen = set()
    for seat in seats:
        row, col = seat["row"], seat["col"]
        if (row, col) in seen:
            raise ValidationError("The same seat was selected twice", {"row": row, "col": col})
        seen.add((row, col))

        state = cell_state(grid, row, col)
        if state is None or state == NON_BOOKABLE:
            raise ValidationError("Seat cannot be booked", {"row": row, "col": col})
        if state != AVAILABLE:
            raise SeatAlreadyReserved(
                f"Seat {seat_number(row, col)} is already reserved",
                {"row": row, "col": col, "seatNumber": seat_number(row, col)},
            )
