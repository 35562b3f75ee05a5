"""
Dense fixed-size matrix used for neuron weights and lattice distances
"""

from typing import Tuple

import numpy as np


class Matrix:
    """
    Row-major ``rows x columns`` matrix of float64 values in one flat buffer.

    ``get_row`` hands out copies, so changes to a row must be written back
    with ``set``/``set_row``. ``view`` is the zero-copy alternative: it
    returns a 2-D ndarray sharing the buffer, and writes through it are
    visible in the matrix.
    """

    def __init__(self, rows: int, columns: int):
        if rows < 0 or columns < 0:
            raise ValueError(f"Matrix shape must be non-negative, got {rows}x{columns}")
        self._rows = int(rows)
        self._columns = int(columns)
        self.data = np.zeros(self._rows * self._columns, dtype=np.float64)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def shape(self) -> Tuple[int, int]:
        return self._rows, self._columns

    def _offset(self, row: int, col: int) -> int:
        if not (0 <= row < self._rows and 0 <= col < self._columns):
            raise IndexError(
                f"Matrix index ({row}, {col}) out of bounds for shape "
                f"{self._rows}x{self._columns}"
            )
        return col + row * self._columns

    def get(self, row: int, col: int) -> float:
        """Returns a single element"""
        return float(self.data[self._offset(row, col)])

    def set(self, row: int, col: int, value: float) -> None:
        """Sets a single element"""
        self.data[self._offset(row, col)] = value

    def get_row(self, row: int) -> np.ndarray:
        """Returns a copy of a row vector"""
        if not 0 <= row < self._rows:
            raise IndexError(f"Row {row} out of bounds for {self._rows} rows")
        start = row * self._columns
        return self.data[start : start + self._columns].copy()

    def set_row(self, row: int, values) -> None:
        """Writes a whole row vector"""
        if not 0 <= row < self._rows:
            raise IndexError(f"Row {row} out of bounds for {self._rows} rows")
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (self._columns,):
            raise ValueError(
                f"Expected row of length {self._columns}, got shape {values.shape}"
            )
        start = row * self._columns
        self.data[start : start + self._columns] = values

    def view(self) -> np.ndarray:
        """Zero-copy (rows, columns) view over the buffer"""
        return self.data.reshape(self._rows, self._columns)

    def clone(self) -> "Matrix":
        """Deep copy including data"""
        matrix = Matrix(self._rows, self._columns)
        matrix.data[:] = self.data
        return matrix

    def clone_without_data(self) -> "Matrix":
        """Zero-filled matrix of the same shape"""
        return Matrix(self._rows, self._columns)

    def copy_from(self, other: "Matrix") -> None:
        """Overwrite this matrix with the contents of a same-shaped matrix"""
        if other.shape != self.shape:
            raise ValueError(
                f"Cannot copy {other.rows}x{other.columns} matrix into "
                f"{self._rows}x{self._columns} matrix"
            )
        self.data[:] = other.data

    def __repr__(self) -> str:
        return f"Matrix(rows={self._rows}, columns={self._columns})"
