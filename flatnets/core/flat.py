"""Contiguous numeric arenas addressed through registered range handles.

A :class:`FlatBuffer` collects range registrations while a structure is being
built.  :meth:`FlatBuffer.finalize_structure` then performs the only
allocation: one ``float64`` array whose length is the sum of every registered
range.  Each handle's offset is the prefix sum of the lengths registered
before it, and is immutable afterwards.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

import numpy as np

from .errors import IndexOutOfRange, StructuralError
from .types import DTYPE, Array


class FlatVector:
    """A one-dimensional sub-range of a :class:`FlatBuffer`."""

    def __init__(self, owner: "FlatBuffer", length: int) -> None:
        self._owner = owner
        self._length = int(length)
        self._offset: Optional[int] = None

    @property
    def owner(self) -> "FlatBuffer":
        return self._owner

    @property
    def length(self) -> int:
        return self._length

    @property
    def offset(self) -> int:
        if self._offset is None:
            raise StructuralError("Range offsets are assigned when the buffer is finalized")
        return self._offset

    @property
    def end(self) -> int:
        return self.offset + self._length

    def _assign(self, offset: int) -> None:
        self._offset = offset

    def _check_index(self, index: int) -> int:
        if index < 0 or index >= self._length:
            raise IndexOutOfRange(
                f"Index {index} outside range of length {self._length}"
            )
        return self.offset + index

    def get(self, index: int) -> float:
        return float(self._owner.data[self._check_index(index)])

    def set(self, index: int, value: float) -> None:
        self._owner.data[self._check_index(index)] = value

    def view(self) -> Array:
        """Return a writable numpy view onto this range (no copy)."""

        return self._owner.data[self.offset : self.end]

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        if self._offset is None or not self._owner.finalized:
            return f"{type(self).__name__}(length={self._length}, offset=None)"
        return f"{type(self).__name__}({np.array2string(self.view(), precision=4)})"


class FlatMatrix(FlatVector):
    """A row-major ``rows x cols`` sub-range of a :class:`FlatBuffer`."""

    def __init__(self, owner: "FlatBuffer", rows: int, cols: int) -> None:
        super().__init__(owner, int(rows) * int(cols))
        self._rows = int(rows)
        self._cols = int(cols)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> tuple[int, int]:
        return self._rows, self._cols

    def index_of(self, row: int, col: int) -> int:
        """Return the position of ``(row, col)`` relative to the matrix base."""

        if row < 0 or row >= self._rows:
            raise IndexOutOfRange(f"Row {row} outside matrix with {self._rows} rows")
        if col < 0 or col >= self._cols:
            raise IndexOutOfRange(f"Column {col} outside matrix with {self._cols} columns")
        return row * self._cols + col

    def get_cell(self, row: int, col: int) -> float:
        return self.get(self.index_of(row, col))

    def set_cell(self, row: int, col: int, value: float) -> None:
        self.set(self.index_of(row, col), value)

    def view(self) -> Array:
        return super().view().reshape(self._rows, self._cols)


class FlatBuffer:
    """Growable registry of sub-ranges packed into one contiguous array."""

    def __init__(self) -> None:
        self._ranges: List[FlatVector] = []
        self._length = 0
        self._data: Optional[Array] = None

    @property
    def finalized(self) -> bool:
        return self._data is not None

    @property
    def length(self) -> int:
        return self._length

    @property
    def data(self) -> Array:
        if self._data is None:
            raise StructuralError("FlatBuffer has not been finalized")
        return self._data

    @property
    def ranges(self) -> tuple[FlatVector, ...]:
        return tuple(self._ranges)

    def _add(self, handle: FlatVector) -> FlatVector:
        if self.finalized:
            raise StructuralError("Cannot register a range after the buffer is finalized")
        if handle.length < 0:
            raise IndexOutOfRange(f"Range length must be non-negative, got {handle.length}")
        self._ranges.append(handle)
        self._length += handle.length
        return handle

    def register(self, length: int) -> FlatVector:
        """Register a vector range of ``length`` values and return its handle."""

        return self._add(FlatVector(self, length))

    def register_matrix(self, rows: int, cols: int) -> FlatMatrix:
        """Register a row-major matrix range and return its handle."""

        if rows < 0 or cols < 0:
            raise IndexOutOfRange(f"Matrix dimensions must be non-negative, got {rows}x{cols}")
        handle = FlatMatrix(self, rows, cols)
        self._add(handle)
        return handle

    def finalize_structure(self) -> None:
        """Allocate backing storage and fix every range offset.

        A buffer with no registered ranges finalizes to an empty array.
        """

        if self.finalized:
            raise StructuralError("FlatBuffer has already been finalized")
        offset = 0
        for handle in self._ranges:
            handle._assign(offset)
            offset += handle.length
        self._data = np.zeros(self._length, dtype=DTYPE)

    def _resolve(self, handle: FlatVector) -> FlatVector:
        if handle.owner is not self:
            raise StructuralError("Range handle belongs to a different buffer")
        if not self.finalized:
            raise StructuralError("FlatBuffer has not been finalized")
        return handle

    def get(self, handle: FlatVector, index: int) -> float:
        return self._resolve(handle).get(index)

    def set(self, handle: FlatVector, index: int, value: float) -> None:
        self._resolve(handle).set(index, value)

    def __iter__(self) -> Iterator[FlatVector]:
        return iter(self._ranges)

    def __len__(self) -> int:
        return self._length


__all__ = ["FlatBuffer", "FlatMatrix", "FlatVector"]
