# keyed_stiffness/kernel/keyed.py
"""
KEYED MATRICES: Dense Matrices Addressed by Domain Keys
=======================================================

PURPOSE:
--------
Structural code thinks in terms of "node 5, y-displacement", but numpy
thinks in terms of "row 16". This module is the thin veneer between the two:
a KeyedMatrix is a dense numpy array plus an ordered sequence of row keys and
an ordered sequence of column keys.

    K = KeyedMatrix(keys)            # square, zero-filled
    K[(n0, X), (n1, X)] = -k         # key-addressed write
    K.at((n0, X), (n0, X))           # key-addressed read

INVARIANT:
----------
The physical index of key k is k's position in the key sequence. That
mapping is fixed at construction and never changes, so all arithmetic is
delegated to numpy over the full index range and the result is re-keyed:

    A + B        keys of A (B must have identical keys)
    A @ B        rows of A, columns of B (A.columns must equal B.rows)
    A.T          rows and columns swapped

KEY ORDER:
----------
Keys are compared POSITIONALLY before any binary operation. Two matrices
holding the same key set in different orders are rejected with
KeyOrderMismatchError instead of silently producing a wrong result.
"""

from typing import Any, Dict, Hashable, Iterable, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .errors import KeyOrderMismatchError


def _unique_keys(keys: Iterable[Hashable], what: str) -> Tuple[Tuple[Hashable, ...], Dict[Hashable, int]]:
    """Freeze a key sequence and build its key -> position map, rejecting duplicates."""
    keys = tuple(keys)
    index = {}
    for position, key in enumerate(keys):
        if key in index:
            raise ValueError(f"Duplicate {what} key {key!r} at positions {index[key]} and {position}")
        index[key] = position
    return keys, index


def _check_same_keys(left: Tuple, right: Tuple, operation: str) -> None:
    if len(left) != len(right):
        raise KeyOrderMismatchError(
            f"Cannot {operation}: {len(left)} keys versus {len(right)} keys"
        )
    for position, (a, b) in enumerate(zip(left, right)):
        if a != b:
            raise KeyOrderMismatchError(
                f"Cannot {operation}: key {a!r} does not match key {b!r} at position {position}"
            )


class KeyedVector:
    """
    A dense vector whose entries are addressed by an ordered set of keys.

    Parameters:
    -----------
    keys : Iterable[Hashable]
        Ordered, duplicate-free keys
    values : array-like, optional
        Initial values (length must match keys). Zero-filled if omitted.

    Examples:
    ---------
    >>> axis = KeyedVector([DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.Z], [3.0, 4.0, 0.0])
    >>> axis.norm()
    5.0
    >>> axis.normalize()[DegreeOfFreedom.X]
    0.6
    """

    def __init__(self, keys: Iterable[Hashable], values: Optional[Sequence[float]] = None):
        self._keys, self._index = _unique_keys(keys, "vector")
        if values is None:
            self._values = np.zeros(len(self._keys), dtype=float)
        else:
            self._values = np.asarray(values, dtype=float)
            if self._values.shape != (len(self._keys),):
                raise ValueError(
                    f"values shape {self._values.shape} doesn't match {len(self._keys)} keys"
                )

    @property
    def keys(self) -> Tuple[Hashable, ...]:
        return self._keys

    @property
    def values(self) -> np.ndarray:
        """The backing numpy array (not a copy)."""
        return self._values

    def __len__(self):
        return len(self._keys)

    def __contains__(self, key):
        return key in self._index

    def _position(self, key) -> int:
        try:
            return self._index[key]
        except KeyError:
            raise KeyError(f"{key!r} is not a key of this vector") from None

    def __getitem__(self, key) -> float:
        return float(self._values[self._position(key)])

    def __setitem__(self, key, value: float) -> None:
        self._values[self._position(key)] = value

    def items(self):
        return zip(self._keys, (float(v) for v in self._values))

    def copy(self) -> "KeyedVector":
        return KeyedVector(self._keys, self._values.copy())

    def norm(self, p: Union[int, float] = 2) -> float:
        return float(np.linalg.norm(self._values, ord=p))

    def sum_magnitudes(self) -> float:
        return float(np.sum(np.abs(self._values)))

    def normalize(self, p: Union[int, float] = 2) -> "KeyedVector":
        """Return a copy scaled to unit p-norm. A zero vector cannot be normalised."""
        magnitude = self.norm(p)
        if magnitude == 0.0:
            raise ValueError(f"Cannot normalize a zero vector: {self!r}")
        return KeyedVector(self._keys, self._values / magnitude)

    def dot(self, other: "KeyedVector") -> float:
        _check_same_keys(self._keys, other.keys, "take dot product")
        return float(np.dot(self._values, other.values))

    def cross_product(self, other: "KeyedVector") -> "KeyedVector":
        if len(self._keys) != 3:
            raise ValueError(f"Cross product is only defined for 3 keys, this vector has {len(self._keys)}")
        _check_same_keys(self._keys, other.keys, "take cross product")
        return KeyedVector(self._keys, np.cross(self._values, other.values))

    def __add__(self, other: "KeyedVector") -> "KeyedVector":
        if not isinstance(other, KeyedVector):
            return NotImplemented
        _check_same_keys(self._keys, other.keys, "add vectors")
        return KeyedVector(self._keys, self._values + other.values)

    def __sub__(self, other: "KeyedVector") -> "KeyedVector":
        if not isinstance(other, KeyedVector):
            return NotImplemented
        _check_same_keys(self._keys, other.keys, "subtract vectors")
        return KeyedVector(self._keys, self._values - other.values)

    def __mul__(self, scalar: float) -> "KeyedVector":
        if not np.isscalar(scalar):
            return NotImplemented
        return KeyedVector(self._keys, self._values * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> "KeyedVector":
        return KeyedVector(self._keys, -self._values)

    def __repr__(self):
        entries = ", ".join(f"{k!r}: {v:g}" for k, v in self.items())
        return f"KeyedVector({{{entries}}})"


class KeyedMatrix:
    """
    A dense matrix whose rows and columns are addressed by ordered keys.

    Parameters:
    -----------
    row_keys : Iterable[Hashable]
        Ordered, duplicate-free row keys
    column_keys : Iterable[Hashable], optional
        Ordered, duplicate-free column keys. Defaults to row_keys (square).
    values : array-like, optional
        Backing values, shape (len(row_keys), len(column_keys)). A float
        numpy array is used as-is (no copy). Zero-filled if omitted.

    Raises:
    -------
    ValueError
        If a key sequence has duplicates or values has the wrong shape

    Examples:
    ---------
    >>> K = KeyedMatrix(["a", "b"])
    >>> K["a", "b"] = 2.0
    >>> K.T["b", "a"]
    2.0
    """

    def __init__(
        self,
        row_keys: Iterable[Hashable],
        column_keys: Optional[Iterable[Hashable]] = None,
        values: Optional[Any] = None,
    ):
        self._row_keys, self._row_index = _unique_keys(row_keys, "row")
        if column_keys is None:
            self._column_keys, self._column_index = self._row_keys, self._row_index
        else:
            self._column_keys, self._column_index = _unique_keys(column_keys, "column")

        shape = (len(self._row_keys), len(self._column_keys))
        if values is None:
            self._values = np.zeros(shape, dtype=float)
        else:
            self._values = np.asarray(values, dtype=float)
            if self._values.shape != shape:
                raise ValueError(f"values shape {self._values.shape} doesn't match keys {shape}")

    @classmethod
    def from_rows(
        cls,
        row_keys: Iterable[Hashable],
        column_keys: Iterable[Hashable],
        rows: Sequence[Sequence[float]],
    ) -> "KeyedMatrix":
        return KeyedMatrix(row_keys, column_keys, np.array(rows, dtype=float))

    # ------------------------------------------------------------------
    # Keys and raw storage
    # ------------------------------------------------------------------

    @property
    def row_keys(self) -> Tuple[Hashable, ...]:
        return self._row_keys

    @property
    def column_keys(self) -> Tuple[Hashable, ...]:
        return self._column_keys

    @property
    def values(self) -> np.ndarray:
        """The backing numpy array (not a copy). Index i corresponds to row_keys[i]."""
        return self._values

    @property
    def shape(self) -> Tuple[int, int]:
        return self._values.shape

    @property
    def is_square(self) -> bool:
        return self._values.shape[0] == self._values.shape[1]

    def row_position(self, key) -> int:
        try:
            return self._row_index[key]
        except KeyError:
            raise KeyError(f"{key!r} is not a row key of this matrix") from None

    def column_position(self, key) -> int:
        try:
            return self._column_index[key]
        except KeyError:
            raise KeyError(f"{key!r} is not a column key of this matrix") from None

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def at(self, row_key, column_key) -> float:
        """Read the entry at (row_key, column_key). Raises KeyError for absent keys."""
        return float(self._values[self.row_position(row_key), self.column_position(column_key)])

    def __getitem__(self, item) -> float:
        row_key, column_key = item
        return self.at(row_key, column_key)

    def __setitem__(self, item, value: float) -> None:
        row_key, column_key = item
        self._values[self.row_position(row_key), self.column_position(column_key)] = value

    def row(self, row_key) -> KeyedVector:
        return KeyedVector(self._column_keys, self._values[self.row_position(row_key), :].copy())

    def column(self, column_key) -> KeyedVector:
        return KeyedVector(self._row_keys, self._values[:, self.column_position(column_key)].copy())

    def copy(self) -> "KeyedMatrix":
        return KeyedMatrix(self._row_keys, self._column_keys, self._values.copy())

    # ------------------------------------------------------------------
    # Algebra (delegated to numpy)
    # ------------------------------------------------------------------

    def _check_same_shape_keys(self, other: "KeyedMatrix", operation: str) -> None:
        _check_same_keys(self._row_keys, other.row_keys, operation)
        _check_same_keys(self._column_keys, other.column_keys, operation)

    def __add__(self, other: "KeyedMatrix") -> "KeyedMatrix":
        if not isinstance(other, KeyedMatrix):
            return NotImplemented
        self._check_same_shape_keys(other, "add matrices")
        return KeyedMatrix(self._row_keys, self._column_keys, self._values + other.values)

    def __sub__(self, other: "KeyedMatrix") -> "KeyedMatrix":
        if not isinstance(other, KeyedMatrix):
            return NotImplemented
        self._check_same_shape_keys(other, "subtract matrices")
        return KeyedMatrix(self._row_keys, self._column_keys, self._values - other.values)

    def __mul__(self, scalar: float) -> "KeyedMatrix":
        if not np.isscalar(scalar):
            return NotImplemented
        return KeyedMatrix(self._row_keys, self._column_keys, self._values * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> "KeyedMatrix":
        return KeyedMatrix(self._row_keys, self._column_keys, -self._values)

    def multiply(self, other: Union["KeyedMatrix", KeyedVector]) -> Union["KeyedMatrix", KeyedVector]:
        """
        Key-aware matrix product.

        The column keys of this matrix must equal the row keys of `other`
        position by position; the result is keyed by this matrix's rows and
        `other`'s columns.

        Raises:
        -------
        KeyOrderMismatchError
            If the inner key sequences differ in length, content or order
        """
        if isinstance(other, KeyedVector):
            _check_same_keys(self._column_keys, other.keys, "multiply matrix by vector")
            return KeyedVector(self._row_keys, self._values @ other.values)
        if not isinstance(other, KeyedMatrix):
            raise TypeError(f"Cannot multiply KeyedMatrix by {type(other).__name__}")
        _check_same_keys(self._column_keys, other.row_keys, "multiply matrices")
        return KeyedMatrix(self._row_keys, other.column_keys, self._values @ other.values)

    def multiply_vector(self, vector: KeyedVector) -> KeyedVector:
        """Matrix-vector product; same key rules as multiply()."""
        if not isinstance(vector, KeyedVector):
            raise TypeError(f"Expected a KeyedVector, got {type(vector).__name__}")
        return self.multiply(vector)

    def __matmul__(self, other):
        if not isinstance(other, (KeyedMatrix, KeyedVector)):
            return NotImplemented
        return self.multiply(other)

    def transpose(self) -> "KeyedMatrix":
        return KeyedMatrix(self._column_keys, self._row_keys, self._values.T.copy())

    @property
    def T(self) -> "KeyedMatrix":
        return self.transpose()

    def determinant(self) -> float:
        if not self.is_square:
            raise ValueError(f"Determinant requires a square matrix, shape is {self.shape}")
        return float(np.linalg.det(self._values))

    def inverse(self) -> "KeyedMatrix":
        """
        Inverse, keyed with rows and columns swapped so that
        A @ A.inverse() is keyed by (A.rows, A.rows).

        Raises numpy.linalg.LinAlgError if the matrix is singular.
        """
        if not self.is_square:
            raise ValueError(f"Inverse requires a square matrix, shape is {self.shape}")
        return KeyedMatrix(self._column_keys, self._row_keys, np.linalg.inv(self._values))

    def norm(self, ord: Union[int, float, str, None] = None) -> float:
        """Matrix norm: None/'fro' (Frobenius), 1, 2, numpy.inf."""
        return float(np.linalg.norm(self._values, ord=ord))

    def normalize_rows(self, p: Union[int, float] = 2) -> "KeyedMatrix":
        norms = np.linalg.norm(self._values, ord=p, axis=1)
        if np.any(norms == 0.0):
            zero_rows = [self._row_keys[i] for i in np.flatnonzero(norms == 0.0)]
            raise ValueError(f"Cannot normalize zero rows {zero_rows!r}")
        return KeyedMatrix(self._row_keys, self._column_keys, self._values / norms[:, np.newaxis])

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def to_frame(self) -> pd.DataFrame:
        """Copy of the matrix as a pandas DataFrame labelled by the keys."""
        return pd.DataFrame(
            self._values.copy(),
            index=pd.Index(list(self._row_keys), tupleize_cols=False),
            columns=pd.Index(list(self._column_keys), tupleize_cols=False),
        )

    def __repr__(self):
        return (
            f"{type(self).__name__}(shape={self.shape}, "
            f"rows={list(self._row_keys)!r}, columns={list(self._column_keys)!r})"
        )
