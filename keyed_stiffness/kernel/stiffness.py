# keyed_stiffness/kernel/stiffness.py
"""Stiffness matrices keyed by (node, degree of freedom) pairs."""

from typing import Iterable, Optional

import numpy as np

from .dof import DegreeOfFreedom, NodalDegreeOfFreedom
from .keyed import KeyedMatrix


class StiffnessMatrix(KeyedMatrix):
    """
    Square keyed matrix whose rows (force equations) and columns
    (displacement equations) are NodalDegreeOfFreedom keys.

        f = K d    with    K.at(row_node, row_dof, col_node, col_dof)

    Parameters:
    -----------
    keys : Iterable[NodalDegreeOfFreedom]
        Ordered keys used for both rows and columns
    values : np.ndarray, optional
        Backing values (not copied). Zero-filled if omitted.
    """

    def __init__(self, keys: Iterable[NodalDegreeOfFreedom], values: Optional[np.ndarray] = None):
        super().__init__(keys, None, values)

    @classmethod
    def from_keyed(cls, matrix: KeyedMatrix) -> "StiffnessMatrix":
        """
        Reinterpret a square keyed matrix as a StiffnessMatrix.

        The backing array is shared, not copied. Row and column keys must be
        identical, in the same order.
        """
        if tuple(matrix.row_keys) != tuple(matrix.column_keys):
            raise ValueError("A stiffness matrix needs identical row and column keys")
        return cls(matrix.row_keys, matrix.values)

    def at(self, *args) -> float:
        """
        Stiffness coefficient, addressed either by two NodalDegreeOfFreedom keys
        or by (row_node, row_dof, column_node, column_dof).

        Raises:
        -------
        ValueError
            If either node is None
        KeyError
            If the node/DOF combination is not part of this matrix
        """
        if len(args) == 2:
            return super().at(*args)
        if len(args) != 4:
            raise TypeError(f"at() takes 2 keys or 4 node/dof arguments, got {len(args)}")
        row_node, row_dof, column_node, column_dof = args
        if row_node is None:
            raise ValueError("row_node must not be None")
        if column_node is None:
            raise ValueError("column_node must not be None")
        return super().at(
            NodalDegreeOfFreedom(row_node, row_dof),
            NodalDegreeOfFreedom(column_node, column_dof),
        )

    def is_symmetric(self, rtol: float = 1e-10, atol: float = 1e-12) -> bool:
        return bool(np.allclose(self._values, self._values.T, rtol=rtol, atol=atol))

    def nodes(self) -> list:
        """Distinct nodes in key order."""
        seen = []
        for key in self.row_keys:
            if key.node not in seen:
                seen.append(key.node)
        return seen

    def degrees_of_freedom(self, node) -> list:
        return [key.degree_of_freedom for key in self.row_keys if key.node == node]

    def set_at(self, row_node, row_dof: DegreeOfFreedom, column_node, column_dof: DegreeOfFreedom, value: float) -> None:
        self[NodalDegreeOfFreedom(row_node, row_dof), NodalDegreeOfFreedom(column_node, column_dof)] = value
