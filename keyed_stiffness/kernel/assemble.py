# keyed_stiffness/kernel/assemble.py
"""
ASSEMBLY: Scatter Keyed Element Stiffness into a Dense Global Matrix
====================================================================

PURPOSE:
--------
Element builders speak in keys: "stiffness between (node 2, X) and
(node 5, Z)". A solver speaks in integers. NodalDOFIndex is the bridge, and
assemble_global_K is the scatter-add that consumes the builders'
global_stiffness_at capability.

The assembly doesn't care about element TYPE. It only needs:
- The ordered set of model keys (which fixes the global numbering)
- For each element: a StiffnessProvider and the keys it contributes to

ALGORITHM:
----------
    K = zeros(ndof x ndof)
    for each provider:
        for each (row_key, col_key) the element owns:
            K[index(row_key), index(col_key)] += k_e(row_key, col_key)

USAGE:
------
    index = NodalDOFIndex.for_nodes(nodes, TRANSLATIONS)
    providers = [factory.create(e) for e in elements]
    K = assemble_global_K(index, providers)
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

from .dof import ALL_DOFS, DegreeOfFreedom, NodalDegreeOfFreedom, nodal_dofs


@dataclass
class NodalDOFIndex:
    """
    Maps NodalDegreeOfFreedom keys to contiguous global DOF indices.

    This is the bridge between "node 5, y-displacement" and "global DOF
    index 16". Numbering follows the order of `keys`.

    Examples:
    ---------
    >>> index = NodalDOFIndex.for_nodes([n0, n1], TRANSLATIONS)
    >>> index.idx(n1, DegreeOfFreedom.X)
    3
    >>> index.ndof
    6
    """
    keys: Tuple[NodalDegreeOfFreedom, ...]
    _positions: Dict[NodalDegreeOfFreedom, int] = field(init=False, repr=False)

    def __post_init__(self):
        self.keys = tuple(self.keys)
        self._positions = {}
        for position, key in enumerate(self.keys):
            if key in self._positions:
                raise ValueError(f"Duplicate key {key!r} in DOF index")
            self._positions[key] = position

    @classmethod
    def for_nodes(cls, nodes: Iterable, dofs: Iterable[DegreeOfFreedom] = ALL_DOFS) -> "NodalDOFIndex":
        return cls(tuple(nodal_dofs(nodes, dofs)))

    @property
    def ndof(self) -> int:
        return len(self.keys)

    def __contains__(self, key) -> bool:
        return key in self._positions

    def idx(self, node, dof: DegreeOfFreedom) -> int:
        """Global DOF index of (node, dof). Raises KeyError if not indexed."""
        key = NodalDegreeOfFreedom(node, dof)
        try:
            return self._positions[key]
        except KeyError:
            raise KeyError(f"{key!r} is not part of this DOF index") from None

    def node_dofs(self, node) -> List[int]:
        """All global indices belonging to one node, in key order."""
        return [position for key, position in self._positions.items() if key.node == node]

    def element_dof_map(self, keys: Sequence[NodalDegreeOfFreedom]) -> List[int]:
        """Global indices of the given keys; keys outside the index map to -1."""
        return [self._positions.get(key, -1) for key in keys]


def assemble_global_K(index: NodalDOFIndex, providers: Iterable) -> np.ndarray:
    """
    Assemble the global stiffness matrix from element stiffness providers.

    Only keys present both in the element matrix and in the index are
    scattered; element DOFs the model does not track (e.g. rotations in a
    pin-jointed truss model) are dropped.

    Parameters:
    -----------
    index : NodalDOFIndex
        Global numbering of the model's node-DOF keys
    providers : Iterable[StiffnessProvider]
        One provider per element (see keyed_stiffness.stiffness.StiffnessProvider)

    Returns:
    --------
    np.ndarray
        Dense global stiffness matrix, shape (ndof, ndof)
    """
    K = np.zeros((index.ndof, index.ndof), dtype=float)

    for provider in providers:
        element_keys = provider.global_stiffness_matrix.row_keys
        dof_map = index.element_dof_map(element_keys)
        shared = [(key, ia) for key, ia in zip(element_keys, dof_map) if ia >= 0]

        for row_key, ia in shared:
            for column_key, ib in shared:
                K[ia, ib] += provider.global_stiffness_at(
                    row_key.node, row_key.degree_of_freedom,
                    column_key.node, column_key.degree_of_freedom,
                )

    return K
