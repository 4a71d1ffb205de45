# keyed_stiffness/kernel/dof.py
"""
DEGREES OF FREEDOM: The Key Vocabulary
======================================

PURPOSE:
--------
This module defines the vocabulary used to address stiffness matrices by
physical quantity instead of by integer position:

    DegreeOfFreedom       X, Y, Z (translations), XX, YY, ZZ (rotations)
    NodalDegreeOfFreedom  (node, dof) pair, e.g. "node 5, y-displacement"
    Strain                row keys of strain-displacement matrices

A 2D frame (ux, uy, rz), a 3D truss (ux, uy, uz) and a 3D frame
(ux, uy, uz, rx, ry, rz) all draw their keys from the same six DOFs, so one
keyed matrix type serves every element family.

USAGE:
------
    key = NodalDegreeOfFreedom(node, DegreeOfFreedom.X)
    K[key, key]  # direct stiffness of node in x
"""

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Any, Iterable, List, Tuple


@total_ordering
class DegreeOfFreedom(Enum):
    """
    One independent direction of motion or rotation tracked at a node.

    Members compare in declaration order, so sorting a list of DOFs always
    yields translations before rotations: X < Y < Z < XX < YY < ZZ.
    """
    X = 0
    Y = 1
    Z = 2
    XX = 3
    YY = 4
    ZZ = 5

    @property
    def is_translation(self) -> bool:
        return self.value < 3

    @property
    def is_rotation(self) -> bool:
        return self.value >= 3

    def __lt__(self, other):
        if not isinstance(other, DegreeOfFreedom):
            return NotImplemented
        return self.value < other.value

    def __repr__(self):
        return f"DegreeOfFreedom.{self.name}"


TRANSLATIONS: Tuple[DegreeOfFreedom, ...] = (
    DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.Z,
)
ROTATIONS: Tuple[DegreeOfFreedom, ...] = (
    DegreeOfFreedom.XX, DegreeOfFreedom.YY, DegreeOfFreedom.ZZ,
)
ALL_DOFS: Tuple[DegreeOfFreedom, ...] = TRANSLATIONS + ROTATIONS


class Strain(Enum):
    """
    Generalised strain components, used as the row keys of a
    strain-displacement (B) matrix.

    Continuum elements use the linear and shear strains; beam elements use
    the axial strain plus curvatures and twist of the member axis.
    """
    LINEAR_STRAIN_X = "linear_strain_x"
    LINEAR_STRAIN_Y = "linear_strain_y"
    LINEAR_STRAIN_Z = "linear_strain_z"
    SHEAR_STRAIN_XY = "shear_strain_xy"
    SHEAR_STRAIN_XZ = "shear_strain_xz"
    SHEAR_STRAIN_YZ = "shear_strain_yz"
    CURVATURE_Y = "curvature_y"
    CURVATURE_Z = "curvature_z"
    TWIST_X = "twist_x"


@dataclass(frozen=True, order=True)
class NodalDegreeOfFreedom:
    """
    Composite key pairing a node with one of its degrees of freedom.

    Two keys are equal iff both the node and the DOF are equal. Ordering
    is (node, dof), which gives the node-major layout used everywhere in
    this package:

        [(n0, X), (n0, Y), ..., (n0, ZZ), (n1, X), ...]

    Parameters:
    -----------
    node : FiniteElementNode (or any hashable, orderable node identity)
        The node this DOF belongs to
    degree_of_freedom : DegreeOfFreedom
        The direction at that node

    Examples:
    ---------
    >>> a = NodalDegreeOfFreedom(node, DegreeOfFreedom.X)
    >>> b = NodalDegreeOfFreedom(node, DegreeOfFreedom.X)
    >>> a == b and hash(a) == hash(b)
    True
    """
    node: Any
    degree_of_freedom: DegreeOfFreedom

    def __post_init__(self):
        if self.node is None:
            raise ValueError("node must not be None")
        if not isinstance(self.degree_of_freedom, DegreeOfFreedom):
            raise ValueError(
                f"degree_of_freedom must be a DegreeOfFreedom, got {self.degree_of_freedom!r}"
            )

    def __repr__(self):
        return f"({self.node!r}, {self.degree_of_freedom.name})"


def nodal_dofs(nodes: Iterable[Any], dofs: Iterable[DegreeOfFreedom] = ALL_DOFS) -> List[NodalDegreeOfFreedom]:
    """
    Cross a sequence of nodes with a sequence of DOFs, node-major.

    Examples:
    ---------
    >>> nodal_dofs([n0, n1], TRANSLATIONS)
    [(n0, X), (n0, Y), (n0, Z), (n1, X), (n1, Y), (n1, Z)]
    """
    dofs = tuple(dofs)
    result = []
    for node in nodes:
        result.extend(NodalDegreeOfFreedom(node, dof) for dof in dofs)
    return result
