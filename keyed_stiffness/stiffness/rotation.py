# keyed_stiffness/stiffness/rotation.py
"""
ROTATION: Local-to-Global Transforms from the Element Axis Triad
================================================================

An element's stiffness is easy to write in its OWN frame (x' along a bar,
x'-y' in the plane of a plate) and has to be expressed in the shared global
frame before assembly. The transform is built in two steps:

1. A 3×3 direction-cosine matrix R whose ROWS are the unit local axes:

        R = [ x'_X  x'_Y  x'_Z ]
            [ y'_X  y'_Y  y'_Z ]
            [ z'_X  z'_Y  z'_Z ]

   so that  u_local = R · u_global  for a translation vector.

2. R expanded per node into a block-diagonal transform over the element's
   (node, DOF) keys:

        T = diag(R, I, R, I, ...)     R on (X, Y, Z), I on (XX, YY, ZZ)

   and the global stiffness is  K_global = Tᵀ · K_local · T.

ROTATIONAL DOFs:
----------------
Rotational freedoms get an identity block: they are NOT rotated with the
translations. This is correct for the element families whose rotations stay
aligned with the global axes (e.g. a 1D beam lying along global X) but a
member with rotational stiffness and an inclined axis is only partially
transformed.
"""

from typing import Optional, Sequence, Union

import numpy as np

from ..config import KernelConfig
from ..kernel.dof import ROTATIONS, TRANSLATIONS, NodalDegreeOfFreedom
from ..kernel.keyed import KeyedMatrix, KeyedVector

AxisLike = Union[KeyedVector, Sequence[float], np.ndarray]


def _axis_values(axis: AxisLike, name: str) -> np.ndarray:
    if axis is None:
        raise ValueError(f"{name} must not be None")
    if isinstance(axis, KeyedVector):
        if len(axis) != 3:
            raise ValueError(f"All axes should be 3D, i.e. have 3 items: {name} has {len(axis)}")
        try:
            values = np.array([axis[dof] for dof in TRANSLATIONS], dtype=float)
        except KeyError:
            raise ValueError(f"{name} must be keyed by X, Y and Z, got keys {axis.keys!r}") from None
    else:
        values = np.asarray(axis, dtype=float)
        if values.shape != (3,):
            raise ValueError(f"All axes should be 3D, i.e. have 3 items: {name} has shape {values.shape}")
    if np.sum(np.abs(values)) == 0.0:
        raise ValueError(f"Axis should not be zero: {name} = {values.tolist()}")
    return values


def rotation_matrix_from_axes(x_axis: AxisLike, y_axis: AxisLike, z_axis: AxisLike) -> KeyedMatrix:
    """
    Build the 3×3 direction-cosine matrix from three local axes.

    Each axis is normalised independently (L2 norm) and becomes one row of
    the result, keyed by (X, Y, Z) on both rows and columns.

    Parameters:
    -----------
    x_axis, y_axis, z_axis : KeyedVector or array-like
        Local axes in global components. Need not be unit length.

    Returns:
    --------
    KeyedMatrix
        3×3, rows = local axes, columns = global X, Y, Z

    Raises:
    -------
    ValueError
        If an axis is not 3-dimensional or is the zero vector. The message
        names the offending axis.

    Example:
    --------
    >>> R = rotation_matrix_from_axes([2, 0, 0], [0, 3, 0], [0, 0, 4])
    >>> np.allclose(R.values, np.eye(3))
    True
    """
    rows = [
        _axis_values(x_axis, "x_axis"),
        _axis_values(y_axis, "y_axis"),
        _axis_values(z_axis, "z_axis"),
    ]
    return KeyedMatrix.from_rows(TRANSLATIONS, TRANSLATIONS, rows).normalize_rows(2)


def element_rotation_matrix(element, config: Optional[KernelConfig] = None) -> KeyedMatrix:
    """
    3×3 direction-cosine matrix of an element's local axis triad.
    `config` carries the tolerances used to derive the triad.
    """
    x_axis, y_axis, z_axis = element.local_axes(config)
    return rotation_matrix_from_axes(x_axis, y_axis, z_axis)


def expand_to_nodal_transform(rotation: KeyedMatrix, keys: Sequence[NodalDegreeOfFreedom]) -> KeyedMatrix:
    """
    Expand a 3×3 rotation into a block-diagonal transform over node-DOF keys.

    For every node appearing in `keys`, the translational block gets the
    rotation and the rotational block gets the identity; every other entry
    (including all cross-node entries) is zero.

    Parameters:
    -----------
    rotation : KeyedMatrix
        3×3 keyed by (X, Y, Z), as returned by rotation_matrix_from_axes
    keys : Sequence[NodalDegreeOfFreedom]
        Row and column keys of the result. Every node must appear with all
        six DOFs.

    Returns:
    --------
    KeyedMatrix
        Square transform T keyed by `keys`
    """
    T = KeyedMatrix(keys)
    nodes = []
    for key in T.row_keys:
        if key.node not in nodes:
            nodes.append(key.node)

    for node in nodes:
        for row_dof in TRANSLATIONS:
            for column_dof in TRANSLATIONS:
                T[NodalDegreeOfFreedom(node, row_dof), NodalDegreeOfFreedom(node, column_dof)] = \
                    rotation.at(row_dof, column_dof)
        for dof in ROTATIONS:
            T[NodalDegreeOfFreedom(node, dof), NodalDegreeOfFreedom(node, dof)] = 1.0

    return T
